from forms_api import schemas


async def test_create_form(service, make_user):
    alice = await make_user()
    result = await service.create_form(alice, "  Customer survey ", "How did we do?")
    assert result.ok and result.kind == "Form"
    form = result.data
    assert form.title == "Customer survey"
    assert form.owner_id == alice.id
    assert form.question_count == 0
    assert form.response_count == 0
    assert form.questions == []


async def test_create_form_validation(service, make_user):
    alice = await make_user()
    result = await service.create_form(alice, "", "d" * 1001)
    assert result.error.code == "VALIDATION_ERROR"
    assert {d.field for d in result.error.details} == {"title", "description"}
    assert (await service.forms(alice)).data.count == 0


async def test_forms_lists_only_own(service, make_user, make_form):
    alice = await make_user("alice@x.com")
    bob = await make_user("bob@x.com")
    await make_form(alice, "Alice 1", questions=())
    await make_form(alice, "Alice 2", questions=())
    await make_form(bob, "Bob 1", questions=())

    listed = await service.forms(alice)
    assert listed.kind == "FormsList"
    assert sorted(f.title for f in listed.data.forms) == ["Alice 1", "Alice 2"]
    assert listed.data.count == 2


async def test_forms_filter_and_sort(service, make_user, make_form):
    alice = await make_user()
    for title in ("Beta feedback", "alpha survey", "Gamma survey"):
        await make_form(alice, title, questions=())

    filtered = await service.forms(alice, schemas.FormFilter(title="SURVEY"))
    assert {f.title for f in filtered.data.forms} == {"alpha survey", "Gamma survey"}

    by_title = await service.forms(
        alice, sort=schemas.FormSort(field=schemas.FormSortField.TITLE, order=schemas.SortOrder.ASC)
    )
    assert [f.title for f in by_title.data.forms] == ["Beta feedback", "Gamma survey", "alpha survey"]


async def test_form_includes_ordered_questions_and_counts(service, make_user, make_form):
    alice = await make_user()
    form, questions = await make_form(alice)
    await service.create_response(
        form.id, schemas.ResponseCreate(answers=[schemas.AnswerInput(question_id=questions[0].id, answer="x")])
    )

    result = await service.form(alice, form.id)
    assert [q.text for q in result.data.questions] == ["Q1", "Q2", "Q3"]
    assert result.data.question_count == 3
    assert result.data.response_count == 1


async def test_foreign_form_is_forbidden(service, make_user, make_form):
    alice = await make_user("alice@x.com")
    bob = await make_user("bob@x.com")
    form, questions = await make_form(alice)

    for result in (
        await service.form(bob, form.id),
        await service.update_form(bob, form.id, schemas.FormUpdate(title="Mine now")),
        await service.delete_form(bob, form.id),
        await service.questions(bob, form.id),
        await service.responses(bob, form.id),
        await service.reorder_questions(bob, form.id, [q.id for q in reversed(questions)]),
    ):
        assert result.error.code == "FORBIDDEN"
        assert result.error.http_status == 403

    unchanged = await service.form(alice, form.id)
    assert unchanged.data.title == "Survey"
    assert [q.text for q in unchanged.data.questions] == ["Q1", "Q2", "Q3"]


async def test_missing_form(service, make_user):
    alice = await make_user()
    result = await service.form(alice, 404)
    assert result.error.code == "FORM_NOT_FOUND"
    assert result.error.http_status == 404


async def test_update_form_partial(service, make_user, make_form):
    alice = await make_user()
    form, _ = await make_form(alice, "Old title", questions=())
    result = await service.update_form(alice, form.id, schemas.FormUpdate(description="Now with text"))
    assert result.data.title == "Old title"
    assert result.data.description == "Now with text"

    result = await service.update_form(alice, form.id, schemas.FormUpdate(title="New title"))
    assert result.data.title == "New title"
    assert result.data.description == "Now with text"

    invalid = await service.update_form(alice, form.id, schemas.FormUpdate(title="t" * 201))
    assert invalid.error.code == "VALIDATION_ERROR"


async def test_delete_form_cascades(service, make_user, make_form):
    alice = await make_user()
    form, questions = await make_form(alice)
    created = await service.create_response(
        form.id, schemas.ResponseCreate(answers=[schemas.AnswerInput(question_id=questions[1].id, answer="y")])
    )
    assert created.ok

    result = await service.delete_form(alice, form.id)
    assert result.ok and result.data.message == "Form deleted successfully"
    assert (await service.form(alice, form.id)).error.code == "FORM_NOT_FOUND"
    assert (await service.response(alice, form.id, created.data.id)).error.code == "FORM_NOT_FOUND"
    assert (await service.forms(alice)).data.count == 0


async def test_input_checked_before_ownership(service, make_user, make_form):
    alice = await make_user("alice@x.com")
    bob = await make_user("bob@x.com")
    form, _ = await make_form(alice)

    result = await service.update_form(bob, form.id, schemas.FormUpdate(title=""))
    assert result.error.code == "VALIDATION_ERROR"
    result = await service.create_question(bob, form.id, schemas.QuestionCreate(text="Q", type="slider"))
    assert result.error.code == "VALIDATION_ERROR"
    result = await service.update_form(bob, form.id, schemas.FormUpdate(title="Valid"))
    assert result.error.code == "FORBIDDEN"
