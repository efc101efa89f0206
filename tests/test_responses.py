import pytest

from forms_api import schemas
from forms_api.crud import crud_response


def answers(*pairs):
    return [schemas.AnswerInput(question_id=qid, answer=text) for qid, text in pairs]


@pytest.fixture
async def survey(make_user, make_form):
    owner = await make_user("owner@x.com", "Owner")
    form, questions = await make_form(owner)
    return owner, form, questions


async def response_count(service, owner, form_id):
    listed = await service.responses(owner, form_id)
    assert listed.ok, listed
    return listed.data.count


async def test_anonymous_submission(service, survey):
    owner, form, (q1, q2, _) = survey
    result = await service.create_response(
        form.id,
        schemas.ResponseCreate(respondent_name="Rita", answers=answers((q1.id, "yes"), (q2.id, "no"))),
    )
    assert result.ok and result.kind == "Response"
    assert result.data.answer_count == 2
    assert sorted(a.answer for a in result.data.answers) == ["no", "yes"]
    assert result.data.respondent_name == "Rita"
    assert await response_count(service, owner, form.id) == 1


async def test_submission_to_missing_form(service):
    result = await service.create_response(999, schemas.ResponseCreate(answers=answers((1, "x"))))
    assert result.error.code == "FORM_NOT_FOUND"


async def test_empty_answers_store_nothing(service, survey):
    owner, form, _ = survey
    result = await service.create_response(form.id, schemas.ResponseCreate(respondent_name="Rita", answers=[]))
    assert result.error.code == "VALIDATION_ERROR"
    assert await response_count(service, owner, form.id) == 0


async def test_answer_to_foreign_question_rolls_back(service, survey, make_form):
    owner, form, (q1, _, _) = survey
    _, (foreign, _, _) = await make_form(owner, "Other form")

    result = await service.create_response(
        form.id, schemas.ResponseCreate(answers=answers((q1.id, "ok"), (foreign.id, "wrong form")))
    )
    assert result.error.code == "QUESTION_NOT_FOUND"
    assert result.error.details[0].constraint == "FOREIGN_KEY"
    assert result.error.details[0].field == "answers[1].question_id"
    assert await response_count(service, owner, form.id) == 0


async def test_storage_failure_leaves_no_orphan(service, survey, monkeypatch):
    owner, form, (q1, q2, _) = survey
    real_add_answer = crud_response.add_answer
    calls = []

    async def flaky_add_answer(db, response_id, question_id, answer_text):
        calls.append(question_id)
        if len(calls) == 2:
            raise RuntimeError("boom: disk full")
        return await real_add_answer(db, response_id, question_id, answer_text)

    monkeypatch.setattr(crud_response, "add_answer", flaky_add_answer)
    result = await service.create_response(
        form.id, schemas.ResponseCreate(answers=answers((q1.id, "a"), (q2.id, "b")))
    )
    assert result.error.code == "INTERNAL_ERROR"
    assert result.error.http_status == 500
    assert result.error.message == "Failed to create response"
    assert "boom" not in result.model_dump_json()

    monkeypatch.undo()
    assert await response_count(service, owner, form.id) == 0


async def test_responses_are_owner_only(service, survey, make_user):
    owner, form, (q1, _, _) = survey
    created = await service.create_response(form.id, schemas.ResponseCreate(answers=answers((q1.id, "x"))))
    stranger = await make_user("stranger@x.com")

    assert (await service.responses(stranger, form.id)).error.code == "FORBIDDEN"
    assert (await service.response(stranger, form.id, created.data.id)).error.code == "FORBIDDEN"
    assert (await service.delete_response(stranger, form.id, created.data.id)).error.code == "FORBIDDEN"
    assert (await service.response(owner, form.id, created.data.id)).ok


async def test_response_of_other_form_is_not_found(service, survey, make_form):
    owner, form, _ = survey
    other, (other_q, _, _) = await make_form(owner, "Other")
    created = await service.create_response(other.id, schemas.ResponseCreate(answers=answers((other_q.id, "x"))))
    result = await service.response(owner, form.id, created.data.id)
    assert result.error.code == "RESPONSE_NOT_FOUND"


async def test_update_without_answers_keeps_them(service, survey):
    owner, form, (q1, _, _) = survey
    created = await service.create_response(form.id, schemas.ResponseCreate(answers=answers((q1.id, "x"))))
    result = await service.update_response(
        owner, form.id, created.data.id, schemas.ResponseUpdate(respondent_email="rita@x.com")
    )
    assert result.data.respondent_email == "rita@x.com"
    assert result.data.answer_count == 1


async def test_update_replaces_answer_set(service, survey):
    owner, form, (q1, q2, q3) = survey
    created = await service.create_response(
        form.id, schemas.ResponseCreate(answers=answers((q1.id, "old"), (q2.id, "old")))
    )
    replaced = await service.update_response(
        owner, form.id, created.data.id, schemas.ResponseUpdate(answers=answers((q3.id, "new")))
    )
    assert [(a.question_id, a.answer) for a in replaced.data.answers] == [(q3.id, "new")]

    cleared = await service.update_response(owner, form.id, created.data.id, schemas.ResponseUpdate(answers=[]))
    assert cleared.data.answers == []
    assert cleared.data.answer_count == 0


async def test_failed_replace_keeps_old_answers(service, survey, make_form):
    owner, form, (q1, _, _) = survey
    _, (foreign, _, _) = await make_form(owner, "Other")
    created = await service.create_response(form.id, schemas.ResponseCreate(answers=answers((q1.id, "keep"))))

    result = await service.update_response(
        owner, form.id, created.data.id, schemas.ResponseUpdate(answers=answers((foreign.id, "nope")))
    )
    assert result.error.code == "QUESTION_NOT_FOUND"
    kept = await service.response(owner, form.id, created.data.id)
    assert [a.answer for a in kept.data.answers] == ["keep"]


async def test_delete_response(service, survey):
    owner, form, (q1, _, _) = survey
    created = await service.create_response(form.id, schemas.ResponseCreate(answers=answers((q1.id, "x"))))
    result = await service.delete_response(owner, form.id, created.data.id)
    assert result.ok and result.data.message == "Response deleted successfully"
    assert (await service.response(owner, form.id, created.data.id)).error.code == "RESPONSE_NOT_FOUND"


async def test_sort_by_respondent_name(service, survey):
    owner, form, (q1, _, _) = survey
    for name in ("Carla", "Anton", "Berta"):
        await service.create_response(
            form.id, schemas.ResponseCreate(respondent_name=name, answers=answers((q1.id, "x")))
        )
    listed = await service.responses(
        owner,
        form.id,
        schemas.ResponseSort(field=schemas.ResponseSortField.RESPONDENT_NAME, order=schemas.SortOrder.ASC),
    )
    assert [r.respondent_name for r in listed.data.responses] == ["Anton", "Berta", "Carla"]


async def test_payload_checked_before_form_lookup(service, survey, make_user):
    owner, form, (q1, _, _) = survey
    created = await service.create_response(form.id, schemas.ResponseCreate(answers=answers((q1.id, "x"))))
    stranger = await make_user("stranger@x.com")

    missing_form = await service.create_response(999, schemas.ResponseCreate(answers=[]))
    assert missing_form.error.code == "VALIDATION_ERROR"

    bad_email = schemas.ResponseUpdate(respondent_email="not-an-email")
    result = await service.update_response(stranger, form.id, created.data.id, bad_email)
    assert result.error.code == "VALIDATION_ERROR"
    assert result.error.details[0].field == "respondent_email"
