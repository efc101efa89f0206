from forms_api import schemas, validators
from forms_api.models import Question


def constraints(violations):
    return {(v.field, v.constraint) for v in violations}


def test_register_collects_every_violation():
    violations = validators.validate_register(
        schemas.RegisterInput(email="not-an-email", password="short", name="   ")
    )
    assert constraints(violations) == {
        ("email", "EMAIL_FORMAT"),
        ("password", "MIN_LENGTH"),
        ("name", "REQUIRED"),
    }


def test_register_accepts_valid_input():
    data = schemas.RegisterInput(email="alice@x.com", password="pw12345678", name="Alice")
    assert validators.validate_register(data) == []


def test_missing_email_is_required_not_format():
    violations = validators.validate_register(schemas.RegisterInput(password="pw12345678", name="A"))
    assert constraints(violations) == {("email", "REQUIRED")}


def test_form_title_limits():
    assert validators.validate_form_create(schemas.FormCreate(title="x" * 200)) == []
    too_long = validators.validate_form_create(schemas.FormCreate(title="x" * 201))
    assert constraints(too_long) == {("title", "MAX_LENGTH")}
    blank = validators.validate_form_create(schemas.FormCreate(title="  "))
    assert constraints(blank) == {("title", "REQUIRED")}


def test_form_description_limit():
    data = schemas.FormCreate(title="Survey", description="d" * 1001)
    assert constraints(validators.validate_form_create(data)) == {("description", "MAX_LENGTH")}


def test_form_update_only_checks_supplied_fields():
    assert validators.validate_form_update(schemas.FormUpdate(description="new")) == []
    assert constraints(validators.validate_form_update(schemas.FormUpdate(title=""))) == {
        ("title", "REQUIRED")
    }


def test_question_type_must_be_known():
    violations = validators.validate_question_create(schemas.QuestionCreate(text="Q", type="slider"))
    assert constraints(violations) == {("type", "INVALID_VALUE")}


def test_choice_questions_need_two_options():
    for question_type in ("multiplechoice", "checkbox", "dropdown"):
        violations = validators.validate_question_create(
            schemas.QuestionCreate(text="Pick", type=question_type, options=["only"])
        )
        assert constraints(violations) == {("options", "MIN_OPTIONS")}

    ok = schemas.QuestionCreate(text="Pick", type="dropdown", options=["A", "B"])
    assert validators.validate_question_create(ok) == []


def test_options_ignored_for_text_questions():
    data = schemas.QuestionCreate(text="Name?", type="shorttext")
    assert validators.validate_question_create(data) == []


def test_question_text_limit():
    data = schemas.QuestionCreate(text="q" * 501, type="paragraph")
    assert constraints(validators.validate_question_create(data)) == {("text", "MAX_LENGTH")}


def test_question_update_checks_merged_state():
    current = Question(text="Name?", question_type="shorttext", options=[], position=1)
    violations = validators.validate_question_update(current, schemas.QuestionUpdate(type="dropdown"))
    assert constraints(violations) == {("options", "MIN_OPTIONS")}

    fixed = schemas.QuestionUpdate(type="dropdown", options=["A", "B"])
    assert validators.validate_question_update(current, fixed) == []


def test_response_needs_answers():
    assert constraints(validators.validate_response_create(schemas.ResponseCreate())) == {
        ("answers", "REQUIRED")
    }
    assert constraints(validators.validate_response_create(schemas.ResponseCreate(answers=[]))) == {
        ("answers", "REQUIRED")
    }


def test_each_answer_needs_question_and_value():
    data = schemas.ResponseCreate(
        answers=[schemas.AnswerInput(question_id=1, answer="ok"), schemas.AnswerInput(answer=" ")]
    )
    assert constraints(validators.validate_response_create(data)) == {
        ("answers[1].question_id", "REQUIRED"),
        ("answers[1].answer", "REQUIRED"),
    }


def test_response_update_allows_empty_answer_list():
    assert validators.validate_response_update(schemas.ResponseUpdate(answers=[])) == []


def test_respondent_email_checked_when_present():
    data = schemas.ResponseCreate(
        respondent_email="nope", answers=[schemas.AnswerInput(question_id=1, answer="x")]
    )
    assert constraints(validators.validate_response_create(data)) == {
        ("respondent_email", "EMAIL_FORMAT")
    }
