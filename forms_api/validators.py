"""
Field rules for every operation input.

Each ``validate_*`` function is pure: it looks at the input and returns the
list of violations it found (empty when the input is acceptable). The caller
decides what to do with them, usually ``raise_if_invalid``.
"""
import re
from typing import List, Optional

from .errors import ErrorDetail, ValidationFailed
from .models import CHOICE_QUESTION_TYPES, QUESTION_TYPES
from . import schemas

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

PASSWORD_MIN_LENGTH = 8
FORM_TITLE_MAX_LENGTH = 200
FORM_DESCRIPTION_MAX_LENGTH = 1000
QUESTION_TEXT_MAX_LENGTH = 500
MIN_CHOICE_OPTIONS = 2

Violation = ErrorDetail


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def raise_if_invalid(violations: List[Violation], message: str = "Invalid input data"):
    if violations:
        raise ValidationFailed(message, violations)


def check_email(value: Optional[str], field: str = "email") -> List[Violation]:
    if _blank(value):
        return [Violation(field=field, message="Email is required", constraint="REQUIRED")]
    if not EMAIL_PATTERN.match(value):
        return [Violation(field=field, message="Invalid email format", constraint="EMAIL_FORMAT")]
    return []


def check_password(value: Optional[str]) -> List[Violation]:
    if value is None or len(value) < PASSWORD_MIN_LENGTH:
        return [
            Violation(
                field="password",
                message=f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
                constraint="MIN_LENGTH",
            )
        ]
    return []


def check_name(value: Optional[str]) -> List[Violation]:
    if _blank(value):
        return [Violation(field="name", message="Name is required", constraint="REQUIRED")]
    return []


def validate_register(data: schemas.RegisterInput) -> List[Violation]:
    return check_email(data.email) + check_password(data.password) + check_name(data.name)


def validate_login(data: schemas.LoginInput) -> List[Violation]:
    violations = []
    if _blank(data.email):
        violations.append(Violation(field="email", message="Email is required", constraint="REQUIRED"))
    if _blank(data.password):
        violations.append(
            Violation(field="password", message="Password is required", constraint="REQUIRED")
        )
    return violations


def validate_user_update(patch: schemas.UserUpdate) -> List[Violation]:
    """Only the supplied fields are checked."""
    violations = []
    if patch.email is not None:
        violations += check_email(patch.email)
    if patch.password is not None:
        violations += check_password(patch.password)
    if patch.name is not None:
        violations += check_name(patch.name)
    return violations


def check_form_title(title: Optional[str]) -> List[Violation]:
    if _blank(title):
        return [Violation(field="title", message="Form title is required", constraint="REQUIRED")]
    if len(title) > FORM_TITLE_MAX_LENGTH:
        return [
            Violation(
                field="title",
                message=f"Form title must be {FORM_TITLE_MAX_LENGTH} characters or less",
                constraint="MAX_LENGTH",
            )
        ]
    return []


def check_form_description(description: Optional[str]) -> List[Violation]:
    if description is not None and len(description) > FORM_DESCRIPTION_MAX_LENGTH:
        return [
            Violation(
                field="description",
                message=f"Form description must be {FORM_DESCRIPTION_MAX_LENGTH} characters or less",
                constraint="MAX_LENGTH",
            )
        ]
    return []


def validate_form_create(data: schemas.FormCreate) -> List[Violation]:
    return check_form_title(data.title) + check_form_description(data.description)


def validate_form_update(patch: schemas.FormUpdate) -> List[Violation]:
    violations = []
    if patch.title is not None:
        violations += check_form_title(patch.title)
    violations += check_form_description(patch.description)
    return violations


def check_question(
    text: Optional[str],
    question_type: Optional[str],
    options: Optional[List[str]],
    position: Optional[int] = None,
) -> List[Violation]:
    violations = []
    if _blank(text):
        violations.append(Violation(field="text", message="Question text is required", constraint="REQUIRED"))
    elif len(text) > QUESTION_TEXT_MAX_LENGTH:
        violations.append(
            Violation(
                field="text",
                message=f"Question text must be {QUESTION_TEXT_MAX_LENGTH} characters or less",
                constraint="MAX_LENGTH",
            )
        )

    if question_type not in QUESTION_TYPES:
        violations.append(
            Violation(
                field="type",
                message=f"Question type must be one of: {', '.join(QUESTION_TYPES)}",
                constraint="INVALID_VALUE",
            )
        )
    elif question_type in CHOICE_QUESTION_TYPES:
        if not options or len(options) < MIN_CHOICE_OPTIONS:
            violations.append(
                Violation(
                    field="options",
                    message=f"At least {MIN_CHOICE_OPTIONS} options are required for choice questions",
                    constraint="MIN_OPTIONS",
                )
            )
        elif any(_blank(option) for option in options):
            violations.append(
                Violation(field="options", message="Options must not be blank", constraint="REQUIRED")
            )

    if position is not None and position < 1:
        violations.append(
            Violation(field="position", message="Position must be 1 or greater", constraint="MIN_VALUE")
        )
    return violations


def validate_question_create(data: schemas.QuestionCreate) -> List[Violation]:
    return check_question(data.text, data.type, data.options, data.position)


def validate_question_update(current, patch: schemas.QuestionUpdate) -> List[Violation]:
    """
    Checks the question as it would look after the patch, so that e.g.
    switching a shorttext question to dropdown without options is rejected.
    """
    return check_question(
        patch.text if patch.text is not None else current.text,
        patch.type if patch.type is not None else current.question_type,
        patch.options if patch.options is not None else current.options,
        patch.position,
    )


def validate_reorder(data: schemas.ReorderInput) -> List[Violation]:
    if data.question_ids is None:
        return [
            Violation(field="question_ids", message="Question IDs array is required", constraint="REQUIRED")
        ]
    return []


def check_answers(answers: List[schemas.AnswerInput]) -> List[Violation]:
    violations = []
    for index, answer in enumerate(answers):
        if answer.question_id is None:
            violations.append(
                Violation(
                    field=f"answers[{index}].question_id",
                    message="Question ID is required",
                    constraint="REQUIRED",
                )
            )
        if _blank(answer.answer):
            violations.append(
                Violation(
                    field=f"answers[{index}].answer",
                    message="Answer value is required",
                    constraint="REQUIRED",
                )
            )
    return violations


def check_respondent_email(value: Optional[str]) -> List[Violation]:
    if value is None or value == "":
        return []
    return check_email(value, field="respondent_email")


def validate_response_create(data: schemas.ResponseCreate) -> List[Violation]:
    violations = check_respondent_email(data.respondent_email)
    if not data.answers:
        violations.append(
            Violation(field="answers", message="At least one answer is required", constraint="REQUIRED")
        )
    else:
        violations += check_answers(data.answers)
    return violations


def validate_response_update(patch: schemas.ResponseUpdate) -> List[Violation]:
    violations = check_respondent_email(patch.respondent_email)
    if patch.answers is not None:
        violations += check_answers(patch.answers)
    return violations
