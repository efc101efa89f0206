import logging
from typing import Iterable, Set

from sqlalchemy.ext.asyncio import AsyncSession

from forms_api import schemas
from forms_api.crud import crud_question, crud_response
from forms_api.errors import ErrorDetail, NotFound
from forms_api.validators import raise_if_invalid, validate_response_create, validate_response_update

logger = logging.getLogger(__name__)


async def _insert_answers(db: AsyncSession, form_id: int, response_id: int, answers: Iterable[schemas.AnswerInput]):
    # Every answer must point at a question of the response's own form
    form_question_ids: Set[int] = set(await crud_question.get_question_ids_for_form(db, form_id))
    inserted = 0
    for index, answer in enumerate(answers):
        if answer.question_id not in form_question_ids:
            raise NotFound(
                "question",
                message="One or more questions not found",
                details=[
                    ErrorDetail(
                        field=f"answers[{index}].question_id",
                        message=f"Question {answer.question_id} does not belong to form {form_id}",
                        constraint="FOREIGN_KEY",
                    )
                ],
            )
        await crud_response.add_answer(db, response_id, answer.question_id, answer.answer)
        inserted += 1
    return inserted


def check_create(payload: schemas.ResponseCreate):
    raise_if_invalid(validate_response_create(payload), "Invalid response data")


def check_replace(patch: schemas.ResponseUpdate):
    raise_if_invalid(validate_response_update(patch), "Invalid response data")


async def create(db: AsyncSession, form, payload: schemas.ResponseCreate):
    """
    Stores a response and its answers. ``payload`` must have passed
    ``check_create``.

    The response row is flushed first to get its id, then one answer row per
    entry follows. Everything happens in the caller's unit of work: if any
    answer fails, the response row is rolled back with it.
    """
    db_response = await crud_response.create_response(
        db,
        form.id,
        respondent_name=payload.respondent_name,
        respondent_email=payload.respondent_email,
    )
    inserted = await _insert_answers(db, form.id, db_response.id, payload.answers)
    logger.info("Response %s stored for form %s with %d answers", db_response.id, form.id, inserted)
    return db_response


async def replace(db: AsyncSession, db_response, patch: schemas.ResponseUpdate):
    """
    Updates the respondent fields and, only when ``patch.answers`` is given,
    swaps the whole answer set: existing answers are deleted and the new ones
    inserted. An empty list therefore removes all answers; ``None`` keeps them.
    ``patch`` must have passed ``check_replace``.
    """
    changes = patch.model_dump(include={"respondent_name", "respondent_email"}, exclude_unset=True)
    db_response = await crud_response.update_response(db, db_response, **changes)

    if patch.answers is not None:
        await crud_response.delete_answers_for_response(db, db_response.id)
        inserted = await _insert_answers(db, db_response.form_id, db_response.id, patch.answers)
        logger.info("Replaced answers of response %s (%d answers)", db_response.id, inserted)
    return db_response
