import logging
from typing import List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from forms_api.crud import crud_question
from forms_api.errors import ErrorDetail, ValidationFailed

logger = logging.getLogger(__name__)


def check_permutation(current_ids: Sequence[int], new_order_ids: Sequence[int], form_id: int) -> List[ErrorDetail]:
    """
    Returns why ``new_order_ids`` is not a permutation of ``current_ids``
    (empty list when it is).
    """
    current = set(current_ids)
    seen = set()
    for question_id in new_order_ids:
        if question_id not in current:
            message = f"Question with ID {question_id} not found in form {form_id}"
            return [ErrorDetail(field="question_ids", message=message, constraint="INVALID_QUESTION_ID")]
        if question_id in seen:
            message = f"Question with ID {question_id} is listed more than once"
            return [ErrorDetail(field="question_ids", message=message, constraint="DUPLICATE_QUESTION_ID")]
        seen.add(question_id)

    if len(new_order_ids) != len(current):
        message = "All questions must be included in the reorder operation"
        return [ErrorDetail(field="question_ids", message=message, constraint="INCOMPLETE_ORDER")]
    return []


async def reorder(db: AsyncSession, form, new_order_ids: Sequence[int]):
    """
    Gives ``new_order_ids[i]`` position ``i + 1``.

    Either every position changes or none does: the permutation is checked
    before anything is written and the write is one UPDATE statement inside
    the caller's unit of work.
    """
    current_ids = await crud_question.get_question_ids_for_form(db, form.id)
    problems = check_permutation(current_ids, new_order_ids, form.id)
    if problems:
        raise ValidationFailed(problems[0].message, problems)

    positions = {question_id: index + 1 for index, question_id in enumerate(new_order_ids)}
    await crud_question.set_positions(db, form.id, positions)
    logger.info("Reordered %d questions of form %s", len(positions), form.id)


async def insert_at(db: AsyncSession, form_id: int, requested_position) -> int:
    """
    Opens a slot for a new question and returns its position. Without a
    requested position (or past the end) the question is appended.
    """
    count = await crud_question.count_questions(db, form_id)
    if requested_position is None or requested_position > count:
        return count + 1
    await crud_question.shift_positions(db, form_id, start=requested_position, end=None, delta=1)
    return requested_position


async def move(db: AsyncSession, question, requested_position: int) -> int:
    """Shifts the neighbours so that ``question`` can take ``requested_position``."""
    count = await crud_question.count_questions(db, question.form_id)
    target = min(requested_position, count)
    current = question.position
    if target < current:
        await crud_question.shift_positions(
            db, question.form_id, start=target, end=current - 1, delta=1, exclude_id=question.id
        )
    elif target > current:
        await crud_question.shift_positions(
            db, question.form_id, start=current + 1, end=target, delta=-1, exclude_id=question.id
        )
    return target


async def close_gap(db: AsyncSession, form_id: int, removed_position: int):
    """Pulls every question after a deleted one up by one."""
    await crud_question.shift_positions(db, form_id, start=removed_position + 1, end=None, delta=-1)
