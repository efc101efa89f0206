from typing import Dict, List, Optional

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from forms_api.models import Answer, Question
from forms_api.schemas import QuestionSort, QuestionSortField, SortOrder

_QUESTION_SORT_COLUMNS = {
    QuestionSortField.POSITION: Question.position,
    QuestionSortField.CREATED_AT: Question.created_at,
    QuestionSortField.UPDATED_AT: Question.updated_at,
}


async def create_question(
    db: AsyncSession,
    form_id: int,
    text: str,
    question_type: str,
    required: bool,
    options: List[str],
    position: int,
) -> Question:
    db_question = Question(
        form_id=form_id,
        text=text,
        question_type=question_type,
        required=required,
        options=options,
        position=position,
    )
    db.add(db_question)
    await db.flush()
    await db.refresh(db_question)
    return db_question


async def get_question(db: AsyncSession, question_id: int) -> Optional[Question]:
    return await db.get(Question, question_id)


async def get_questions_for_form(
    db: AsyncSession, form_id: int, sort: Optional[QuestionSort] = None
) -> List[Question]:
    sort = sort or QuestionSort()
    column = _QUESTION_SORT_COLUMNS[sort.field]
    # positions may have been rewritten by bulk updates in this session
    stmt = (
        select(Question)
        .where(Question.form_id == form_id)
        .execution_options(populate_existing=True)
    )
    if sort.order == SortOrder.ASC:
        stmt = stmt.order_by(column.asc(), Question.id.asc())
    else:
        stmt = stmt.order_by(column.desc(), Question.id.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_question_ids_for_form(db: AsyncSession, form_id: int) -> List[int]:
    result = await db.execute(
        select(Question.id).where(Question.form_id == form_id).order_by(Question.position, Question.id)
    )
    return [question_id for (question_id,) in result.all()]


async def count_questions(db: AsyncSession, form_id: int) -> int:
    result = await db.execute(select(func.count(Question.id)).where(Question.form_id == form_id))
    return result.scalar_one()


async def set_positions(db: AsyncSession, form_id: int, positions: Dict[int, int]):
    """
    Writes ``{question_id: position}`` for one form in a single UPDATE
    statement. The caller guarantees the mapping covers every question.
    """
    if not positions:
        return
    await db.execute(
        update(Question)
        .where(Question.form_id == form_id, Question.id.in_(list(positions)))
        .values(
            position=case(positions, value=Question.id),
            updated_at=func.now(),
        )
        .execution_options(synchronize_session=False)
    )
    await db.flush()


async def shift_positions(
    db: AsyncSession,
    form_id: int,
    start: int,
    end: Optional[int],
    delta: int,
    exclude_id: Optional[int] = None,
):
    """Moves every question with ``start <= position <= end`` by ``delta``."""
    stmt = update(Question).where(Question.form_id == form_id, Question.position >= start)
    if end is not None:
        stmt = stmt.where(Question.position <= end)
    if exclude_id is not None:
        stmt = stmt.where(Question.id != exclude_id)
    await db.execute(
        stmt.values(position=Question.position + delta).execution_options(synchronize_session=False)
    )
    await db.flush()


async def update_question(db: AsyncSession, db_question: Question, **fields) -> Question:
    for key, value in fields.items():
        setattr(db_question, key, value)
    db_question.updated_at = func.now()
    await db.flush()
    await db.refresh(db_question)
    return db_question


async def delete_question(db: AsyncSession, question_id: int):
    await db.execute(
        delete(Answer).where(Answer.question_id == question_id).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Question).where(Question.id == question_id).execution_options(synchronize_session=False)
    )
    await db.flush()
