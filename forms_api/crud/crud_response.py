from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from forms_api.models import Answer, Response
from forms_api.schemas import ResponseSort, ResponseSortField, SortOrder

_RESPONSE_SORT_COLUMNS = {
    ResponseSortField.CREATED_AT: Response.created_at,
    ResponseSortField.UPDATED_AT: Response.updated_at,
    ResponseSortField.RESPONDENT_NAME: Response.respondent_name,
}


async def create_response(
    db: AsyncSession,
    form_id: int,
    respondent_name: Optional[str],
    respondent_email: Optional[str],
) -> Response:
    db_response = Response(
        form_id=form_id,
        respondent_name=respondent_name,
        respondent_email=respondent_email,
    )
    db.add(db_response)
    await db.flush()  # ID der neuen Antwort wird für die Answers gebraucht
    await db.refresh(db_response)
    return db_response


async def add_answer(db: AsyncSession, response_id: int, question_id: int, answer_text: str) -> Answer:
    db_answer = Answer(response_id=response_id, question_id=question_id, answer_text=answer_text)
    db.add(db_answer)
    await db.flush()
    return db_answer


async def get_response(db: AsyncSession, response_id: int) -> Optional[Response]:
    result = await db.execute(
        select(Response)
        .options(selectinload(Response.answers))
        .where(Response.id == response_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_responses_for_form(
    db: AsyncSession, form_id: int, sort: Optional[ResponseSort] = None
) -> List[Response]:
    sort = sort or ResponseSort()
    column = _RESPONSE_SORT_COLUMNS[sort.field]
    stmt = (
        select(Response)
        .options(selectinload(Response.answers))
        .where(Response.form_id == form_id)
        .execution_options(populate_existing=True)
    )
    if sort.order == SortOrder.ASC:
        stmt = stmt.order_by(column.asc(), Response.id.asc())
    else:
        stmt = stmt.order_by(column.desc(), Response.id.desc())
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_responses(db: AsyncSession, form_id: int) -> int:
    result = await db.execute(select(func.count(Response.id)).where(Response.form_id == form_id))
    return result.scalar_one()


async def update_response(db: AsyncSession, db_response: Response, **fields) -> Response:
    for key, value in fields.items():
        setattr(db_response, key, value)
    db_response.updated_at = func.now()
    await db.flush()
    await db.refresh(db_response)
    return db_response


async def delete_answers_for_response(db: AsyncSession, response_id: int):
    await db.execute(
        delete(Answer).where(Answer.response_id == response_id).execution_options(synchronize_session=False)
    )
    await db.flush()


async def delete_response(db: AsyncSession, response_id: int):
    await delete_answers_for_response(db, response_id)
    await db.execute(
        delete(Response).where(Response.id == response_id).execution_options(synchronize_session=False)
    )
    await db.flush()
