from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from forms_api.models import Answer, Form, Question, Response
from forms_api.schemas import FormFilter, FormSort, FormSortField, SortOrder

_FORM_SORT_COLUMNS = {
    FormSortField.CREATED_AT: Form.created_at,
    FormSortField.UPDATED_AT: Form.updated_at,
    FormSortField.TITLE: Form.title,
}


async def create_form(db: AsyncSession, owner_id: int, title: str, description: Optional[str]) -> Form:
    db_form = Form(owner_id=owner_id, title=title, description=description)
    db.add(db_form)
    await db.flush()
    await db.refresh(db_form)
    return db_form


async def get_form(db: AsyncSession, form_id: int) -> Optional[Form]:
    return await db.get(Form, form_id)


async def get_forms_for_owner(
    db: AsyncSession,
    owner_id: int,
    form_filter: Optional[FormFilter] = None,
    sort: Optional[FormSort] = None,
) -> List[Form]:
    stmt = select(Form).where(Form.owner_id == owner_id)
    if form_filter is not None:
        if form_filter.title:
            stmt = stmt.where(func.lower(Form.title).contains(form_filter.title.lower()))
        if form_filter.created_after is not None:
            stmt = stmt.where(Form.created_at >= form_filter.created_after)
        if form_filter.created_before is not None:
            stmt = stmt.where(Form.created_at <= form_filter.created_before)

    sort = sort or FormSort()
    column = _FORM_SORT_COLUMNS[sort.field]
    if sort.order == SortOrder.ASC:
        stmt = stmt.order_by(column.asc(), Form.id.asc())
    else:
        stmt = stmt.order_by(column.desc(), Form.id.desc())

    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_form_ids_for_owner(db: AsyncSession, owner_id: int) -> List[int]:
    result = await db.execute(select(Form.id).where(Form.owner_id == owner_id))
    return [form_id for (form_id,) in result.all()]


async def update_form(db: AsyncSession, db_form: Form, **fields) -> Form:
    for key, value in fields.items():
        setattr(db_form, key, value)
    db_form.updated_at = func.now()
    await db.flush()
    await db.refresh(db_form)
    return db_form


async def delete_form(db: AsyncSession, form_id: int):
    """
    Removes a form with its answers, responses and questions. Children are
    deleted explicitly (answers first) so the result does not depend on the
    database enforcing ON DELETE CASCADE.
    """
    response_ids = select(Response.id).where(Response.form_id == form_id)
    await db.execute(
        delete(Answer).where(Answer.response_id.in_(response_ids)).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Response).where(Response.form_id == form_id).execution_options(synchronize_session=False)
    )
    await db.execute(
        delete(Question).where(Question.form_id == form_id).execution_options(synchronize_session=False)
    )
    await db.execute(delete(Form).where(Form.id == form_id).execution_options(synchronize_session=False))
    await db.flush()
