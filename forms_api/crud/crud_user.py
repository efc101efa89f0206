from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from forms_api.models import User
from forms_api.crud import crud_form


async def create_user(db: AsyncSession, email: str, hashed_password: str, name: str) -> User:
    db_user = User(email=email, hashed_password=hashed_password, name=name)
    db.add(db_user)
    await db.flush()
    await db.refresh(db_user)
    return db_user


async def get_user(db: AsyncSession, user_id: int) -> Optional[User]:
    return await db.get(User, user_id)


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def get_all_users(db: AsyncSession) -> List[User]:
    result = await db.execute(select(User).order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())


async def update_user(db: AsyncSession, db_user: User, **fields) -> User:
    for key, value in fields.items():
        setattr(db_user, key, value)
    await db.flush()
    await db.refresh(db_user)
    return db_user


async def delete_user(db: AsyncSession, db_user: User):
    form_ids = await crud_form.get_form_ids_for_owner(db, db_user.id)
    for form_id in form_ids:
        await crud_form.delete_form(db, form_id)
    await db.execute(delete(User).where(User.id == db_user.id).execution_options(synchronize_session=False))
    await db.flush()
