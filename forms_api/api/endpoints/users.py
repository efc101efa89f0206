from fastapi import APIRouter, Depends

from forms_api import schemas
from forms_api.auth import Identity
from forms_api.api.deps import get_identity, get_service, render_result
from forms_api.service import FormService

router = APIRouter()


@router.get("/me")
async def read_me(identity: Identity = Depends(get_identity), service: FormService = Depends(get_service)):
    return render_result(await service.me(identity))


@router.get("/users")
async def read_users(identity: Identity = Depends(get_identity), service: FormService = Depends(get_service)):
    return render_result(await service.users(identity))


@router.get("/users/{user_id}")
async def read_user(
    user_id: int, identity: Identity = Depends(get_identity), service: FormService = Depends(get_service)
):
    return render_result(await service.user(identity, user_id))


@router.patch("/users/{user_id}")
async def update_user(
    user_id: int,
    patch: schemas.UserUpdate,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.update_user(identity, user_id, patch))


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int, identity: Identity = Depends(get_identity), service: FormService = Depends(get_service)
):
    return render_result(await service.delete_user(identity, user_id))
