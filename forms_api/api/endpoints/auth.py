from fastapi import APIRouter, Depends, status

from forms_api import schemas
from forms_api.auth import Identity
from forms_api.api.deps import get_identity, get_service, render_result
from forms_api.service import FormService

router = APIRouter()


@router.post("/register")
async def register(data: schemas.RegisterInput, service: FormService = Depends(get_service)):
    result = await service.register(data.email, data.password, data.name)
    return render_result(result, status.HTTP_201_CREATED)


@router.post("/login")
async def login(data: schemas.LoginInput, service: FormService = Depends(get_service)):
    return render_result(await service.login(data.email, data.password))


@router.post("/logout")
async def logout(
    identity: Identity = Depends(get_identity), service: FormService = Depends(get_service)
):
    return render_result(await service.logout(identity))
