from fastapi import APIRouter, Depends, status

from forms_api import schemas
from forms_api.auth import Identity
from forms_api.api.deps import get_identity, get_service, render_result
from forms_api.service import FormService

router = APIRouter()


@router.get("/forms/{form_id}/responses")
async def list_responses(
    form_id: int,
    sort_field: schemas.ResponseSortField = schemas.ResponseSortField.CREATED_AT,
    sort_order: schemas.SortOrder = schemas.SortOrder.DESC,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    sort = schemas.ResponseSort(field=sort_field, order=sort_order)
    return render_result(await service.responses(identity, form_id, sort))


# Öffentlich: Teilnehmer senden ihre Antworten ohne Login
@router.post("/forms/{form_id}/responses")
async def create_response(
    form_id: int, data: schemas.ResponseCreate, service: FormService = Depends(get_service)
):
    result = await service.create_response(form_id, data)
    return render_result(result, status.HTTP_201_CREATED)


@router.get("/forms/{form_id}/responses/{response_id}")
async def read_response(
    form_id: int,
    response_id: int,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.response(identity, form_id, response_id))


@router.patch("/forms/{form_id}/responses/{response_id}")
async def update_response(
    form_id: int,
    response_id: int,
    patch: schemas.ResponseUpdate,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.update_response(identity, form_id, response_id, patch))


@router.delete("/forms/{form_id}/responses/{response_id}")
async def delete_response(
    form_id: int,
    response_id: int,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.delete_response(identity, form_id, response_id))
