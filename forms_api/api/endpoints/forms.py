from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status

from forms_api import schemas
from forms_api.auth import Identity
from forms_api.api.deps import get_identity, get_service, render_result
from forms_api.service import FormService

router = APIRouter()


@router.get("/forms")
async def list_forms(
    title: Optional[str] = None,
    created_after: Optional[datetime] = None,
    created_before: Optional[datetime] = None,
    sort_field: schemas.FormSortField = schemas.FormSortField.CREATED_AT,
    sort_order: schemas.SortOrder = schemas.SortOrder.DESC,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    form_filter = schemas.FormFilter(
        title=title, created_after=created_after, created_before=created_before
    )
    sort = schemas.FormSort(field=sort_field, order=sort_order)
    return render_result(await service.forms(identity, form_filter, sort))


@router.post("/forms")
async def create_form(
    data: schemas.FormCreate,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    result = await service.create_form(identity, data.title, data.description)
    return render_result(result, status.HTTP_201_CREATED)


@router.get("/forms/{form_id}")
async def read_form(
    form_id: int, identity: Identity = Depends(get_identity), service: FormService = Depends(get_service)
):
    return render_result(await service.form(identity, form_id))


@router.patch("/forms/{form_id}")
async def update_form(
    form_id: int,
    patch: schemas.FormUpdate,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.update_form(identity, form_id, patch))


@router.delete("/forms/{form_id}")
async def delete_form(
    form_id: int, identity: Identity = Depends(get_identity), service: FormService = Depends(get_service)
):
    return render_result(await service.delete_form(identity, form_id))
