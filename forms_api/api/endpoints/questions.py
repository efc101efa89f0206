from fastapi import APIRouter, Depends, status

from forms_api import schemas
from forms_api.auth import Identity
from forms_api.api.deps import get_identity, get_service, render_result
from forms_api.service import FormService

router = APIRouter()


@router.get("/forms/{form_id}/questions")
async def list_questions(
    form_id: int,
    sort_field: schemas.QuestionSortField = schemas.QuestionSortField.POSITION,
    sort_order: schemas.SortOrder = schemas.SortOrder.ASC,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    sort = schemas.QuestionSort(field=sort_field, order=sort_order)
    return render_result(await service.questions(identity, form_id, sort))


@router.post("/forms/{form_id}/questions")
async def create_question(
    form_id: int,
    data: schemas.QuestionCreate,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    result = await service.create_question(identity, form_id, data)
    return render_result(result, status.HTTP_201_CREATED)


@router.put("/forms/{form_id}/questions/order")
async def reorder_questions(
    form_id: int,
    data: schemas.ReorderInput,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.reorder_questions(identity, form_id, data.question_ids))


@router.get("/forms/{form_id}/questions/{question_id}")
async def read_question(
    form_id: int,
    question_id: int,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.question(identity, form_id, question_id))


@router.patch("/forms/{form_id}/questions/{question_id}")
async def update_question(
    form_id: int,
    question_id: int,
    patch: schemas.QuestionUpdate,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.update_question(identity, form_id, question_id, patch))


@router.delete("/forms/{form_id}/questions/{question_id}")
async def delete_question(
    form_id: int,
    question_id: int,
    identity: Identity = Depends(get_identity),
    service: FormService = Depends(get_service),
):
    return render_result(await service.delete_question(identity, form_id, question_id))
