from typing import Optional

from fastapi import Depends, Header, Request
from fastapi.responses import JSONResponse

from forms_api.auth import Identity
from forms_api.results import Result
from forms_api.service import FormService


def get_service(request: Request) -> FormService:
    return request.app.state.service


async def get_identity(
    authorization: Optional[str] = Header(None),
    service: FormService = Depends(get_service),
) -> Identity:
    """
    Resolves the caller from the ``Authorization: Bearer <token>`` header.
    A missing or unusable token is not an error here: the caller is simply
    anonymous and operations that need an identity answer UNAUTHORIZED.
    """
    return service.resolve_identity(authorization)


def render_result(result: Result, success_status: int = 200) -> JSONResponse:
    status_code = success_status if result.ok else result.error.http_status
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
