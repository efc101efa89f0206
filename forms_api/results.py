"""
Result envelopes returned by every FormService operation.

An operation returns either ``Success`` (tagged with the payload's entity
kind, e.g. ``"Form"`` or ``"ResponsesList"``) or ``Failure`` (always tagged
``"Error"``). The tag is set when the envelope is built, callers branch on
``result.ok`` or ``result.kind``.
"""
from typing import Any, List, Literal, Union

from pydantic import BaseModel, Field

from .errors import ErrorDetail, ServiceError


class ErrorBody(BaseModel):
    code: str
    message: str
    http_status: int
    details: List[ErrorDetail] = Field(default_factory=list)


class Success(BaseModel):
    kind: str
    data: Any

    @property
    def ok(self) -> bool:
        return True


class Failure(BaseModel):
    kind: Literal["Error"] = "Error"
    error: ErrorBody

    @property
    def ok(self) -> bool:
        return False

    @classmethod
    def from_error(cls, exc: ServiceError) -> "Failure":
        return cls(
            error=ErrorBody(
                code=exc.code,
                message=exc.message,
                http_status=exc.http_status,
                details=exc.details,
            )
        )


Result = Union[Success, Failure]
