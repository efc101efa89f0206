from typing import List, Optional

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    field: str
    message: str
    constraint: Optional[str] = None


class ServiceError(Exception):
    """
    Base class for every failure an operation can report to its caller.

    The operation boundary in service.py turns these into a Failure envelope;
    anything that is not a ServiceError is reported as INTERNAL_ERROR.
    """

    code = "INTERNAL_ERROR"
    http_status = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, details: Optional[List[ErrorDetail]] = None):
        self.message = message or self.default_message
        self.details = list(details or [])
        super().__init__(self.message)


class ValidationFailed(ServiceError):
    code = "VALIDATION_ERROR"
    http_status = 400
    default_message = "Invalid input data"


class Unauthorized(ServiceError):
    code = "UNAUTHORIZED"
    http_status = 401
    default_message = "Authentication required"


class InvalidCredentials(ServiceError):
    code = "INVALID_CREDENTIALS"
    http_status = 401
    default_message = "Invalid email or password"


class Forbidden(ServiceError):
    code = "FORBIDDEN"
    http_status = 403
    default_message = "You are not allowed to perform this action"


class NotFound(ServiceError):
    http_status = 404

    def __init__(self, entity: str, entity_id=None, message: Optional[str] = None, details=None):
        self.entity = entity
        self.code = f"{entity.upper()}_NOT_FOUND"
        if message is None:
            if entity_id is None:
                message = f"{entity.capitalize()} not found"
            else:
                message = f"{entity.capitalize()} with id {entity_id} not found"
        super().__init__(message, details)


class DuplicateEmail(ServiceError):
    code = "DUPLICATE_EMAIL"
    http_status = 409
    default_message = "Email already exists"


class InternalError(ServiceError):
    pass
