import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError

from .api.deps import get_service, render_result
from .api.endpoints import auth, forms, questions, responses, users
from .auth import AuthGate
from .database import build_engine, build_session_factory, create_db_and_tables
from .errors import ErrorDetail, ValidationFailed
from .logging_config import setup_logging
from .results import Failure
from .service import FormService

logger = logging.getLogger(__name__)


def _field_path(loc) -> str:
    # ("body", "answers", 0, "question_id") -> "answers.0.question_id"
    parts = [str(part) for part in loc]
    return ".".join(parts[1:]) or ".".join(parts) or "request"


def create_app(database_url: Optional[str] = None, auth_gate: Optional[AuthGate] = None) -> FastAPI:
    """
    Builds the HTTP app. The engine and the FormService are created in the
    lifespan, so each app instance owns its own store.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application starting...")
        engine = build_engine(database_url)
        await create_db_and_tables(engine)
        app.state.service = FormService(build_session_factory(engine), auth_gate)
        yield
        logger.info("Application shutting down...")
        await engine.dispose()

    app = FastAPI(title="Forms API", lifespan=lifespan)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # Body, query or path that FastAPI could not parse into the declared types
        details = [
            ErrorDetail(
                field=_field_path(error["loc"]),
                message=error["msg"],
                constraint="INVALID_VALUE",
            )
            for error in exc.errors()
        ]
        logger.info("Rejected malformed request to %s", request.url.path)
        return render_result(Failure.from_error(ValidationFailed("Invalid request data", details)))

    @app.get("/health")
    async def health(service: FormService = Depends(get_service)):
        return render_result(await service.health())

    app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
    app.include_router(users.router, prefix="/api", tags=["users"])
    app.include_router(forms.router, prefix="/api", tags=["forms"])
    app.include_router(questions.router, prefix="/api", tags=["questions"])
    app.include_router(responses.router, prefix="/api", tags=["responses"])
    return app


setup_logging()
app = create_app()
