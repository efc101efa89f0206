"""
FormService: every query and mutation of the forms API.

Each public coroutine runs the same pipeline: identity check (unless the
operation is public), validation, ownership check for form-scoped resources,
the effect inside one unit of work, and finally the result envelope. Callers
always get a ``Success`` or a ``Failure`` back, never an exception.
"""
import functools
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from . import schemas
from .auth import AuthGate, Identity, require_identity
from .config import APP_VERSION
from .crud import crud_form, crud_question, crud_response, crud_user
from .database import unit_of_work
from .errors import (
    DuplicateEmail,
    ErrorDetail,
    InternalError,
    InvalidCredentials,
    NotFound,
    ServiceError,
)
from .models import CHOICE_QUESTION_TYPES
from .ownership import assert_owner, assert_self
from .results import Failure, Result, Success
from .services import composer, reorder
from . import validators

logger = logging.getLogger(__name__)


def operation(kind: str, failure_message: str, requires_auth: bool = True):
    """
    Wraps a FormService coroutine into the result protocol.

    ``kind`` tags the success payload. ``failure_message`` is the only text an
    unexpected error shows to the caller; the exception itself goes to the log.
    """

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs) -> Result:
            try:
                if requires_auth:
                    identity = kwargs.get("identity", args[0] if args else None)
                    require_identity(identity)
                data = await func(self, *args, **kwargs)
            except ServiceError as exc:
                logger.info("%s rejected: %s (%s)", func.__name__, exc.code, exc.message)
                return Failure.from_error(exc)
            except Exception:
                logger.exception("%s failed with an unexpected error", func.__name__)
                return Failure.from_error(InternalError(failure_message))
            return Success(kind=kind, data=data)

        return wrapper

    return decorator


def _duplicate_email() -> DuplicateEmail:
    return DuplicateEmail(
        details=[ErrorDetail(field="email", message="This email is already registered", constraint="UNIQUE")]
    )


class FormService:
    def __init__(self, session_factory: async_sessionmaker, auth_gate: Optional[AuthGate] = None):
        self.session_factory = session_factory
        self.auth_gate = auth_gate or AuthGate()

    def resolve_identity(self, token: Optional[str]) -> Identity:
        return self.auth_gate.resolve(token)

    # --- Hilfsfunktionen ---

    async def _load_caller(self, db, identity: Identity):
        # Tokens outlive deleted accounts until they expire
        user = await crud_user.get_user(db, identity.id)
        if user is None:
            raise NotFound("user", identity.id)
        return user

    async def _load_owned_form(self, db, identity: Identity, form_id: int, message: str):
        form = await crud_form.get_form(db, form_id)
        if form is None:
            raise NotFound("form", form_id)
        assert_owner(identity, form, message)
        return form

    async def _load_question(self, db, form, question_id: int):
        question = await crud_question.get_question(db, question_id)
        if question is None or question.form_id != form.id:
            raise NotFound("question", question_id)
        return question

    async def _load_response(self, db, form, response_id: int):
        response = await crud_response.get_response(db, response_id)
        if response is None or response.form_id != form.id:
            raise NotFound("response", response_id)
        return response

    async def _form_payload(self, db, form) -> schemas.FormOut:
        questions = await crud_question.get_questions_for_form(db, form.id)
        return schemas.FormOut(
            id=form.id,
            owner_id=form.owner_id,
            title=form.title,
            description=form.description,
            created_at=form.created_at,
            updated_at=form.updated_at,
            question_count=len(questions),
            response_count=await crud_response.count_responses(db, form.id),
            questions=[schemas.QuestionOut.model_validate(q) for q in questions],
        )

    async def _response_payload(self, db, response_id: int) -> schemas.ResponseOut:
        # fresh read so the answer collection reflects this unit of work
        response = await crud_response.get_response(db, response_id)
        return self._response_out(response)

    @staticmethod
    def _response_out(response) -> schemas.ResponseOut:
        answers = [schemas.AnswerOut.model_validate(a) for a in response.answers]
        return schemas.ResponseOut(
            id=response.id,
            form_id=response.form_id,
            respondent_name=response.respondent_name,
            respondent_email=response.respondent_email,
            created_at=response.created_at,
            updated_at=response.updated_at,
            answers=answers,
            answer_count=len(answers),
        )

    # --- System ---

    @operation("HealthStatus", "Health check failed", requires_auth=False)
    async def health(self):
        async with unit_of_work(self.session_factory) as db:
            await db.execute(text("SELECT 1"))
        return schemas.HealthStatus(
            status="OK",
            message="Forms API is running",
            timestamp=datetime.now(timezone.utc),
            version=APP_VERSION,
        )

    # --- Authentifizierung ---

    @operation("User", "Registration failed", requires_auth=False)
    async def register(self, email: Optional[str], password: Optional[str], name: Optional[str]):
        data = schemas.RegisterInput(email=email, password=password, name=name)
        validators.raise_if_invalid(validators.validate_register(data))

        async with unit_of_work(self.session_factory) as db:
            if await crud_user.get_user_by_email(db, data.email) is not None:
                raise _duplicate_email()
            try:
                user = await crud_user.create_user(
                    db, data.email, self.auth_gate.hash_password(data.password), data.name.strip()
                )
            except IntegrityError:
                # lost a race against a concurrent registration
                raise _duplicate_email()
            logger.info("User %s registered", user.id)
            return schemas.UserOut.model_validate(user)

    @operation("Session", "Login failed", requires_auth=False)
    async def login(self, email: Optional[str], password: Optional[str]):
        data = schemas.LoginInput(email=email, password=password)
        validators.raise_if_invalid(validators.validate_login(data))

        async with unit_of_work(self.session_factory) as db:
            user = await crud_user.get_user_by_email(db, data.email)
            if user is None or not self.auth_gate.verify_password(data.password, user.hashed_password):
                logger.warning("Failed login for %s", data.email)
                raise InvalidCredentials(
                    details=[
                        ErrorDetail(
                            field="credentials",
                            message="Email or password is incorrect",
                            constraint="AUTHENTICATION",
                        )
                    ]
                )
            token, expires_at = self.auth_gate.issue_token(user.id, user.email)
            logger.info("User %s logged in", user.id)
            return schemas.SessionOut(
                token=token,
                user_id=user.id,
                user=schemas.UserOut.model_validate(user),
                expires_at=expires_at,
            )

    @operation("SuccessResult", "Logout failed")
    async def logout(self, identity: Identity):
        # Tokens are stateless; the client discards it, nothing is revoked here.
        logger.info("User %s logged out", identity.id)
        return schemas.SuccessResult(message="Logged out successfully")

    # --- Benutzer ---

    @operation("User", "Failed to fetch user")
    async def me(self, identity: Identity):
        async with unit_of_work(self.session_factory) as db:
            user = await self._load_caller(db, identity)
            return schemas.UserOut.model_validate(user)

    @operation("UsersList", "Failed to fetch users")
    async def users(self, identity: Identity):
        async with unit_of_work(self.session_factory) as db:
            users = await crud_user.get_all_users(db)
            return schemas.UsersList(
                users=[schemas.UserOut.model_validate(u) for u in users], count=len(users)
            )

    @operation("User", "Failed to fetch user")
    async def user(self, identity: Identity, user_id: int):
        async with unit_of_work(self.session_factory) as db:
            user = await crud_user.get_user(db, user_id)
            if user is None:
                raise NotFound("user", user_id)
            return schemas.UserOut.model_validate(user)

    @operation("User", "Failed to update user")
    async def update_user(self, identity: Identity, user_id: int, patch: schemas.UserUpdate):
        validators.raise_if_invalid(validators.validate_user_update(patch))
        assert_self(identity, user_id, "You can only update your own profile")

        async with unit_of_work(self.session_factory) as db:
            user = await crud_user.get_user(db, user_id)
            if user is None:
                raise NotFound("user", user_id)

            changes = {}
            if patch.email is not None and patch.email != user.email:
                other = await crud_user.get_user_by_email(db, patch.email)
                if other is not None:
                    raise _duplicate_email()
                changes["email"] = patch.email
            if patch.password is not None:
                changes["hashed_password"] = self.auth_gate.hash_password(patch.password)
            if patch.name is not None:
                changes["name"] = patch.name.strip()

            try:
                user = await crud_user.update_user(db, user, **changes)
            except IntegrityError:
                # lost a race against a concurrent update
                raise _duplicate_email()
            logger.info("User %s updated (%s)", user_id, ", ".join(sorted(changes)) or "no changes")
            return schemas.UserOut.model_validate(user)

    @operation("SuccessResult", "Failed to delete user")
    async def delete_user(self, identity: Identity, user_id: int):
        assert_self(identity, user_id, "You can only delete your own account")
        async with unit_of_work(self.session_factory) as db:
            user = await crud_user.get_user(db, user_id)
            if user is None:
                raise NotFound("user", user_id)
            await crud_user.delete_user(db, user)
        logger.info("User %s deleted with all forms", user_id)
        return schemas.SuccessResult(message="User deleted successfully and logged out")

    # --- Formulare ---

    @operation("FormsList", "Failed to fetch forms")
    async def forms(
        self,
        identity: Identity,
        form_filter: Optional[schemas.FormFilter] = None,
        sort: Optional[schemas.FormSort] = None,
    ):
        async with unit_of_work(self.session_factory) as db:
            forms = await crud_form.get_forms_for_owner(db, identity.id, form_filter, sort)
            payloads = [await self._form_payload(db, form) for form in forms]
            return schemas.FormsList(forms=payloads, count=len(payloads))

    @operation("Form", "Failed to fetch form")
    async def form(self, identity: Identity, form_id: int):
        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(db, identity, form_id, "You can only view your own forms")
            return await self._form_payload(db, form)

    @operation("Form", "Failed to create form")
    async def create_form(self, identity: Identity, title: Optional[str], description: Optional[str] = None):
        data = schemas.FormCreate(title=title, description=description)
        validators.raise_if_invalid(validators.validate_form_create(data), "Invalid form data")

        async with unit_of_work(self.session_factory) as db:
            await self._load_caller(db, identity)
            form = await crud_form.create_form(db, identity.id, data.title.strip(), data.description)
            logger.info("Form %s created by user %s", form.id, identity.id)
            return await self._form_payload(db, form)

    @operation("Form", "Failed to update form")
    async def update_form(self, identity: Identity, form_id: int, patch: schemas.FormUpdate):
        validators.raise_if_invalid(validators.validate_form_update(patch), "Invalid form data")

        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(db, identity, form_id, "You can only update your own forms")

            changes = patch.model_dump(exclude_unset=True)
            if changes.get("title") is None:
                changes.pop("title", None)
            else:
                changes["title"] = changes["title"].strip()
            form = await crud_form.update_form(db, form, **changes)
            logger.info("Form %s updated", form_id)
            return await self._form_payload(db, form)

    @operation("SuccessResult", "Failed to delete form")
    async def delete_form(self, identity: Identity, form_id: int):
        async with unit_of_work(self.session_factory) as db:
            await self._load_owned_form(db, identity, form_id, "You can only delete your own forms")
            await crud_form.delete_form(db, form_id)
        logger.info("Form %s deleted with its questions and responses", form_id)
        return schemas.SuccessResult(message="Form deleted successfully")

    # --- Fragen ---

    @operation("QuestionsList", "Failed to fetch questions")
    async def questions(self, identity: Identity, form_id: int, sort: Optional[schemas.QuestionSort] = None):
        async with unit_of_work(self.session_factory) as db:
            await self._load_owned_form(db, identity, form_id, "You can only view questions of your own forms")
            questions = await crud_question.get_questions_for_form(db, form_id, sort)
            return schemas.QuestionsList(
                questions=[schemas.QuestionOut.model_validate(q) for q in questions],
                count=len(questions),
            )

    @operation("Question", "Failed to fetch question")
    async def question(self, identity: Identity, form_id: int, question_id: int):
        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(db, identity, form_id, "You can only view questions of your own forms")
            question = await self._load_question(db, form, question_id)
            return schemas.QuestionOut.model_validate(question)

    @operation("Question", "Failed to create question")
    async def create_question(self, identity: Identity, form_id: int, data: schemas.QuestionCreate):
        validators.raise_if_invalid(validators.validate_question_create(data), "Invalid question data")

        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(
                db, identity, form_id, "You can only add questions to your own forms"
            )

            position = await reorder.insert_at(db, form.id, data.position)
            options = list(data.options) if data.type in CHOICE_QUESTION_TYPES else []
            question = await crud_question.create_question(
                db,
                form.id,
                text=data.text.strip(),
                question_type=data.type,
                required=data.required,
                options=options,
                position=position,
            )
            logger.info("Question %s added to form %s at position %s", question.id, form.id, position)
            return schemas.QuestionOut.model_validate(question)

    @operation("Question", "Failed to update question")
    async def update_question(
        self, identity: Identity, form_id: int, question_id: int, patch: schemas.QuestionUpdate
    ):
        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(
                db, identity, form_id, "You can only update questions in your own forms"
            )
            question = await self._load_question(db, form, question_id)
            validators.raise_if_invalid(
                validators.validate_question_update(question, patch), "Invalid question data"
            )

            changes = {}
            if patch.text is not None:
                changes["text"] = patch.text.strip()
            if patch.type is not None:
                changes["question_type"] = patch.type
            if patch.required is not None:
                changes["required"] = patch.required
            new_type = changes.get("question_type", question.question_type)
            if new_type not in CHOICE_QUESTION_TYPES:
                changes["options"] = []
            elif patch.options is not None:
                changes["options"] = list(patch.options)
            if patch.position is not None and patch.position != question.position:
                changes["position"] = await reorder.move(db, question, patch.position)

            question = await crud_question.update_question(db, question, **changes)
            logger.info("Question %s of form %s updated", question_id, form_id)
            return schemas.QuestionOut.model_validate(question)

    @operation("SuccessResult", "Failed to delete question")
    async def delete_question(self, identity: Identity, form_id: int, question_id: int):
        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(
                db, identity, form_id, "You can only delete questions from your own forms"
            )
            question = await self._load_question(db, form, question_id)
            removed_position = question.position
            await crud_question.delete_question(db, question.id)
            await reorder.close_gap(db, form.id, removed_position)
        logger.info("Question %s deleted from form %s", question_id, form_id)
        return schemas.SuccessResult(message="Question deleted successfully")

    @operation("Form", "Failed to reorder questions")
    async def reorder_questions(self, identity: Identity, form_id: int, question_ids: Optional[List[int]]):
        data = schemas.ReorderInput(question_ids=question_ids)
        validators.raise_if_invalid(validators.validate_reorder(data), "Question IDs array is required")

        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(
                db, identity, form_id, "You can only reorder questions in your own forms"
            )

            await reorder.reorder(db, form, data.question_ids)
            return await self._form_payload(db, form)

    # --- Antworten ---

    @operation("ResponsesList", "Failed to fetch responses")
    async def responses(self, identity: Identity, form_id: int, sort: Optional[schemas.ResponseSort] = None):
        async with unit_of_work(self.session_factory) as db:
            await self._load_owned_form(db, identity, form_id, "You can only view responses of your own forms")
            responses = await crud_response.get_responses_for_form(db, form_id, sort)
            return schemas.ResponsesList(
                responses=[self._response_out(r) for r in responses], count=len(responses)
            )

    @operation("Response", "Failed to fetch response")
    async def response(self, identity: Identity, form_id: int, response_id: int):
        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(db, identity, form_id, "You can only view responses of your own forms")
            response = await self._load_response(db, form, response_id)
            return self._response_out(response)

    @operation("Response", "Failed to create response", requires_auth=False)
    async def create_response(self, form_id: int, data: schemas.ResponseCreate):
        # Public: anyone who knows the form may submit, no ownership check
        composer.check_create(data)

        async with unit_of_work(self.session_factory) as db:
            form = await crud_form.get_form(db, form_id)
            if form is None:
                raise NotFound("form", form_id)
            response = await composer.create(db, form, data)
            return await self._response_payload(db, response.id)

    @operation("Response", "Failed to update response")
    async def update_response(
        self, identity: Identity, form_id: int, response_id: int, patch: schemas.ResponseUpdate
    ):
        composer.check_replace(patch)

        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(
                db, identity, form_id, "You can only update responses in your own forms"
            )
            response = await self._load_response(db, form, response_id)
            await composer.replace(db, response, patch)
            return await self._response_payload(db, response_id)

    @operation("SuccessResult", "Failed to delete response")
    async def delete_response(self, identity: Identity, form_id: int, response_id: int):
        async with unit_of_work(self.session_factory) as db:
            form = await self._load_owned_form(
                db, identity, form_id, "You can only delete responses from your own forms"
            )
            await self._load_response(db, form, response_id)
            await crud_response.delete_response(db, response_id)
        logger.info("Response %s deleted from form %s", response_id, form_id)
        return schemas.SuccessResult(message="Response deleted successfully")
