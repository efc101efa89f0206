from enum import Enum
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# --- Sortierung & Filter ---


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class FormSortField(str, Enum):
    CREATED_AT = "CREATED_AT"
    UPDATED_AT = "UPDATED_AT"
    TITLE = "TITLE"


class QuestionSortField(str, Enum):
    POSITION = "POSITION"
    CREATED_AT = "CREATED_AT"
    UPDATED_AT = "UPDATED_AT"


class ResponseSortField(str, Enum):
    CREATED_AT = "CREATED_AT"
    UPDATED_AT = "UPDATED_AT"
    RESPONDENT_NAME = "RESPONDENT_NAME"


class FormSort(BaseModel):
    field: FormSortField = FormSortField.CREATED_AT
    order: SortOrder = SortOrder.DESC


class QuestionSort(BaseModel):
    field: QuestionSortField = QuestionSortField.POSITION
    order: SortOrder = SortOrder.ASC


class ResponseSort(BaseModel):
    field: ResponseSortField = ResponseSortField.CREATED_AT
    order: SortOrder = SortOrder.DESC


class FormFilter(BaseModel):
    title: Optional[str] = None  # Teilstring, Groß-/Kleinschreibung egal
    created_after: Optional[datetime] = None
    created_before: Optional[datetime] = None


# --- Eingaben ---
# Die Eingabe-Schemas prüfen nur die Form der Daten. Inhaltliche Regeln
# (Längen, Formate, Pflichtfelder) liegen in validators.py, damit alle
# Verstöße gesammelt als VALIDATION_ERROR zurückgegeben werden.


class RegisterInput(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginInput(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserUpdate(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class FormCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class FormUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class QuestionCreate(BaseModel):
    text: Optional[str] = None
    type: Optional[str] = None
    required: bool = False
    options: Optional[List[str]] = None
    position: Optional[int] = None  # None = ans Ende anhängen


class QuestionUpdate(BaseModel):
    text: Optional[str] = None
    type: Optional[str] = None
    required: Optional[bool] = None
    options: Optional[List[str]] = None
    position: Optional[int] = None  # verschiebt die Frage


class ReorderInput(BaseModel):
    question_ids: Optional[List[int]] = None


class AnswerInput(BaseModel):
    question_id: Optional[int] = None
    answer: Optional[str] = None


class ResponseCreate(BaseModel):
    respondent_name: Optional[str] = None
    respondent_email: Optional[str] = None
    answers: Optional[List[AnswerInput]] = None


class ResponseUpdate(BaseModel):
    respondent_name: Optional[str] = None
    respondent_email: Optional[str] = None
    # None = Antworten unverändert lassen, [] = alle Antworten löschen
    answers: Optional[List[AnswerInput]] = None


# --- Ausgaben ---


class UserOut(BaseModel):
    id: int
    email: str
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UsersList(BaseModel):
    users: List[UserOut] = []
    count: int


class SessionOut(BaseModel):
    """Ergebnis eines erfolgreichen Logins."""

    token: str
    token_type: str = "bearer"
    user_id: int
    user: UserOut
    expires_at: datetime


class QuestionOut(BaseModel):
    id: int
    form_id: int
    text: str
    type: str = Field(validation_alias="question_type")
    required: bool
    options: List[str] = []
    position: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class QuestionsList(BaseModel):
    questions: List[QuestionOut] = []
    count: int


class FormOut(BaseModel):
    id: int
    owner_id: int
    title: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    question_count: int = 0
    response_count: int = 0
    questions: List[QuestionOut] = []


class FormsList(BaseModel):
    forms: List[FormOut] = []
    count: int


class AnswerOut(BaseModel):
    id: int
    response_id: int
    question_id: int
    answer: str = Field(validation_alias="answer_text")

    model_config = ConfigDict(from_attributes=True)


class ResponseOut(BaseModel):
    id: int
    form_id: int
    respondent_name: Optional[str] = None
    respondent_email: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    answers: List[AnswerOut] = []
    answer_count: int = 0


class ResponsesList(BaseModel):
    responses: List[ResponseOut] = []
    count: int


class HealthStatus(BaseModel):
    status: str
    message: str
    timestamp: datetime
    version: str


class SuccessResult(BaseModel):
    success: bool = True
    message: str
