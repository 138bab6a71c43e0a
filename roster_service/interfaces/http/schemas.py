from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from ...domain.entities import StudentFields

FieldName = Literal["first_name", "last_name", "roll_no", "email", "department"]


class StudentIn(BaseModel):
    # пустые значения разрешены: сообщения формирует validate_student
    first_name: str = ""
    last_name: str = ""
    roll_no: str = ""
    email: str = ""
    department: str = ""

    def to_fields(self) -> StudentFields:
        return StudentFields(**self.model_dump())

    @classmethod
    def from_fields(cls, fields: StudentFields) -> "StudentIn":
        return cls(**fields.as_dict())


class StudentOut(BaseModel):
    id: int | str
    first_name: str
    last_name: str
    roll_no: str
    email: str
    department: str
    created_at: datetime | None = None
    class Config: from_attributes = True


class FieldChange(BaseModel):
    field: FieldName
    value: str


class SearchReq(BaseModel):
    term: str = ""


class NotificationOut(BaseModel):
    level: str
    message: str
    class Config: from_attributes = True


class RosterStateOut(BaseModel):
    mode: Literal["compose", "browse"]
    mounted: bool
    loading: bool
    editing: StudentOut | None = None
    form: StudentIn
    errors: dict[str, str]
    search: str
    total: int
    students: list[StudentOut]
    notifications: list[NotificationOut]
