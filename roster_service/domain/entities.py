from dataclasses import dataclass, asdict
from datetime import datetime

DEPARTMENTS = (
    "Electronics and Communication",
    "Computers",
    "Mechanical and Automation",
)

FIELD_NAMES = ("first_name", "last_name", "roll_no", "email", "department")


@dataclass(frozen=True)
class StudentFields:
    """Пять полей, которые вводит пользователь. Пустая строка = не задано."""
    first_name: str = ""
    last_name: str = ""
    roll_no: str = ""
    email: str = ""
    department: str = ""

    def as_dict(self) -> dict[str, str]:
        return asdict(self)


@dataclass(frozen=True)
class Student:
    id: int | str
    first_name: str
    last_name: str
    roll_no: str
    email: str
    department: str
    created_at: datetime | None = None

    @property
    def key(self) -> str:
        # локальный стор выдаёт строковые id, удалённый — целые
        return str(self.id)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def fields(self) -> StudentFields:
        return StudentFields(
            first_name=self.first_name,
            last_name=self.last_name,
            roll_no=self.roll_no,
            email=self.email,
            department=self.department,
        )
