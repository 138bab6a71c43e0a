import re

from ..domain.entities import DEPARTMENTS, StudentFields

EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

REQUIRED_TEXT = {
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "roll_no": "Roll number is required",
}


def validate_student(fields: StudentFields) -> dict[str, str]:
    """Возвращает {поле: сообщение} для каждого невалидного поля.

    Правила независимы друг от друга; пустой словарь — запись можно сохранять.
    """
    errors: dict[str, str] = {}

    for name, message in REQUIRED_TEXT.items():
        if not getattr(fields, name).strip():
            errors[name] = message

    if not fields.email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_RE.fullmatch(fields.email):
        # проверяем исходное значение, без trim
        errors["email"] = "Please enter a valid email address"

    if not fields.department:
        errors["department"] = "Department is required"
    elif fields.department not in DEPARTMENTS:
        errors["department"] = "Please select a valid department"

    return errors
