from typing import Iterable

from ..domain.entities import Student


def matches(student: Student, term: str) -> bool:
    needle = term.lower()
    return any(
        needle in value.lower()
        for value in (
            student.first_name,
            student.last_name,
            student.roll_no,
            student.email,
            student.department,
        )
    )


def filter_students(students: Iterable[Student], term: str) -> list[Student]:
    """Регистронезависимый поиск подстроки; исходный список не меняется."""
    return [s for s in students if matches(s, term)]
