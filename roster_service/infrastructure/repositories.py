from __future__ import annotations

import json
import threading
import time
from datetime import datetime, timezone
from pathlib import Path

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .metrics import track_store_operation
from .models import StudentORM
from ..domain.entities import Student, StudentFields
from ..domain.errors import NotFound, StoreUnavailable, WriteError
from ..application.use_cases.manage_roster import IStudentStore

logger = structlog.get_logger()


def to_domain(s: StudentORM) -> Student:
    return Student(
        id=s.id,
        first_name=s.first_name,
        last_name=s.last_name,
        roll_no=s.roll_no,
        email=s.email,
        department=s.department,
        created_at=s.created_at,
    )


def _parse_pk(student_id: int | str) -> int | None:
    if isinstance(student_id, int):
        return student_id
    try:
        return int(student_id)
    except (TypeError, ValueError):
        return None


class SqlStudentStore(IStudentStore):
    """Удалённая таблица "Students"; id и created_at выставляет база."""

    backend = "remote"

    def __init__(self, session_factory: sessionmaker[Session]):
        self.session_factory = session_factory

    def list(self) -> list[Student]:
        with track_store_operation(self.backend, "list"):
            q = select(StudentORM).order_by(StudentORM.created_at.desc(), StudentORM.id.desc())
            try:
                with self.session_factory() as db:
                    return [to_domain(row) for row in db.execute(q).scalars().all()]
            except SQLAlchemyError as e:
                raise StoreUnavailable("Could not read students") from e

    def create(self, fields: StudentFields) -> Student:
        with track_store_operation(self.backend, "create"):
            try:
                with self.session_factory() as db:
                    row = StudentORM(**fields.as_dict())
                    db.add(row); db.commit(); db.refresh(row)
                    return to_domain(row)
            except SQLAlchemyError as e:
                raise WriteError("Could not insert student") from e

    def update(self, student_id: int | str, fields: StudentFields) -> Student:
        with track_store_operation(self.backend, "update"):
            pk = _parse_pk(student_id)
            if pk is None:
                raise NotFound(student_id)
            try:
                with self.session_factory() as db:
                    row = db.get(StudentORM, pk)
                    if row is None:
                        raise NotFound(student_id)
                    for name, value in fields.as_dict().items():
                        setattr(row, name, value)
                    db.commit(); db.refresh(row)
                    return to_domain(row)
            except SQLAlchemyError as e:
                raise WriteError(f"Could not update student {student_id}") from e

    def delete(self, student_id: int | str) -> None:
        with track_store_operation(self.backend, "delete"):
            pk = _parse_pk(student_id)
            if pk is None:
                return
            try:
                with self.session_factory() as db:
                    db.execute(delete(StudentORM).where(StudentORM.id == pk))
                    db.commit()
            except SQLAlchemyError as e:
                raise WriteError(f"Could not delete student {student_id}") from e


def student_to_record(s: Student) -> dict:
    return {
        "id": s.id,
        "first_name": s.first_name,
        "last_name": s.last_name,
        "roll_no": s.roll_no,
        "email": s.email,
        "department": s.department,
        "created_at": s.created_at.isoformat() if s.created_at else None,
    }


def student_from_record(d: dict) -> Student:
    created_at = d.get("created_at")
    return Student(
        id=d["id"],
        first_name=d["first_name"],
        last_name=d["last_name"],
        roll_no=d["roll_no"],
        email=d["email"],
        department=d["department"],
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )


class JsonStudentStore(IStudentStore):
    """Локальное key-value хранилище: JSON-документ, где под ключом лежит массив записей.

    Массив перечитывается при каждом list() и целиком перезаписывается при
    каждом изменении. Остальные ключи документа не трогаем. Битый JSON не
    перехватывается: это ошибка данных, а не недоступность хранилища.
    """

    backend = "local"

    def __init__(self, path: str | Path, key: str = "students", clock=time.time):
        self.path = Path(path)
        self.key = key
        self._clock = clock
        self._lock = threading.Lock()

    def list(self) -> list[Student]:
        with track_store_operation(self.backend, "list"):
            with self._lock:
                return self._load()

    def create(self, fields: StudentFields) -> Student:
        with track_store_operation(self.backend, "create"):
            with self._lock:
                students = self._load_for_write()
                now = self._clock()
                student = Student(
                    id=self._next_id(students, now),
                    created_at=datetime.fromtimestamp(now, timezone.utc),
                    **fields.as_dict(),
                )
                students.append(student)
                self._save(students)
                return student

    def update(self, student_id: int | str, fields: StudentFields) -> Student:
        with track_store_operation(self.backend, "update"):
            with self._lock:
                students = self._load_for_write()
                key = str(student_id)
                for i, s in enumerate(students):
                    if s.key == key:
                        updated = Student(id=s.id, created_at=s.created_at, **fields.as_dict())
                        students[i] = updated
                        self._save(students)
                        return updated
                raise NotFound(student_id)

    def delete(self, student_id: int | str) -> None:
        with track_store_operation(self.backend, "delete"):
            with self._lock:
                students = self._load_for_write()
                key = str(student_id)
                remaining = [s for s in students if s.key != key]
                if len(remaining) == len(students):
                    # удаление идемпотентно
                    return
                self._save(remaining)

    def _next_id(self, students: list[Student], now: float) -> str:
        taken = {s.key for s in students}
        candidate = int(now * 1000)
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def _read_document(self) -> dict:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise StoreUnavailable(f"Could not read {self.path}") from e
        if not text.strip():
            return {}
        return json.loads(text)

    def _load(self) -> list[Student]:
        records = self._read_document().get(self.key) or []
        return [student_from_record(r) for r in records]

    def _load_for_write(self) -> list[Student]:
        try:
            return self._load()
        except StoreUnavailable as e:
            raise WriteError(str(e)) from e

    def _save(self, students: list[Student]) -> None:
        try:
            document = self._read_document()
        except StoreUnavailable as e:
            raise WriteError(str(e)) from e
        document[self.key] = [student_to_record(s) for s in students]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise WriteError(f"Could not write {self.path}") from e
        logger.debug("local_store_saved", path=str(self.path), count=len(students))


def build_store(settings) -> IStudentStore:
    if settings.STORE_BACKEND == "remote":
        from . import db
        return SqlStudentStore(db.SessionLocal)
    return JsonStudentStore(settings.LOCAL_STORE_PATH, settings.LOCAL_STORE_KEY)
