import threading
from contextlib import contextmanager
from dataclasses import replace

import structlog

from ...domain.entities import FIELD_NAMES, Student, StudentFields
from ...domain.errors import (
    InvalidTransition,
    NotFound,
    StoreError,
    SubmissionInProgress,
)
from ..dto import Notification, ViewMode
from ..search import filter_students
from ..validation import validate_student

logger = structlog.get_logger()


class IStudentStore:
    backend: str = "abstract"

    def list(self) -> list[Student]: ...
    def create(self, fields: StudentFields) -> Student: ...
    def update(self, student_id: int | str, fields: StudentFields) -> Student: ...
    def delete(self, student_id: int | str) -> None: ...


class RosterCoordinator:
    """Состояние экрана: режим (форма/таблица), список записей, форма, тосты.

    Все обращения к хранилищу идут через IStudentStore, поэтому координатор
    не зависит от того, локальное оно или удалённое.
    """

    def __init__(self, store: IStudentStore):
        self.store = store
        self.mode = ViewMode.COMPOSE
        self.students: list[Student] = []
        self.editing: Student | None = None
        self.form = StudentFields()
        self.errors: dict[str, str] = {}
        self.search_term = ""
        self.loading = False
        self.mounted = False
        self._epoch = 0
        self._notifications: list[Notification] = []
        # одна операция над формой/таблицей за раз: пока идёт submit/delete,
        # навигация и повторные submit/delete отклоняются
        self._busy = threading.Lock()

    # --- lifecycle

    def mount(self) -> bool:
        # повторный mount не делает незавершённые операции устаревшими
        if not self.mounted:
            self.mounted = True
            self._epoch += 1
        return self._refresh()

    def unmount(self) -> None:
        # результаты, пришедшие после этого, отбрасываются
        self.mounted = False
        self.loading = False
        self._epoch += 1

    # --- navigation

    def show_add(self) -> None:
        with self._exclusive():
            self._reset_form()
            self.mode = ViewMode.COMPOSE

    def show_list(self) -> None:
        with self._exclusive():
            self._reset_form()
            self.mode = ViewMode.BROWSE

    def start_edit(self, student_id: int | str) -> Student:
        with self._exclusive():
            if self.mode is not ViewMode.BROWSE:
                raise InvalidTransition("Records can only be edited from the list view")
            student = self._find(student_id)
            if student is None:
                raise NotFound(student_id)
            self.editing = student
            self.form = student.fields()
            self.errors = {}
            self.mode = ViewMode.COMPOSE
            return student

    def cancel_edit(self) -> None:
        with self._exclusive():
            self._reset_form()
            self.mode = ViewMode.BROWSE

    # --- form

    def change_field(self, name: str, value: str) -> None:
        if name not in FIELD_NAMES:
            raise ValueError(f"Unknown field: {name}")
        with self._exclusive():
            self.form = replace(self.form, **{name: value})
            self.errors.pop(name, None)

    def submit(self, fields: StudentFields | None = None) -> bool:
        with self._exclusive():
            if self.mode is not ViewMode.COMPOSE:
                raise InvalidTransition("Nothing to submit outside the form view")
            return self._submit(fields)

    def _submit(self, fields: StudentFields | None) -> bool:
        if fields is not None:
            self.form = fields
        self.errors = validate_student(self.form)
        if self.errors:
            self._notify("error", "Please fix the validation errors")
            return False

        epoch = self._epoch
        editing = self.editing
        try:
            if editing is not None:
                self.store.update(editing.id, self.form)
                message = "Student information updated successfully!"
            else:
                self.store.create(self.form)
                message = "Student added successfully!"
        except (StoreError, NotFound) as e:
            operation = "update" if editing is not None else "create"
            self._fail(operation, e, "Failed to save student information")
            return False

        if epoch != self._epoch:
            logger.info("stale_result_discarded", operation="submit")
            return True

        self._notify("success", message)
        self._refresh()
        self._reset_form()
        self.mode = ViewMode.BROWSE
        return True

    # --- table

    def delete_prompt(self, student_id: int | str) -> str:
        student = self._find(student_id)
        name = student.full_name if student is not None else str(student_id)
        return f"Are you sure you want to delete {name}'s record?"

    def delete(self, student_id: int | str) -> bool:
        with self._exclusive():
            if self.mode is not ViewMode.BROWSE:
                raise InvalidTransition("Records can only be deleted from the list view")
            epoch = self._epoch
            try:
                self.store.delete(student_id)
            except StoreError as e:
                self._fail("delete", e, "Failed to delete student")
                return False
            if epoch != self._epoch:
                logger.info("stale_result_discarded", operation="delete")
                return True
            self._notify("success", "Student deleted successfully!")
            self._refresh()
            return True

    def set_search(self, term: str) -> None:
        self.search_term = term

    @property
    def visible_students(self) -> list[Student]:
        return filter_students(self.students, self.search_term)

    # --- notifications

    def drain_notifications(self) -> list[Notification]:
        pending, self._notifications = self._notifications, []
        return pending

    # --- helpers

    @contextmanager
    def _exclusive(self):
        if not self._busy.acquire(blocking=False):
            raise SubmissionInProgress()
        try:
            yield
        finally:
            self._busy.release()

    def _refresh(self) -> bool:
        epoch = self._epoch
        self.loading = True
        try:
            students = self.store.list()
        except StoreError as e:
            if epoch == self._epoch:
                self.loading = False
                self._fail("list", e, "Failed to load students")
            return False
        if epoch != self._epoch:
            logger.info("stale_result_discarded", operation="list")
            return False
        self.loading = False
        self.students = students
        return True

    def _find(self, student_id: int | str) -> Student | None:
        key = str(student_id)
        return next((s for s in self.students if s.key == key), None)

    def _reset_form(self) -> None:
        self.editing = None
        self.form = StudentFields()
        self.errors = {}

    def _notify(self, level: str, message: str) -> None:
        self._notifications.append(Notification(level=level, message=message))

    def _fail(self, operation: str, error: Exception, message: str) -> None:
        logger.error(
            "store_call_failed",
            operation=operation,
            backend=self.store.backend,
            error=str(error),
            error_type=type(error).__name__,
        )
        self._notify("error", message)
