class RosterError(Exception):
    pass


class StoreError(RosterError):
    """Сбой хранилища (недоступно, ошибка записи)."""


class StoreUnavailable(StoreError):
    pass


class WriteError(StoreError):
    pass


class NotFound(RosterError):
    def __init__(self, student_id):
        super().__init__(f"Student {student_id} not found")
        self.student_id = student_id


class InvalidTransition(RosterError):
    pass


class SubmissionInProgress(RosterError):
    def __init__(self):
        super().__init__("Another submission is still in progress")
