from fastapi import Request

from ...application.use_cases.manage_roster import IStudentStore, RosterCoordinator


def get_store(request: Request) -> IStudentStore:
    return request.app.state.store


def get_coordinator(request: Request) -> RosterCoordinator:
    return request.app.state.coordinator
