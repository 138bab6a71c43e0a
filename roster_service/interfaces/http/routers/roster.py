from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....application.use_cases.manage_roster import RosterCoordinator
from ....domain.errors import InvalidTransition, NotFound, SubmissionInProgress
from ..deps import get_coordinator
from ..schemas import (
    FieldChange,
    NotificationOut,
    RosterStateOut,
    SearchReq,
    StudentIn,
    StudentOut,
)

router = APIRouter(prefix="/api/roster", tags=["roster"])


def _state(c: RosterCoordinator) -> RosterStateOut:
    # тосты одноразовые: забираем их вместе с состоянием
    return RosterStateOut(
        mode=c.mode.value,
        mounted=c.mounted,
        loading=c.loading,
        editing=StudentOut.model_validate(c.editing) if c.editing else None,
        form=StudentIn.from_fields(c.form),
        errors=dict(c.errors),
        search=c.search_term,
        total=len(c.students),
        students=[StudentOut.model_validate(s) for s in c.visible_students],
        notifications=[NotificationOut.model_validate(n) for n in c.drain_notifications()],
    )


@router.get("", response_model=RosterStateOut)
def get_state(c: RosterCoordinator = Depends(get_coordinator)):
    return _state(c)


@router.post("/mount", response_model=RosterStateOut)
def mount(c: RosterCoordinator = Depends(get_coordinator)):
    c.mount()
    return _state(c)


@router.post("/add", response_model=RosterStateOut)
def show_add(c: RosterCoordinator = Depends(get_coordinator)):
    try:
        c.show_add()
    except SubmissionInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(c)


@router.post("/view", response_model=RosterStateOut)
def show_list(c: RosterCoordinator = Depends(get_coordinator)):
    try:
        c.show_list()
    except SubmissionInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(c)


@router.post("/edit/{student_id}", response_model=RosterStateOut)
def start_edit(student_id: str, c: RosterCoordinator = Depends(get_coordinator)):
    try:
        c.start_edit(student_id)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidTransition, SubmissionInProgress) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(c)


@router.patch("/form", response_model=RosterStateOut)
def change_field(payload: FieldChange, c: RosterCoordinator = Depends(get_coordinator)):
    try:
        c.change_field(payload.field, payload.value)
    except SubmissionInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(c)


@router.post("/submit", response_model=RosterStateOut)
def submit(payload: StudentIn | None = None, c: RosterCoordinator = Depends(get_coordinator)):
    try:
        c.submit(payload.to_fields() if payload is not None else None)
    except (InvalidTransition, SubmissionInProgress) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(c)


@router.post("/cancel", response_model=RosterStateOut)
def cancel_edit(c: RosterCoordinator = Depends(get_coordinator)):
    try:
        c.cancel_edit()
    except SubmissionInProgress as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(c)


@router.put("/search", response_model=RosterStateOut)
def set_search(payload: SearchReq, c: RosterCoordinator = Depends(get_coordinator)):
    c.set_search(payload.term)
    return _state(c)


@router.get("/students/{student_id}/delete-prompt")
def delete_prompt(student_id: str, c: RosterCoordinator = Depends(get_coordinator)):
    return {"prompt": c.delete_prompt(student_id)}


@router.delete("/students/{student_id}", response_model=RosterStateOut)
def delete_student(
    student_id: str,
    confirm: bool = Query(False),
    c: RosterCoordinator = Depends(get_coordinator),
):
    # удаление только после явного подтверждения
    if not confirm:
        raise HTTPException(
            status_code=status.HTTP_428_PRECONDITION_REQUIRED,
            detail=c.delete_prompt(student_id),
        )
    try:
        c.delete(student_id)
    except (InvalidTransition, SubmissionInProgress) as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _state(c)
