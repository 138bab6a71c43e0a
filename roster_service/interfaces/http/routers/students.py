from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from ....application.search import filter_students
from ....application.use_cases.manage_roster import IStudentStore
from ....application.validation import validate_student
from ....domain.errors import NotFound, StoreError
from ..deps import get_store
from ..schemas import StudentIn, StudentOut

router = APIRouter(prefix="/api/students", tags=["students"])


def _validated(payload: StudentIn):
    fields = payload.to_fields()
    errors = validate_student(fields)
    if errors:
        raise HTTPException(
            status_code=422,
            detail={"message": "Please fix the validation errors", "errors": errors},
        )
    return fields


@router.get("", response_model=list[StudentOut])
def list_students(q: str = Query(""), store: IStudentStore = Depends(get_store)):
    try:
        rows = store.list()
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return [StudentOut.model_validate(s) for s in filter_students(rows, q)]


@router.post("", response_model=StudentOut, status_code=status.HTTP_201_CREATED)
def create_student(payload: StudentIn, store: IStudentStore = Depends(get_store)):
    fields = _validated(payload)
    try:
        student = store.create(fields)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return StudentOut.model_validate(student)


@router.put("/{student_id}", response_model=StudentOut)
def update_student(student_id: str, payload: StudentIn, store: IStudentStore = Depends(get_store)):
    fields = _validated(payload)
    try:
        student = store.update(student_id, fields)
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return StudentOut.model_validate(student)


@router.delete("/{student_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_student(student_id: str, store: IStudentStore = Depends(get_store)):
    try:
        store.delete(student_id)
    except StoreError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
