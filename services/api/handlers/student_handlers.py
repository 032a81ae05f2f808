"""
Student endpoints for the signed-in teacher.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from crm import query, schemas, students
from crm.auth import Caller, Operation
from crm.config import settings
from services.api import deps

router = APIRouter(tags=["students"])


@router.get("/students", response_model=list[schemas.StudentOut])
def list_students(
    response: Response,
    q: Optional[str] = None,
    regular: query.RegularFilter = query.RegularFilter.ALL,
    page: Optional[int] = Query(None, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    caller: Caller = Depends(deps.require(Operation.LIST_STUDENTS)),
    db: Session = Depends(deps.get_db),
):
    rows = deps.serialize(students.list_owned(db, caller.id), schemas.StudentOut)
    rows = query.apply_filters(
        rows,
        query.text_search(q, "username", "full_name"),
        query.regular_status(regular),
    )
    return deps.page_of(response, rows, page, page_size or settings.STUDENTS_PAGE_SIZE)


@router.post("/students", response_model=schemas.StudentOut)
def create_student(
    body: schemas.StudentFields,
    caller: Caller = Depends(deps.require(Operation.CREATE_STUDENT)),
    db: Session = Depends(deps.get_db),
):
    return students.create(db, caller.id, body)


@router.put("/students", response_model=schemas.StudentOut)
def update_student(
    body: schemas.StudentUpdate,
    caller: Caller = Depends(deps.require(Operation.UPDATE_STUDENT)),
    db: Session = Depends(deps.get_db),
):
    return students.update(db, caller.id, body)


@router.delete("/students", response_model=schemas.Success)
def delete_student(
    body: schemas.RecordId,
    caller: Caller = Depends(deps.require(Operation.DELETE_STUDENT)),
    db: Session = Depends(deps.get_db),
):
    students.delete(db, caller.id, body.id)
    return schemas.Success(message="Student deleted successfully")
