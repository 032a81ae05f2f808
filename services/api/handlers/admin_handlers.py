"""
Cross-teacher endpoints. Every route checks the admin role server-side.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from crm import lessons, query, schemas, students, users
from crm.auth import Caller, Operation
from crm.config import settings
from crm.models import LessonStatus, PaymentStatus
from services.api import deps

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/students", response_model=list[schemas.StudentOut])
def list_all_students(
    response: Response,
    q: Optional[str] = None,
    regular: query.RegularFilter = query.RegularFilter.ALL,
    teacher_id: Optional[str] = None,
    page: Optional[int] = Query(None, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    caller: Caller = Depends(deps.require(Operation.ADMIN_LIST_STUDENTS)),
    db: Session = Depends(deps.get_db),
):
    rows = deps.serialize(students.list_all(db), schemas.StudentOut)
    rows = query.apply_filters(
        rows,
        query.text_search(q, "username", "full_name"),
        query.regular_status(regular),
        query.field_equals("teacher_id", teacher_id),
    )
    return deps.page_of(response, rows, page, page_size or settings.STUDENTS_PAGE_SIZE)


@router.get("/teachers", response_model=list[schemas.TeacherOut])
def list_teachers(
    caller: Caller = Depends(deps.require(Operation.ADMIN_LIST_TEACHERS)),
    db: Session = Depends(deps.get_db),
):
    return users.list_teachers(db)


@router.get("/lessons", response_model=list[schemas.AdminLessonOut])
def list_all_lessons(
    response: Response,
    q: Optional[str] = None,
    teacher_id: Optional[str] = None,
    student_id: Optional[str] = None,
    status: Optional[LessonStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    page: Optional[int] = Query(None, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    caller: Caller = Depends(deps.require(Operation.ADMIN_LIST_LESSONS)),
    db: Session = Depends(deps.get_db),
):
    rows = deps.serialize(lessons.list_all_for_admin(db), schemas.AdminLessonOut)
    rows = query.apply_filters(
        rows,
        query.text_search(q, "student.username"),
        query.field_equals("teacher_id", teacher_id),
        query.field_equals("student_id", student_id),
        query.field_equals("status", status),
        query.field_equals("payment_status", payment_status),
    )
    rows = query.sort_by_time_slot(rows)
    return deps.page_of(response, rows, page, page_size or settings.LESSONS_PAGE_SIZE)
