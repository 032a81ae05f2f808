"""
Lesson endpoints for the signed-in teacher (updates also serve admins).
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from crm import lessons, query, schemas
from crm.auth import Caller, Operation
from crm.config import settings
from crm.models import LessonStatus, LessonType, PaymentStatus
from services.api import deps

router = APIRouter(tags=["lessons"])


@router.get("/lessons", response_model=list[schemas.LessonOut])
def list_lessons(
    response: Response,
    q: Optional[str] = None,
    lesson_type: list[LessonType] = Query(default=[], alias="type"),
    status: list[LessonStatus] = Query(default=[]),
    payment_status: list[PaymentStatus] = Query(default=[]),
    page: Optional[int] = Query(None, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    caller: Caller = Depends(deps.require(Operation.LIST_LESSONS)),
    db: Session = Depends(deps.get_db),
):
    rows = deps.serialize(lessons.list_owned(db, caller.id), schemas.LessonOut)
    rows = query.apply_filters(
        rows,
        query.text_search(q, "student.username", "student.full_name"),
        query.field_in("type", lesson_type),
        query.field_in("status", status),
        query.field_in("payment_status", payment_status),
    )
    rows = query.sort_by_time_slot(rows)
    return deps.page_of(response, rows, page, page_size or settings.LESSONS_PAGE_SIZE)


@router.get("/lessons/schedule", response_model=schemas.WeekSchedule)
def week_schedule(
    week: Optional[date] = None,
    caller: Caller = Depends(deps.require(Operation.LIST_LESSONS)),
    db: Session = Depends(deps.get_db),
):
    """The caller's lessons on a Monday-first weekly grid (defaults to this week)."""
    rows = deps.serialize(lessons.list_owned(db, caller.id), schemas.LessonOut)
    start, grid = query.week_schedule(rows, week or date.today())
    days = [
        schemas.ScheduleDay(
            day=day,
            slots=[schemas.ScheduleSlot(hour=hour, lesson=lesson) for hour, lesson in sorted(slots.items())],
        )
        for day, slots in grid.items()
    ]
    return schemas.WeekSchedule(week_start=start, days=days)


@router.post("/lessons", response_model=schemas.LessonOut)
def create_lesson(
    body: schemas.LessonCreate,
    caller: Caller = Depends(deps.require(Operation.CREATE_LESSON)),
    db: Session = Depends(deps.get_db),
):
    return lessons.create(db, caller.id, body)


@router.put("/lessons", response_model=schemas.LessonOut)
def update_lesson(
    body: schemas.LessonUpdate,
    caller: Caller = Depends(deps.require(Operation.UPDATE_LESSON)),
    db: Session = Depends(deps.get_db),
):
    return lessons.update(db, caller, body)


@router.delete("/lessons", response_model=schemas.Success)
def delete_lesson(
    body: schemas.RecordId,
    caller: Caller = Depends(deps.require(Operation.DELETE_LESSON)),
    db: Session = Depends(deps.get_db),
):
    lessons.delete(db, caller.id, body.id)
    return schemas.Success()
