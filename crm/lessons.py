"""Lesson records.

There is no transition graph on ``status``: any status may follow any other.
The one rule is that a cancellation reason only survives on a Cancelled lesson.
"""
import logging
from typing import Optional

from sqlalchemy.orm import Session

from . import crud
from .auth import Caller, Operation, owner_scope
from .config import settings
from .errors import NotFoundOrForbidden, ValidationError
from .models import LessonStatus
from .schemas import LessonCreate, LessonUpdate

logger = logging.getLogger(__name__)


def _enum_value(value):
    return value.value if value is not None else None


def normalize_cancellation(status, reason: Optional[str]) -> Optional[str]:
    """Reason to store for the given status: cleared unless Cancelled."""
    if status is None or LessonStatus(status) != LessonStatus.CANCELLED:
        return None
    return reason or None


def _check_student_owner(db: Session, teacher_id: str, student_id: Optional[str]) -> None:
    if not settings.ENFORCE_STUDENT_OWNERSHIP or student_id is None:
        return
    if crud.get_student(db, student_id, teacher_id=teacher_id) is None:
        logger.warning("Teacher %s referenced foreign student %s", teacher_id, student_id)
        raise ValidationError(["student_id"], "student_id must reference one of your students")


def list_owned(db: Session, teacher_id: str):
    return crud.list_lessons(db, teacher_id=teacher_id)


def list_all_for_admin(db: Session):
    return crud.list_lessons(db, with_teacher=True)


def create(db: Session, teacher_id: str, fields: LessonCreate):
    if not fields.student_id:
        raise ValidationError(["student_id"], "student_id required")
    _check_student_owner(db, teacher_id, fields.student_id)

    values = {
        "student_id": fields.student_id,
        "type": _enum_value(fields.type),
        "lessonlink": fields.lessonlink,
        "duration": fields.duration,
        "time_slot": fields.time_slot,
        "status": _enum_value(fields.status),
        "payment_status": _enum_value(fields.payment_status),
        "reasonforcancellation": normalize_cancellation(fields.status, fields.reasonforcancellation),
    }
    lesson = crud.create_lesson(db, teacher_id, values)
    logger.info("Teacher %s created lesson %s for student %s", teacher_id, lesson.id, lesson.student_id)
    return lesson


def update(db: Session, caller: Caller, fields: LessonUpdate):
    """Full replace of the lesson's mutable fields.

    Absent fields are written as null. ``lessonlink`` is the exception and is
    only replaced when the body carries it. Admins may update any teacher's
    lesson and reassign it with ``teacher_id``; teachers only their own.
    """
    if not fields.id:
        raise ValidationError(["id"], "Missing lesson ID")

    scope = owner_scope(caller, Operation.UPDATE_LESSON)
    if scope is not None:
        _check_student_owner(db, scope, fields.student_id)

    values = {
        "student_id": fields.student_id,
        "type": _enum_value(fields.type),
        "duration": fields.duration,
        "time_slot": fields.time_slot,
        "status": _enum_value(fields.status),
        "payment_status": _enum_value(fields.payment_status),
        "reasonforcancellation": normalize_cancellation(fields.status, fields.reasonforcancellation),
    }
    if "lessonlink" in fields.model_fields_set:
        values["lessonlink"] = fields.lessonlink
    if scope is None and fields.teacher_id:
        values["teacher_id"] = fields.teacher_id

    lesson = crud.update_lesson(db, fields.id, values, teacher_id=scope)
    if lesson is None:
        raise NotFoundOrForbidden("Lesson", fields.id)
    logger.info("User %s updated lesson %s (status=%s)", caller.id, lesson.id, lesson.status)
    return lesson


def delete(db: Session, teacher_id: str, lesson_id) -> None:
    """Delete the teacher's lesson; foreign or unknown ids are a no-op."""
    if not lesson_id:
        raise ValidationError(["id"], "Lesson ID required")
    deleted = crud.delete_lesson(db, lesson_id, teacher_id=teacher_id)
    logger.info("Teacher %s deleted lesson %s (%d rows)", teacher_id, lesson_id, deleted)

