"""Student records: validation, defaults and owner scoping."""
import logging

from sqlalchemy.orm import Session

from . import crud
from .errors import NotFoundOrForbidden, ValidationError
from .schemas import StudentFields, StudentUpdate

logger = logging.getLogger(__name__)

CREATE_REQUIRED = ("full_name", "level", "username")
UPDATE_REQUIRED = ("id", "full_name", "level")


def _require(fields, names) -> None:
    missing = [name for name in names if not getattr(fields, name, None)]
    if missing:
        logger.warning("Student request missing fields: %s", ", ".join(missing))
        raise ValidationError(missing)


def _values(fields: StudentFields) -> dict:
    return {
        "full_name": fields.full_name,
        "username": fields.username,
        "level": fields.level,
        "description": fields.description,
        "isregular": bool(fields.isregular),
    }


def list_owned(db: Session, teacher_id: str):
    return crud.list_students(db, teacher_id=teacher_id)


def list_all(db: Session):
    """Every student of every teacher; callers must have checked the admin role."""
    return crud.list_students(db)


def create(db: Session, teacher_id: str, fields: StudentFields):
    _require(fields, CREATE_REQUIRED)
    student = crud.create_student(db, teacher_id, _values(fields))
    logger.info("Teacher %s created student %s", teacher_id, student.id)
    return student


def update(db: Session, teacher_id: str, fields: StudentUpdate):
    """Replace the mutable fields of one of the teacher's students."""
    _require(fields, UPDATE_REQUIRED)
    student = crud.update_student(db, fields.id, _values(fields), teacher_id=teacher_id)
    if student is None:
        raise NotFoundOrForbidden("Student", fields.id)
    logger.info("Teacher %s updated student %s", teacher_id, student.id)
    return student


def delete(db: Session, teacher_id: str, student_id) -> None:
    """Delete the student if the teacher owns it; unknown ids are a no-op."""
    if not student_id:
        raise ValidationError(["id"], "Student ID is required")
    deleted = crud.delete_student(db, student_id, teacher_id=teacher_id)
    logger.info("Teacher %s deleted student %s (%d rows)", teacher_id, student_id, deleted)
