"""Typed access to the users, students and lessons tables.

Functions here hold no business rules. Owner scoping is expressed as an
optional ``teacher_id`` predicate; ``None`` means unscoped.
"""
import functools
import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from . import models
from .errors import StoreError

logger = logging.getLogger(__name__)


def _store_call(func):
    """Roll back and re-raise store failures as StoreError."""
    @functools.wraps(func)
    def wrapper(db: Session, *args, **kwargs):
        try:
            return func(db, *args, **kwargs)
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Store error in %s: %s", func.__name__, exc, exc_info=True)
            message = str(getattr(exc, 'orig', None) or exc)
            raise StoreError(message) from exc
    return wrapper


def _scoped(query, model, record_id: str, teacher_id: Optional[str]):
    query = query.filter(model.id == record_id)
    if teacher_id is not None:
        query = query.filter(model.teacher_id == teacher_id)
    return query


def _save(db: Session, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


# users

@_store_call
def get_user(db: Session, user_id: str):
    return db.query(models.User).filter_by(id=user_id).first()


@_store_call
def create_user(db: Session, user_id: str, email: str, full_name: Optional[str] = None,
                role: str = models.Role.TEACHER.value):
    return _save(db, models.User(id=user_id, email=email, full_name=full_name, role=role))


@_store_call
def list_teachers(db: Session):
    return (
        db.query(models.User)
        .filter_by(role=models.Role.TEACHER.value)
        .order_by(models.User.full_name)
        .all()
    )


# students

@_store_call
def list_students(db: Session, teacher_id: Optional[str] = None):
    query = db.query(models.Student)
    if teacher_id is not None:
        query = query.filter_by(teacher_id=teacher_id)
    return query.order_by(models.Student.full_name).all()


@_store_call
def get_student(db: Session, student_id: str, teacher_id: Optional[str] = None):
    return _scoped(db.query(models.Student), models.Student, student_id, teacher_id).first()


@_store_call
def create_student(db: Session, teacher_id: str, values: dict[str, Any]):
    return _save(db, models.Student(teacher_id=teacher_id, **values))


@_store_call
def update_student(db: Session, student_id: str, values: dict[str, Any],
                   teacher_id: Optional[str] = None):
    student = _scoped(db.query(models.Student), models.Student, student_id, teacher_id).first()
    if student is None:
        return None
    for field, value in values.items():
        setattr(student, field, value)
    return _save(db, student)


@_store_call
def delete_student(db: Session, student_id: str, teacher_id: Optional[str] = None) -> int:
    """Hard-delete the student; its lessons stay with student_id set to null."""
    scoped = _scoped(db.query(models.Student), models.Student, student_id, teacher_id)
    if scoped.first() is None:
        return 0
    # done here too so stores without FK enforcement don't keep dangling ids
    db.query(models.Lesson).filter(models.Lesson.student_id == student_id).update(
        {models.Lesson.student_id: None}, synchronize_session=False
    )
    deleted = scoped.delete(synchronize_session=False)
    db.commit()
    return deleted


# lessons

def _lessons_query(db: Session, with_teacher: bool = False):
    options = [joinedload(models.Lesson.student)]
    if with_teacher:
        options.append(joinedload(models.Lesson.teacher))
    return db.query(models.Lesson).options(*options)


@_store_call
def list_lessons(db: Session, teacher_id: Optional[str] = None, with_teacher: bool = False):
    query = _lessons_query(db, with_teacher=with_teacher)
    if teacher_id is not None:
        query = query.filter(models.Lesson.teacher_id == teacher_id)
    return query.all()


@_store_call
def get_lesson(db: Session, lesson_id: str, teacher_id: Optional[str] = None):
    return _scoped(_lessons_query(db), models.Lesson, lesson_id, teacher_id).first()


@_store_call
def create_lesson(db: Session, teacher_id: str, values: dict[str, Any]):
    return _save(db, models.Lesson(teacher_id=teacher_id, **values))


@_store_call
def update_lesson(db: Session, lesson_id: str, values: dict[str, Any],
                  teacher_id: Optional[str] = None):
    lesson = _scoped(db.query(models.Lesson), models.Lesson, lesson_id, teacher_id).first()
    if lesson is None:
        return None
    for field, value in values.items():
        setattr(lesson, field, value)
    return _save(db, lesson)


@_store_call
def delete_lesson(db: Session, lesson_id: str, teacher_id: Optional[str] = None) -> int:
    deleted = _scoped(db.query(models.Lesson), models.Lesson, lesson_id, teacher_id).delete(
        synchronize_session=False
    )
    db.commit()
    return deleted
