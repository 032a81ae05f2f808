import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from .db import Base


class Role(str, enum.Enum):
    TEACHER = 'teacher'
    ADMIN = 'admin'


class LessonType(str, enum.Enum):
    TRIAL = 'Trial'
    REGULAR = 'Regular'


class LessonStatus(str, enum.Enum):
    UPCOMING = 'Upcoming'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'


class PaymentStatus(str, enum.Enum):
    PAID = 'Paid'
    NOT_PAID = 'Not Paid'


def _new_id() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = 'users'
    # identity provider's user id, stored verbatim
    id = Column(String, primary_key=True)
    email = Column(String, nullable=False)
    full_name = Column(String)
    role = Column(String, nullable=False, default=Role.TEACHER.value)
    students = relationship('Student', back_populates='teacher')
    lessons = relationship('Lesson', back_populates='teacher')


class Student(Base):
    __tablename__ = 'students'
    id = Column(String, primary_key=True, default=_new_id)
    teacher_id = Column(String, ForeignKey('users.id'), nullable=False, index=True)
    full_name = Column(String, nullable=False)
    username = Column(String)
    level = Column(String, nullable=False)
    description = Column(Text)
    isregular = Column(Boolean, nullable=False, default=False)
    teacher = relationship('User', back_populates='students')
    lessons = relationship('Lesson', back_populates='student')


class Lesson(Base):
    __tablename__ = 'lessons'
    id = Column(String, primary_key=True, default=_new_id)
    teacher_id = Column(String, ForeignKey('users.id'), nullable=False, index=True)
    # lessons outlive their student; see crud.delete_student
    student_id = Column(String, ForeignKey('students.id', ondelete='SET NULL'), index=True)
    type = Column(String)
    lessonlink = Column(Text)
    duration = Column(Integer)
    time_slot = Column(DateTime(timezone=True))
    status = Column(String)
    payment_status = Column(String)
    reasonforcancellation = Column(Text)
    student = relationship('Student', back_populates='lessons')
    teacher = relationship('User', back_populates='lessons')
