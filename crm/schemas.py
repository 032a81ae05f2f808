"""Request and response bodies of the HTTP surface.

Input bodies keep every field optional: required-field checks belong to the
record services so they are reported as ValidationError naming the fields.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .models import LessonStatus, LessonType, PaymentStatus


class StudentFields(BaseModel):
    model_config = ConfigDict(extra="ignore")

    full_name: Optional[str] = None
    username: Optional[str] = None
    level: Optional[str] = None
    description: Optional[str] = None
    isregular: Optional[bool] = None


class StudentUpdate(StudentFields):
    id: Optional[str] = None


class RecordId(BaseModel):
    id: Optional[str] = None


class _LessonBody(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    student_id: Optional[str] = None
    type: Optional[LessonType] = None
    lessonlink: Optional[str] = None
    duration: Optional[int] = None
    time_slot: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("time_slot", "timeSlot")
    )
    status: Optional[LessonStatus] = None
    payment_status: Optional[PaymentStatus] = Field(
        None, validation_alias=AliasChoices("payment_status", "paymentStatus")
    )
    reasonforcancellation: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_null(cls, value):
        # the web client sends "" for untouched inputs
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("time_slot")
    @classmethod
    def _store_as_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # time slots are stored as naive UTC
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class LessonCreate(_LessonBody):
    pass


class LessonUpdate(_LessonBody):
    id: Optional[str] = None
    # honoured only on the admin path
    teacher_id: Optional[str] = None


class StudentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    teacher_id: str
    full_name: str
    username: Optional[str] = None
    level: str
    description: Optional[str] = None
    isregular: bool = False


class StudentRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    full_name: Optional[str] = None
    username: Optional[str] = None


class TeacherRef(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    full_name: Optional[str] = None


class LessonOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    teacher_id: str
    student_id: Optional[str] = None
    type: Optional[str] = None
    lessonlink: Optional[str] = None
    duration: Optional[int] = None
    time_slot: Optional[datetime] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    reasonforcancellation: Optional[str] = None
    student: Optional[StudentRef] = None


class AdminLessonOut(LessonOut):
    teacher: Optional[TeacherRef] = None


class TeacherOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    full_name: Optional[str] = None


class Success(BaseModel):
    success: bool = True
    message: Optional[str] = None


class ScheduleSlot(BaseModel):
    hour: int
    lesson: LessonOut


class ScheduleDay(BaseModel):
    day: date
    slots: list[ScheduleSlot]


class WeekSchedule(BaseModel):
    week_start: date
    days: list[ScheduleDay]


# identity provider webhook

class IdentityEmail(BaseModel):
    email_address: str


class IdentityUserData(BaseModel):
    id: str = Field(min_length=1)
    email_addresses: list[IdentityEmail] = Field(min_length=1)
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @property
    def full_name(self) -> Optional[str]:
        parts = [part for part in (self.first_name, self.last_name) if part]
        return " ".join(parts) or None


class IdentityEvent(BaseModel):
    type: Optional[str] = None
    data: IdentityUserData
