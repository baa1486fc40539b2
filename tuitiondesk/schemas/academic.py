"""
Rule sets for academic structure: standards, subjects and batches.
"""

from datetime import date
from typing import Annotated, ClassVar, Literal, Optional

from pydantic import Field, StringConstraints, ValidationInfo, field_validator

from tuitiondesk.core.validation import RuleSet, non_nullable, violation
from tuitiondesk.schemas.common import (
    WEEKDAYS, ClockTime, Money, RecordId, check_after, pad_clock,
)

BatchStatus = Literal["upcoming", "active", "completed", "cancelled"]


# ---- Standard ----
class StandardCreate(RuleSet):
    name: Annotated[str, StringConstraints(min_length=2, max_length=50)]
    level: int = Field(ge=1, le=12)
    description: Annotated[str, StringConstraints(min_length=10, max_length=500)]
    subjects: Optional[Annotated[list[RecordId], Field(min_length=1)]] = None
    is_active: bool = True

    required_messages: ClassVar[dict[str, str]] = {
        "name": "Name is required",
        "level": "Level is required",
        "description": "Description is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "name": "Name must be between 2 and 50 characters",
        "level": "Level must be between 1 and 12",
        "description": "Description must be between 10 and 500 characters",
        "subjects": "At least one valid subject is required",
        "is_active": "isActive must be true or false",
    }


class StandardUpdate(StandardCreate):
    name: Optional[Annotated[str, StringConstraints(min_length=2, max_length=50)]] = None
    level: Optional[int] = Field(default=None, ge=1, le=12)
    description: Optional[Annotated[str, StringConstraints(min_length=10, max_length=500)]] = None
    is_active: Optional[bool] = None

    not_null: ClassVar[dict[str, str]] = non_nullable(StandardCreate)


# ---- Subject ----
class SubjectCreate(RuleSet):
    name: Annotated[str, StringConstraints(min_length=2, max_length=100)]
    description: Annotated[str, StringConstraints(min_length=1, max_length=500)]
    duration: Annotated[str, StringConstraints(min_length=1)]
    status: Literal["active", "inactive"] = "active"
    standard: Optional[RecordId] = None

    required_messages: ClassVar[dict[str, str]] = {
        "name": "Subject name is required",
        "description": "Description is required",
        "duration": "Duration is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "name": "Subject name must be between 2 and 100 characters",
        "description": "Description cannot exceed 500 characters",
        "duration": "Duration is required",
        "status": "Status must be either 'active' or 'inactive'",
        "standard": "Invalid standard ID",
    }

    @field_validator("name")
    @classmethod
    def lowercase_name(cls, value):
        # names are unique case-insensitively
        return value.lower() if value else value


class SubjectUpdate(SubjectCreate):
    name: Optional[Annotated[str, StringConstraints(min_length=2, max_length=100)]] = None
    description: Optional[Annotated[str, StringConstraints(min_length=1, max_length=500)]] = None
    duration: Optional[Annotated[str, StringConstraints(min_length=1)]] = None
    status: Optional[Literal["active", "inactive"]] = None

    not_null: ClassVar[dict[str, str]] = non_nullable(SubjectCreate)


# ---- Batch ----
class Schedule(RuleSet):
    days: list[str]
    start_time: ClockTime
    end_time: ClockTime

    @field_validator("days")
    @classmethod
    def known_days(cls, value):
        if value is None:
            return value
        if not value:
            raise violation("At least one day must be selected")
        if any(day not in WEEKDAYS for day in value):
            raise violation("Invalid day selection")
        return value

    @field_validator("start_time")
    @classmethod
    def pad_start(cls, value):
        return pad_clock(value)

    @field_validator("end_time")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        value = pad_clock(value)
        start = info.data.get("start_time")
        if value is not None and start is not None and value <= start:
            raise violation("End time must be after start time")
        return value


class ScheduleUpdate(Schedule):
    days: Optional[list[str]] = None
    start_time: Optional[ClockTime] = None
    end_time: Optional[ClockTime] = None

    not_null: ClassVar[dict[str, str]] = {
        "days": "At least one day must be selected",
        "start_time": "Start time is required",
        "end_time": "End time is required",
    }


class BatchCreate(RuleSet):
    name: Annotated[str, StringConstraints(min_length=2)]
    standard: RecordId
    subject: RecordId
    teacher: Optional[RecordId] = None
    start_date: date
    end_date: date
    schedule: Schedule
    capacity: int = Field(ge=1)
    fees: Money
    status: BatchStatus = "upcoming"
    description: Optional[str] = None

    required_messages: ClassVar[dict[str, str]] = {
        "name": "Batch name is required",
        "standard": "Standard is required",
        "subject": "Subject is required",
        "start_date": "Start date is required",
        "end_date": "End date is required",
        "schedule": "Schedule is required",
        "schedule.days": "At least one day must be selected",
        "schedule.start_time": "Start time is required",
        "schedule.end_time": "End time is required",
        "capacity": "Capacity is required",
        "fees": "Fee is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "name": "Batch name must be at least 2 characters long",
        "standard": "Invalid standard ID",
        "subject": "Invalid subject ID",
        "teacher": "Invalid teacher ID",
        "start_date": "Invalid start date format",
        "end_date": "Invalid end date format",
        "schedule": "Schedule must be an object",
        "schedule.days": "At least one day must be selected",
        "schedule.start_time": "Invalid start time format (HH:mm)",
        "schedule.end_time": "Invalid end time format (HH:mm)",
        "capacity": "Capacity must be at least 1",
        "fees": "Fee must be a positive number",
        "status": "Invalid status",
    }

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return check_after(value, info, "start_date", "End date must be after start date")


class BatchUpdate(BatchCreate):
    name: Optional[Annotated[str, StringConstraints(min_length=2)]] = None
    standard: Optional[RecordId] = None
    subject: Optional[RecordId] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    schedule: Optional[ScheduleUpdate] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    fees: Optional[Money] = None
    status: Optional[BatchStatus] = None

    not_null: ClassVar[dict[str, str]] = non_nullable(BatchCreate)


class EnrollRequest(RuleSet):
    student_ids: Annotated[list[str], Field(min_length=1)]

    required_messages: ClassVar[dict[str, str]] = {
        "student_ids": "Select at least one student to enroll",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "student_ids": "student_ids must be a non-empty list of student IDs",
    }
