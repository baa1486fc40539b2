"""
Rule sets for front-office records: announcements and payments.
"""

from datetime import date
from typing import Annotated, ClassVar, Literal, Optional

from pydantic import StringConstraints, ValidationInfo, field_validator

from tuitiondesk.core.validation import RuleSet, non_nullable
from tuitiondesk.schemas.common import Money, RecordId, check_after

Text = Annotated[str, StringConstraints(min_length=1)]

AnnouncementType = Literal["General", "Event", "Holiday", "Exam", "Emergency", "Other"]
Priority = Literal["Low", "Medium", "High"]
Audience = Literal["All", "Students", "Teachers", "Parents"]

PaymentMethod = Literal["Cash", "UPI", "Bank Transfer", "Cheque"]
PaymentStatus = Literal["Pending", "Completed", "Failed"]


# ---- Announcement ----
class AnnouncementCreate(RuleSet):
    title: Text
    content: Text
    type: AnnouncementType = "General"
    priority: Priority = "Medium"
    target_audience: Audience = "All"
    start_date: date
    end_date: date

    required_messages: ClassVar[dict[str, str]] = {
        "title": "Title is required",
        "content": "Content is required",
        "start_date": "Start date is required",
        "end_date": "End date is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "type": "Invalid announcement type",
        "priority": "Invalid priority level",
        "target_audience": "Invalid target audience",
        "start_date": "Invalid start date",
        "end_date": "Invalid end date",
    }

    @field_validator("end_date")
    @classmethod
    def end_after_start(cls, value, info: ValidationInfo):
        return check_after(value, info, "start_date", "End date must be after start date")


class AnnouncementUpdate(AnnouncementCreate):
    title: Optional[Text] = None
    content: Optional[Text] = None
    type: Optional[AnnouncementType] = None
    priority: Optional[Priority] = None
    target_audience: Optional[Audience] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    not_null: ClassVar[dict[str, str]] = non_nullable(AnnouncementCreate)


# ---- Payment ----
class PaymentCreate(RuleSet):
    student: RecordId
    batch: RecordId
    amount: Money
    payment_date: date
    payment_method: PaymentMethod
    status: PaymentStatus = "Pending"
    transaction_id: Optional[str] = None
    notes: Optional[str] = None

    required_messages: ClassVar[dict[str, str]] = {
        "student": "Student ID is required",
        "batch": "Batch ID is required",
        "amount": "Amount is required",
        "payment_date": "Payment date is required",
        "payment_method": "Payment method is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "student": "Invalid student ID",
        "batch": "Invalid batch ID",
        "amount": "Amount must be a positive number",
        "payment_date": "Payment date must be a valid date",
        "payment_method": "Invalid payment method",
        "status": "Invalid payment status",
    }


class PaymentUpdate(PaymentCreate):
    student: Optional[RecordId] = None
    batch: Optional[RecordId] = None
    amount: Optional[Money] = None
    payment_date: Optional[date] = None
    payment_method: Optional[PaymentMethod] = None
    status: Optional[PaymentStatus] = None

    not_null: ClassVar[dict[str, str]] = non_nullable(PaymentCreate)
