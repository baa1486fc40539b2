"""
Field types shared by the resource rule sets.
"""

from datetime import date
from typing import Annotated, Literal, Optional

from pydantic import EmailStr, Field, StringConstraints, ValidationInfo

from tuitiondesk.core.validation import violation

UUID_PATTERN = r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
PHONE_PATTERN = r"^[0-9]{10}$"
TIME_PATTERN = r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$"

RecordId = Annotated[str, StringConstraints(strip_whitespace=True, pattern=UUID_PATTERN)]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, pattern=PHONE_PATTERN)]
ClockTime = Annotated[str, StringConstraints(strip_whitespace=True, pattern=TIME_PATTERN)]
Money = Annotated[float, Field(ge=0)]
Gender = Literal["male", "female", "other"]
Password = Annotated[str, StringConstraints(min_length=6, max_length=72)]
Email = EmailStr

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def pad_clock(value):
    """Zero-pad "9:05" to "09:05" so HH:mm strings compare correctly."""
    if value is None:
        return value
    hours, minutes = value.split(":")
    return f"{int(hours):02d}:{minutes}"


def check_after(value: Optional[date], info: ValidationInfo, other: str, message: str):
    """Reject `value` unless it is strictly after the sibling field `other`."""
    earlier = info.data.get(other)
    if value is not None and earlier is not None and value <= earlier:
        raise violation(message)
    return value


def normalize_email(value):
    return value.lower() if isinstance(value, str) else value
