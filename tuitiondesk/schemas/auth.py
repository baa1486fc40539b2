"""
Rule sets for authentication.
"""

from typing import Annotated, ClassVar

from pydantic import StringConstraints, field_validator

from tuitiondesk.core.validation import RuleSet
from tuitiondesk.schemas.common import Email, Password, normalize_email


class UserLogin(RuleSet):
    email: Email
    password: Annotated[str, StringConstraints(min_length=1)]

    required_messages: ClassVar[dict[str, str]] = {
        "email": "Please include a valid email",
        "password": "Password is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "email": "Please include a valid email",
    }

    @field_validator("email", mode="before")
    @classmethod
    def lowercase_email(cls, value):
        return normalize_email(value)


class AdminRegister(UserLogin):
    name: Annotated[str, StringConstraints(min_length=1)]
    password: Password

    required_messages: ClassVar[dict[str, str]] = {
        **UserLogin.required_messages,
        "name": "Name is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        **UserLogin.field_messages,
        "password": "Please enter a password with 6 or more characters",
    }
