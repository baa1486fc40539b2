"""
Rule sets for people records: teachers, staff and students.
The write-only `password` becomes the login user's bcrypt hash.
"""

from datetime import date
from typing import Annotated, ClassVar, Literal, Optional

from pydantic import Field, StringConstraints, field_validator

from tuitiondesk.core.validation import RuleSet, non_nullable
from tuitiondesk.schemas.common import (
    Email, Gender, Money, Password, Phone, RecordId, normalize_email,
)

Text = Annotated[str, StringConstraints(min_length=1)]


class Person(RuleSet):
    @field_validator("email", "parent_email", mode="before", check_fields=False)
    @classmethod
    def lowercase_email(cls, value):
        return normalize_email(value)


# ---- Teacher ----
class TeacherCreate(Person):
    name: Annotated[str, StringConstraints(min_length=3, max_length=50)]
    email: Email
    password: Password
    phone: Phone
    gender: Gender
    address: Annotated[str, StringConstraints(min_length=5, max_length=200)]
    qualification: Annotated[str, StringConstraints(min_length=2, max_length=100)]
    experience: float = Field(ge=0, le=50)
    joining_date: date
    salary: Money
    status: Literal["active", "inactive", "on_leave"] = "active"
    subjects: Annotated[list[RecordId], Field(min_length=1)]

    required_messages: ClassVar[dict[str, str]] = {
        "name": "Name is required",
        "email": "Email is required",
        "password": "Password is required",
        "phone": "Phone number is required",
        "gender": "Gender is required",
        "address": "Address is required",
        "qualification": "Qualification is required",
        "experience": "Experience is required",
        "joining_date": "Joining date is required",
        "salary": "Salary is required",
        "subjects": "At least one subject is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "name": "Name must be between 3-50 characters",
        "email": "Please include a valid email",
        "password": "Please enter a password with 6 or more characters",
        "phone": "Phone number must be exactly 10 digits",
        "gender": "Gender must be male, female, or other",
        "address": "Address must be between 5-200 characters",
        "qualification": "Qualification must be between 2-100 characters",
        "experience": "Experience must be a non-negative number up to 50 years",
        "joining_date": "Joining date must be a valid date",
        "salary": "Salary must be a positive number",
        "status": "Status must be active, inactive or on_leave",
        "subjects": "At least one valid subject is required",
    }


class TeacherUpdate(TeacherCreate):
    name: Optional[Annotated[str, StringConstraints(min_length=3, max_length=50)]] = None
    email: Optional[Email] = None
    password: Optional[Password] = None
    phone: Optional[Phone] = None
    gender: Optional[Gender] = None
    address: Optional[Annotated[str, StringConstraints(min_length=5, max_length=200)]] = None
    qualification: Optional[Annotated[str, StringConstraints(min_length=2, max_length=100)]] = None
    experience: Optional[float] = Field(default=None, ge=0, le=50)
    joining_date: Optional[date] = None
    salary: Optional[Money] = None
    status: Optional[Literal["active", "inactive", "on_leave"]] = None
    subjects: Optional[Annotated[list[RecordId], Field(min_length=1)]] = None

    not_null: ClassVar[dict[str, str]] = non_nullable(TeacherCreate)


# ---- Staff ----
Department = Literal["administration", "accounts", "reception", "other"]


class StaffCreate(Person):
    name: Text
    email: Email
    password: Password
    phone: Phone
    address: Text
    gender: Optional[Gender] = None
    role: Text
    department: Department
    joining_date: date
    salary: Money
    status: Literal["active", "inactive"] = "active"
    permissions: list[str] = []
    reporting_to: Optional[RecordId] = None

    required_messages: ClassVar[dict[str, str]] = {
        "name": "Name is required",
        "email": "Email is required",
        "password": "Password is required",
        "phone": "Phone number is required",
        "address": "Address is required",
        "role": "Role is required",
        "department": "Department is required",
        "joining_date": "Joining date is required",
        "salary": "Salary is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "email": "Please include a valid email",
        "password": "Please enter a password with 6 or more characters",
        "phone": "Phone number must be exactly 10 digits",
        "gender": "Gender must be male, female, or other",
        "department": "Department must be administration, accounts, reception or other",
        "joining_date": "Joining date is required",
        "salary": "Salary must be a positive number",
        "status": "Status must be active or inactive",
        "permissions": "Permissions must be a list of strings",
        "reporting_to": "Invalid staff ID",
    }


class StaffUpdate(StaffCreate):
    name: Optional[Text] = None
    email: Optional[Email] = None
    password: Optional[Password] = None
    phone: Optional[Phone] = None
    address: Optional[Text] = None
    role: Optional[Text] = None
    department: Optional[Department] = None
    joining_date: Optional[date] = None
    salary: Optional[Money] = None
    status: Optional[Literal["active", "inactive"]] = None
    permissions: Optional[list[str]] = None

    not_null: ClassVar[dict[str, str]] = non_nullable(StaffCreate)


# ---- Student ----
Board = Literal["CBSE", "ICSE", "State Board", "Other"]


class StudentCreate(Person):
    name: Text
    email: Email
    password: Password
    phone: Phone
    gender: Gender
    date_of_birth: Optional[date] = None
    address: Text
    parent_name: Text
    parent_phone: Phone
    parent_email: Optional[Email] = None
    standard: Optional[RecordId] = None
    board: Board
    school_name: Text
    previous_percentage: Optional[float] = Field(default=None, ge=0, le=100)
    joining_date: date
    status: Literal["active", "inactive"] = "active"

    required_messages: ClassVar[dict[str, str]] = {
        "name": "Name is required",
        "email": "Email is required",
        "password": "Password is required and must be at least 6 characters",
        "phone": "Phone number is required",
        "gender": "Gender is required",
        "address": "Address is required",
        "parent_name": "Parent name is required",
        "parent_phone": "Parent phone number is required",
        "board": "Board is required",
        "school_name": "School name is required",
        "joining_date": "Joining date is required",
    }
    field_messages: ClassVar[dict[str, str]] = {
        "email": "Please include a valid email",
        "password": "Password is required and must be at least 6 characters",
        "phone": "Phone number must be exactly 10 digits",
        "gender": "Gender must be male, female, or other",
        "date_of_birth": "Date of birth must be a valid date",
        "parent_phone": "Parent phone number must be exactly 10 digits",
        "parent_email": "Please include a valid parent email",
        "standard": "Invalid standard ID",
        "board": "Board must be CBSE, ICSE, State Board or Other",
        "previous_percentage": "Previous percentage must be between 0 and 100",
        "joining_date": "Joining date must be a valid date",
        "status": "Status must be either active or inactive",
    }


class StudentUpdate(StudentCreate):
    name: Optional[Text] = None
    email: Optional[Email] = None
    password: Optional[Password] = None
    phone: Optional[Phone] = None
    gender: Optional[Gender] = None
    address: Optional[Text] = None
    parent_name: Optional[Text] = None
    parent_phone: Optional[Phone] = None
    board: Optional[Board] = None
    school_name: Optional[Text] = None
    joining_date: Optional[date] = None
    status: Optional[Literal["active", "inactive"]] = None

    not_null: ClassVar[dict[str, str]] = non_nullable(StudentCreate)


# ---- Self-service profile edits ----
TEACHER_EDITABLE = ("phone", "address", "qualification", "experience")
STUDENT_EDITABLE = ("phone", "address")


def _only(messages: dict[str, str], fields: tuple) -> dict[str, str]:
    return {name: messages[name] for name in fields if name in messages}


class TeacherProfileUpdate(Person):
    """What a teacher may change on their own record; other keys are ignored."""

    phone: Optional[Phone] = None
    address: Optional[Annotated[str, StringConstraints(min_length=5, max_length=200)]] = None
    qualification: Optional[Annotated[str, StringConstraints(min_length=2, max_length=100)]] = None
    experience: Optional[float] = Field(default=None, ge=0, le=50)

    required_messages: ClassVar[dict[str, str]] = _only(TeacherCreate.required_messages, TEACHER_EDITABLE)
    field_messages: ClassVar[dict[str, str]] = _only(TeacherCreate.field_messages, TEACHER_EDITABLE)
    not_null: ClassVar[dict[str, str]] = _only(non_nullable(TeacherCreate), TEACHER_EDITABLE)


class StudentProfileUpdate(Person):
    """What a student may change on their own record; other keys are ignored."""

    phone: Optional[Phone] = None
    address: Optional[Text] = None

    required_messages: ClassVar[dict[str, str]] = _only(StudentCreate.required_messages, STUDENT_EDITABLE)
    field_messages: ClassVar[dict[str, str]] = _only(StudentCreate.field_messages, STUDENT_EDITABLE)
    not_null: ClassVar[dict[str, str]] = _only(non_nullable(StudentCreate), STUDENT_EDITABLE)
