"""
Payload validation against a create/update rule set.

Each rule set is a pydantic model (see tuitiondesk.schemas). Pydantic checks
every field independently and stops at the first failing rule of a field, so
translating its errors gives one {field, message} pair per failing field.

Messages are picked in this order:
    - explicit rule violations raised by validators (cross-field checks)
    - "required" message when the field is missing or blank
    - the rule set's per-field format message
    - pydantic's own message

Update rule sets make every field optional, but a field that is required on
create may still not be cleared: an explicit null for it is reported with the
create message (see `non_nullable`).
"""

from typing import Any, ClassVar, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from tuitiondesk.core.errors import ApiError, validation_failed

RULE_VIOLATION = "rule_violation"
_BLANK = (None, [], {})

M = TypeVar("M", bound=BaseModel)


class RuleSet(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    # dotted field path -> message used when the field is absent or blank
    required_messages: ClassVar[dict[str, str]] = {}
    # dotted field path -> message used for any type/format failure
    field_messages: ClassVar[dict[str, str]] = {}
    # field name -> message used when an update sends null for it
    not_null: ClassVar[dict[str, str]] = {}

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, value, info: ValidationInfo):
        if value is None and info.field_name in cls.not_null:
            raise violation(cls.not_null[info.field_name])
        return value


def violation(message: str) -> PydanticCustomError:
    """Raise from a validator to report `message` verbatim."""
    return PydanticCustomError(RULE_VIOLATION, message)


def field_path(loc: tuple) -> str:
    # list indexes are dropped: an error on subjects[2] is an error on subjects
    return ".".join(str(part) for part in loc if not isinstance(part, int))


def _is_blank(value) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return value in _BLANK


def _required_message(field: str) -> str:
    return f"{field.rsplit('.', 1)[-1].replace('_', ' ').capitalize()} is required"


def non_nullable(create: Type[RuleSet]) -> dict[str, str]:
    """
    Fields of `create` that an update may omit but never set to null:
    the required ones and those with a non-null default.
    """
    return {
        name: create.required_messages.get(name) or _required_message(name)
        for name, info in create.model_fields.items()
        if info.is_required() or info.default is not None
    }


def _message(schema: Type[RuleSet], field: str, err: dict) -> str:
    if err["type"] == RULE_VIOLATION:
        return err["msg"]
    required = schema.required_messages.get(field)
    if required and (err["type"] == "missing" or _is_blank(err.get("input", 0))):
        return required
    if field in schema.field_messages:
        return schema.field_messages[field]
    if err["type"] == "missing":
        return _required_message(field)
    return err["msg"]


def field_errors(schema: Type[RuleSet], exc: ValidationError) -> list[dict]:
    errors, seen = [], set()
    for err in exc.errors():
        field = field_path(err["loc"]) or "body"
        if field in seen:
            continue
        seen.add(field)
        errors.append({"field": field, "message": _message(schema, field, err)})
    return errors


def validate_payload(schema: Type[M], payload: Any) -> M:
    if not isinstance(payload, dict):
        raise validation_failed([{"field": "body", "message": "Request body must be a JSON object"}])
    try:
        return schema.model_validate(payload)
    except ValidationError as exc:
        raise validation_failed(field_errors(schema, exc)) from exc


def validated(schema: Type[M]):
    """
    Dependency factory running `schema` over the JSON body before the route.

    Usage:
        @router.post("/batches")
        async def create_batch(body: BatchCreate = Depends(validated(BatchCreate))):
    """

    async def dependency(request: Request) -> M:
        try:
            payload = await request.json()
        except ValueError:
            raise ApiError(400, "Request body must be valid JSON")
        return validate_payload(schema, payload)

    return dependency
