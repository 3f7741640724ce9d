# fleet_records/services/patching.py
"""
Helpers shared by the write services: turning caller input into typed
schema objects and applying partial updates.
"""

from datetime import datetime
from typing import Iterable, Type, TypeVar

from pydantic import BaseModel, ValidationError

from fleet_records.errors import NoFieldsToUpdate, ValidationFailed

M = TypeVar("M", bound=BaseModel)


def _describe(exc: ValidationError) -> list[str]:
    details = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"])
        msg = err["msg"].removeprefix("Value error, ")
        details.append(f"{field}: {msg}" if field else msg)
    return details


def coerce(schema: Type[M], data) -> M:
    """
    Accept either a schema instance or a plain mapping.
    Unknown keys are dropped; invalid values raise ValidationFailed.
    """
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        raise ValidationFailed("Validation failed", _describe(e)) from e


def changed_fields(patch: BaseModel, not_null: Iterable[str] = ()) -> dict:
    """Fields the caller explicitly supplied. Raises NoFieldsToUpdate if none."""
    fields = patch.model_dump(exclude_unset=True)
    if not fields:
        raise NoFieldsToUpdate()
    nulled = [name for name in not_null if name in fields and fields[name] is None]
    if nulled:
        raise ValidationFailed("Validation failed", [f"{name}: cannot be null" for name in nulled])
    return fields


def apply_fields(row, fields: dict):
    for name, value in fields.items():
        setattr(row, name, value)
    row.updated_at = datetime.utcnow()
    return row
