from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.errors import ValidationError
from app.core.result import Err, Ok, Result

M = TypeVar("M", bound=BaseModel)


def _message(err: dict) -> str:
    field = ".".join(str(p) for p in err.get("loc", ()))
    msg = err.get("msg", "is invalid")
    return f"{field}: {msg}" if field else msg


def validate_payload(model: type[M], data: Mapping[str, Any]) -> Result[M]:
    """Validate ``data`` against ``model``, collecting every violation rather than the first."""
    try:
        return Ok(model.model_validate(dict(data)))
    except PydanticValidationError as e:
        return Err(ValidationError("Validation error", [_message(err) for err in e.errors()]))
