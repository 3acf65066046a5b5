from __future__ import annotations

import uuid

from app.core.errors import InvalidIdError
from app.core.result import Err, Ok, Result


def parse_id(value, label: str = "ID") -> Result[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return Ok(value)
    try:
        return Ok(uuid.UUID(str(value)))
    except (TypeError, ValueError):
        return Err(InvalidIdError(f"Invalid {label}"))
