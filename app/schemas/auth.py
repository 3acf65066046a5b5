from __future__ import annotations

import uuid
from typing import Annotated

from pydantic import AfterValidator, Field, StringConstraints

from app.schemas.common import CamelModel, NonEmptyStr, UtcDatetime

Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_lower=True, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$"),
]
Phone = Annotated[str, StringConstraints(strip_whitespace=True, pattern=r"^\+?[0-9]{7,15}$")]
# bcrypt only looks at the first 72 bytes and refuses anything longer.
BCRYPT_MAX_BYTES = 72


def _fits_bcrypt(value: str) -> str:
    if len(value.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return value


Password = Annotated[
    str,
    StringConstraints(min_length=6, max_length=128),
    AfterValidator(_fits_bcrypt),
]


class UserRegisterIn(CamelModel):
    name: NonEmptyStr
    phone_number: Phone
    email: Email
    password: Password


class VentureRegisterIn(CamelModel):
    business_name: NonEmptyStr
    email: Email
    phone_number: Phone | None = None
    password: Password


class AdminCreateIn(CamelModel):
    name: NonEmptyStr
    email: Email
    password: Password


class UserLoginIn(CamelModel):
    phone_number: Phone
    password: str = Field(min_length=1)


class EmailLoginIn(CamelModel):
    email: Email
    password: str = Field(min_length=1)


class UserOut(CamelModel):
    id: uuid.UUID
    name: str
    phone_number: str
    email: str
    avatar: str
    created_at: UtcDatetime


class AdminOut(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    created_at: UtcDatetime


class VentureOut(CamelModel):
    id: uuid.UUID
    business_name: str
    email: str
    phone_number: str | None
    avatar: str
    created_at: UtcDatetime
