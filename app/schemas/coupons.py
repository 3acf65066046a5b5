# app/schemas/coupons.py
from __future__ import annotations

import uuid
from typing import Annotated, Literal
from urllib.parse import urlparse

from pydantic import AliasChoices, ConfigDict, Field, StringConstraints, field_validator

from app.schemas.common import CamelModel, NonEmptyStr, UtcDatetime, blank_to_none

CouponCode = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=3, max_length=64, pattern=r"^[A-Za-z0-9]+$"),
]


def _check_uri(v: str | None) -> str | None:
    if v is None:
        return v
    parsed = urlparse(v)
    if not parsed.scheme or not (parsed.netloc or parsed.path):
        raise ValueError("must be a valid uri")
    return v


class CouponCreateIn(CamelModel):
    model_config = ConfigDict(extra="allow")

    title: NonEmptyStr = Field(validation_alias=AliasChoices("title", "couponTitle"))
    code: CouponCode | None = Field(default=None, validation_alias=AliasChoices("code", "couponCode"))
    discount_type: Literal["percent", "fixed"] | None = None
    discount_value: float | None = Field(default=None, ge=0)

    offer_title: NonEmptyStr
    offer_description: NonEmptyStr
    terms_and_conditions: NonEmptyStr
    expiry_date: UtcDatetime

    logo: str | None = None
    offer_details: str | None = None
    about_company: str | None = None
    claim_percentage: float | None = Field(default=None, ge=0, le=100)

    @field_validator("logo", "discount_type", "discount_value", "claim_percentage", "code", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("logo")
    @classmethod
    def _logo_uri(cls, v):
        return _check_uri(v)


class CouponEditIn(CamelModel):
    model_config = ConfigDict(extra="forbid")

    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3)] | None = Field(
        default=None, validation_alias=AliasChoices("title", "couponTitle")
    )
    code: CouponCode | None = Field(default=None, validation_alias=AliasChoices("code", "couponCode"))
    discount_type: Literal["percent", "fixed"] | None = None
    discount_value: float | None = Field(default=None, ge=0)
    expiry_date: UtcDatetime | None = None

    logo: str | None = None
    offer_title: NonEmptyStr | None = None
    offer_description: NonEmptyStr | None = None
    terms_and_conditions: NonEmptyStr | None = None
    offer_details: str | None = None
    about_company: str | None = None
    claim_percentage: float | None = Field(default=None, ge=0, le=100)

    @field_validator("logo", "discount_type", "discount_value", "claim_percentage", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)

    @field_validator("logo")
    @classmethod
    def _logo_uri(cls, v):
        return _check_uri(v)


class CouponOut(CamelModel):
    id: uuid.UUID
    title: str
    code: str
    discount_type: str | None
    discount_value: float | None
    expiry_date: UtcDatetime
    created_by: uuid.UUID
    status: str
    view_count: int
    claim_percentage: float | None
    offer_title: str
    offer_description: str
    terms_and_conditions: str
    offer_details: str | None
    about_company: str | None
    logo: str | None
    created_at: UtcDatetime
    updated_at: UtcDatetime


def serialize_coupon(coupon) -> dict:
    out = dict(coupon.extra or {})
    out.update(CouponOut.model_validate(coupon).to_json())
    return out
