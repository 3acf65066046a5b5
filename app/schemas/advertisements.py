# app/schemas/advertisements.py
from __future__ import annotations

import uuid

from pydantic import Field, field_validator

from app.schemas.common import CamelModel, NonEmptyStr, UtcDatetime, blank_to_none


class AdvertisementCreateIn(CamelModel):
    title: NonEmptyStr
    description: NonEmptyStr
    validity: UtcDatetime
    image: str | None = Field(default=None, alias="img")

    @field_validator("image", mode="before")
    @classmethod
    def _blank(cls, v):
        return blank_to_none(v)


class ViewerOut(CamelModel):
    user_id: uuid.UUID
    viewed_at: UtcDatetime


class AdvertisementOut(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    image: str | None
    validity: UtcDatetime
    created_by: uuid.UUID
    status: str
    viewers: list[ViewerOut]
    created_at: UtcDatetime
    updated_at: UtcDatetime


class AnalyticsDay(CamelModel):
    date: str
    total_views: int
    unique_users_count: int


def serialize_advertisement(ad) -> dict:
    return AdvertisementOut.model_validate(ad).to_json()
