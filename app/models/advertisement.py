# app/models/advertisement.py
from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models.base import utcnow

ADVERTISEMENT_STATUSES = ("active", "expired", "deleted")


class Advertisement(Base):
    __tablename__ = "advertisements"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active','expired','deleted')",
            name="advertisements_status_check",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    image = Column(String(500), nullable=True)
    validity = Column(DateTime(timezone=True), nullable=False, index=True)

    created_by = Column(Uuid, ForeignKey("ventures.id"), nullable=False, index=True)
    status = Column(String(16), nullable=False, default="active", index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    viewers = relationship(
        "AdvertisementView",
        lazy="selectin",
        order_by="AdvertisementView.viewed_at",
    )


class AdvertisementView(Base):
    __tablename__ = "advertisement_views"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    advertisement_id = Column(
        Uuid, ForeignKey("advertisements.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    viewed_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
