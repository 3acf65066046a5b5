# app/models/coupon.py
from __future__ import annotations

import uuid

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from app.core.db import Base
from app.models.base import utcnow

COUPON_STATUSES = ("active", "expired", "deleted", "rejected", "claimed")
COUPON_TERMINAL_STATUSES = ("deleted", "rejected")


class Coupon(Base):
    __tablename__ = "coupons"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active','expired','deleted','rejected','claimed')",
            name="coupons_status_check",
        ),
        CheckConstraint(
            "claim_percentage IS NULL OR (claim_percentage >= 0 AND claim_percentage <= 100)",
            name="coupons_claim_percentage_check",
        ),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    title = Column(Text, nullable=False)
    code = Column(String(64), nullable=False, index=True)

    discount_type = Column(String(16), nullable=True)  # percent / fixed
    discount_value = Column(Float, nullable=True)

    expiry_date = Column(DateTime(timezone=True), nullable=False, index=True)

    created_by = Column(Uuid, ForeignKey("ventures.id"), nullable=False, index=True)

    status = Column(String(16), nullable=False, default="active", index=True)
    view_count = Column(Integer, nullable=False, default=0)
    claim_percentage = Column(Float, nullable=True)

    offer_title = Column(Text, nullable=False)
    offer_description = Column(Text, nullable=False)
    terms_and_conditions = Column(Text, nullable=False)
    offer_details = Column(Text, nullable=True)
    about_company = Column(Text, nullable=True)
    logo = Column(String(500), nullable=True)

    # Unknown fields sent on create are kept as-is.
    extra = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
