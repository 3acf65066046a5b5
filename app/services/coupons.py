# app/services/coupons.py
from __future__ import annotations

import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.core.ids import parse_id
from app.core.result import Err, Ok, Result
from app.core.validation import validate_payload
from app.models.coupon import COUPON_STATUSES, COUPON_TERMINAL_STATUSES, Coupon
from app.schemas.coupons import CouponCreateIn, CouponEditIn

logger = structlog.get_logger()

# Never stored from client-supplied extras.
_RESERVED_EXTRA_KEYS = {"id", "createdBy", "created_by", "status", "viewCount", "view_count"}

# Columns an edit may clear by sending an empty value.
_NULLABLE_EDIT_FIELDS = {
    "logo",
    "offer_details",
    "about_company",
    "claim_percentage",
    "discount_type",
    "discount_value",
}


def _generate_coupon_code() -> str:
    return secrets.token_hex(4).upper()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def sweep_expired_coupons(db: AsyncSession, *, now: datetime | None = None) -> int:
    """Flip every active coupon whose expiry has passed to expired.

    Only ``active`` rows match, so deleted/rejected coupons are never touched.
    """
    now = now or _utcnow()
    stmt = (
        update(Coupon)
        .where(Coupon.status == "active", Coupon.expiry_date <= now)
        .values(status="expired", updated_at=now)
        .execution_options(synchronize_session=False)
    )
    res = await db.execute(stmt)
    await db.commit()

    if res.rowcount:
        logger.info("coupons_expired", count=res.rowcount)
    return res.rowcount or 0


async def _status_counts(db: AsyncSession, *criteria) -> dict[str, int]:
    stmt = select(Coupon.status, func.count()).group_by(Coupon.status)
    for c in criteria:
        stmt = stmt.where(c)

    counts = {s: 0 for s in COUPON_STATUSES}
    res = await db.execute(stmt)
    for status, n in res.all():
        counts[status] = int(n)
    return counts


async def _get_coupon(
    db: AsyncSession,
    coupon_id,
    actor_id: uuid.UUID | None = None,
) -> Result[Coupon]:
    """Load a coupon; with ``actor_id`` only the venture that created it can see it."""
    parsed = parse_id(coupon_id, "coupon ID")
    if isinstance(parsed, Err):
        return parsed

    coupon = await db.get(Coupon, parsed.value)
    if not coupon or (actor_id is not None and coupon.created_by != actor_id):
        return Err(NotFoundError("Coupon not found"))
    return Ok(coupon)


async def create_coupon(
    db: AsyncSession,
    *,
    data: Mapping[str, Any],
    creator_id: uuid.UUID,
) -> Result[Coupon]:
    validated = validate_payload(CouponCreateIn, data)
    if isinstance(validated, Err):
        return validated
    body = validated.value

    extra = {k: v for k, v in (body.model_extra or {}).items() if k not in _RESERVED_EXTRA_KEYS}

    coupon = Coupon(
        title=body.title,
        code=body.code or _generate_coupon_code(),
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        expiry_date=body.expiry_date,
        created_by=creator_id,
        status="active",
        view_count=0,
        claim_percentage=body.claim_percentage,
        offer_title=body.offer_title,
        offer_description=body.offer_description,
        terms_and_conditions=body.terms_and_conditions,
        offer_details=body.offer_details,
        about_company=body.about_company,
        logo=body.logo,
        extra=extra,
    )

    try:
        db.add(coupon)
        await db.commit()
        await db.refresh(coupon)
    except Exception:
        await db.rollback()
        raise

    logger.info("coupon_created", coupon_id=str(coupon.id), venture_id=str(creator_id))
    return Ok(coupon)


async def edit_coupon(
    db: AsyncSession,
    *,
    coupon_id,
    data: Mapping[str, Any],
    actor_id: uuid.UUID | None = None,
) -> Result[Coupon]:
    found = await _get_coupon(db, coupon_id, actor_id)
    if isinstance(found, Err):
        return found
    coupon = found.value

    validated = validate_payload(CouponEditIn, data)
    if isinstance(validated, Err):
        return validated

    if coupon.status in COUPON_TERMINAL_STATUSES:
        return Err(ValidationError(f"Cannot edit a {coupon.status} coupon"))

    patch = validated.value.model_dump(exclude_unset=True)
    patch = {k: v for k, v in patch.items() if v is not None or k in _NULLABLE_EDIT_FIELDS}

    try:
        for field, value in patch.items():
            setattr(coupon, field, value)
        await db.commit()
        await db.refresh(coupon)
    except Exception:
        await db.rollback()
        raise

    logger.info("coupon_edited", coupon_id=str(coupon.id), fields=sorted(patch))
    return Ok(coupon)


async def _transition(
    db: AsyncSession,
    *,
    coupon_id,
    target: str,
    actor_id: uuid.UUID | None = None,
) -> Result[Coupon]:
    found = await _get_coupon(db, coupon_id, actor_id)
    if isinstance(found, Err):
        return found
    coupon = found.value

    # Terminal states never move; repeating the same transition is a no-op rewrite.
    if coupon.status in COUPON_TERMINAL_STATUSES and coupon.status != target:
        return Err(ValidationError(f"Coupon is already {coupon.status}"))

    try:
        coupon.status = target
        coupon.updated_at = _utcnow()
        await db.commit()
        await db.refresh(coupon)
    except Exception:
        await db.rollback()
        raise

    logger.info("coupon_status_changed", coupon_id=str(coupon.id), status=target)
    return Ok(coupon)


async def reject_coupon(db: AsyncSession, *, coupon_id) -> Result[Coupon]:
    return await _transition(db, coupon_id=coupon_id, target="rejected")


async def soft_delete_coupon(
    db: AsyncSession,
    *,
    coupon_id,
    actor_id: uuid.UUID | None = None,
) -> Result[Coupon]:
    return await _transition(db, coupon_id=coupon_id, target="deleted", actor_id=actor_id)


async def list_venture_coupons(db: AsyncSession, *, creator_id) -> Result[dict]:
    parsed = parse_id(creator_id, "Venture ID")
    if isinstance(parsed, Err):
        return parsed
    venture_id = parsed.value

    await sweep_expired_coupons(db)

    res = await db.execute(
        select(Coupon)
        .where(Coupon.created_by == venture_id)
        .order_by(Coupon.created_at.desc())
    )
    coupons = list(res.scalars().all())
    counts = await _status_counts(db, Coupon.created_by == venture_id)

    return Ok({"total": len(coupons), "status_counts": counts, "coupons": coupons})


async def list_venture_coupons_by_status(
    db: AsyncSession,
    *,
    creator_id,
    status: str,
) -> Result[list[Coupon]]:
    parsed = parse_id(creator_id, "Venture ID")
    if isinstance(parsed, Err):
        return parsed
    if status not in COUPON_STATUSES:
        return Err(ValidationError(f"Unknown coupon status '{status}'"))

    await sweep_expired_coupons(db)

    res = await db.execute(
        select(Coupon)
        .where(Coupon.created_by == parsed.value, Coupon.status == status)
        .order_by(Coupon.expiry_date.desc())
    )
    return Ok(list(res.scalars().all()))


async def list_coupons(db: AsyncSession, *, status: str | None = None) -> Result[dict]:
    """All coupons, or one status, newest first. The unfiltered view carries per-status counts."""
    if status is not None and status not in COUPON_STATUSES:
        return Err(ValidationError(f"Unknown coupon status '{status}'"))

    await sweep_expired_coupons(db)

    stmt = select(Coupon).order_by(Coupon.created_at.desc())
    if status is not None:
        stmt = stmt.where(Coupon.status == status)
    res = await db.execute(stmt)
    coupons = list(res.scalars().all())

    if status is not None:
        return Ok({"count": len(coupons), "coupons": coupons})

    counts = await _status_counts(db)
    return Ok({"coupon_count": len(coupons), "status_summary": counts, "coupons": coupons})


async def get_coupon_details(db: AsyncSession, *, coupon_id) -> Result[Coupon]:
    """Fetch one coupon, counting the view unless it was deleted or rejected."""
    parsed = parse_id(coupon_id, "coupon ID")
    if isinstance(parsed, Err):
        return parsed

    await sweep_expired_coupons(db)

    await db.execute(
        update(Coupon)
        .where(Coupon.id == parsed.value, Coupon.status.notin_(COUPON_TERMINAL_STATUSES))
        .values(view_count=Coupon.view_count + 1)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    coupon = await db.get(Coupon, parsed.value, populate_existing=True)
    if not coupon:
        return Err(NotFoundError("Coupon not found"))
    return Ok(coupon)
