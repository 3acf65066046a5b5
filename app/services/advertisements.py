# app/services/advertisements.py
from __future__ import annotations

import uuid
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Mapping

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, ValidationError
from app.core.ids import parse_id
from app.core.result import Err, Ok, Result
from app.core.validation import validate_payload
from app.models.advertisement import ADVERTISEMENT_STATUSES, Advertisement, AdvertisementView
from app.schemas.advertisements import AdvertisementCreateIn
from app.schemas.common import as_utc

logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def sweep_expired_advertisements(db: AsyncSession, *, now: datetime | None = None) -> int:
    now = now or _utcnow()
    res = await db.execute(
        update(Advertisement)
        .where(Advertisement.status == "active", Advertisement.validity <= now)
        .values(status="expired", updated_at=now)
        .execution_options(synchronize_session=False)
    )
    await db.commit()

    if res.rowcount:
        logger.info("advertisements_expired", count=res.rowcount)
    return res.rowcount or 0


async def _get_advertisement(
    db: AsyncSession,
    ad_id,
    actor_id: uuid.UUID | None = None,
) -> Result[Advertisement]:
    parsed = parse_id(ad_id, "advertisement ID")
    if isinstance(parsed, Err):
        return parsed

    ad = await db.get(Advertisement, parsed.value)
    if not ad or (actor_id is not None and ad.created_by != actor_id):
        return Err(NotFoundError("Advertisement not found"))
    return Ok(ad)


async def create_advertisement(
    db: AsyncSession,
    *,
    data: Mapping[str, Any],
    creator_id: uuid.UUID,
) -> Result[Advertisement]:
    validated = validate_payload(AdvertisementCreateIn, data)
    if isinstance(validated, Err):
        return Err(
            ValidationError(
                "All fields (title, description, validity) are required.",
                validated.error.errors,
            )
        )
    body = validated.value

    ad = Advertisement(
        title=body.title,
        description=body.description,
        validity=body.validity,
        image=body.image,
        created_by=creator_id,
        status="active",
        viewers=[],
    )

    try:
        db.add(ad)
        await db.commit()
        await db.refresh(ad)
    except Exception:
        await db.rollback()
        raise

    logger.info("advertisement_created", advertisement_id=str(ad.id), venture_id=str(creator_id))
    return Ok(ad)


async def soft_delete_advertisement(
    db: AsyncSession,
    *,
    ad_id,
    actor_id: uuid.UUID | None = None,
) -> Result[Advertisement]:
    found = await _get_advertisement(db, ad_id, actor_id)
    if isinstance(found, Err):
        return found
    ad = found.value

    try:
        ad.status = "deleted"
        ad.updated_at = _utcnow()
        await db.commit()
        await db.refresh(ad)
    except Exception:
        await db.rollback()
        raise

    logger.info("advertisement_deleted", advertisement_id=str(ad.id))
    return Ok(ad)


async def list_advertisements(db: AsyncSession, *, status: str | None = None) -> Result[dict]:
    if status is not None and status not in ADVERTISEMENT_STATUSES:
        return Err(ValidationError(f"Unknown advertisement status '{status}'"))

    await sweep_expired_advertisements(db)

    stmt = select(Advertisement).order_by(Advertisement.created_at.desc())
    if status is not None:
        stmt = stmt.where(Advertisement.status == status)
    res = await db.execute(stmt)
    ads = list(res.scalars().all())
    return Ok({"total": len(ads), "advertisements": ads})


async def list_venture_advertisements(db: AsyncSession, *, creator_id) -> Result[dict]:
    parsed = parse_id(creator_id, "Venture ID")
    if isinstance(parsed, Err):
        return parsed

    res = await db.execute(
        select(Advertisement)
        .where(Advertisement.created_by == parsed.value)
        .order_by(Advertisement.created_at.desc())
    )
    ads = list(res.scalars().all())
    return Ok({"total": len(ads), "advertisements": ads})


async def record_view(db: AsyncSession, *, ad_id, user_id: uuid.UUID) -> Result[Advertisement]:
    found = await _get_advertisement(db, ad_id)
    if isinstance(found, Err):
        return found
    ad = found.value

    if ad.status != "active":
        return Err(ValidationError("Advertisement is not active"))

    try:
        db.add(AdvertisementView(advertisement_id=ad.id, user_id=user_id, viewed_at=_utcnow()))
        await db.commit()
        await db.refresh(ad, attribute_names=["viewers"])
    except Exception:
        await db.rollback()
        raise

    return Ok(ad)


def summarize_views(views) -> list[dict]:
    """Group (user_id, viewed_at) pairs by UTC calendar day, most recent day first."""
    totals: dict[str, int] = defaultdict(int)
    users: dict[str, set] = defaultdict(set)

    for user_id, viewed_at in views:
        day = as_utc(viewed_at).strftime("%Y-%m-%d")
        totals[day] += 1
        users[day].add(user_id)

    return [
        {"date": day, "total_views": totals[day], "unique_users_count": len(users[day])}
        for day in sorted(totals, reverse=True)
    ]


async def advertisement_analytics(db: AsyncSession) -> Result[list[dict]]:
    res = await db.execute(select(AdvertisementView.user_id, AdvertisementView.viewed_at))
    return Ok(summarize_views(res.all()))
