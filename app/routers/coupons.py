# app/routers/coupons.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.deps import coupon_reject_guard, require_admin, require_user, require_venture
from app.core.forms import read_payload, settle_uploads
from app.core.responses import api_response
from app.core.result import unwrap
from app.models.venture import Venture
from app.schemas.coupons import serialize_coupon
from app.services import coupons as coupon_service

router = APIRouter(prefix="/coupons", tags=["Coupons"])


def _all_coupons_payload(listing: dict) -> dict:
    return {
        "couponCount": listing["coupon_count"],
        "statusSummary": listing["status_summary"],
        "coupons": [serialize_coupon(c) for c in listing["coupons"]],
    }


def _status_payload(listing: dict) -> dict:
    return {
        "count": listing["count"],
        "coupons": [serialize_coupon(c) for c in listing["coupons"]],
    }


# ---- venture ----

@router.post("/create")
async def create_coupon(
    request: Request,
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    data = await read_payload(request, file_field="logo", folder="coupons")
    result = await coupon_service.create_coupon(db, data=data, creator_id=venture.id)
    coupon = unwrap(await settle_uploads(request, result))
    return api_response(serialize_coupon(coupon), "Coupon created successfully", 201)


@router.patch("/edit/{coupon_id}")
async def edit_coupon(
    coupon_id: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    data = await read_payload(request, file_field="logo", folder="coupons")
    result = await coupon_service.edit_coupon(db, coupon_id=coupon_id, data=data, actor_id=venture.id)
    coupon = unwrap(await settle_uploads(request, result))
    return api_response(serialize_coupon(coupon), "Coupon updated successfully")


@router.delete("/delete/{coupon_id}")
async def delete_coupon(
    coupon_id: str,
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    coupon = unwrap(await coupon_service.soft_delete_coupon(db, coupon_id=coupon_id, actor_id=venture.id))
    return api_response(serialize_coupon(coupon), "Coupon status updated to 'deleted'")


@router.get("/deleted-coupons")
async def deleted_coupons(
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    listing = unwrap(await coupon_service.list_coupons(db, status="deleted"))
    return api_response(_status_payload(listing), "Deleted coupons fetched successfully.")


@router.get("/venture/{venture_id}")
async def venture_coupons(
    venture_id: str,
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    listing = unwrap(await coupon_service.list_venture_coupons(db, creator_id=venture_id))
    return api_response(
        {
            "total": listing["total"],
            "statusCounts": listing["status_counts"],
            "coupons": [serialize_coupon(c) for c in listing["coupons"]],
        },
        f"Coupons created by Venture {venture_id} fetched successfully",
    )


@router.get("/expired-coupons/{venture_id}")
async def venture_expired_coupons(
    venture_id: str,
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    coupons = unwrap(
        await coupon_service.list_venture_coupons_by_status(db, creator_id=venture_id, status="expired")
    )
    return api_response([serialize_coupon(c) for c in coupons], "Expired coupons fetched successfully.")


@router.get("/venture-display-all-coupons")
async def venture_display_all(
    db: AsyncSession = Depends(get_db),
    venture: Venture = Depends(require_venture),
):
    listing = unwrap(await coupon_service.list_coupons(db))
    return api_response(_all_coupons_payload(listing), "Coupons fetched successfully.")


# ---- user ----

@router.get("/active-coupons")
async def active_coupons(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_user),
):
    listing = unwrap(await coupon_service.list_coupons(db, status="active"))
    return api_response(_status_payload(listing), "Active coupons fetched successfully.")


@router.get("/expired-coupons")
async def expired_coupons(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_user),
):
    listing = unwrap(await coupon_service.list_coupons(db, status="expired"))
    return api_response(_status_payload(listing), "Expired coupons fetched successfully.")


@router.get("/display-coupons-details/{coupon_id}")
async def coupon_details(
    coupon_id: str,
    db: AsyncSession = Depends(get_db),
    user=Depends(require_user),
):
    coupon = unwrap(await coupon_service.get_coupon_details(db, coupon_id=coupon_id))
    return api_response(serialize_coupon(coupon), "Coupon details fetched successfully.")


@router.get("/user-display-all-coupons")
async def user_display_all(
    db: AsyncSession = Depends(get_db),
    user=Depends(require_user),
):
    listing = unwrap(await coupon_service.list_coupons(db))
    return api_response(_all_coupons_payload(listing), "Coupons fetched successfully.")


# ---- moderation ----

@router.get("/display-all-coupons")
async def display_all(
    db: AsyncSession = Depends(get_db),
    admin_user=Depends(require_admin),
):
    listing = unwrap(await coupon_service.list_coupons(db))
    return api_response(_all_coupons_payload(listing), "Coupons fetched successfully.")


@router.delete("/reject/{coupon_id}")
async def reject_coupon(
    coupon_id: str,
    db: AsyncSession = Depends(get_db),
    moderator=Depends(coupon_reject_guard),
):
    coupon = unwrap(await coupon_service.reject_coupon(db, coupon_id=coupon_id))
    return api_response(serialize_coupon(coupon), "Coupon status updated to 'rejected'")
