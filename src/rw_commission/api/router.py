"""rw_commission REST API: public, read-only quote and tier table."""

from fastapi import APIRouter, Query, Request

from src.rw_commission.application.schemas import CommissionQuoteResponse, CommissionTierItem
from src.rw_commission.domain.commission import (
    COMMISSION_TIERS,
    commission_breakdown,
    commission_tier,
)
from src.rw_common.response import ApiResponse, success_response

router = APIRouter(prefix="/commission", tags=["commission"])


@router.get("/quote")
async def quote(
    request: Request,
    amount: int = Query(..., description="Transaction amount in TZS"),
) -> ApiResponse:
    data = CommissionQuoteResponse.from_domain(
        commission_breakdown(amount), commission_tier(amount)
    )
    return success_response(data.model_dump(), request)


@router.get("/tiers")
async def list_tiers(request: Request) -> ApiResponse:
    items = [CommissionTierItem.from_domain(t).model_dump() for t in COMMISSION_TIERS]
    return success_response({"tiers": items}, request)
