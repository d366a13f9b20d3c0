"""rw_referral REST API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.database import get_db_session
from src.rw_common.response import ApiResponse, success_response
from src.rw_gateway.auth.dependencies import get_current_identity, require_admin
from src.rw_gateway.auth.jwt_handler import Identity
from src.rw_referral.application.schemas import (
    AccrueRequest,
    LinkReferralRequest,
    SetReferralStatusRequest,
    ValidateCodeRequest,
)
from src.rw_referral.application.service import ReferralCommissionService

router = APIRouter(prefix="/referrals", tags=["referrals"])

_service = ReferralCommissionService()


@router.get("/code")
async def get_code(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    """The caller's code plus referral totals; the code is issued on first call."""
    data = await _service.summary(db, identity.user_id, identity.name)
    return success_response(data.model_dump(), request)


@router.post("/validate")
async def validate_code(
    body: ValidateCodeRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.resolve_code(db, body.code)
    return success_response(data.model_dump(), request)


@router.post("", status_code=201)
async def link_referral(
    body: LinkReferralRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.link_by_code(db, identity.user_id, body.code)
    return success_response(data.model_dump(), request)


@router.post("/{referral_id}/accrue")
async def accrue_commission(
    referral_id: int,
    body: AccrueRequest,
    _admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.accrue(db, referral_id, body.base_amount, body.source_reference)
    return success_response(data.model_dump(), request)


@router.patch("/{referral_id}")
async def set_referral_status(
    referral_id: int,
    body: SetReferralStatusRequest,
    _admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_status(db, referral_id, body.status)
    return success_response(data.model_dump(), request)
