"""rw_investment REST API: plan catalogue and the caller's positions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.database import get_db_session
from src.rw_common.enums import InvestmentStatus
from src.rw_common.response import ApiResponse, success_response
from src.rw_gateway.auth.dependencies import get_current_identity, require_admin
from src.rw_gateway.auth.jwt_handler import Identity
from src.rw_investment.application.schemas import (
    CreatePlanRequest,
    OpenInvestmentRequest,
    SetPlanActiveRequest,
)
from src.rw_investment.application.service import InvestmentAccrualService

router = APIRouter(prefix="/investments", tags=["investments"])

_service = InvestmentAccrualService()


# Static paths are registered before /{investment_id}


@router.get("/plans")
async def list_plans(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_plans(db)
    return success_response(data.model_dump(), request)


@router.post("/plans", status_code=201)
async def create_plan(
    body: CreatePlanRequest,
    _admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_plan(
        db,
        body.name,
        body.min_amount,
        body.max_amount,
        body.annual_return_rate_percent,
        body.duration_days,
        body.is_active,
    )
    return success_response(data.model_dump(), request)


@router.patch("/plans/{plan_id}")
async def set_plan_active(
    plan_id: int,
    body: SetPlanActiveRequest,
    _admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_plan_active(db, plan_id, body.is_active)
    return success_response(data.model_dump(), request)


@router.get("/stats")
async def portfolio_stats(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.portfolio_stats(db, identity.user_id)
    return success_response(data.model_dump(), request)


@router.get("")
async def list_investments(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: InvestmentStatus | None = Query(None, description="Filter by status"),
) -> ApiResponse:
    data = await _service.list_investments(db, identity.user_id, status)
    return success_response(data.model_dump(), request)


@router.post("", status_code=201)
async def open_investment(
    body: OpenInvestmentRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.open(db, identity.user_id, body.plan_id, body.amount)
    return success_response(data.model_dump(), request)


@router.get("/{investment_id}")
async def get_investment(
    investment_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_investment(db, identity.user_id, investment_id)
    return success_response(data.model_dump(), request)


@router.post("/{investment_id}/close")
async def close_investment(
    investment_id: str,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.close(db, identity.user_id, investment_id)
    return success_response(data.model_dump(), request)
