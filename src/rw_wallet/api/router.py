"""rw_wallet REST API: all endpoints require a verified Bearer token."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.rw_common.database import get_db_session
from src.rw_common.enums import LedgerEntryKind
from src.rw_common.response import ApiResponse, success_response
from src.rw_gateway.auth.dependencies import get_current_identity, require_admin
from src.rw_gateway.auth.jwt_handler import Identity
from src.rw_wallet.application.schemas import (
    DepositRequest,
    VendorCommissionRequest,
    WithdrawRequest,
)
from src.rw_wallet.application.service import WalletLedgerService

router = APIRouter(prefix="/wallet", tags=["wallet"])

_service = WalletLedgerService()


@router.get("/balance")
async def get_balance(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, identity.user_id)
    return success_response(data.model_dump(), request)


@router.post("/deposit")
async def deposit(
    body: DepositRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.deposit(
        db, identity.user_id, body.amount, body.method, body.reference
    )
    return success_response(data.model_dump(), request)


@router.post("/withdraw")
async def withdraw(
    body: WithdrawRequest,
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.withdraw(
        db, identity.user_id, body.amount, body.method, body.destination
    )
    return success_response(data.model_dump(), request)


@router.get("/ledger")
async def list_ledger(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    kind: LedgerEntryKind | None = Query(None, description="Filter by entry kind"),
) -> ApiResponse:
    data = await _service.list_ledger(
        db, identity.user_id, cursor, limit, kind.value if kind else None
    )
    return success_response(data.model_dump(), request)


@router.get("/reconcile")
async def reconcile(
    identity: Annotated[Identity, Depends(get_current_identity)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.reconcile(db, identity.user_id)
    return success_response(data.model_dump(), request)


@router.post("/vendor-commission")
async def charge_vendor_commission(
    body: VendorCommissionRequest,
    _admin: Annotated[Identity, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.charge_vendor_commission(
        db, body.vendor_id, body.transaction_amount, body.order_reference
    )
    return success_response(data.model_dump(), request)
