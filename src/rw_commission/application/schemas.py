"""Pydantic schemas for the commission quote API."""

from pydantic import BaseModel

from src.rw_commission.domain.commission import CommissionBreakdown, CommissionTier
from src.rw_common.money import format_amount


class CommissionTierItem(BaseModel):
    name: str
    min_amount: int
    max_amount: int | None
    rate_min_display: str
    rate_max_display: str

    @classmethod
    def from_domain(cls, tier: CommissionTier) -> "CommissionTierItem":
        return cls(
            name=tier.name,
            min_amount=tier.min_amount,
            max_amount=tier.max_amount,
            rate_min_display=tier.rate_min_display,
            rate_max_display=tier.rate_max_display,
        )


class CommissionQuoteResponse(BaseModel):
    amount: int
    amount_display: str
    rate: str  # Decimal as string, e.g. "0.013"
    rate_percent_display: str
    fee: int
    fee_display: str
    net_amount: int
    net_amount_display: str
    tier: CommissionTierItem

    @classmethod
    def from_domain(
        cls, breakdown: CommissionBreakdown, tier: CommissionTier
    ) -> "CommissionQuoteResponse":
        return cls(
            amount=breakdown.amount,
            amount_display=format_amount(breakdown.amount),
            rate=str(breakdown.rate),
            rate_percent_display=breakdown.rate_percent_display,
            fee=breakdown.fee,
            fee_display=format_amount(breakdown.fee),
            net_amount=breakdown.net_amount,
            net_amount_display=format_amount(breakdown.net_amount),
            tier=CommissionTierItem.from_domain(tier),
        )
