"""Vendor commission model: continuous rate from 1% to 2% of the transaction.

    rate(T) = min(1% + ((T - 1,000) / 99,999,000) x 1%, 2%)     for T >= 1,000
    fee(T)  = round_half_up(T x rate(T))
    net(T)  = T - fee(T)

All arithmetic is Decimal; fees are whole minor units. The tier table below
is a display aid only. Fees are always computed from the formula so that no
tier boundary can introduce rounding drift.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from src.rw_common.errors import InvalidAmountError
from src.rw_common.money import format_amount

MIN_TRANSACTION = 1_000
MAX_TRANSACTION = 100_000_000  # rate is capped at and above this amount
MIN_RATE = Decimal("0.01")
MAX_RATE = Decimal("0.02")
_RATE_RANGE = MAX_RATE - MIN_RATE
_TRANSACTION_RANGE = Decimal(MAX_TRANSACTION - MIN_TRANSACTION)  # 99,999,000


@dataclass(frozen=True)
class CommissionTier:
    name: str
    min_amount: int
    max_amount: int | None  # None = unbounded
    rate_min_display: str
    rate_max_display: str


@dataclass(frozen=True)
class CommissionBreakdown:
    amount: int
    rate: Decimal
    fee: int
    net_amount: int

    @property
    def rate_percent_display(self) -> str:
        return f"{self.rate * 100:.2f}%"


COMMISSION_TIERS: tuple[CommissionTier, ...] = (
    CommissionTier("Micro", 1_000, 49_999, "1.00%", "1.02%"),
    CommissionTier("Small", 50_000, 199_999, "1.02%", "1.08%"),
    CommissionTier("Medium-Small", 200_000, 499_999, "1.08%", "1.18%"),
    CommissionTier("Medium", 500_000, 999_999, "1.18%", "1.30%"),
    CommissionTier("Medium-Large", 1_000_000, 4_999_999, "1.30%", "1.60%"),
    CommissionTier("Large", 5_000_000, 14_999_999, "1.60%", "1.85%"),
    CommissionTier("Extra-Large", 15_000_000, 49_999_999, "1.85%", "1.98%"),
    CommissionTier("Premium", 50_000_000, 99_999_999, "1.98%", "2.00%"),
    CommissionTier("Enterprise", 100_000_000, None, "2.00%", "2.00%"),
)


def validate_transaction_amount(amount: object) -> tuple[bool, str]:
    """Non-raising eligibility check, for form validation."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        return False, "Transaction amount must be a whole number"
    if amount < MIN_TRANSACTION:
        return False, f"Transaction amount must be at least {format_amount(MIN_TRANSACTION)}"
    return True, "Transaction amount is valid"


def _require_eligible(amount: int) -> None:
    valid, message = validate_transaction_amount(amount)
    if not valid:
        raise InvalidAmountError(message)


def commission_rate(amount: int) -> Decimal:
    """Commission rate as a fraction (Decimal('0.013') == 1.3%)."""
    _require_eligible(amount)
    if amount >= MAX_TRANSACTION:
        return MAX_RATE
    scale = Decimal(amount - MIN_TRANSACTION) / _TRANSACTION_RANGE
    return min(MIN_RATE + scale * _RATE_RANGE, MAX_RATE)


def commission_fee(amount: int) -> int:
    rate = commission_rate(amount)
    return int((amount * rate).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def commission_breakdown(amount: int) -> CommissionBreakdown:
    """Rate, fee and vendor net. net_amount + fee == amount always holds."""
    rate = commission_rate(amount)
    fee = int((amount * rate).quantize(Decimal(1), rounding=ROUND_HALF_UP))
    return CommissionBreakdown(amount=amount, rate=rate, fee=fee, net_amount=amount - fee)


def commission_tier(amount: int) -> CommissionTier:
    """Display tier for `amount`. Amounts below the floor report the first tier."""
    for tier in COMMISSION_TIERS:
        if tier.max_amount is None or amount <= tier.max_amount:
            return tier
    return COMMISSION_TIERS[-1]
