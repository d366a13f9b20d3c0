"""Referral codes and commission arithmetic.

A code is three upper-case letters taken from the user's display name
followed by four digits, e.g. "JOH4821". Codes are unique per user and
resolved case-sensitively.
"""

import re
import secrets
from decimal import ROUND_FLOOR, Decimal

from src.rw_common.errors import InvalidReferralError

CODE_PATTERN = re.compile(r"^[A-Z]{3}\d{4}$")

_FALLBACK_PREFIX = "USER"
MAX_RATE_PERCENT = Decimal("100")


def generate_referral_code(display_name: str | None) -> str:
    letters = "".join(c for c in (display_name or "").upper() if "A" <= c <= "Z")
    prefix = (letters or _FALLBACK_PREFIX)[:3].ljust(3, "X")
    return f"{prefix}{1000 + secrets.randbelow(9000)}"


def is_well_formed_code(code: str) -> bool:
    return bool(CODE_PATTERN.match(code))


def validate_commission_rate(rate_percent: Decimal) -> None:
    if rate_percent <= 0 or rate_percent > MAX_RATE_PERCENT:
        raise InvalidReferralError(
            f"commission rate must be in (0, {MAX_RATE_PERCENT}], got {rate_percent}"
        )


def referral_commission(base_amount: int, rate_percent: Decimal) -> int:
    """floor(base × rate / 100): 5% of 200,000 is 10,000; 5% of 19 is 0."""
    commission = Decimal(base_amount) * rate_percent / Decimal(100)
    return int(commission.to_integral_value(rounding=ROUND_FLOOR))
