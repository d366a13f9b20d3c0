"""Integer money utilities.

All amounts and balances are int in the currency's minor unit (TZS has no
subunit in circulation, so 1 unit == 1 shilling). No float for money.
Percent rates are Decimal.
"""

from config.settings import settings
from src.rw_common.errors import InvalidAmountError


def require_positive_amount(amount: object) -> int:
    """Return `amount` if it is a positive int, else raise InvalidAmountError."""
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidAmountError(f"amount must be an integer, got {amount!r}")
    if amount <= 0:
        raise InvalidAmountError(f"amount must be positive, got {amount}")
    return amount


def format_amount(amount: int) -> str:
    """Convert an amount to display string: 1000000 -> 'TZS 1,000,000', -500 -> '-TZS 500'."""
    if amount < 0:
        return f"-{settings.CURRENCY_CODE} {-amount:,}"
    return f"{settings.CURRENCY_CODE} {amount:,}"
