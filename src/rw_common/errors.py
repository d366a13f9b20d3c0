"""Unified error codes and custom exceptions.

Error code ranges:
  2xxx: Wallet / ledger
  3xxx: Investment
  4xxx: Referral
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 2xxx: Wallet / ledger ---

class InvalidAmountError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(2001, f"Invalid amount: {detail}", 422)


class InsufficientFundsError(AppError):
    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(
            2002,
            f"Insufficient funds: required {required}, available {available}",
            422,
        )


class MissingDestinationError(AppError):
    def __init__(self) -> None:
        super().__init__(2003, "Withdrawal destination is required", 422)



# --- 3xxx: Investment ---

class PlanNotFoundError(AppError):
    def __init__(self, plan_id: int) -> None:
        super().__init__(3001, f"Investment plan not found: {plan_id}", 404)


class PlanInactiveError(AppError):
    def __init__(self, plan_id: int) -> None:
        super().__init__(3002, f"Investment plan is not active: {plan_id}", 422)


class AmountBelowMinimumError(AppError):
    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(
            3003, f"Amount {amount} is below the plan minimum {minimum}", 422
        )


class AmountAboveMaximumError(AppError):
    def __init__(self, amount: int, maximum: int) -> None:
        super().__init__(
            3004, f"Amount {amount} is above the plan maximum {maximum}", 422
        )


class InvalidPlanError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(3005, f"Invalid investment plan: {detail}", 422)


class InvestmentNotFoundError(AppError):
    def __init__(self, investment_id: str) -> None:
        super().__init__(3006, f"Investment not found: {investment_id}", 404)


class InvestmentNotMaturedError(AppError):
    def __init__(self, investment_id: str, days_remaining: int) -> None:
        super().__init__(
            3007,
            f"Investment {investment_id} matures in {days_remaining} day(s)",
            422,
        )


class InvestmentClosedError(AppError):
    def __init__(self, investment_id: str) -> None:
        super().__init__(3008, f"Investment already closed: {investment_id}", 409)


# --- 4xxx: Referral ---

class ReferralNotFoundError(AppError):
    def __init__(self, referral_id: int) -> None:
        super().__init__(4001, f"Referral not found: {referral_id}", 404)


class ReferralInactiveError(AppError):
    def __init__(self, referral_id: int) -> None:
        super().__init__(4002, f"Referral is not active: {referral_id}", 422)


class InvalidReferralError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(4003, f"Invalid referral: {detail}", 422)


class ReferralCodeInvalidError(AppError):
    def __init__(self, code: str) -> None:
        super().__init__(4004, f"Invalid referral code: {code}", 404)


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail, 500)


class ConcurrencyConflictError(AppError):
    """Lost a race on an account balance update. Safe to retry."""

    def __init__(self, detail: str = "Concurrent balance update, retry the request") -> None:
        super().__init__(9003, detail, 409)


class StorageUnavailableError(AppError):
    def __init__(self, detail: str = "Storage unavailable") -> None:
        super().__init__(9004, detail, 503)


class ForbiddenError(AppError):
    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(9005, detail, 403)
