"""Global enums: must match DB CHECK constraints exactly."""

from enum import Enum


class LedgerEntryKind(str, Enum):
    # External money in/out (payment gateway settles instantly)
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    # Investment open/close (user side)
    INVESTMENT = "INVESTMENT"
    INVESTMENT_RETURN = "INVESTMENT_RETURN"
    # Vendor commission charged on a sale
    COMMISSION = "COMMISSION"
    # Referrer credit for a referred user's transaction
    REFERRAL_COMMISSION = "REFERRAL_COMMISSION"


class InvestmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class ReferralStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
