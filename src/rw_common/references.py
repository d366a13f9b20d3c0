"""Business identifiers for ledger references and investments.

References are stored verbatim on ledger entries for audit/reconciliation,
so they are short, upper-case and prefixed by their origin:
  DEP-…  deposit without an external payment reference
  WD-…   withdrawal payout
  INV-…  investment position (also the ledger reference of its debit/credit)
"""

import uuid


def new_reference(prefix: str) -> str:
    """Return a unique reference such as 'WD-3F9A0C1B7D2E4A55'."""
    return f"{prefix}-{uuid.uuid4().hex[:16].upper()}"
