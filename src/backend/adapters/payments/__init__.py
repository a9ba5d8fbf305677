"""Payment processor payload adapters (no I/O)."""

from ._common import PayoutAdapterError
from .klarna import payout_records_from_klarna_settlements
from .paypal import payout_records_from_paypal_transactions
from .stripe import payout_records_from_stripe_balance_transactions

__all__ = [
    "PayoutAdapterError",
    "payout_records_from_klarna_settlements",
    "payout_records_from_paypal_transactions",
    "payout_records_from_stripe_balance_transactions",
]
