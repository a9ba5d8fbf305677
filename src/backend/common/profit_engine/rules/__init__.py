from .ads_conversion_anomalies import ADS_CONVERSION_ANOMALIES
from .payment_payout_variance import PAYMENT_PAYOUT_VARIANCE

__all__ = [
    "ADS_CONVERSION_ANOMALIES",
    "PAYMENT_PAYOUT_VARIANCE",
]
