"""
sayitanyway/entitlements — recording-time ledger, subscription tiers, access codes.
"""

from sayitanyway.entitlements.access_codes import ACCESS_CODES, validate_access_code
from sayitanyway.entitlements.ledger import DRAW_ORDER, RecordingTimeLedger
from sayitanyway.entitlements.status import SubscriptionStatusStore
from sayitanyway.entitlements.subscription import (
    BillingUnavailableError,
    SubscriptionManager,
    should_show_ads,
)

__all__ = [
    "ACCESS_CODES",
    "DRAW_ORDER",
    "BillingUnavailableError",
    "RecordingTimeLedger",
    "SubscriptionManager",
    "SubscriptionStatusStore",
    "should_show_ads",
    "validate_access_code",
]
