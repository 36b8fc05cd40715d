"""
sayitanyway/entitlements/status.py
Load/save the persisted SubscriptionStatus blob.
Absent or malformed data reads as the Free tier.
"""

import logging

from sayitanyway.models.record import SubscriptionStatus
from sayitanyway.storage.base import SUBSCRIPTION_STATUS_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class SubscriptionStatusStore:

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def get_status(self) -> SubscriptionStatus:
        data = await self.store.get(SUBSCRIPTION_STATUS_KEY)
        if data is None:
            return SubscriptionStatus()
        try:
            return SubscriptionStatus.from_dict(data)
        except (KeyError, TypeError, ValueError, OverflowError, AttributeError) as e:
            logger.warning(f"Malformed subscription status — defaulting to Free: {e}")
            return SubscriptionStatus()

    async def save_status(self, status: SubscriptionStatus) -> None:
        await self.store.set(SUBSCRIPTION_STATUS_KEY, status.to_dict())
        logger.info(f"Subscription status saved: {status.tier}")
