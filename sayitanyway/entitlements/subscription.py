"""
sayitanyway/entitlements/subscription.py
Subscription state machine: store billing events, access-code unlock,
extra-time purchases and ad visibility.

Precedence rule: a manual unlock (is_unlocked=True) is never downgraded
by store-driven deactivation. Only remove_unlock() clears it.

Billing capability is detected once at startup and passed in as
`billing_available`; store-driven calls fail fast when it is False.
"""

import logging
import time
from typing import Optional

from sayitanyway.entitlements.access_codes import validate_access_code
from sayitanyway.entitlements.ledger import RecordingTimeLedger
from sayitanyway.entitlements.status import SubscriptionStatusStore
from sayitanyway.models.record import (
    EXTRA_TIME_SECONDS,
    TIER_FREE,
    TIER_SUBSCRIBER,
    TIER_UNLOCKED,
    RecordingTime,
    SubscriptionStatus,
)
from sayitanyway.storage.base import KeyValueStore

logger = logging.getLogger(__name__)

# Screens where ads are never shown
AD_FREE_SCREENS = (
    'support-resources',
    'compose-message',
    'recipient',
)


class BillingUnavailableError(RuntimeError):
    """Store billing is not available on this platform/build."""


def should_show_ads(tier: str, screen_name: Optional[str] = None) -> bool:
    if tier != TIER_FREE:
        return False
    if screen_name and any(screen in screen_name for screen in AD_FREE_SCREENS):
        return False
    return True


def _now_ms() -> int:
    return int(time.time() * 1000)


class SubscriptionManager:

    def __init__(
        self,
        store:             KeyValueStore,
        ledger:            Optional[RecordingTimeLedger] = None,
        billing_available: bool = True,
    ):
        self.status_store      = SubscriptionStatusStore(store)
        self.ledger            = ledger or RecordingTimeLedger(store)
        self.billing_available = billing_available

    def _require_billing(self, action: str) -> None:
        if not self.billing_available:
            raise BillingUnavailableError(f"Billing unavailable — cannot {action}")

    # ── QUERIES ──────────────────────────────────────────────

    async def get_status(self) -> SubscriptionStatus:
        return await self.status_store.get_status()

    async def is_subscriber(self) -> bool:
        status = await self.status_store.get_status()
        return status.is_subscriber

    async def should_show_ads(self, screen_name: Optional[str] = None) -> bool:
        status = await self.status_store.get_status()
        return should_show_ads(status.tier, screen_name)

    # ── STORE BILLING EVENTS ─────────────────────────────────

    async def activate_subscription(self) -> SubscriptionStatus:
        self._require_billing("activate subscription")
        current = await self.status_store.get_status()
        if current.is_unlocked:
            # Tier stays unlocked; record the store side for remove_unlock()
            current.store_subscription_active   = True
            current.subscription_activated_date = _now_ms()
            await self.status_store.save_status(current)
            logger.info("Subscription activated (already unlocked via code)")
            return current

        status = SubscriptionStatus(
            tier                        = TIER_SUBSCRIBER,
            is_unlocked                 = False,
            store_subscription_active   = True,
            subscription_activated_date = _now_ms(),
        )
        await self.status_store.save_status(status)
        await self.ledger.set_subscriber_pool(True)
        logger.info("Subscription activated")
        return status

    async def deactivate_subscription(self) -> SubscriptionStatus:
        """Store-driven deactivation. Never downgrades a code-unlocked user."""
        current = await self.status_store.get_status()
        if current.is_unlocked:
            current.store_subscription_active   = False
            current.subscription_activated_date = None
            await self.status_store.save_status(current)
            logger.info("Store subscription ended; access-code unlock keeps the tier")
            return current

        status = SubscriptionStatus(
            tier                      = TIER_FREE,
            is_unlocked               = False,
            store_subscription_active = False,
        )
        await self.status_store.save_status(status)
        await self.ledger.set_subscriber_pool(False)
        logger.info("Subscription deactivated")
        return status

    async def purchase_extra_time(self) -> RecordingTime:
        self._require_billing("purchase extra time")
        return await self.ledger.add_extra_time(EXTRA_TIME_SECONDS)

    # ── ACCESS CODES ─────────────────────────────────────────

    async def unlock_with_code(self, code: str) -> bool:
        if not validate_access_code(code):
            logger.info("Access code rejected")
            return False

        current = await self.status_store.get_status()
        status = SubscriptionStatus(
            tier                        = TIER_UNLOCKED,
            is_unlocked                 = True,
            store_subscription_active   = current.store_subscription_active,
            unlocked_date               = _now_ms(),
            subscription_activated_date = current.subscription_activated_date,
        )
        await self.status_store.save_status(status)
        await self.ledger.set_subscriber_pool(True)
        logger.info("Subscriber access unlocked via access code")
        return True

    async def remove_unlock(self) -> SubscriptionStatus:
        """
        Explicit deactivation — the only way to clear a manual unlock.
        Falls back to Subscriber if a store subscription is still active.
        """
        current = await self.status_store.get_status()
        store_active = current.store_subscription_active
        status = SubscriptionStatus(
            tier                        = TIER_SUBSCRIBER if store_active else TIER_FREE,
            is_unlocked                 = False,
            store_subscription_active   = store_active,
            subscription_activated_date = current.subscription_activated_date if store_active else None,
        )
        await self.status_store.save_status(status)
        await self.ledger.set_subscriber_pool(store_active)
        logger.info("Access-code unlock removed")
        return status
