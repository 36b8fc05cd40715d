"""
sayitanyway/entitlements/ledger.py
Recording-time ledger. Three pools of seconds, drained in a fixed order:

  free monthly  →  subscriber monthly  →  purchased extra

Monthly pools refresh lazily: the first read in a new (month, year)
resets them. Purchased extra time is never touched by the reset.

Deduction is all-or-nothing. Insufficient funds return False and leave
the stored record untouched. Storage errors propagate to the caller.
"""

import logging
from datetime import datetime
from typing import Callable, NamedTuple, Optional, Tuple

from sayitanyway.entitlements.status import SubscriptionStatusStore
from sayitanyway.models.record import (
    EXTRA_TIME_SECONDS,
    FREE_MONTHLY_SECONDS,
    SUBSCRIBER_MONTHLY_SECONDS,
    PoolInfo,
    RecordingTime,
)
from sayitanyway.storage.base import RECORDING_TIME_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class Pool(NamedTuple):
    attr:         str    # RecordingTime field
    display_name: str


DRAW_ORDER: Tuple[Pool, ...] = (
    Pool('free_monthly',       'Free Monthly'),
    Pool('subscriber_monthly', 'Subscriber Monthly'),
    Pool('purchased_extra',    'Purchased Extra'),
)

NO_POOL = 'None'


def draw_from_pools(record: RecordingTime, seconds: int) -> bool:
    """
    Drain `seconds` from record in DRAW_ORDER, in place.
    Returns False and leaves record unchanged if the total is too small.
    """
    if seconds < 0 or seconds > record.total:
        return False
    remaining = seconds
    for pool in DRAW_ORDER:
        if remaining == 0:
            break
        available = getattr(record, pool.attr)
        taken = min(available, remaining)
        setattr(record, pool.attr, available - taken)
        remaining -= taken
    return True


def next_pool(record: RecordingTime) -> PoolInfo:
    for pool in DRAW_ORDER:
        available = getattr(record, pool.attr)
        if available > 0:
            return PoolInfo(pool.display_name, available)
    return PoolInfo(NO_POOL, 0)


class RecordingTimeLedger:
    """
    Async ledger over an injected KeyValueStore.

    Usage:
        ledger = RecordingTimeLedger(MemoryStore())
        if await ledger.deduct_recording_time(90):
            ...
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store  = store
        self.clock  = clock or datetime.now
        self.status = SubscriptionStatusStore(store)

    # ── INTERNAL ─────────────────────────────────────────────

    def _default_record(self) -> RecordingTime:
        now = self.clock()
        return RecordingTime(
            free_monthly       = FREE_MONTHLY_SECONDS,
            subscriber_monthly = 0,
            purchased_extra    = 0,
            last_reset_month   = now.month,
            last_reset_year    = now.year,
        )

    async def _load(self) -> Optional[RecordingTime]:
        data = await self.store.get(RECORDING_TIME_KEY)
        if data is None:
            return None
        try:
            return RecordingTime.from_dict(data)
        except (KeyError, TypeError, ValueError, OverflowError) as e:
            logger.warning(f"Malformed recording time record — using defaults: {e}")
            return None

    async def _apply_monthly_reset(self, record: RecordingTime) -> bool:
        now = self.clock()
        if (record.last_reset_month, record.last_reset_year) == (now.month, now.year):
            return False

        status = await self.status.get_status()
        record.free_monthly       = FREE_MONTHLY_SECONDS
        record.subscriber_monthly = SUBSCRIBER_MONTHLY_SECONDS if status.is_subscriber else 0
        record.last_reset_month   = now.month
        record.last_reset_year    = now.year
        logger.info(
            f"Monthly reset applied for {now.year}-{now.month:02d} | tier={status.tier}"
        )
        return True

    # ── PUBLIC ───────────────────────────────────────────────

    async def get_recording_time(self) -> RecordingTime:
        """Load the record, creating defaults or applying the monthly reset."""
        record = await self._load()
        if record is None:
            record = self._default_record()
            await self.save_recording_time(record)
            logger.info("Recording time initialized with defaults")
            return record

        if await self._apply_monthly_reset(record):
            await self.save_recording_time(record)
        return record

    async def save_recording_time(self, record: RecordingTime) -> None:
        await self.store.set(RECORDING_TIME_KEY, record.to_dict())

    async def deduct_recording_time(self, seconds: int) -> bool:
        """
        Consume `seconds` across pools. All-or-nothing.
        Returns False (nothing persisted) when funds are insufficient.
        """
        if isinstance(seconds, bool) or not isinstance(seconds, int):
            logger.warning(f"Rejected non-integer deduction: {seconds!r}")
            return False
        if seconds < 0:
            logger.warning(f"Rejected negative deduction: {seconds}s")
            return False

        record = await self.get_recording_time()
        total  = record.total
        if not draw_from_pools(record, seconds):
            logger.info(f"Insufficient recording time: requested {seconds}s, available {total}s")
            return False

        await self.save_recording_time(record)
        logger.info(f"Deducted {seconds}s | remaining {record.total}s")
        return True

    async def get_total_recording_time(self) -> int:
        record = await self.get_recording_time()
        return record.total

    async def get_next_pool_info(self) -> PoolInfo:
        record = await self.get_recording_time()
        return next_pool(record)

    async def has_recording_time(self, seconds: int) -> bool:
        return seconds <= await self.get_total_recording_time()

    async def set_subscriber_pool(self, active: bool) -> RecordingTime:
        record = await self.get_recording_time()
        record.subscriber_monthly = SUBSCRIBER_MONTHLY_SECONDS if active else 0
        await self.save_recording_time(record)
        return record

    async def add_extra_time(self, seconds: int = EXTRA_TIME_SECONDS) -> RecordingTime:
        if seconds < 0:
            raise ValueError(f"Extra time must be non-negative: {seconds}")
        record = await self.get_recording_time()
        record.purchased_extra += seconds
        await self.save_recording_time(record)
        logger.info(f"Added {seconds}s of extra recording time")
        return record
