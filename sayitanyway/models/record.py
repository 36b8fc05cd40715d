"""
sayitanyway/models/record.py
Shared dataclass schema. The screening engine, ledger, subscription
manager and compose workflow all use these types. Data only — the
dict helpers below only translate to/from the persisted JSON shape.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# ── QUOTA CONSTANTS (seconds) ────────────────────────────────
FREE_MONTHLY_SECONDS       = 300     # 5 minutes
SUBSCRIBER_MONTHLY_SECONDS = 3600    # 60 minutes
EXTRA_TIME_SECONDS         = 3600    # one extra-time purchase

# ── TIERS ────────────────────────────────────────────────────
TIER_FREE       = 'Free'
TIER_SUBSCRIBER = 'Subscriber'
TIER_UNLOCKED   = 'Subscriber (Unlocked)'
TIERS           = (TIER_FREE, TIER_SUBSCRIBER, TIER_UNLOCKED)

# ── CONFIDENCE LEVELS ────────────────────────────────────────
CONFIDENCE_LOW    = 'low'
CONFIDENCE_MEDIUM = 'medium'
CONFIDENCE_HIGH   = 'high'


@dataclass
class ScreeningResult:
    """Verdict for one piece of text."""
    is_flagged:       bool
    confidence:       str                 # low / medium / high
    matched_patterns: List[str] = field(default_factory=list)
    reason:           Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'isFlagged':       self.is_flagged,
            'confidence':      self.confidence,
            'matchedPatterns': list(self.matched_patterns),
            'reason':          self.reason,
        }


@dataclass
class RecordingTime:
    """Per-installation recording-seconds balance, split into pools."""
    free_monthly:       int
    subscriber_monthly: int
    purchased_extra:    int
    last_reset_month:   int           # 1-12
    last_reset_year:    int

    @property
    def total(self) -> int:
        return self.free_monthly + self.subscriber_monthly + self.purchased_extra

    def to_dict(self) -> Dict[str, int]:
        return {
            'freeMonthly':       self.free_monthly,
            'subscriberMonthly': self.subscriber_monthly,
            'purchasedExtra':    self.purchased_extra,
            'lastResetMonth':    self.last_reset_month,
            'lastResetYear':     self.last_reset_year,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RecordingTime':
        """Raises KeyError / TypeError / ValueError / OverflowError on a malformed blob."""
        record = cls(
            free_monthly       = _non_negative_int(data['freeMonthly']),
            subscriber_monthly = _non_negative_int(data['subscriberMonthly']),
            purchased_extra    = _non_negative_int(data['purchasedExtra']),
            last_reset_month   = int(data['lastResetMonth']),
            last_reset_year    = int(data['lastResetYear']),
        )
        if not 1 <= record.last_reset_month <= 12:
            raise ValueError(f"lastResetMonth out of range: {record.last_reset_month}")
        return record


@dataclass
class PoolInfo:
    """Which pool the next deduction draws from."""
    pool_name: str
    available: int

    def to_dict(self) -> Dict[str, Any]:
        return {'poolName': self.pool_name, 'available': self.available}


@dataclass
class SubscriptionStatus:
    tier:                        str  = TIER_FREE
    is_unlocked:                 bool = False      # granted by access code, not billing
    store_subscription_active:   bool = False
    unlocked_date:               Optional[int] = None   # epoch ms
    subscription_activated_date: Optional[int] = None   # epoch ms

    @property
    def is_subscriber(self) -> bool:
        return self.tier != TIER_FREE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'tier':                    self.tier,
            'isUnlocked':              self.is_unlocked,
            'storeSubscriptionActive': self.store_subscription_active,
        }
        if self.unlocked_date is not None:
            data['unlockedDate'] = self.unlocked_date
        if self.subscription_activated_date is not None:
            data['subscriptionActivatedDate'] = self.subscription_activated_date
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SubscriptionStatus':
        tier = data['tier']
        if tier not in TIERS:
            raise ValueError(f"Unknown subscription tier: {tier!r}")
        return cls(
            tier                        = tier,
            is_unlocked                 = bool(data.get('isUnlocked', False)),
            store_subscription_active   = bool(data.get('storeSubscriptionActive', False)),
            unlocked_date               = _optional_int(data.get('unlockedDate')),
            subscription_activated_date = _optional_int(data.get('subscriptionActivatedDate')),
        )


@dataclass
class Message:
    """One journal entry addressed to a recipient."""
    id:                   str
    recipient_id:         str
    timestamp:            int           # epoch ms
    type:                 str           # text / audio
    text_content:         Optional[str] = None
    audio_uri:            Optional[str] = None
    audio_duration:       Optional[int] = None   # seconds
    transcript:           Optional[str] = None
    transcription_status: str           = 'none'  # none / completed / failed
    transcription_error:  Optional[str] = None
    is_hidden:            bool          = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id':                  self.id,
            'recipientId':         self.recipient_id,
            'timestamp':           self.timestamp,
            'type':                self.type,
            'textContent':         self.text_content,
            'audioUri':            self.audio_uri,
            'audioDuration':       self.audio_duration,
            'transcript':          self.transcript,
            'transcriptionStatus': self.transcription_status,
            'transcriptionError':  self.transcription_error,
            'isHidden':            self.is_hidden,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Message':
        return cls(
            id                   = str(data['id']),
            recipient_id         = str(data['recipientId']),
            timestamp            = int(data['timestamp']),
            type                 = data['type'],
            text_content         = data.get('textContent'),
            audio_uri            = data.get('audioUri'),
            audio_duration       = data.get('audioDuration'),
            transcript           = data.get('transcript'),
            transcription_status = data.get('transcriptionStatus') or 'none',
            transcription_error  = data.get('transcriptionError'),
            is_hidden            = bool(data.get('isHidden', False)),
        )


@dataclass
class TranscriptionResult:
    success:    bool
    transcript: Optional[str] = None
    error:      Optional[str] = None


@dataclass
class ComposeOutcome:
    """What the UI needs after a save: the message and where to go next."""
    message:             Message
    screening:           ScreeningResult
    redirect_to_support: bool = False


def _non_negative_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("boolean is not a valid seconds value")
    if isinstance(value, float) and not value.is_integer():
        raise ValueError(f"fractional seconds value: {value}")
    number = int(value)
    if number < 0:
        raise ValueError(f"negative seconds value: {number}")
    return number


def _optional_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)
