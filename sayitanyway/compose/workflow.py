"""
sayitanyway/compose/workflow.py
Save flow for a composed message:

  audio → charge recording time (blocks the save on failure)
        → transcribe
  all   → persist message → screen text/transcript → redirect decision

If transcription or the message write raises, the charge is restored
before the error propagates. A flagged screening never blocks saving;
it only sets redirect_to_support on the returned outcome.

Saved messages can later be hidden or deleted.
"""

import logging
import time
import uuid
from typing import Any, Awaitable, Callable, Dict, List, Optional

from sayitanyway.compose.transcription import format_recording_time, transcribe_audio
from sayitanyway.entitlements.ledger import RecordingTimeLedger
from sayitanyway.models.record import (
    ComposeOutcome,
    Message,
    ScreeningResult,
    TranscriptionResult,
)
from sayitanyway.screening.engine import screen
from sayitanyway.storage.base import MESSAGES_KEY, KeyValueStore

logger = logging.getLogger(__name__)

MESSAGE_TYPES = ('text', 'audio')

Screener    = Callable[[str], ScreeningResult]
Transcriber = Callable[[str, int], Awaitable[TranscriptionResult]]


class InsufficientRecordingTimeError(Exception):
    """Audio save refused because the ledger could not cover its duration."""


class ComposeService:

    def __init__(
        self,
        store:       KeyValueStore,
        ledger:      Optional[RecordingTimeLedger] = None,
        screener:    Screener    = screen,
        transcriber: Transcriber = transcribe_audio,
    ):
        self.store       = store
        self.ledger      = ledger or RecordingTimeLedger(store)
        self.screener    = screener
        self.transcriber = transcriber

    # ── MESSAGES ─────────────────────────────────────────────

    async def _load_records(self) -> List[Dict[str, Any]]:
        data = await self.store.get(MESSAGES_KEY)
        return data if isinstance(data, list) else []

    async def list_messages(
        self,
        recipient_id:   Optional[str] = None,
        include_hidden: bool          = True,
    ) -> List[Message]:
        messages: List[Message] = []
        for item in await self._load_records():
            try:
                messages.append(Message.from_dict(item))
            except (KeyError, TypeError, ValueError, OverflowError) as e:
                logger.warning(f"Skipping malformed message record: {e}")
        if recipient_id is not None:
            messages = [m for m in messages if m.recipient_id == recipient_id]
        if not include_hidden:
            messages = [m for m in messages if not m.is_hidden]
        return messages

    async def _append_message(self, message: Message) -> None:
        records = await self._load_records()
        records.append(message.to_dict())
        await self.store.set(MESSAGES_KEY, records)

    async def set_message_hidden(self, message_id: str, hidden: bool = True) -> Optional[Message]:
        """Hide or unhide a saved message. Returns None if no such id."""
        records = await self._load_records()
        for item in records:
            if isinstance(item, dict) and item.get('id') == message_id:
                item['isHidden'] = bool(hidden)
                await self.store.set(MESSAGES_KEY, records)
                logger.info(f"Message {message_id} {'hidden' if hidden else 'unhidden'}")
                return Message.from_dict(item)
        logger.warning(f"Hide requested for unknown message: {message_id}")
        return None

    async def delete_message(self, message_id: str) -> bool:
        """Remove a saved message. Recording time is not refunded."""
        records = await self._load_records()
        kept = [
            item for item in records
            if not (isinstance(item, dict) and item.get('id') == message_id)
        ]
        if len(kept) == len(records):
            logger.warning(f"Delete requested for unknown message: {message_id}")
            return False
        await self.store.set(MESSAGES_KEY, kept)
        logger.info(f"Message deleted: {message_id}")
        return True

    # ── SAVE ─────────────────────────────────────────────────

    async def save_message(
        self,
        recipient_id:     str,
        message_type:     str,
        text_content:     Optional[str] = None,
        audio_uri:        Optional[str] = None,
        duration_seconds: int           = 0,
    ) -> ComposeOutcome:
        if message_type not in MESSAGE_TYPES:
            raise ValueError(f"Unknown message type: {message_type!r}")
        if not recipient_id:
            raise ValueError("recipient_id is required")
        if message_type == 'text' and not (text_content or '').strip():
            raise ValueError("Please write something before saving.")
        if message_type == 'audio' and not audio_uri:
            raise ValueError("Please record an audio message before saving.")
        if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int):
            raise ValueError(f"duration_seconds must be an integer: {duration_seconds!r}")
        if duration_seconds < 0:
            raise ValueError(f"duration_seconds must be non-negative: {duration_seconds}")

        now_ms = int(time.time() * 1000)
        message = Message(
            id           = uuid.uuid4().hex,
            recipient_id = recipient_id,
            timestamp    = now_ms,
            type         = message_type,
        )

        if message_type == 'text':
            message.text_content = text_content.strip()
            await self._append_message(message)
        else:
            await self._save_audio(message, audio_uri, duration_seconds)
        logger.info(f"Message saved: {message.id} ({message_type})")

        content = message.text_content if message_type == 'text' else (message.transcript or '')
        verdict = self.screener(content)
        if verdict.is_flagged:
            logger.info(f"Message {message.id} flagged ({verdict.confidence}), redirecting to support")

        return ComposeOutcome(
            message             = message,
            screening           = verdict,
            redirect_to_support = verdict.is_flagged,
        )

    async def _save_audio(self, message: Message, audio_uri: str, duration_seconds: int) -> None:
        """Charge, transcribe, persist. The charge is rolled back if the message is not saved."""
        before = await self.ledger.get_recording_time()
        if not await self.ledger.deduct_recording_time(duration_seconds):
            raise InsufficientRecordingTimeError(
                f"Not enough recording time: this message needs "
                f"{format_recording_time(duration_seconds)} but only "
                f"{format_recording_time(before.total)} remains."
            )

        try:
            message.audio_uri      = audio_uri
            message.audio_duration = duration_seconds
            result = await self.transcriber(audio_uri, duration_seconds)
            if result.success:
                message.transcript           = result.transcript
                message.transcription_status = 'completed'
            else:
                message.transcription_status = 'failed'
                message.transcription_error  = result.error
                logger.warning(f"Transcription failed: {result.error}")
            await self._append_message(message)
        except Exception:
            logger.error(f"Audio save failed; refunding {duration_seconds}s", exc_info=True)
            await self.ledger.save_recording_time(before)
            raise
