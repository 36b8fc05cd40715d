"""
sayitanyway/compose/transcription.py
Audio transcription stub plus recording-time formatting helpers.
The stub keeps the async contract a real on-device backend would use.
"""

import logging

from sayitanyway.models.record import TranscriptionResult

logger = logging.getLogger(__name__)

PLACEHOLDER_TRANSCRIPT = '(Transcription pending – coming soon)'
TRANSCRIPTION_MESSAGE  = (
    'Audio transcription is coming soon. '
    'Your audio will be saved and can be played back anytime.'
)


async def transcribe_audio(audio_uri: str, duration_seconds: int) -> TranscriptionResult:
    """Placeholder transcription — always succeeds with a fixed transcript."""
    logger.debug(f"Transcription requested | duration={duration_seconds}s")
    return TranscriptionResult(success=True, transcript=PLACEHOLDER_TRANSCRIPT)


def get_transcription_message() -> str:
    return TRANSCRIPTION_MESSAGE


def format_recording_time(seconds: int) -> str:
    """45 → '45s', 300 → '5m', 65 → '1m 5s'."""
    seconds = max(int(seconds), 0)
    minutes, remaining = divmod(seconds, 60)
    if minutes == 0:
        return f"{remaining}s"
    if remaining == 0:
        return f"{minutes}m"
    return f"{minutes}m {remaining}s"
