"""
sayitanyway/compose — message save flow (charge → transcribe → persist → screen).
"""

from sayitanyway.compose.transcription import format_recording_time, transcribe_audio
from sayitanyway.compose.workflow import ComposeService, InsufficientRecordingTimeError

__all__ = [
    "ComposeService",
    "InsufficientRecordingTimeError",
    "format_recording_time",
    "transcribe_audio",
]
