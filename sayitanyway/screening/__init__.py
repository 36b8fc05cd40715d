"""
sayitanyway/screening — rule-based self-harm screening.

Privacy: No raw message content in logs. Verdicts and rule names only.
"""

from sayitanyway.screening.engine import (
    match_rules,
    screen,
    screen_with,
)
from sayitanyway.screening.rules import ScreeningRule

__all__ = [
    "ScreeningRule",
    "match_rules",
    "screen",
    "screen_with",
]
