"""
sayitanyway/screening/rules.py
Rule tables for the self-harm screening engine — pure data, zero
dependencies. Each rule is (compiled pattern, severity, description).
Tiers are evaluated in the order of SCREENING_RULES: high, medium, low.
"""

import re
from typing import List, NamedTuple, Pattern

from sayitanyway.models.record import (
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
)


class ScreeningRule(NamedTuple):
    pattern:     Pattern[str]
    severity:    str
    description: str


def _rule(pattern: str, severity: str, description: str) -> ScreeningRule:
    return ScreeningRule(re.compile(pattern, re.IGNORECASE), severity, description)


# ── FIRST-PERSON CHECK ───────────────────────────────────────

FIRST_PERSON_PATTERN = re.compile(
    r"\b(i|i'm|i am|i've|i have|i'd|i would|i'll|i will|my|me|myself)\b",
    re.IGNORECASE,
)

# ── EXCLUSIONS ───────────────────────────────────────────────
# Third-person or media framing. Any match vetoes the whole scan.

EXCLUSION_PATTERNS: List[Pattern[str]] = [
    re.compile(r"\b(he|she|they|them|someone|people|person).{0,30}(kill|suicide|hurt|harm|died|dead)\b", re.IGNORECASE),
    re.compile(r"\b(movie|book|show|story|news|article).{0,30}(suicide|death|kill|died)\b", re.IGNORECASE),
    re.compile(r"\b(heard|read|saw|watched).{0,30}(someone|person).{0,30}(suicide|kill|died)\b", re.IGNORECASE),
    re.compile(r"\b(character|actor|celebrity).{0,30}(died|dead|suicide)\b", re.IGNORECASE),
]

# ── HIGH RISK ────────────────────────────────────────────────

HIGH_RISK_RULES: List[ScreeningRule] = [
    _rule(r"\b(want to|going to|plan to|planning to|thinking about|thought about).{0,20}(kill myself|end my life|take my life|die|suicide)\b",
          CONFIDENCE_HIGH, 'Suicidal ideation with intent'),
    _rule(r"\b(i|i'm|i am).{0,20}(going to|want to|planning to).{0,20}(kill myself|end my life|take my life|commit suicide)\b",
          CONFIDENCE_HIGH, 'Direct suicidal statement'),
    _rule(r"\b(can't|cannot|can not).{0,20}(go on|take it|do this|live like this).{0,20}(anymore|any longer|any more)\b",
          CONFIDENCE_HIGH, 'Expression of inability to continue'),
    _rule(r"\b(better off|world would be better).{0,20}(without me|if i was|if i were).{0,20}(dead|gone)\b",
          CONFIDENCE_HIGH, 'Belief that others would be better off'),
    _rule(r"\b(i|i'm|i am).{0,20}(ready to|prepared to|about to).{0,20}(end it|die|kill myself)\b",
          CONFIDENCE_HIGH, 'Imminent suicidal intent'),
    _rule(r"\b(goodbye|farewell).{0,30}(forever|for good|won't see you|last time)\b",
          CONFIDENCE_HIGH, 'Farewell message indicating finality'),
]

# ── MEDIUM RISK ──────────────────────────────────────────────

MEDIUM_RISK_RULES: List[ScreeningRule] = [
    _rule(r"\b(i|i'm|i am).{0,30}(hopeless|worthless|useless|burden|pointless)\b",
          CONFIDENCE_MEDIUM, 'Feelings of hopelessness or worthlessness'),
    _rule(r"\b(no reason|nothing).{0,20}(to live|worth living|to go on)\b",
          CONFIDENCE_MEDIUM, 'Loss of purpose or meaning'),
    _rule(r"\b(i|i'm|i am).{0,20}(so|very|extremely).{0,20}(depressed|sad|alone|lonely|empty)\b",
          CONFIDENCE_MEDIUM, 'Severe emotional distress'),
    _rule(r"\b(wish|wished).{0,20}(i was|i were|i could be).{0,20}(dead|gone|not here)\b",
          CONFIDENCE_MEDIUM, 'Passive suicidal ideation'),
    _rule(r"\b(everyone|everybody).{0,20}(would be|be).{0,20}(better off|happier).{0,20}without me\b",
          CONFIDENCE_MEDIUM, 'Belief of being a burden'),
    _rule(r"\b(i|i'm|i am).{0,20}(giving up|done trying|can't fight|tired of fighting)\b",
          CONFIDENCE_MEDIUM, 'Expression of giving up'),
    _rule(r"\b(i|i'm|i am).{0,20}(not worth|don't deserve).{0,20}(living|life|to live)\b",
          CONFIDENCE_MEDIUM, 'Self-worth concerns'),
    _rule(r"\b(i|i'm|i am).{0,20}(trapped|stuck|no way out|no escape)\b",
          CONFIDENCE_MEDIUM, 'Feeling trapped or hopeless'),
]

# ── LOW RISK ─────────────────────────────────────────────────
# Recorded for completeness. Never raises confidence on its own.

LOW_RISK_RULES: List[ScreeningRule] = [
    _rule(r"\b(i|i'm|i am).{0,30}(struggling|hurting|in pain|suffering)\b",
          CONFIDENCE_LOW, 'Expression of struggle or pain'),
    _rule(r"\b(i|i'm|i am).{0,20}(not okay|not ok|not doing well)\b",
          CONFIDENCE_LOW, 'Acknowledgment of distress'),
    _rule(r"\b(i|i'm|i am).{0,20}(lost|confused|scared|afraid)\b",
          CONFIDENCE_LOW, 'Emotional vulnerability'),
    _rule(r"\b(i|i'm|i am).{0,20}(overwhelmed|can't cope|breaking down)\b",
          CONFIDENCE_LOW, 'Feeling overwhelmed'),
]

SCREENING_RULES: List[ScreeningRule] = HIGH_RISK_RULES + MEDIUM_RISK_RULES + LOW_RISK_RULES

# Severity precedence (highest wins when multiple tiers match)
SEVERITY_RANK = {
    CONFIDENCE_HIGH:   2,
    CONFIDENCE_MEDIUM: 1,
    CONFIDENCE_LOW:    0,
}

TIER_LABELS = {
    CONFIDENCE_HIGH:   'HIGH RISK',
    CONFIDENCE_MEDIUM: 'MEDIUM RISK',
    CONFIDENCE_LOW:    'LOW RISK',
}
