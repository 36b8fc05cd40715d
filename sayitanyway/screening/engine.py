"""
sayitanyway/screening/engine.py
Self-harm screening — pure Python, zero dependencies, fully offline.

Order of evaluation:
  1. short-text guard
  2. exclusion veto (third-person / media framing)
  3. first-person veto
  4. full scan of every rule tier, confidence as a running max

Privacy: raw text is never logged. Only rule descriptions and verdicts.
"""

import logging
from typing import Iterable, List, Optional, Pattern

from sayitanyway.models.record import (
    CONFIDENCE_HIGH,
    CONFIDENCE_LOW,
    CONFIDENCE_MEDIUM,
    ScreeningResult,
)
from sayitanyway.screening.rules import (
    EXCLUSION_PATTERNS,
    FIRST_PERSON_PATTERN,
    SCREENING_RULES,
    SEVERITY_RANK,
    TIER_LABELS,
    ScreeningRule,
)

logger = logging.getLogger(__name__)

MIN_TEXT_LENGTH = 3

REASON_TOO_SHORT      = 'Text too short to analyze'
REASON_THIRD_PERSON   = 'Content appears to be about someone else, not the user'
REASON_NO_FIRST_PERSON = 'No first-person language detected'

FLAGGING_CONFIDENCE = (CONFIDENCE_HIGH, CONFIDENCE_MEDIUM)


def match_rules(text: str, rules: Iterable[ScreeningRule]) -> List[ScreeningRule]:
    """Every rule whose pattern matches, in rule order. No short-circuit."""
    return [rule for rule in rules if rule.pattern.search(text)]


def screen(text: Optional[str]) -> ScreeningResult:
    """Screen one message or transcript with the built-in rule set."""
    return screen_with(text)


def screen_with(
    text:         Optional[str],
    rules:        Iterable[ScreeningRule] = SCREENING_RULES,
    exclusions:   Iterable[Pattern[str]]  = EXCLUSION_PATTERNS,
    first_person: Pattern[str]            = FIRST_PERSON_PATTERN,
) -> ScreeningResult:
    """
    Screen text against an arbitrary rule set.
    Never raises for str input; None and non-str are treated as empty.
    """
    if not isinstance(text, str) or len(text.strip()) < MIN_TEXT_LENGTH:
        logger.debug("Screening skipped: text too short")
        return ScreeningResult(
            is_flagged       = False,
            confidence       = CONFIDENCE_LOW,
            matched_patterns = [],
            reason           = REASON_TOO_SHORT,
        )

    lowered = text.lower().strip()

    # ── VETO 1: someone else ─────────────────────────────────
    for exclusion in exclusions:
        if exclusion.search(lowered):
            logger.debug("Screening excluded: third-person or media framing")
            return ScreeningResult(
                is_flagged       = False,
                confidence       = CONFIDENCE_LOW,
                matched_patterns = [],
                reason           = REASON_THIRD_PERSON,
            )

    # ── VETO 2: not about the user ───────────────────────────
    if not first_person.search(lowered):
        logger.debug("Screening skipped: no first-person language")
        return ScreeningResult(
            is_flagged       = False,
            confidence       = CONFIDENCE_LOW,
            matched_patterns = [],
            reason           = REASON_NO_FIRST_PERSON,
        )

    # ── RULE SCAN ────────────────────────────────────────────
    matched: List[str] = []
    confidence = CONFIDENCE_LOW

    for rule in match_rules(lowered, rules):
        matched.append(f"{TIER_LABELS.get(rule.severity, rule.severity.upper())}: {rule.description}")
        if SEVERITY_RANK.get(rule.severity, 0) > SEVERITY_RANK[confidence]:
            confidence = rule.severity
        logger.debug(f"Rule matched [{rule.severity}]: {rule.description}")

    is_flagged = bool(matched) and confidence in FLAGGING_CONFIDENCE

    if is_flagged:
        logger.info(f"Message flagged | confidence={confidence} | rules={len(matched)}")
    elif matched:
        logger.debug("Low-risk patterns detected but not flagged")

    return ScreeningResult(
        is_flagged       = is_flagged,
        confidence       = confidence,
        matched_patterns = matched,
        reason           = f"Detected {confidence}-risk mental health concerns" if is_flagged else None,
    )
