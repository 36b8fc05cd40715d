"""
sayitanyway/entitlements/access_codes.py
Fixed access codes that grant Subscriber (Unlocked) without store billing.
Testing/support credential — not a security boundary.
"""

from typing import Any, FrozenSet

# Compared upper-cased and trimmed
ACCESS_CODES: FrozenSet[str] = frozenset({
    'DEV123',
    'BETATESTER',
    'SAYITANYWAY-SUPPORT',
})


def normalize_access_code(code: str) -> str:
    return code.strip().upper()


def validate_access_code(code: Any) -> bool:
    """Case- and whitespace-insensitive membership test. Non-str → False."""
    if not isinstance(code, str):
        return False
    return normalize_access_code(code) in ACCESS_CODES
