"""
sayitanyway/support_resources.py
Crisis resources shown after a flagged message is saved.
Served via API at /support-resources.
"""

from __future__ import annotations

from typing import Any, Dict, List

SUPPORT_RESOURCES: List[Dict[str, Any]] = [
    {
        "name": "988 Suicide & Crisis Lifeline",
        "description": "Free, confidential support 24/7 for people in distress.",
        "actions": [
            {"kind": "call", "label": "Call 988", "target": "988"},
            {"kind": "text", "label": "Text 988", "target": "988"},
            {"kind": "web", "label": "Visit 988lifeline.org", "target": "https://988lifeline.org"},
        ],
        "urgent": True,
    },
    {
        "name": "Crisis Text Line",
        "description": "Text with a trained crisis counselor.",
        "actions": [
            {"kind": "text", "label": "Text HOME to 741741", "target": "741741"},
        ],
        "urgent": True,
    },
    {
        "name": "SAMHSA National Helpline",
        "description": "Treatment referral and information service.",
        "actions": [
            {"kind": "web", "label": "Find help", "target": "https://www.samhsa.gov/find-help/national-helpline"},
        ],
        "urgent": False,
    },
    {
        "name": "NAMI HelpLine",
        "description": "Information, resource referrals and support.",
        "actions": [
            {"kind": "web", "label": "Get help", "target": "https://www.nami.org/help"},
        ],
        "urgent": False,
    },
    {
        "name": "Veterans Crisis Line",
        "description": "Support for veterans and their loved ones.",
        "actions": [
            {"kind": "web", "label": "Visit veteranscrisisline.net", "target": "https://www.veteranscrisisline.net"},
        ],
        "urgent": False,
    },
]

ACTION_SCHEMES = {"call": "tel:", "text": "sms:", "web": ""}


def action_url(action: Dict[str, Any]) -> str:
    """tel:/sms: URL for call and text actions, the plain URL for web."""
    return f"{ACTION_SCHEMES.get(action['kind'], '')}{action['target']}"


def get_support_resources(urgent_only: bool = False) -> List[Dict[str, Any]]:
    """Copy of the catalogue with a resolved `url` on every action."""
    resources = []
    for resource in SUPPORT_RESOURCES:
        if urgent_only and not resource["urgent"]:
            continue
        entry = dict(resource)
        entry["actions"] = [{**a, "url": action_url(a)} for a in resource["actions"]]
        resources.append(entry)
    return resources
