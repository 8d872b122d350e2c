# titles.py
"""Fuzzy title comparison between desired items and rendered source rows.

The notebook UI rewrites page titles freely: it appends site branding, trims
long titles with an ellipsis and drops punctuation. Matching is therefore done
on a normalized form and is deliberately permissive. A false positive only
keeps an unrelated source around; a false negative re-adds (or deletes) a
source that is already present, which is the worse outcome.
"""

import re
from typing import Optional

PREFIX_LENGTH = 20

# Unicode-aware: \W is everything except letters, digits and underscore.
_NON_ALNUM = re.compile(r"[\W_]+")


def normalize(text: Optional[str]) -> str:
    """Keep only letters and digits, lowercased. ``None`` becomes ``""``."""
    if not text:
        return ""
    return _NON_ALNUM.sub("", text).lower()


def match_reason(observed_title: Optional[str], desired_title: Optional[str]) -> Optional[str]:
    """
    Return why two titles match (``"containment"`` or ``"prefix"``), or ``None``.

    An empty title on either side never matches, so an item whose title lookup
    failed can never be confirmed present.
    """
    observed = normalize(observed_title)
    desired = normalize(desired_title)
    if not observed or not desired:
        return None

    shorter, longer = sorted((observed, desired), key=len)
    if shorter in longer:
        return "containment"

    if observed[:PREFIX_LENGTH] == desired[:PREFIX_LENGTH]:
        return "prefix"
    return None


def is_match(observed_title: Optional[str], desired_title: Optional[str]) -> bool:
    return match_reason(observed_title, desired_title) is not None


def shorten(text: Optional[str], limit: int = 40) -> str:
    """Trim a title for single-line log output."""
    value = (text or "").strip()
    if len(value) <= limit:
        return value
    return value[:limit] + "..."


def describe_match(observed_title: str, desired_title: str) -> str:
    """One-line comparison trace used when a row finds no owner."""
    reason = match_reason(observed_title, desired_title)
    observed = normalize(observed_title)[:25]
    desired = normalize(desired_title)[:25]
    verdict = f"✓ {reason}" if reason else "✗ no match"
    return f'row="{observed}" vs item="{desired}" → {verdict}'
