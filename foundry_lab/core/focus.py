"""Normalize free-text workout focus labels into a closed vocabulary."""

import re
from typing import List, Optional, Pattern, Tuple

from foundry_lab.core.taxonomy import FocusLabel

# Ordered: the first matching rule wins, so compound labels ("Upper Push")
# resolve to the broader split day before the movement direction.
FOCUS_RULES: List[Tuple[Pattern, FocusLabel]] = [
    (re.compile(r"\bfull[\s_-]*body\b|\bfullbody\b|\btotal[\s-]*body\b"), FocusLabel.FULL_BODY),
    (re.compile(r"\bupper\b"), FocusLabel.UPPER),
    (re.compile(r"\blower\b"), FocusLabel.LOWER),
    (re.compile(r"\bpush\b|\bchest\b"), FocusLabel.PUSH),
    (re.compile(r"\bpull\b|\bback\b"), FocusLabel.PULL),
    (re.compile(r"\blegs?\b|\bquads?\b|\bhamstrings?\b|\bglutes?\b"), FocusLabel.LEGS),
    (re.compile(r"\barms?\b|\bbiceps?\b|\btriceps?\b"), FocusLabel.ARMS),
    (re.compile(r"\bshoulders?\b|\bdelts?\b"), FocusLabel.SHOULDERS),
    (re.compile(r"\bcore\b|\babs\b"), FocusLabel.CORE),
    (re.compile(r"\bcardio\b|\bconditioning\b|\bhiit\b|\bmetcon\b"), FocusLabel.CONDITIONING),
]

_PARENTHETICAL = re.compile(r"\s*\([^)]*\)\s*")
_SEPARATOR = re.compile(r"\s*[+&/]\s*")
_WHITESPACE = re.compile(r"\s+")


def clean_focus(text: str) -> str:
    """Lower-case, drop parentheticals and normalize separators."""
    cleaned = _PARENTHETICAL.sub(" ", (text or "").lower())
    cleaned = _SEPARATOR.sub(" + ", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()


def normalize_focus(text: str) -> Optional[FocusLabel]:
    """Canonical label for a focus string, or None when no rule matches."""
    cleaned = clean_focus(text)
    for pattern, label in FOCUS_RULES:
        if pattern.search(cleaned):
            return label
    return None


def focus_key(text: str) -> str:
    """Grouping key: the canonical label value, else the cleaned text."""
    label = normalize_focus(text)
    return label.value if label is not None else clean_focus(text)


def display_label(key: str) -> str:
    """'full_body' -> 'Full Body'."""
    return " ".join(part.capitalize() for part in key.replace("_", " ").split())
