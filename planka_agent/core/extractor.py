"""Heuristic extraction of task fields from free text.

Nothing here understands language; a fixed list of patterns and keyword
sets picks out a short title, a due-date phrase and label hints.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


END_OF_NEXT_WEEK = "end of next week"

_POLITE_PREFIX_RE = re.compile(r"^\s*(please|pls|kindly)\b[:,]?\s*", re.IGNORECASE)
_QUESTION_PREFIX_RE = re.compile(r"^\s*(could you|can you|would you)\b[:,]?\s*", re.IGNORECASE)
_SCAFFOLD_PREFIX_RE = re.compile(
    r"^\s*(please\s+)?(add|create|make)\s+(a\s+)?(task|todo)\s+(to\s+my\s+)?(planka\s+board\s*)?(that\s+)?",
    re.IGNORECASE,
)
_SHORT_TITLE_RE = re.compile(r"(.{10,120}?)(?:\.|$)")

# Tried in order; the first hit is returned verbatim.
_DATE_PHRASE_PATTERNS = [
    re.compile(r"until\s+[^,.\n]+", re.IGNORECASE),
    re.compile(r"by\s+[^,.\n]+", re.IGNORECASE),
    re.compile(r"due\s+[^,.\n]+", re.IGNORECASE),
    re.compile(r"in\s+\d+\s+days?", re.IGNORECASE),
    re.compile(r"next\s+\w+", re.IGNORECASE),
    re.compile(r"tomorrow|today", re.IGNORECASE),
]

# (label, keywords). Substring tests, so "ai" also hits "email".
LABEL_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("testing", ("test", "testing", "qa", "verify")),
    ("docs", ("docu", "readme", "docs")),
    ("bug", ("bug", "fix", "error")),
    ("llm", ("llm", "ai", "gpt", "agent")),
]


@dataclass
class ExtractedText:
    title: str
    description: str
    labels: List[str] = field(default_factory=list)


def normalize_title(text: Optional[str]) -> str:
    """Derive a short title from a request sentence.

    >>> normalize_title("Please, fix the login redirect. It loops forever.")
    'fix the login redirect'
    """

    if not text:
        return ""

    t = str(text).strip()
    t = _POLITE_PREFIX_RE.sub("", t, count=1)
    t = _QUESTION_PREFIX_RE.sub("", t, count=1)
    t = _SCAFFOLD_PREFIX_RE.sub("", t, count=1)
    t = re.sub(r"\s+", " ", t).strip()

    first_line = t.split("\n")[0].strip()
    match = _SHORT_TITLE_RE.search(first_line)
    if match and match.group(1):
        return match.group(1).strip()
    return first_line[:80].strip()


def extract_date_phrase(text: Optional[str]) -> Optional[str]:
    """Return the part of ``text`` that looks like a due date, if any.

    "end of next week" is returned as a fixed sentinel so it can be computed
    by end_of_next_week() instead of the generic date parser.
    """

    if not text:
        return None

    lower = str(text).lower()
    if "end of next week" in lower or "end of the next week" in lower:
        return END_OF_NEXT_WEEK

    for pattern in _DATE_PHRASE_PATTERNS:
        match = pattern.search(str(text))
        if match:
            return match.group(0)
    return None


def guess_labels(text: Optional[str]) -> List[str]:
    lower = (text or "").lower()
    return [label for label, keywords in LABEL_KEYWORDS if any(k in lower for k in keywords)]


def extract(text: str) -> ExtractedText:
    """Split free text into title, verbatim description and label hints."""

    return ExtractedText(
        title=normalize_title(text),
        description=text,
        labels=guess_labels(text),
    )
