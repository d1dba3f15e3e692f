"""Shared regular expressions and keyword tables."""
from __future__ import annotations

import re

REC_NUMBER_RE = re.compile(r"\b\d{4}-\d{2}-\d{4}\b")

SECTION_MARKER_RE = re.compile(
    r"\b(?P<prefix>[A-Z]{1,4}\d{1,4})[ \t]*-[ \t]*(?P<suffix>[A-Z])\b(?=\s|$)"
)

STATUS_KEYWORDS: tuple[str, ...] = (
    "Pending",
    "Complete",
    "Completed",
    "In-Progress",
    "In Progress",
    "Partial",
    "Approved",
    "Not Approved",
    "Deferred",
    "Temporary Repair",
)

ACTION_VERBS: tuple[str, ...] = (
    "Replace",
    "Repair",
    "Clean",
    "Install",
    "Inspect",
    "Evaluate",
    "Conduct",
    "Perform",
    "Seal",
    "Tighten",
    "Vacuum",
    "Maintain",
    "Winterization",
    "Remove",
    "Add",
    "Check",
    "Verify",
    "Properly",
    "Ensure",
    "Fix",
    "Update",
    "Test",
    "Monitor",
    "Review",
)

BULLET_GLYPHS = "-•*●○▪▫◦‣–"


def _keyword_pattern(keyword: str) -> str:
    return r"\s+".join(re.escape(part) for part in keyword.split())


# Longest first so "Not Approved" wins over "Approved" at the same position.
STATUS_KEYWORD_RE = re.compile(
    r"(?<![\w-])(?:"
    + "|".join(
        _keyword_pattern(keyword)
        for keyword in sorted(STATUS_KEYWORDS, key=len, reverse=True)
    )
    + r")(?![\w-])",
    re.IGNORECASE,
)

ACTION_VERB_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(verb) for verb in ACTION_VERBS) + r")\b",
    re.IGNORECASE,
)

_BULLET_CLASS = "[" + re.escape(BULLET_GLYPHS) + "]"
BULLET_RE = re.compile(rf"^{_BULLET_CLASS}\s")
NUMBERED_RE = re.compile(r"^(?:\d+\.|\(\d+\)|[a-z]\))")

# Applied in order, each at most once.
LIST_PREFIX_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"^{_BULLET_CLASS}\s+"),
    re.compile(r"^\d+\.\s*"),
    re.compile(r"^\(\d+\)\s*"),
    re.compile(r"^[a-z]\)\s*"),
)

RECOMMENDATION_HEADERS = frozenset({"RECOMMENDATIONS", "REPAIR RECOMMENDATIONS"})
PARAGRAPH_KEYWORD_RE = re.compile(r"recommend|repair", re.IGNORECASE)
PARAGRAPH_SPLIT_RE = re.compile(r"\r?\n[ \t]*\r?\n")
LINE_SPLIT_RE = re.compile(r"\r?\n")
