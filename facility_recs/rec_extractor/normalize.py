"""Normalization of free-text status and priority fragments."""
from __future__ import annotations

import re

PENDING_APPROVAL = "pending_approval"
APPROVED = "approved"
NOT_APPROVED = "not_approved"
DEFERRED = "deferred"
TEMPORARY_REPAIR = "temporary_repair"

STATUSES: tuple[str, ...] = (
    PENDING_APPROVAL,
    APPROVED,
    NOT_APPROVED,
    DEFERRED,
    TEMPORARY_REPAIR,
)
DEFAULT_STATUS = PENDING_APPROVAL

PRIORITIES: tuple[str, ...] = ("low", "medium", "high", "critical")
DEFAULT_PRIORITY = "medium"

_NOT_RE = re.compile(r"NOT(?!E|IC)")
_TEMP_RE = re.compile(r"(?<![A-Z])TEMP")
_CRITICAL_RE = re.compile(r"CRITICAL|URGENT|IMMEDIATE|EMERGENCY")
_HIGH_RE = re.compile(r"(?<![A-Z])HIGH(?![A-Z])")
_LOW_RE = re.compile(r"(?<![A-Z])LOW(?![A-Z])")


def normalize_status(raw: str | None) -> str:
    """Map a status annotation onto the fixed status enumeration.

    The not-approved check runs before the approved check because
    ``APPROVE`` is contained in ``NOT APPROVED``.
    """
    if not raw:
        return DEFAULT_STATUS
    upper = raw.upper()
    if "APPROVE" in upper and _NOT_RE.search(upper):
        return NOT_APPROVED
    if "APPROVE" in upper:
        return APPROVED
    if "DEFER" in upper:
        return DEFERRED
    if _TEMP_RE.search(upper):
        return TEMPORARY_REPAIR
    if "PENDING" in upper:
        return PENDING_APPROVAL
    return DEFAULT_STATUS


def normalize_priority(raw: str | None) -> str:
    if not raw:
        return DEFAULT_PRIORITY
    upper = raw.upper()
    if _CRITICAL_RE.search(upper):
        return "critical"
    if _HIGH_RE.search(upper):
        return "high"
    if _LOW_RE.search(upper):
        return "low"
    return DEFAULT_PRIORITY


def limit_length(value: str, max_length: int = 60) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."
