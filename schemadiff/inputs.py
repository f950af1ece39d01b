"""
inputs
======

Parsing of raw action inputs into the shapes the diff core consumes.

- branch identifiers become :class:`~schemadiff.branches.BranchSelector`
  (``id`` when the value looks like ``br-<adjective>-<noun>-<suffix>``,
  otherwise ``name``)
- ``timestamp`` / ``lsn`` become an optional :class:`PointInTime`
- the API host, database and role are checked for obvious mistakes
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from typing import Optional

from .branches import BranchComparisonInput, BranchSelector
from .errors import InputError

LSN_RE = re.compile(r"[a-fA-F0-9]{1,8}/[a-fA-F0-9]{1,8}")
HAIKU_RE = re.compile(r"[a-z]+-[a-z]+-[a-z0-9]+")
URL_RE = re.compile(r"https?://[^\s/$.?#].[^\s]*", re.IGNORECASE)


@dataclass(frozen=True)
class PointInTime:
    """A historical coordinate: ``kind`` is "timestamp" or "lsn"."""

    kind: str
    value: str


def parse_timestamp(value: str) -> str:
    """Normalize an ISO-8601 timestamp to ``YYYY-MM-DDTHH:MM:SS.mmmZ`` (UTC).

    Values without an offset are read as UTC.

    Raises
    ------
    InputError
        If *value* is not a valid ISO-8601 date or datetime.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = dt.datetime.fromisoformat(text)
    except ValueError:
        raise InputError("Invalid timestamp") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    parsed = parsed.astimezone(dt.timezone.utc)
    return parsed.strftime("%Y-%m-%dT%H:%M:%S") + f".{parsed.microsecond // 1000:03d}Z"


def parse_lsn(value: str) -> str:
    """Return *value* unchanged if it is a ``XXXXXXXX/XXXXXXXX`` LSN."""
    if not LSN_RE.fullmatch(value):
        raise InputError("Invalid LSN")
    return value


def get_point_in_time(timestamp: Optional[str] = None, lsn: Optional[str] = None) -> Optional[PointInTime]:
    """Build the point in time for the compare branch.

    A timestamp takes precedence over an LSN. Returns ``None`` when neither
    is given.
    """
    if timestamp:
        return PointInTime("timestamp", parse_timestamp(timestamp))
    if lsn:
        return PointInTime("lsn", parse_lsn(lsn))
    return None


def is_branch_id(value: str) -> bool:
    return value.startswith("br-") and HAIKU_RE.fullmatch(value[3:]) is not None


def parse_branch_input(value: str) -> Optional[BranchSelector]:
    """Classify *value* as a branch id or name; blank values give ``None``."""
    value = value.strip()
    if not value:
        return None
    return BranchSelector("id" if is_branch_id(value) else "name", value)


def get_branch_input(compare_branch: str, base_branch: Optional[str] = None) -> BranchComparisonInput:
    compare = parse_branch_input(compare_branch)
    base = parse_branch_input(base_branch) if base_branch else None
    if compare is None:
        raise InputError("Invalid compare branch input")
    return BranchComparisonInput(compare=compare, base=base)


def validate_target(api_host: str, database: str, username: str) -> None:
    """Fail fast on an unusable API host, database or role."""
    if not URL_RE.search(api_host or ""):
        raise InputError("API host must be a valid URL")
    if not database:
        raise InputError("Database name cannot be empty")
    if not username:
        raise InputError("Database username/role cannot be empty")
