"""
utils
=====

Small, shared utilities used across the codebase.

This module intentionally contains only low-level helpers that are safe to
import from anywhere (no network calls, no action context).

Members
-------
- :class:`ApiResponse`:
  Status code plus decoded JSON body, the return type of every collaborator
  call (branching API and comment store alike).
- :func:`to_response`:
  Convert an :class:`httpx.Response` into an :class:`ApiResponse`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx


@dataclass(frozen=True)
class ApiResponse:
    """Status code and decoded JSON body of a collaborator call."""

    status: int
    data: Any = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def to_response(r: httpx.Response) -> ApiResponse:
    """Return *r* as an :class:`ApiResponse`.

    Bodies that are empty or not JSON (e.g. ``204 No Content``) give
    ``data=None``.

    Examples
    --------
    >>> to_response(httpx.Response(204)).ok
    True
    """
    if not r.content:
        return ApiResponse(status=r.status_code)
    try:
        data = r.json()
    except ValueError:
        data = None
    return ApiResponse(status=r.status_code, data=data)
