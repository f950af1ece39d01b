"""
neon
====

Branching API access.

The rest of the codebase talks to the Neon API through the small
:class:`BranchApi` interface:

- ``list_project_branches(project_id)``
- ``get_project_branch_schema(project_id, branch_id, role, db_name, ...)``

Both return an :class:`ApiResponse` (status + decoded JSON) instead of
raising on HTTP errors, so callers decide how a non-success status is worded.
Transport failures (timeouts, connection errors) are raised by httpx as-is.

:class:`NeonClient` is the httpx implementation used by the action; tests
substitute their own :class:`BranchApi`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Optional

import httpx

from . import __version__
from .branches import Branch, BranchSelector
from .errors import SchemaFetchError
from .inputs import PointInTime
from .utils import ApiResponse, to_response

DEFAULT_API_HOST = "https://console.neon.tech/api/v2"
CONSOLE_URL = "https://console.neon.tech"
DEFAULT_TIMEOUT_SECONDS = 60


class BranchApi(ABC):
    """Operations the action needs from the branching API."""

    @abstractmethod
    def list_project_branches(self, project_id: str) -> ApiResponse:
        """Return ``{"branches": [...]}`` for the project."""

    @abstractmethod
    def get_project_branch_schema(
        self,
        project_id: str,
        branch_id: str,
        role: str,
        db_name: str,
        lsn: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> ApiResponse:
        """Return ``{"sql": "..."}`` for the branch, optionally at a past point."""


class NeonClient(BranchApi):
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_API_HOST,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._url = base_url.rstrip("/")
        self._client = httpx.Client(
            base_url=self._url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "User-Agent": f"neon-schema-diff-action v{__version__}",
            },
        )

    def list_project_branches(self, project_id: str) -> ApiResponse:
        r = self._client.get(f"/projects/{project_id}/branches")
        return to_response(r)

    def get_project_branch_schema(
        self,
        project_id: str,
        branch_id: str,
        role: str,
        db_name: str,
        lsn: Optional[str] = None,
        timestamp: Optional[str] = None,
    ) -> ApiResponse:
        params: Dict[str, str] = {"role": role, "db_name": db_name}
        if lsn is not None:
            params["lsn"] = lsn
        if timestamp is not None:
            params["timestamp"] = timestamp
        r = self._client.get(f"/projects/{project_id}/branches/{branch_id}/schema", params=params)
        return to_response(r)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "NeonClient":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def branch_url(project_id: str, branch_id: str) -> str:
    """Return the console URL of a branch."""
    return f"{CONSOLE_URL}/app/projects/{project_id}/branches/{branch_id}"


def _schema_sql(resp: ApiResponse) -> str:
    return (resp.data or {}).get("sql") or ""


def fetch_compare_schema(
    api: BranchApi,
    project_id: str,
    branch: Branch,
    selector: BranchSelector,
    role: str,
    database: str,
    point_in_time: Optional[PointInTime] = None,
) -> str:
    """Fetch the compare branch schema, optionally as of *point_in_time*.

    Raises
    ------
    SchemaFetchError
        If the API returns a non-success status.
    """
    resp = api.get_project_branch_schema(
        project_id,
        branch.id,
        role,
        database,
        lsn=point_in_time.value if point_in_time and point_in_time.kind == "lsn" else None,
        timestamp=point_in_time.value if point_in_time and point_in_time.kind == "timestamp" else None,
    )
    if not resp.ok:
        raise SchemaFetchError(f"Failed to get schema for branch {selector.value} in project {project_id}")
    return _schema_sql(resp)


def fetch_base_schema(
    api: BranchApi,
    project_id: str,
    branch: Branch,
    selector: Optional[BranchSelector],
    role: str,
    database: str,
) -> str:
    """Fetch the current schema of the base branch.

    The base branch is always read at its latest state.
    """
    resp = api.get_project_branch_schema(project_id, branch.id, role, database)
    if not resp.ok:
        name = selector.value if selector and selector.value else branch.name
        raise SchemaFetchError(f"Failed to get schema for the base branch {name} in project {project_id}")
    return _schema_sql(resp)
