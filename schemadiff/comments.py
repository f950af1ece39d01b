"""
comments
========

Pull-request comment reconciliation.

One comment per pull request carries the schema diff. :func:`upsert_comment`
keeps it in sync with the latest rendered body:

===========  ==========  =======================================
existing     new body    action
===========  ==========  =======================================
none         empty       nothing (``noop``)
none         non-empty   create (``created``)
found        empty       delete (``deleted``)
found        same hash   nothing (``noop``, existing URL)
found        new hash    update in place (``updated``)
===========  ==========  =======================================

"Found" is the first listed comment whose body contains
:data:`~schemadiff.reporting.DIFF_COMMENT_IDENTIFIER`. Other comments carrying
the marker are left alone. At most one write happens per call.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from . import __version__
from .errors import CreateCommentError, DeleteCommentError, UpdateCommentError
from .reporting import DIFF_COMMENT_IDENTIFIER, hash_marker
from .utils import ApiResponse, to_response

DEFAULT_GITHUB_API_URL = "https://api.github.com"
PAGE_SIZE = 100


@dataclass(frozen=True)
class Comment:
    """An existing issue/PR comment."""

    id: int
    body: str
    url: str

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Comment":
        return cls(id=data["id"], body=data.get("body") or "", url=data.get("html_url") or "")


@dataclass(frozen=True)
class SummaryComment:
    """Outcome of a reconciliation: ``operation`` plus the comment URL, if any."""

    operation: str  # "created" | "updated" | "noop" | "deleted"
    url: Optional[str] = None


class CommentStore(ABC):
    """Comment operations on a single issue or pull request."""

    @abstractmethod
    def list_comments(self) -> List[Comment]:
        """Return all comments, oldest first."""

    @abstractmethod
    def create_comment(self, body: str) -> ApiResponse:
        """Create a comment; success is ``201`` with ``{"html_url": ...}``."""

    @abstractmethod
    def update_comment(self, comment_id: int, body: str) -> ApiResponse:
        """Replace a comment body; success is ``200`` with ``{"html_url": ...}``."""

    @abstractmethod
    def delete_comment(self, comment_id: int) -> ApiResponse:
        """Delete a comment; success is ``204``."""


class GitHubComments(CommentStore):
    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        issue_number: int,
        api_url: str = DEFAULT_GITHUB_API_URL,
        timeout: float = 30,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.owner = owner
        self.repo = repo
        self.issue_number = issue_number
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": f"neon-schema-diff-action v{__version__}",
            },
        )

    @property
    def _issue_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}/issues/{self.issue_number}/comments"

    def _comment_path(self, comment_id: int) -> str:
        return f"/repos/{self.owner}/{self.repo}/issues/comments/{comment_id}"

    def list_comments(self) -> List[Comment]:
        comments: List[Comment] = []
        r = self._client.get(self._issue_path, params={"per_page": PAGE_SIZE})
        while True:
            r.raise_for_status()
            comments.extend(Comment.from_api(c) for c in r.json())
            next_url = r.links.get("next", {}).get("url")
            if not next_url:
                return comments
            r = self._client.get(next_url)

    def create_comment(self, body: str) -> ApiResponse:
        return to_response(self._client.post(self._issue_path, json={"body": body}))

    def update_comment(self, comment_id: int, body: str) -> ApiResponse:
        return to_response(self._client.patch(self._comment_path(comment_id), json={"body": body}))

    def delete_comment(self, comment_id: int) -> ApiResponse:
        return to_response(self._client.delete(self._comment_path(comment_id)))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "GitHubComments":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def find_summary_comment(comments: Sequence[Comment]) -> Optional[Comment]:
    """Return the first comment carrying the identifier marker."""
    for comment in comments:
        if DIFF_COMMENT_IDENTIFIER in comment.body:
            return comment
    return None


def upsert_comment(store: CommentStore, body: str, hash: str) -> SummaryComment:
    """Create, update, delete or keep the summary comment.

    Parameters
    ----------
    store:
        Comment operations bound to the run's pull request.
    body:
        Fully rendered comment body; blank means "no differences".
    hash:
        Fingerprint of the diff rendered into *body*.

    Returns
    -------
    SummaryComment
        The operation performed and the resulting comment URL.

    Raises
    ------
    CreateCommentError, UpdateCommentError, DeleteCommentError
        If the corresponding write returns a non-success status.
    """
    existing = find_summary_comment(store.list_comments())
    empty = not body.strip()

    if existing is not None:
        if empty:
            if store.delete_comment(existing.id).status != 204:
                raise DeleteCommentError("Failed to delete comment")
            return SummaryComment("deleted")

        if hash_marker(hash) in existing.body:
            return SummaryComment("noop", existing.url)

        resp = store.update_comment(existing.id, body)
        if resp.status != 200:
            raise UpdateCommentError(f"Failed to update comment {existing.id}")
        return SummaryComment("updated", (resp.data or {}).get("html_url"))

    if empty:
        return SummaryComment("noop")

    resp = store.create_comment(body)
    if resp.status != 201:
        raise CreateCommentError("Failed to create a comment")
    return SummaryComment("created", (resp.data or {}).get("html_url"))
