"""
branches
========

Branch records and compare/base resolution.

Given the full branch list of a project and a
:class:`BranchComparisonInput`, :func:`resolve_branches` returns the branch
to compare and the branch to compare against. The base is either named
explicitly or taken from the compare branch's parent.

Matching is exact and case-sensitive on either the branch id or the branch
name. The first match in list order wins.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from .errors import BranchListError, BranchNotFoundError, NoParentError, ParentNotFoundError

if TYPE_CHECKING:
    from .neon import BranchApi


@dataclass(frozen=True)
class Branch:
    """A database branch as returned by the branching API.

    Attributes
    ----------
    id:
        Branch identifier (``br-...``), unique within a project.
    name:
        Human name of the branch.
    parent_id:
        Identifier of the branch this one was created from.
    protected:
        Whether the branch is marked protected.
    raw:
        Remaining API fields, carried along untouched.
    """

    id: str
    name: str
    parent_id: Optional[str] = None
    protected: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Branch":
        """Build a branch from one entry of the ``branches`` array."""
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            parent_id=data.get("parent_id") or None,
            protected=bool(data.get("protected", False)),
            raw=dict(data),
        )


@dataclass(frozen=True)
class BranchSelector:
    """How a branch was specified by the user: ``kind`` is "id" or "name"."""

    kind: str
    value: str


@dataclass(frozen=True)
class BranchComparisonInput:
    """The compare branch (required) and an optional explicit base."""

    compare: BranchSelector
    base: Optional[BranchSelector] = None


def list_branches(api: "BranchApi", project_id: str) -> List[Branch]:
    """Return every branch of *project_id*.

    Raises
    ------
    BranchListError
        If the listing call returns a non-success status.
    """
    resp = api.list_project_branches(project_id)
    if not resp.ok:
        raise BranchListError(f"Failed to list branches for project {project_id}")
    return [Branch.from_api(b) for b in (resp.data or {}).get("branches", [])]


def find_branch(branches: Sequence[Branch], value: str) -> Optional[Branch]:
    """Return the first branch whose id or name equals *value*."""
    for branch in branches:
        if branch.id == value or branch.name == value:
            return branch
    return None


def resolve_branches(
    branches: Sequence[Branch],
    comparison: BranchComparisonInput,
    project_id: str,
) -> Tuple[Branch, Branch]:
    """Resolve the ``(compare, base)`` branch pair.

    Parameters
    ----------
    branches:
        All branches of the project.
    comparison:
        User selectors for the compare branch and, optionally, the base.
    project_id:
        Project the branches belong to (used in error messages).

    Returns
    -------
    tuple[Branch, Branch]
        The compare branch and the base branch.

    Raises
    ------
    BranchNotFoundError
        If either selector matches no branch.
    NoParentError
        If no base was given and the compare branch has no parent.
    ParentNotFoundError
        If the compare branch's parent is not in *branches*.
    """
    compare_input, base_input = comparison.compare, comparison.base

    compare = find_branch(branches, compare_input.value)
    if compare is None:
        raise BranchNotFoundError(f"Branch {compare_input.value} not found in project {project_id}")

    if base_input is not None:
        base = find_branch(branches, base_input.value)
        if base is None:
            raise BranchNotFoundError(f"Branch {base_input.value} not found in project {project_id}")
        return compare, base

    if not compare.parent_id:
        raise NoParentError(
            f"Branch {compare_input.value} has no parent to compare to, please provide a base branch"
        )

    base = next((b for b in branches if b.id == compare.parent_id), None)
    if base is None:
        raise ParentNotFoundError(f"Parent branch for {compare_input.value} not found")
    return compare, base
