"""Shared fakes for the branching API and the comment store."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from schemadiff.branches import Branch
from schemadiff.comments import Comment, CommentStore
from schemadiff.neon import BranchApi
from schemadiff.utils import ApiResponse


def branch_data(branch_id: str, name: str, parent_id: Optional[str] = None, protected: bool = False) -> Dict[str, Any]:
    """Return a branch record shaped like the API's ``branches`` entries."""
    data: Dict[str, Any] = {
        "id": branch_id,
        "name": name,
        "project_id": "test-project",
        "current_state": "ready",
        "protected": protected,
        "default": False,
        "created_at": "2021-01-01T00:00:00Z",
        "updated_at": "2021-01-01T00:00:00Z",
    }
    if parent_id is not None:
        data["parent_id"] = parent_id
    return data


def build_branch(branch_id: str, name: str, parent_id: Optional[str] = None, protected: bool = False) -> Branch:
    return Branch.from_api(branch_data(branch_id, name, parent_id, protected))


class FakeBranchApi(BranchApi):
    """In-memory branching API keyed by branch id."""

    def __init__(
        self,
        branches: List[Dict[str, Any]],
        schemas: Optional[Dict[str, str]] = None,
        list_status: int = 200,
        schema_status: Optional[Dict[str, int]] = None,
    ):
        self.branches = branches
        self.schemas = schemas or {}
        self.list_status = list_status
        self.schema_status = schema_status or {}
        self.schema_calls: List[Dict[str, Any]] = []

    def list_project_branches(self, project_id: str) -> ApiResponse:
        return ApiResponse(self.list_status, {"branches": self.branches})

    def get_project_branch_schema(self, project_id, branch_id, role, db_name, lsn=None, timestamp=None) -> ApiResponse:
        self.schema_calls.append(
            {
                "project_id": project_id,
                "branch_id": branch_id,
                "role": role,
                "db_name": db_name,
                "lsn": lsn,
                "timestamp": timestamp,
            }
        )
        status = self.schema_status.get(branch_id, 200)
        return ApiResponse(status, {"sql": self.schemas.get(branch_id, "")})


class FakeCommentStore(CommentStore):
    """Records every write; responses are configurable per operation."""

    def __init__(
        self,
        comments: Optional[List[Comment]] = None,
        create: Optional[ApiResponse] = None,
        update: Optional[ApiResponse] = None,
        delete: Optional[ApiResponse] = None,
    ):
        self.comments = comments or []
        self.create = create or ApiResponse(201, {"html_url": "http://example.com/new-comment"})
        self.update = update or ApiResponse(200, {"html_url": "http://example.com/updated-comment"})
        self.delete = delete or ApiResponse(204)
        self.created: List[str] = []
        self.updated: List[Tuple[int, str]] = []
        self.deleted: List[int] = []

    def list_comments(self) -> List[Comment]:
        return list(self.comments)

    def create_comment(self, body: str) -> ApiResponse:
        self.created.append(body)
        return self.create

    def update_comment(self, comment_id: int, body: str) -> ApiResponse:
        self.updated.append((comment_id, body))
        return self.update

    def delete_comment(self, comment_id: int) -> ApiResponse:
        self.deleted.append(comment_id)
        return self.delete

    @property
    def writes(self) -> int:
        return len(self.created) + len(self.updated) + len(self.deleted)


@pytest.fixture
def parent_child_branches() -> List[Dict[str, Any]]:
    """branch1 (id 1) created from branch2 (id 2)."""
    return [branch_data("1", "branch1", "2"), branch_data("2", "branch2")]
