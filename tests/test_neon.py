"""Unit tests for neon module."""

import json

import httpx
import pytest

from conftest import FakeBranchApi, build_branch
from schemadiff import __version__
from schemadiff.branches import BranchSelector
from schemadiff.errors import SchemaFetchError
from schemadiff.inputs import PointInTime
from schemadiff.neon import NeonClient, branch_url, fetch_base_schema, fetch_compare_schema

PROJECT = "test-project"


@pytest.fixture
def api(parent_child_branches) -> FakeBranchApi:
    return FakeBranchApi(parent_child_branches, schemas={"1": "CREATE TABLE a();", "2": "CREATE TABLE b();"})


def test_branch_url() -> None:
    assert branch_url("p-1", "br-x") == "https://console.neon.tech/app/projects/p-1/branches/br-x"


class TestFetchCompareSchema:
    """Tests for fetch_compare_schema."""

    def test_returns_sql(self, api: FakeBranchApi) -> None:
        sql = fetch_compare_schema(api, PROJECT, build_branch("1", "branch1"), BranchSelector("name", "branch1"), "owner", "db")
        assert sql == "CREATE TABLE a();"
        assert api.schema_calls[0]["lsn"] is None
        assert api.schema_calls[0]["timestamp"] is None

    def test_passes_lsn(self, api: FakeBranchApi) -> None:
        fetch_compare_schema(
            api, PROJECT, build_branch("1", "branch1"), BranchSelector("name", "branch1"), "owner", "db",
            PointInTime("lsn", "0/16B3748"),
        )
        assert api.schema_calls[0]["lsn"] == "0/16B3748"
        assert api.schema_calls[0]["timestamp"] is None

    def test_passes_timestamp(self, api: FakeBranchApi) -> None:
        fetch_compare_schema(
            api, PROJECT, build_branch("1", "branch1"), BranchSelector("name", "branch1"), "owner", "db",
            PointInTime("timestamp", "2023-10-14T12:30:00.000Z"),
        )
        assert api.schema_calls[0]["timestamp"] == "2023-10-14T12:30:00.000Z"
        assert api.schema_calls[0]["lsn"] is None

    def test_error_names_selector_value(self, api: FakeBranchApi) -> None:
        api.schema_status["1"] = 500
        with pytest.raises(SchemaFetchError, match=f"Failed to get schema for branch branch1 in project {PROJECT}"):
            fetch_compare_schema(api, PROJECT, build_branch("1", "branch1"), BranchSelector("name", "branch1"), "o", "db")


class TestFetchBaseSchema:
    """Tests for fetch_base_schema."""

    def test_never_sends_point_in_time(self, api: FakeBranchApi) -> None:
        assert fetch_base_schema(api, PROJECT, build_branch("2", "branch2"), None, "owner", "db") == "CREATE TABLE b();"
        assert api.schema_calls[0]["lsn"] is None
        assert api.schema_calls[0]["timestamp"] is None

    def test_error_uses_selector_value(self, api: FakeBranchApi) -> None:
        api.schema_status["2"] = 404
        with pytest.raises(SchemaFetchError, match="the base branch br-main-base-1 in project"):
            fetch_base_schema(api, PROJECT, build_branch("2", "branch2"), BranchSelector("id", "br-main-base-1"), "o", "db")

    def test_error_falls_back_to_branch_name(self, api: FakeBranchApi) -> None:
        api.schema_status["2"] = 500
        with pytest.raises(SchemaFetchError) as exc_info:
            fetch_base_schema(api, PROJECT, build_branch("2", "branch2"), None, "o", "db")
        assert str(exc_info.value) == f"Failed to get schema for the base branch branch2 in project {PROJECT}"

    def test_missing_sql_is_empty(self) -> None:
        api = FakeBranchApi([])
        assert fetch_base_schema(api, PROJECT, build_branch("2", "branch2"), None, "o", "db") == ""


class TestNeonClient:
    """Tests for the httpx-backed client."""

    def _client(self, handler) -> NeonClient:
        return NeonClient("secret-key", "https://api.example.test/api/v2/", transport=httpx.MockTransport(handler))

    def test_list_branches_request(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["auth"] = request.headers["Authorization"]
            seen["agent"] = request.headers["User-Agent"]
            return httpx.Response(200, json={"branches": [{"id": "br-a", "name": "main"}]})

        with self._client(handler) as client:
            resp = client.list_project_branches("p-1")

        assert resp.ok
        assert resp.data["branches"][0]["id"] == "br-a"
        assert seen["path"] == "/api/v2/projects/p-1/branches"
        assert seen["auth"] == "Bearer secret-key"
        assert seen["agent"] == f"neon-schema-diff-action v{__version__}"

    def test_schema_request_params(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, content=json.dumps({"sql": "SELECT 1;"}))

        with self._client(handler) as client:
            resp = client.get_project_branch_schema("p-1", "br-a", "owner", "neondb", lsn="0/1")

        assert resp.data == {"sql": "SELECT 1;"}
        assert seen["path"] == "/api/v2/projects/p-1/branches/br-a/schema"
        assert seen["params"] == {"role": "owner", "db_name": "neondb", "lsn": "0/1"}

    def test_error_status_is_returned_not_raised(self) -> None:
        with self._client(lambda request: httpx.Response(500, text="boom")) as client:
            resp = client.list_project_branches("p-1")
        assert resp.status == 500
        assert not resp.ok
        assert resp.data is None
