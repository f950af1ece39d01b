#!/usr/bin/env python3
"""
main
====

Post the schema diff between two Neon branches as a pull-request comment.

Each run:

- lists the project branches and resolves the compare/base pair
- fetches both schemas (the compare branch optionally at a past timestamp
  or LSN)
- renders a unified diff and its SHA-256 fingerprint
- creates, updates, deletes or keeps the single summary comment

Outputs ``diff`` (the unified diff, empty when the schemas match) and
``comment_url``.

Configuration
-------------

Values are resolved per input, highest priority first:

1. action inputs (``INPUT_<NAME>`` environment variables set by the runner)
2. CLI flags
3. a YAML file passed with ``--config``
4. built-in defaults

Example ``schema-diff.yml``::

    project_id: "rapid-haze-373089"
    compare_branch: "preview/pr-42"
    base_branch: "main"
    database: "neondb"
    username: "neondb_owner"

CLI Usage
---------

Inside a workflow the runner provides every input, so no flags are needed::

    schema-diff-action

Locally, with secrets from the environment::

    env "INPUT_GITHUB-TOKEN=..." "INPUT_API_KEY=..." GITHUB_REPOSITORY=org/app \\
        GITHUB_EVENT_PATH=event.json \\
        schema-diff-action --config schema-diff.yml --lsn 0/1F2A3B4
"""

from __future__ import annotations

import argparse
import datetime as dt
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence

import yaml

from . import actions
from .branches import list_branches, resolve_branches
from .comments import CommentStore, GitHubComments, SummaryComment, upsert_comment
from .diffing import BranchDiff, compute_diff
from .errors import InputError
from .inputs import get_branch_input, get_point_in_time, validate_target
from .neon import DEFAULT_API_HOST, BranchApi, NeonClient, fetch_base_schema, fetch_compare_schema
from .reporting import summary


# -----------------------------
# Configuration
# -----------------------------
@dataclass(frozen=True)
class ActionConfig:
    """Fully resolved action inputs."""

    github_token: str
    project_id: str
    compare_branch: str
    api_key: str
    base_branch: str = ""
    api_host: str = DEFAULT_API_HOST
    database: str = "neondb"
    username: str = "neondb_owner"
    timestamp: str = ""
    lsn: str = ""


# (input name, config field, required, default)
INPUTS = [
    ("github-token", "github_token", True, ""),
    ("project_id", "project_id", True, ""),
    ("compare_branch", "compare_branch", True, ""),
    ("base_branch", "base_branch", False, ""),
    ("api_key", "api_key", True, ""),
    ("api_host", "api_host", False, DEFAULT_API_HOST),
    ("database", "database", False, "neondb"),
    ("username", "username", False, "neondb_owner"),
    ("timestamp", "timestamp", False, ""),
    ("lsn", "lsn", False, ""),
]


def load_config(path: Path) -> Dict[str, Any]:
    """Load a YAML config file; an empty file gives ``{}``."""
    if not path.exists():
        raise InputError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def pick(name: str, field: str, cfg: Mapping[str, Any], overrides: Mapping[str, Any], env: Mapping[str, str]) -> str:
    """Return the first non-blank value from inputs, CLI overrides, then config."""
    value = actions.get_input(name, env=env)
    if value:
        return value
    cli = overrides.get(field)
    if cli:
        return str(cli).strip()
    cfg_value = cfg.get(name, cfg.get(field))
    return "" if cfg_value is None else str(cfg_value).strip()


def build_config(
    cfg: Mapping[str, Any],
    overrides: Mapping[str, Any],
    env: Optional[Mapping[str, str]] = None,
) -> ActionConfig:
    """Resolve every input into an :class:`ActionConfig`.

    Raises
    ------
    InputError
        If a required input has no value in any source.
    """
    env = os.environ if env is None else env
    values: Dict[str, str] = {}
    for name, field, required, default in INPUTS:
        value = pick(name, field, cfg, overrides, env) or default
        if required and not value:
            raise InputError(f"Input required and not supplied: {name}")
        values[field] = value
    return ActionConfig(**values)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        description="Comment the schema diff between two Neon branches on the current pull request."
    )
    ap.add_argument("--config", default=None, help="Path to a YAML file with input values")
    ap.add_argument("--project-id", dest="project_id", default=None)
    ap.add_argument("--compare-branch", dest="compare_branch", default=None, help="Branch id or name to compare")
    ap.add_argument("--base-branch", dest="base_branch", default=None, help="Branch id or name to compare against (default: parent)")
    ap.add_argument("--api-host", dest="api_host", default=None)
    ap.add_argument("--database", default=None)
    ap.add_argument("--username", default=None, help="Database role used to read the schema")
    ap.add_argument("--timestamp", default=None, help="Read the compare branch schema as of this ISO-8601 time")
    ap.add_argument("--lsn", default=None, help="Read the compare branch schema as of this LSN")
    return ap.parse_args(argv)


# -----------------------------
# Orchestration
# -----------------------------
@dataclass(frozen=True)
class RunResult:
    diff: BranchDiff
    comment: SummaryComment


def diff_branches(config: ActionConfig, api: BranchApi) -> BranchDiff:
    """Resolve the branch pair, fetch both schemas and diff them."""
    validate_target(config.api_host, config.database, config.username)
    point_in_time = get_point_in_time(config.timestamp, config.lsn)
    if point_in_time is not None:
        actions.debug(f"Reading compare branch schema at {point_in_time.kind} {point_in_time.value}")
    comparison = get_branch_input(config.compare_branch, config.base_branch)

    branches = list_branches(api, config.project_id)
    compare, base = resolve_branches(branches, comparison, config.project_id)
    actions.info(f"Comparing branch {compare.name} ({compare.id}) with {base.name} ({base.id})")

    compare_sql = fetch_compare_schema(
        api, config.project_id, compare, comparison.compare, config.username, config.database, point_in_time
    )
    base_sql = fetch_base_schema(api, config.project_id, base, comparison.base, config.username, config.database)
    return compute_diff(base_sql, compare_sql, compare, base, config.username, config.database)


def run(
    config: ActionConfig,
    api: BranchApi,
    comments: CommentStore,
    set_output: Callable[[str, Optional[str]], None] = actions.set_output,
    now: Optional[dt.datetime] = None,
) -> RunResult:
    """Diff the configured branches and reconcile the summary comment.

    The ``diff`` output is published before the comment is touched, so it is
    available even if the comment write fails.
    """
    diff = diff_branches(config, api)
    body = summary(
        diff.sql,
        diff.hash,
        diff.compare_branch,
        diff.base_branch,
        config.database,
        config.username,
        config.project_id,
        now=now,
    )
    set_output("diff", diff.sql)

    comment = upsert_comment(comments, body, diff.hash)
    if comment.operation == "noop":
        actions.info("No changes detected in the schema diff")
    else:
        actions.info(f"Comment {comment.operation} successfully")

    set_output("comment_url", comment.url)
    actions.info(f"Comment URL: {comment.url}")
    return RunResult(diff=diff, comment=comment)


# -----------------------------
# Entry point
# -----------------------------
def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the action; returns the process exit code."""
    args = parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if k != "config"}

    try:
        cfg = load_config(Path(args.config)) if args.config else {}
        config = build_config(cfg, overrides)
        actions.mask(config.github_token)
        actions.mask(config.api_key)

        context = actions.load_context()
        with NeonClient(config.api_key, config.api_host) as api, GitHubComments(
            config.github_token,
            context.owner,
            context.repo,
            context.issue_number,
            api_url=context.api_url,
        ) as comments:
            run(config, api, comments)
    except Exception as exc:
        return actions.set_failed(str(exc))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
