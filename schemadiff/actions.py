"""
actions
=======

GitHub Actions runner helpers.

The runner reads the step log from stdout and recognizes workflow commands
(``::error::``, ``::debug::``, ``::add-mask::``). Inputs arrive as ``INPUT_<NAME>``
environment variables and outputs are appended to the file named by
``GITHUB_OUTPUT``. The helpers below cover the subset the action uses, plus
:func:`load_context`, which reads the repository and pull-request number of
the triggering event.
"""

from __future__ import annotations

import json
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import InputError


@dataclass(frozen=True)
class RunContext:
    """Repository and issue/pull-request number of the current run."""

    owner: str
    repo: str
    issue_number: int
    api_url: str = "https://api.github.com"


def input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def get_input(name: str, env: Optional[Mapping[str, str]] = None) -> str:
    """Return the trimmed value of action input *name* (``""`` if unset)."""
    env = os.environ if env is None else env
    return (env.get(input_env_name(name)) or "").strip()


def info(message: str) -> None:
    print(message, flush=True)


def debug(message: str) -> None:
    print(f"::debug::{message}", flush=True)


def mask(secret: str) -> None:
    """Ask the runner to redact *secret* from the log."""
    if secret:
        print(f"::add-mask::{secret}", flush=True)


def set_failed(message: str) -> int:
    """Log *message* as an error annotation and return the failing exit code."""
    print(f"::error::{message}", flush=True)
    return 1


def set_output(name: str, value: Optional[str], env: Optional[Mapping[str, str]] = None) -> None:
    """Publish step output *name*.

    Multi-line values are written as a heredoc block with a random delimiter.
    Outside a runner (no ``GITHUB_OUTPUT``) the value is printed instead.
    """
    env = os.environ if env is None else env
    value = "" if value is None else value
    output_file = env.get("GITHUB_OUTPUT")
    if not output_file:
        info(f"{name}={value}")
        return

    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with Path(output_file).open("a", encoding="utf-8") as f:
        f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")


def _load_event(path: Optional[str]) -> Dict[str, Any]:
    if not path or not Path(path).exists():
        return {}
    with Path(path).open("r", encoding="utf-8") as f:
        return json.load(f) or {}


def load_context(env: Optional[Mapping[str, str]] = None) -> RunContext:
    """Read the repository and issue number from the runner environment.

    Raises
    ------
    InputError
        If ``GITHUB_REPOSITORY`` is missing or the event has no issue or
        pull-request number.
    """
    env = os.environ if env is None else env
    repository = env.get("GITHUB_REPOSITORY", "")
    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        raise InputError("GITHUB_REPOSITORY is not set, expected 'owner/repo'")

    payload = _load_event(env.get("GITHUB_EVENT_PATH"))
    source = payload.get("issue") or payload.get("pull_request") or payload
    number = source.get("number")
    if not number:
        raise InputError("No pull request or issue number found in the event payload")

    return RunContext(
        owner=owner,
        repo=repo,
        issue_number=int(number),
        api_url=env.get("GITHUB_API_URL") or "https://api.github.com",
    )
