"""
diffing
=======

Unified diff and fingerprint helpers.

This module contains:
- splitting schema text into diffable lines
- generating a patch (``Index:`` / ``===`` / ``---`` / ``+++`` / ``@@``)
- hashing a patch so an unchanged diff can be recognized on the next run
- :func:`compute_diff`, which ties both together for a branch pair

The patch output is byte-stable for identical inputs: no timestamps are
written into the headers, and the matcher runs without the autojunk
heuristic so large schemas with repeated lines diff the same way every time.
"""

from __future__ import annotations

import difflib
import hashlib
from dataclasses import dataclass
from typing import Iterator, List, Sequence

from .branches import Branch

PATCH_SEPARATOR = "=" * 67
CONTEXT_LINES = 4
NO_NEWLINE_MARKER = "\\ No newline at end of file"


@dataclass(frozen=True)
class BranchDiff:
    """Schema diff between a base and a compare branch.

    ``sql`` is the unified diff text, empty when both schemas are equal.
    ``hash`` is the SHA-256 hex digest of ``sql``, empty iff ``sql`` is.
    """

    sql: str
    hash: str
    compare_branch: Branch
    base_branch: Branch
    role: str
    database: str


def split_lines(text: str) -> List[str]:
    """Split *text* on ``\\n`` keeping line endings.

    Only ``\\n`` separates lines; a final line without a newline is kept as
    is so the patch can flag it.
    """
    if not text:
        return []
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def _emit(prefix: str, lines: Sequence[str]) -> Iterator[str]:
    for line in lines:
        if line.endswith("\n"):
            yield prefix + line[:-1]
        else:
            yield prefix + line
            yield NO_NEWLINE_MARKER


def _range_start(start: int, length: int) -> int:
    # zero-length ranges point at the line before the change
    return start if length == 0 else start + 1


def _hunks(a: List[str], b: List[str], context: int) -> Iterator[List[str]]:
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)
    for group in matcher.get_grouped_opcodes(context):
        first, last = group[0], group[-1]
        old_len = last[2] - first[1]
        new_len = last[4] - first[3]
        out = [
            f"@@ -{_range_start(first[1], old_len)},{old_len} "
            f"+{_range_start(first[3], new_len)},{new_len} @@"
        ]
        for tag, i1, i2, j1, j2 in group:
            if tag == "equal":
                out.extend(_emit(" ", a[i1:i2]))
                continue
            if tag in ("replace", "delete"):
                out.extend(_emit("-", a[i1:i2]))
            if tag in ("replace", "insert"):
                out.extend(_emit("+", b[j1:j2]))
        yield out


def create_patch(
    file_name: str,
    old_text: str,
    new_text: str,
    old_header: str,
    new_header: str,
    context: int = CONTEXT_LINES,
) -> str:
    """Return a unified diff of *old_text* -> *new_text*.

    Parameters
    ----------
    file_name:
        Name written to the ``Index:``, ``---`` and ``+++`` lines.
    old_text, new_text:
        Input texts.
    old_header, new_header:
        Revision labels appended (tab separated) to the ``---``/``+++`` lines.
    context:
        Number of unchanged lines around each change.

    Returns
    -------
    str
        Patch text, newline terminated.
    """
    lines = [
        f"Index: {file_name}",
        PATCH_SEPARATOR,
        f"--- {file_name}\t{old_header}",
        f"+++ {file_name}\t{new_header}",
    ]
    for hunk in _hunks(split_lines(old_text), split_lines(new_text), context):
        lines.extend(hunk)
    return "\n".join(lines) + "\n"


def sha256_hex(text: str) -> str:
    """Lowercase hex SHA-256 of the UTF-8 bytes of *text*."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def compute_diff(
    base_sql: str,
    compare_sql: str,
    compare_branch: Branch,
    base_branch: Branch,
    role: str,
    database: str,
) -> BranchDiff:
    """Diff the base schema (from side) against the compare schema (to side).

    Equal schemas short-circuit to an empty ``sql`` and ``hash``.
    """
    if base_sql == compare_sql:
        return BranchDiff("", "", compare_branch, base_branch, role, database)

    sql = create_patch(
        f"{database}-schema.sql",
        base_sql,
        compare_sql,
        f"Branch {base_branch.name}",
        f"Branch {compare_branch.name}",
    )
    return BranchDiff(sql, sha256_hex(sql), compare_branch, base_branch, role, database)
