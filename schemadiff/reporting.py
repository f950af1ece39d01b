"""
reporting
=========

Markdown comment generation.

This module renders a schema diff into the pull-request comment body. The
body carries two hidden HTML comments that later runs read back:

- :data:`DIFF_COMMENT_IDENTIFIER` marks the comment as ours
- :func:`hash_marker` embeds the diff fingerprint

Everything else in the body is presentation.

Primary API
-----------
- :func:`summary`
"""

from __future__ import annotations

import datetime as dt
from typing import List, Optional

from .branches import Branch
from .neon import branch_url

DIFF_COMMENT_IDENTIFIER = "<!--- [schema diff GitHub action comment identifier] -->"
DIFF_HASH_COMMENT_TEMPLATE = "<!--- [diff digest: %s] -->"

LOCK_ICON = "\N{LOCK}"
LOGO = (
    '<picture><source media="(prefers-color-scheme: dark)" '
    'srcset="https://raw.githubusercontent.com/neondatabase/schema-diff-action/refs/heads/main/docs/logos/logo-dark.svg">'
    '<img alt="Neon logo" '
    'src="https://raw.githubusercontent.com/neondatabase/schema-diff-action/refs/heads/main/docs/logos/logo-light.svg" '
    'width="24" height="24"></picture>'
)


def hash_marker(digest: str) -> str:
    """Return the hidden marker embedding *digest*."""
    return DIFF_HASH_COMMENT_TEMPLATE.replace("%s", digest)


def branch_line(label: str, branch: Branch, project_id: str) -> str:
    """Bullet line for one branch: name, id link and a lock if protected."""
    line = f"- {label}: {branch.name} ([{branch.id}]({branch_url(project_id, branch.id)}))"
    if branch.protected:
        line += f" {LOCK_ICON}"
    return line


def summary(
    sql: str,
    hash: str,
    compare_branch: Branch,
    base_branch: Branch,
    database: str,
    role: str,
    project_id: str,
    now: Optional[dt.datetime] = None,
) -> str:
    """Render the comment body for a schema diff.

    Parameters
    ----------
    sql:
        Unified diff text. Blank means there is nothing to report.
    hash:
        Fingerprint of *sql*, written into the hash marker.
    compare_branch, base_branch:
        The resolved branch pair.
    database, role:
        Database and role the schemas were read with.
    project_id:
        Project used to build branch links.
    now:
        Timestamp for the footer; defaults to the current local time.

    Returns
    -------
    str
        Markdown body, or ``""`` when *sql* is blank.
    """
    if not sql.strip():
        return ""

    now = now or dt.datetime.now()
    compare_url = branch_url(project_id, compare_branch.id)
    base_url = branch_url(project_id, base_branch.id)

    lines: List[str] = []
    lines.append("")
    lines.append(DIFF_COMMENT_IDENTIFIER)
    lines.append(hash_marker(hash))
    lines.append("")
    lines.append(f"# {LOGO} Neon Schema Diff summary")
    lines.append("")
    lines.append(
        f"Schema diff between the compare branch ([{compare_branch.name}]({compare_url})) "
        f"and the base branch ([{base_branch.name}]({base_url}))."
    )
    lines.append("")
    lines.append(branch_line("Base branch", base_branch, project_id))
    lines.append(branch_line("Compare branch", compare_branch, project_id))
    lines.append(f"- Database: {database}")
    lines.append(f"- Role: {role}")
    lines.append("")
    lines.append(f"```diff\n{sql}\n```")
    lines.append("")
    lines.append(f"This comment was last updated at {now.strftime('%Y-%m-%d')} {now.strftime('%H:%M:%S')}")
    return "\n".join(lines) + "\n"
