"""
Collecting commit metadata for new benchmark entries.
"""

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import CommitInfoError, SchemaError
from .models import Commit, CommitUser

logger = logging.getLogger(__name__)

# one field per line; the message is last because it may span lines
_GIT_FORMAT = "%H%n%T%n%an%n%ae%n%cn%n%ce%n%cI%n%B"


def commit_from_event(payload: Dict[str, Any]) -> Commit:
    """Build a Commit from a GitHub ``push`` event payload.

    Args:
        payload: Parsed event JSON

    Returns:
        Commit describing ``head_commit``

    Raises:
        CommitInfoError: If the payload has no usable head commit
    """
    head = payload.get("head_commit")
    if not head:
        raise CommitInfoError(
            "event payload has no head_commit; only push events are supported"
        )
    try:
        return Commit.from_dict(head, "head_commit")
    except SchemaError as e:
        raise CommitInfoError(f"invalid head_commit in event payload: {e}") from e


def load_event_file(path: Union[str, Path]) -> Commit:
    """Read a GitHub event payload file (``GITHUB_EVENT_PATH``)."""
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CommitInfoError(f"cannot read event payload {path}: {e}") from e
    if not isinstance(payload, dict):
        raise CommitInfoError(f"event payload {path} is not a JSON object")
    return commit_from_event(payload)


def commit_from_git(
    repo_url: str, rev: str = "HEAD", cwd: Optional[Union[str, Path]] = None
) -> Commit:
    """Build a Commit from the local git repository.

    Args:
        repo_url: Repository URL used to form the commit URL
        rev: Revision to describe
        cwd: Working directory of the repository

    Returns:
        Commit for ``rev``; usernames are not known to git and are left unset

    Raises:
        CommitInfoError: If git is missing or the revision cannot be read
    """
    try:
        result = subprocess.run(
            ["git", "log", "-1", f"--format={_GIT_FORMAT}", rev],
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise CommitInfoError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        raise CommitInfoError(f"git log failed for {rev}: {e.stderr.strip()}") from e

    lines = result.stdout.split("\n")
    if len(lines) < 8:
        raise CommitInfoError(f"unexpected git log output for {rev}")

    sha, tree, author_name, author_email, committer_name, committer_email, timestamp = lines[:7]
    message = "\n".join(lines[7:]).strip()
    logger.debug("Resolved %s to commit %s", rev, sha)

    return Commit(
        author=CommitUser(email=author_email, name=author_name),
        committer=CommitUser(email=committer_email, name=committer_name),
        id=sha,
        message=message,
        timestamp=timestamp,
        url=f"{repo_url.rstrip('/')}/commit/{sha}",
        distinct=True,
        tree_id=tree,
    )
