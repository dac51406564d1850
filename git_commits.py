# git_commits.py

"""
git_commits.py - Loading commit history for a branch.

Commits are read once from GitPython and copied into immutable CommitInfo
records, so nothing downstream keeps live git objects around after the
handle is released.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple, Union

import pandas as pd
from git import Commit, RemoteReference, Repo

from activity_config import Config
from git_repository import BranchNotFoundError, RepositoryHandle


COMMIT_COLUMNS = ["hash", "author_name", "author_email", "date", "day", "message"]


@dataclass(frozen=True)
class CommitInfo:
    """Metadata about a single commit."""

    hexsha: str
    author_name: str
    author_email: str
    authored_at: datetime
    summary: str
    message: str
    parents: Tuple[str, ...] = ()

    @property
    def short_id(self) -> str:
        return self.hexsha[: Config.SHORT_ID_LENGTH]

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @classmethod
    def from_git(cls, commit: Commit, grafted: bool = False) -> "CommitInfo":
        """grafted=True drops the parents, for the boundary of a shallow clone."""
        parents = () if grafted else tuple(p.hexsha for p in commit.parents)
        return cls(
            hexsha=commit.hexsha,
            author_name=commit.author.name or "",
            author_email=commit.author.email or "",
            authored_at=commit.authored_datetime,
            summary=_as_text(commit.summary),
            message=_as_text(commit.message),
            parents=parents,
        )


def _as_text(value: Union[str, bytes]) -> str:
    # GitPython hands back bytes when a message cannot be decoded.
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value


def _resolve_branch(repo: Repo, branch: str) -> Commit:
    """Local branches win over remote-tracking refs of the same name."""
    for head in repo.heads:
        if head.name == branch:
            return head.commit

    for ref in repo.refs:
        if isinstance(ref, RemoteReference) and ref.name == branch:
            return ref.commit

    raise BranchNotFoundError(f"Branch '{branch}' does not exist.")


def load_commits(
    handle: RepositoryHandle,
    branch: str,
    limit: Optional[int] = None,
    first_parent: bool = False,
) -> List[CommitInfo]:
    """
    Loads the commits reachable from a branch tip, most recent first.

    Args:
        handle: An open repository handle
        branch: Local branch name, or a remote-tracking name such as 'origin/main'
        limit: Maximum number of commits to return (None = all)
        first_parent: Follow only first-parent edges at merges

    Returns:
        A list of CommitInfo ordered by commit time, newest first, with every
        commit listed before its parents. Boundary commits of a shallow clone
        come back as roots.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    repo = handle.repo
    tip = _resolve_branch(repo, branch)

    if limit == 0:
        return []

    # Newest commit time first; a commit never follows one of its parents.
    kwargs = {"date_order": True, "first_parent": first_parent}
    if limit:
        kwargs["max_count"] = limit

    shallow = handle.shallow_commits
    if shallow:
        logging.debug(f"Shallow clone: {len(shallow)} boundary commit(s)")

    commits = []
    for commit in repo.iter_commits(tip.hexsha, **kwargs):
        commits.append(CommitInfo.from_git(commit, grafted=commit.hexsha in shallow))
        if len(commits) % Config.PROGRESS_INTERVAL == 0:
            logging.info(f"Loaded {len(commits):,} commits...")

    logging.info(f"Loaded {len(commits):,} commits from branch '{branch}'")
    return commits


def build_commit_dataframe(commits: List[CommitInfo]) -> pd.DataFrame:
    """
    Returns the commit list as a DataFrame, one row per commit.

    'day' is the calendar date in the author's own UTC offset.
    """
    if not commits:
        return pd.DataFrame(columns=COMMIT_COLUMNS)

    return pd.DataFrame(
        [
            {
                "hash": c.hexsha,
                "author_name": c.author_name,
                "author_email": c.author_email,
                "date": c.authored_at,
                "day": c.authored_at.date(),
                "message": c.message,
            }
            for c in commits
        ],
        columns=COMMIT_COLUMNS,
    )
