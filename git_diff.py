# git_diff.py

"""
git_diff.py - File-level changes of a commit against its first parent.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from git import Diff, GitError, ODBError

from git_commits import CommitInfo
from git_repository import RepositoryHandle, RepositoryOpenError


class ChangeStatus(Enum):
    ADDED = "Added"
    DELETED = "Deleted"
    MODIFIED = "Modified"
    RENAMED = "Renamed"
    OTHER = "Other"


_STATUS_BY_CHANGE_TYPE = {
    "A": ChangeStatus.ADDED,
    "D": ChangeStatus.DELETED,
    "M": ChangeStatus.MODIFIED,
    "R": ChangeStatus.RENAMED,
}


@dataclass(frozen=True)
class FileChange:
    """One changed path; old_path is only set for renames."""

    status: ChangeStatus
    path: str
    old_path: Optional[str] = None


def _classify(diff: Diff) -> ChangeStatus:
    # Type changes ('T') and copies ('C') have no dedicated status.
    return _STATUS_BY_CHANGE_TYPE.get(diff.change_type, ChangeStatus.OTHER)


def diff_against_parent(
    handle: RepositoryHandle, commit: CommitInfo
) -> List[FileChange]:
    """
    Compares the first parent's tree with the commit's tree.

    Root commits have nothing to compare against and yield an empty list,
    as do the boundary commits of a shallow clone, whose parents are missing.
    Renames come back as a single RENAMED change thanks to GitPython's
    default rename detection.

    Raises RepositoryOpenError when the objects cannot be read.
    """
    repo = handle.repo
    if commit.is_root or commit.hexsha in handle.shallow_commits:
        return []

    try:
        current = repo.commit(commit.hexsha)
        diffs = current.parents[0].diff(current)
    except (GitError, ODBError, ValueError) as e:
        raise RepositoryOpenError(
            f"Could not diff commit {commit.short_id} against its parent: {e}"
        ) from e

    changes = []
    for diff in diffs:
        status = _classify(diff)
        path = diff.b_path or diff.a_path
        old_path = diff.a_path if status is ChangeStatus.RENAMED else None
        changes.append(FileChange(status=status, path=path, old_path=old_path))
    return changes
