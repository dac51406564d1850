# git_repository.py

"""
git_repository.py - Locating, opening and releasing Git repositories.

Everything else in the project talks to Git through a RepositoryHandle, so the
"is this handle still usable" check lives in one place. The module also owns
the error taxonomy shared by the loader, analyzer and diff inspector.
"""

import logging
import os
from pathlib import Path
from typing import FrozenSet, List, Optional, Union

from git import Repo, GitError, InvalidGitRepositoryError, NoSuchPathError


# ============================================================================
# ERRORS
# ============================================================================


class GitActivityError(Exception):
    """Base class for all recoverable repository activity errors."""


class InvalidPathError(GitActivityError):
    """The starting directory does not exist or cannot be read."""


class RepositoryNotFoundError(GitActivityError):
    """No Git metadata was found in the directory or any of its parents."""


class RepositoryOpenError(GitActivityError):
    """The repository exists but could not be opened."""


class BranchNotFoundError(GitActivityError):
    """A branch name did not resolve to a commit."""


class RepositoryNotOpenError(GitActivityError):
    """An operation was attempted on a released or never-opened handle."""


# ============================================================================
# REPOSITORY DISCOVERY
# ============================================================================


def _repository_root(repo: Repo) -> Path:
    # Bare repositories have no working tree; their root is the git dir itself.
    root = repo.working_tree_dir or repo.git_dir
    return Path(root).resolve()


def discover_repository(start_directory: Union[str, Path]) -> Path:
    """
    Walks upward from start_directory and returns the first repository root.

    Raises InvalidPathError for a missing or unreadable start directory and
    RepositoryNotFoundError when no ancestor contains Git metadata.
    """
    start = Path(start_directory).expanduser()
    if not start.is_dir():
        raise InvalidPathError(f"Not an existing directory: {start}")
    if not os.access(start, os.R_OK | os.X_OK):
        raise InvalidPathError(f"Directory is not readable: {start}")

    try:
        repo = Repo(start, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError) as e:
        raise RepositoryNotFoundError(
            f"No Git repository found at or above {start}"
        ) from e

    try:
        root = _repository_root(repo)
    finally:
        repo.close()

    logging.debug(f"Discovered repository root {root} from {start}")
    return root


# ============================================================================
# REPOSITORY HANDLE
# ============================================================================


class RepositoryHandle:
    """
    Owns an open git.Repo until close() is called.

    The handle is also a context manager. After close() every accessor raises
    RepositoryNotOpenError.
    """

    def __init__(self, repo: Optional[Repo] = None):
        self._repo = repo

    def __enter__(self) -> "RepositoryHandle":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __repr__(self) -> str:
        if self._repo is None:
            return "<RepositoryHandle (closed)>"
        return f"<RepositoryHandle {self.root}>"

    @property
    def is_open(self) -> bool:
        return self._repo is not None

    @property
    def repo(self) -> Repo:
        """The underlying git.Repo; raises if the handle has been released."""
        if self._repo is None:
            raise RepositoryNotOpenError("Repository handle is not open.")
        return self._repo

    def close(self) -> None:
        """Releases the repository. Calling close() twice is harmless."""
        if self._repo is not None:
            self._repo.close()
            self._repo = None

    @property
    def root(self) -> Path:
        return _repository_root(self.repo)

    @property
    def name(self) -> str:
        """The repository's directory name."""
        return self.root.name

    @property
    def remote_url(self) -> Optional[str]:
        """URL of the first configured remote, or None when there is none."""
        remotes = self.repo.remotes
        return remotes[0].url if remotes else None

    @property
    def active_branch(self) -> Optional[str]:
        """Name of the checked-out branch, or None when HEAD is detached."""
        try:
            return self.repo.active_branch.name
        except TypeError:
            return None

    @property
    def shallow_commits(self) -> FrozenSet[str]:
        """
        Ids of the boundary commits of a shallow clone.

        Their parents are recorded in the commit objects but were never
        fetched. The set is empty for a complete repository.
        """
        shallow_file = Path(self.repo.common_dir) / "shallow"
        if not shallow_file.is_file():
            return frozenset()
        return frozenset(shallow_file.read_text().split())

    def list_branches(self) -> List[str]:
        """Returns local (non-remote) branch names, sorted by name."""
        return sorted(head.name for head in self.repo.heads)


def open_repository(root: Union[str, Path]) -> RepositoryHandle:
    """
    Opens the repository whose root is exactly `root`.

    Any failure (missing path, not a repository, corrupt metadata, permission
    problems) is reported as RepositoryOpenError.
    """
    try:
        repo = Repo(Path(root))
    except (GitError, OSError) as e:
        raise RepositoryOpenError(f"Could not open repository at {root}: {e}") from e

    logging.info(f"Opened repository at {root}")
    return RepositoryHandle(repo)
