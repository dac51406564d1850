"""
Pytest fixtures for the entire test suite.

This file defines:
1. Session-scoped fixtures to generate test repositories once.
2. Function-scoped fixtures handing out open RepositoryHandles.
3. Helpers for building CommitInfo records without a repository.
"""
import logging
from datetime import datetime, timezone

import pytest
from git import Repo

from git_commits import CommitInfo
from git_repository import open_repository
from tests.fixtures.create_test_repos import (
    create_simple_repo,
    create_scenario_repo,
    create_complex_repo,
    create_refactor_repo,
)


@pytest.fixture(scope="session")
def test_repos_dir(tmp_path_factory):
    """
    Creates all test repositories once per test session in a temporary directory.
    Tests must treat these repositories as read-only.
    """
    repos_dir = tmp_path_factory.mktemp("git_repos")

    repo_paths = {
        "simple": repos_dir / "simple",
        "scenario": repos_dir / "scenario",
        "complex": repos_dir / "complex",
        "refactor": repos_dir / "refactor",
    }

    create_simple_repo(repo_paths["simple"])
    create_scenario_repo(repo_paths["scenario"])
    create_complex_repo(repo_paths["complex"])
    create_refactor_repo(repo_paths["refactor"])

    return repo_paths


def _open(path):
    handle = open_repository(path)
    yield handle
    handle.close()


@pytest.fixture
def simple_handle(test_repos_dir):
    """Handle on the simple, linear-history repository."""
    yield from _open(test_repos_dir["simple"])


@pytest.fixture
def scenario_handle(test_repos_dir):
    """Handle on the three-commit alice/bob repository."""
    yield from _open(test_repos_dir["scenario"])


@pytest.fixture
def complex_handle(test_repos_dir):
    """Handle on the branched, multi-author repository."""
    yield from _open(test_repos_dir["complex"])


@pytest.fixture
def refactor_repo_handle(test_repos_dir):
    """Handle on the repository with renames and a deletion."""
    yield from _open(test_repos_dir["refactor"])


@pytest.fixture
def empty_repo_path(tmp_path):
    """An initialized repository without any commits."""
    path = tmp_path / "empty"
    Repo.init(path).close()
    return path


@pytest.fixture
def cloned_repo_path(test_repos_dir, tmp_path):
    """A fresh clone of the simple repository, with 'origin' pointing at it."""
    path = tmp_path / "clone"
    Repo.clone_from(str(test_repos_dir["simple"]), str(path)).close()
    return path


@pytest.fixture
def shallow_clone_path(test_repos_dir, tmp_path):
    """
    A depth-3 clone of the simple repository. 'Update 9' is the boundary
    commit: it records a parent whose objects were never fetched.
    """
    path = tmp_path / "shallow"
    # --depth is ignored for plain local paths, so clone over file://.
    Repo.clone_from(test_repos_dir["simple"].as_uri(), str(path), depth=3).close()
    return path


def make_commit(
    hexsha: str = "0123456789abcdef0123456789abcdef01234567",
    author_name: str = "Alice",
    summary: str = "Initial commit",
    message: str = None,
    authored_at: datetime = datetime(2020, 1, 1, 12, 0, tzinfo=timezone.utc),
    parents=(),
) -> CommitInfo:
    return CommitInfo(
        hexsha=hexsha,
        author_name=author_name,
        author_email=f"{author_name.lower()}@example.com",
        authored_at=authored_at,
        summary=summary,
        message=message if message is not None else summary,
        parents=tuple(parents),
    )


@pytest.fixture
def commit_factory():
    """Builds CommitInfo records directly, for tests that need no repository."""
    return make_commit


@pytest.fixture(autouse=True)
def restore_root_logging():
    """analyze_repo.main() reconfigures the root logger; undo that after each test."""
    root = logging.getLogger()
    level = root.level
    yield
    # pytest's own capture handlers are subclasses and are left alone.
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
