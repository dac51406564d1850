# activity_insights.py

"""
activity_insights.py - Aggregate activity statistics for a commit list.

The analyzer mirrors what the activity panel showed: commits per day, commits
per author, how often each file was touched, and a few headline scalars
(busiest day, most active author, top modified file, longest message).

Per-day and per-author counts come straight from the commit DataFrame. The
per-file counts need one tree diff per non-root commit, which is the only part
that touches the repository.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

import pandas as pd
from tqdm import tqdm

from activity_config import Config
from git_commits import CommitInfo, build_commit_dataframe
from git_diff import diff_against_parent
from git_repository import RepositoryHandle, RepositoryNotOpenError


@dataclass(frozen=True)
class ActivityInsights:
    """Everything the activity summary and the per-day chart are built from."""

    total_commits: int = 0
    commits_per_day: Dict[date, int] = field(default_factory=dict)
    commits_per_author: Dict[str, int] = field(default_factory=dict)
    commits_per_file: Dict[str, int] = field(default_factory=dict)
    most_active_author: Optional[str] = None
    most_active_author_count: int = 0
    busiest_day: Optional[date] = None
    busiest_day_count: int = 0
    top_modified_file: Optional[str] = None
    top_modified_file_count: int = 0
    longest_message: Optional[str] = None


def _value_counts(series: pd.Series) -> Dict:
    return {key: int(count) for key, count in series.value_counts().items()}


def _top_entry(counts: Dict) -> Tuple[Optional[object], int]:
    """Returns some key with the maximal count, or (None, 0) when empty."""
    if not counts:
        return None, 0
    key = max(counts, key=counts.get)
    return key, counts[key]


def _file_change_dataframe(
    handle: RepositoryHandle, commits: List[CommitInfo], show_progress: bool
) -> pd.DataFrame:
    records = []
    non_root = [c for c in commits if not c.is_root]
    for commit in tqdm(
        non_root, desc="Diffing commits", unit="commit", disable=not show_progress
    ):
        for change in diff_against_parent(handle, commit):
            records.append(
                {
                    "commit_hash": commit.hexsha,
                    "filepath": change.path,
                    "change_type": change.status.value,
                }
            )

    logging.debug(
        f"Collected {len(records):,} file changes from {len(non_root):,} commits"
    )
    return pd.DataFrame(records, columns=["commit_hash", "filepath", "change_type"])


def analyze(
    handle: RepositoryHandle,
    commits: List[CommitInfo],
    show_progress: bool = False,
) -> ActivityInsights:
    """
    Computes ActivityInsights for a commit list.

    Root commits are skipped for the per-file statistics. When several
    entries share the maximal count, which one is reported as busiest day,
    most active author or top file is unspecified.
    """
    if not handle.is_open:
        raise RepositoryNotOpenError("Cannot analyze commits on a closed repository.")

    if not commits:
        return ActivityInsights()

    commits_df = build_commit_dataframe(commits)
    per_day = _value_counts(commits_df["day"])
    per_author = _value_counts(commits_df["author_name"])

    changes_df = _file_change_dataframe(handle, commits, show_progress)
    per_file = _value_counts(changes_df["filepath"]) if not changes_df.empty else {}

    busiest_day, busiest_day_count = _top_entry(per_day)
    author, author_count = _top_entry(per_author)
    top_file, top_file_count = _top_entry(per_file)

    # max() keeps the first commit on ties, so this is exact and stable.
    longest = max(commits, key=lambda c: len(c.message)).message

    logging.info(
        f"Analyzed {len(commits):,} commits: {len(per_author)} authors, "
        f"{len(per_day)} active days, {len(per_file)} files touched"
    )

    return ActivityInsights(
        total_commits=len(commits),
        commits_per_day=per_day,
        commits_per_author=per_author,
        commits_per_file=per_file,
        most_active_author=author,
        most_active_author_count=author_count,
        busiest_day=busiest_day,
        busiest_day_count=busiest_day_count,
        top_modified_file=top_file,
        top_modified_file_count=top_file_count,
        longest_message=longest,
    )


def commits_per_day_timeline(insights: ActivityInsights) -> pd.DataFrame:
    """Per-day commit counts as a date-sorted DataFrame, ready for plotting."""
    if not insights.commits_per_day:
        return pd.DataFrame(columns=["date", "commit_count"])

    timeline_df = pd.DataFrame(
        list(insights.commits_per_day.items()), columns=["date", "commit_count"]
    )
    return timeline_df.sort_values("date").reset_index(drop=True)


def truncate_message(
    message: Optional[str], length: int = Config.MESSAGE_DISPLAY_LENGTH
) -> str:
    """Shortens a message for display; the stored value stays untouched."""
    if not message:
        return ""
    return message[:length]
