# commit_export.py

"""
commit_export.py - CSV and JSON renderings of a commit list.

The CSV form is meant for spreadsheets: no header row, 8-character commit ids.
The JSON form keeps the full commit id. The two formats deliberately differ in
that respect.
"""

import csv
import io
import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from activity_config import Config
from git_commits import CommitInfo


EXPORT_FORMATS = ("csv", "json")


def to_csv(commits: List[CommitInfo]) -> str:
    """One fully quoted line per commit: author, summary, local time, short id."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for commit in commits:
        writer.writerow(
            [
                commit.author_name,
                commit.summary,
                commit.authored_at.astimezone().strftime(Config.CSV_DATE_FORMAT),
                commit.short_id,
            ]
        )
    return buffer.getvalue()


def to_json(commits: List[CommitInfo]) -> str:
    """An indented JSON array of {author, message, date, commitId} objects."""
    records = [
        {
            "author": commit.author_name,
            "message": commit.summary,
            "date": commit.authored_at.astimezone().isoformat(),
            "commitId": commit.hexsha,
        }
        for commit in commits
    ]
    return json.dumps(records, indent=Config.JSON_INDENT, ensure_ascii=False)


def save_export(
    commits: List[CommitInfo],
    path: Union[str, Path],
    fmt: Optional[str] = None,
) -> Path:
    """
    Writes commits to `path` as CSV or JSON.

    When fmt is omitted it is taken from the file suffix.
    """
    path = Path(path)
    fmt = (fmt or path.suffix.lstrip(".")).lower()
    if fmt not in EXPORT_FORMATS:
        raise ValueError(
            f"Unsupported export format '{fmt}'. Expected one of {EXPORT_FORMATS}."
        )

    text = to_csv(commits) if fmt == "csv" else to_json(commits)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(text)

    logging.info(f"Exported {len(commits):,} commits to {path}")
    return path
