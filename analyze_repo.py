"""
Command-line driver for the Git activity explorer.

Finds the repository enclosing a directory, loads a branch's history, prints
the activity summary and optionally exports the commit list or shows the file
changes of one commit.
"""

import argparse
import logging
import sys
from typing import List, Optional

from git import CommandError

from activity_config import Config
from activity_insights import (
    ActivityInsights,
    analyze,
    commits_per_day_timeline,
    truncate_message,
)
from commit_export import save_export
from git_commits import CommitInfo, load_commits
from git_diff import diff_against_parent
from git_repository import (
    GitActivityError,
    RepositoryHandle,
    discover_repository,
    open_repository,
)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Show commit activity for the Git repository enclosing a directory.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
  %(prog)s /path/to/project --branch develop --limit 500
  %(prog)s . --export-csv commits.csv --export-json commits.json
  %(prog)s . --show-diff 3f2a9c1d
  %(prog)s . --pull
        """,
    )

    parser.add_argument(
        "start_dir",
        nargs="?",
        default=".",
        help="Directory inside the repository (default: current directory)",
    )

    parser.add_argument(
        "-b", "--branch",
        default=None,
        help="Branch to analyze (default: checked-out branch, then main/master/develop)",
    )

    parser.add_argument(
        "-n", "--limit",
        type=int,
        default=None,
        help="Maximum number of commits to load (default: all)",
    )

    parser.add_argument(
        "--first-parent",
        action="store_true",
        help="Follow only the first parent of merge commits",
    )

    parser.add_argument(
        "--export-csv",
        metavar="PATH",
        default=None,
        help=f"Write the commit list as CSV (e.g. {Config.DEFAULT_EXPORT_NAMES['csv']})",
    )

    parser.add_argument(
        "--export-json",
        metavar="PATH",
        default=None,
        help=f"Write the commit list as JSON (e.g. {Config.DEFAULT_EXPORT_NAMES['json']})",
    )

    parser.add_argument(
        "--show-diff",
        metavar="COMMIT",
        default=None,
        help="Print the file changes of the loaded commit whose id starts with COMMIT",
    )

    parser.add_argument(
        "--message-length",
        type=int,
        default=Config.MESSAGE_DISPLAY_LENGTH,
        help=f"Characters of the longest message to display (default: {Config.MESSAGE_DISPLAY_LENGTH})",
    )

    sync = parser.add_mutually_exclusive_group()
    sync.add_argument(
        "--pull", dest="sync", action="store_const", const="pull",
        help="Run 'git pull' and reload before analyzing",
    )
    sync.add_argument(
        "--fetch", dest="sync", action="store_const", const="fetch",
        help="Run 'git fetch' and reload before analyzing",
    )

    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar while diffing commits",
    )

    parser.add_argument(
        "--log-file",
        default=None,
        help="Also write log output to this file",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Warnings only")

    args = parser.parse_args(argv)
    if args.limit is not None and args.limit < 0:
        parser.error("--limit must be zero or a positive number")
    return args


def configure_logging(verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None):
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=handlers,
        force=True,
    )


def choose_branch(handle: RepositoryHandle, requested: Optional[str] = None) -> Optional[str]:
    """
    Picks the branch to analyze.

    An explicit request always wins (and is validated later by load_commits).
    Otherwise: the checked-out branch, the first existing priority branch, or
    the first local branch. None when the repository has no branches yet.
    """
    if requested:
        return requested

    branches = handle.list_branches()
    active = handle.active_branch
    if active in branches:
        return active

    for branch_name in Config.BRANCH_PRIORITY:
        if branch_name in branches:
            return branch_name

    return branches[0] if branches else None


def sync_remote(handle: RepositoryHandle, action: str) -> bool:
    """Runs 'git pull' or 'git fetch'. Returns False when the command failed."""
    logging.info(f"Running git {action} in {handle.root}...")
    try:
        output = handle.repo.git.execute(
            ["git", action], with_extended_output=True
        )
    except CommandError as e:
        logging.error(f"git {action} failed: {e}")
        return False

    _status, stdout, stderr = output
    for text in (stdout, stderr):
        if text:
            logging.info(text)
    return True


def format_insights(insights: ActivityInsights, message_length: int) -> List[str]:
    """Renders the activity summary as text lines."""
    if insights.total_commits == 0:
        return ["No commits to analyze."]

    busiest = (
        f"{insights.busiest_day:%Y-%m-%d} ({insights.busiest_day_count} commits)"
        if insights.busiest_day
        else "-"
    )
    lines = [
        f"Total Commits: {insights.total_commits}",
        f"Most Active Author: {insights.most_active_author or '-'}",
        f"Busiest Day: {busiest}",
        f"Top Modified File: {insights.top_modified_file or '-'}",
        f"Longest Message: {truncate_message(insights.longest_message, message_length)}",
        "",
        "Commits per Day:",
    ]
    timeline_df = commits_per_day_timeline(insights)
    for row in timeline_df.itertuples(index=False):
        lines.append(f"  {row.date:%Y-%m-%d}  {row.commit_count}")
    return lines


def find_commit(commits: List[CommitInfo], prefix: str) -> Optional[CommitInfo]:
    prefix = prefix.lower()
    for commit in commits:
        if commit.hexsha.startswith(prefix):
            return commit
    return None


def print_diff(handle: RepositoryHandle, commit: CommitInfo):
    changes = diff_against_parent(handle, commit)
    print(f"\nFile changes in {commit.short_id} ({len(changes)}):")
    if commit.is_root:
        print("  (root commit, nothing to compare against)")
    for change in changes:
        if change.old_path:
            print(f"  {change.status.value:<9} {change.old_path} -> {change.path}")
        else:
            print(f"  {change.status.value:<9} {change.path}")


def run(args) -> int:
    root = discover_repository(args.start_dir)
    handle = open_repository(root)
    try:
        if args.sync:
            if sync_remote(handle, args.sync):
                # Full reload: nothing from the previous handle is reused.
                handle.close()
                handle = open_repository(root)

        print(f"Repository: {handle.name} ({handle.root})")
        print(f"Remote: {handle.remote_url or 'N/A'}")

        branch = choose_branch(handle, args.branch)
        if branch is None:
            logging.warning("Repository has no branches yet. Nothing to analyze.")
            return 0

        commits = load_commits(
            handle, branch, limit=args.limit, first_parent=args.first_parent
        )
        print(f"Branch: {branch}")
        insights = analyze(handle, commits, show_progress=args.progress)
        print()
        print("\n".join(format_insights(insights, args.message_length)))

        if args.show_diff:
            commit = find_commit(commits, args.show_diff)
            if commit is None:
                logging.error(f"No loaded commit starts with '{args.show_diff}'")
                return 1
            print_diff(handle, commit)

        if args.export_csv:
            save_export(commits, args.export_csv, "csv")
        if args.export_json:
            save_export(commits, args.export_json, "json")
    finally:
        handle.close()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose, args.quiet, args.log_file)

    try:
        return run(args)
    except GitActivityError as e:
        logging.error(f"{e}")
        return 1
    except Exception:
        logging.error("An unexpected error occurred. See traceback below:", exc_info=True)
        return 2


if __name__ == "__main__":
    sys.exit(main())
