# activity_config.py

"""
Default configuration settings for the activity explorer.

The command-line driver overrides these through its flags where it exposes one.
"""


class Config:
    """
    Default configuration settings.
    """

    # Longest message is shown truncated to this many characters.
    MESSAGE_DISPLAY_LENGTH = 300

    CSV_DATE_FORMAT = "%Y-%m-%d %H:%M"
    SHORT_ID_LENGTH = 8
    JSON_INDENT = 2

    # Used when no branch is given and HEAD is detached or unborn.
    BRANCH_PRIORITY = ["main", "master", "develop"]

    DEFAULT_EXPORT_NAMES = {"csv": "commits.csv", "json": "commits.json"}

    PROGRESS_INTERVAL = 1000
