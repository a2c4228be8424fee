"""In-memory commit history.

Answers merge base lookups from a fixed table. Used by tests and when
no remote commit history is configured.
"""

from __future__ import annotations

from datetime import datetime

from buildservice.commits.base import CommitHistoryBase, CommitLookupError


class StaticCommitHistory(CommitHistoryBase):
    """Commit history backed by a dict of (import_path, sha) -> date.

    Unknown pairs return None. Import paths listed in `failing` raise
    CommitLookupError, which lets tests exercise lookup failures.
    """

    def __init__(
        self,
        dates: dict[tuple[str, str], datetime] | None = None,
        failing: set[str] | None = None,
    ):
        self.dates = dict(dates or {})
        self.failing = set(failing or ())
        self.calls: list[tuple[str, str, str]] = []

    def merge_base_date(self, import_path: str, sha: str, base: str) -> datetime | None:
        self.calls.append((import_path, sha, base))
        if import_path in self.failing:
            raise CommitLookupError(f"Lookup failed for {import_path}")
        return self.dates.get((import_path, sha))
