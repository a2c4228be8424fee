"""Base commit history interface.

Commit history sources implement a narrow interface:
merge_base_date(import_path, sha, base) -> datetime | None

They must NOT write to the database; persisting results is the
enrichment worker's job.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class CommitLookupError(Exception):
    """Raised when a commit history source cannot answer for an import path."""


class CommitHistoryBase(ABC):
    """Abstract base class for commit history sources."""

    @abstractmethod
    def merge_base_date(self, import_path: str, sha: str, base: str) -> datetime | None:
        """Get the date of the merge base of `sha` and `base`.

        Args:
            import_path: Dependency import path, e.g. github.com/owner/repo.
            sha: Commit the build was made against.
            base: Reference to compare with, usually "HEAD".

        Returns:
            Committer date of the merge base commit, or None if unknown.
        """
        pass
