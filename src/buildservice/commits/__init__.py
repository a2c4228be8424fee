"""Commit history collaborators used for dependency enrichment."""

from buildservice.commits.base import CommitHistoryBase, CommitLookupError

__all__ = ["CommitHistoryBase", "CommitLookupError"]
