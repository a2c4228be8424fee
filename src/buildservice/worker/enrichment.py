"""Dependency enrichment worker.

After a build is created, each of its dependencies is looked up in the
commit history to find how far the pinned commit is behind HEAD. The
merge base date is written back to the dependency row.

Architecture:
- enrich_dependencies: processes one build, entry by entry
- EnrichmentWorker: thin layer that runs enrich_dependencies on a thread
  pool so the creating request never waits for it

Every entry is best effort. A failed lookup or write is logged and the
entry is left without a date. Nothing is retried and no error reaches
whoever created the build.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Callable

from buildservice.commits.base import CommitHistoryBase
from buildservice.db import repo
from buildservice.db.repo import DbSession
from buildservice.models.domain import Build

logger = logging.getLogger(__name__)

# Reference the pinned commit is compared against
MERGE_BASE_REF = "HEAD"

SessionFactory = Callable[[], DbSession]


def _store_merge_base_date(
    session_factory: SessionFactory,
    build: Build,
    import_path: str,
    commit: str,
    date: datetime,
) -> bool:
    """Persist one merge base date in its own session.

    Returns:
        True if the date was committed.
    """
    session = session_factory()
    try:
        updated = repo.set_merge_base_date(
            session, build.name, build.version, import_path, commit, date
        )
        session.commit()
    except Exception as e:
        session.rollback()
        logger.warning(
            f"Failed to set merge base date ({build.name}, {build.version}, "
            f"{import_path}, {commit}): {e}"
        )
        return False
    finally:
        session.close()

    if not updated:
        logger.warning(
            f"No dependency row for ({build.name}, {build.version}, {import_path}, {commit})"
        )
        return False
    return True


def enrich_dependencies(
    build: Build,
    commit_history: CommitHistoryBase,
    session_factory: SessionFactory,
) -> dict[str, datetime]:
    """Resolve and store the merge base date of every dependency of a build.

    Args:
        build: Build that has already been committed.
        commit_history: Source of merge base dates.
        session_factory: Callable returning a new database session.

    Returns:
        Import path -> merge base date for the entries that were stored.
    """
    resolved: dict[str, datetime] = {}

    for import_path, commit in build.dependencies.items():
        try:
            date = commit_history.merge_base_date(import_path, commit, MERGE_BASE_REF)
        except Exception as e:
            logger.warning(f"Failed to get merge base date of {import_path}/{commit}: {e}")
            continue

        if date is None:
            logger.warning(f"No merge base date for {import_path}/{commit}")
            continue

        if _store_merge_base_date(session_factory, build, import_path, commit, date):
            logger.debug(f"Merge base date of {import_path}/{commit} is {date.isoformat()}")
            resolved[import_path] = date

    logger.info(
        f"Enriched {build.name} {build.version}: "
        f"{len(resolved)}/{len(build.dependencies)} dependencies resolved"
    )
    return resolved


class EnrichmentWorker:
    """Runs dependency enrichment in the background.

    Thin layer that:
    - Accepts freshly created builds
    - Runs enrich_dependencies on a thread pool
    - Never propagates errors to the submitter
    """

    def __init__(
        self,
        commit_history: CommitHistoryBase,
        session_factory: SessionFactory,
        max_workers: int = 4,
    ):
        """Initialize worker.

        Args:
            commit_history: Source of merge base dates.
            session_factory: Callable returning a new database session.
            max_workers: Size of the thread pool.
        """
        self.commit_history = commit_history
        self.session_factory = session_factory
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="enrichment"
        )

    def submit(self, build: Build) -> Future | None:
        """Schedule enrichment of a build and return immediately.

        Returns:
            Future of the enrichment, or None if the build has no dependencies.
        """
        if not build.dependencies:
            return None
        return self._executor.submit(self._run, build)

    def _run(self, build: Build) -> dict[str, datetime]:
        try:
            return enrich_dependencies(build, self.commit_history, self.session_factory)
        except Exception:
            logger.exception(f"Enrichment of {build.name} {build.version} failed")
            return {}

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting builds; optionally wait for running enrichments."""
        self._executor.shutdown(wait=wait)
