"""Repository pattern for database operations.

Encapsulates all SQLAlchemy queries, keeping domain logic pure.
Returns domain models (not SQLAlchemy entities) to external callers.
Every build fetch goes through aggregate_build_rows and every trend
fetch through group_coverage_rows.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Select, and_, delete, select, update
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session, aliased

from buildservice.aggregation.builds import aggregate_build_rows
from buildservice.aggregation.trend import group_coverage_rows
from buildservice.db.schema import BuildRecord, CoverageRecord, DependencyRecord
from buildservice.models.domain import Build, BuildJoinRow, CoverageRow, CoverageSnapshot

if TYPE_CHECKING:
    from sqlalchemy.orm import Session as DbSession
else:
    DbSession = Session

# Re-export for external use
__all__ = ["DbSession"]


# ============================================================================
# Converters: SQLAlchemy rows -> Domain
# ============================================================================


def _from_unix(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _row_to_join_row(row: Row) -> BuildJoinRow:
    """Convert one builds/coverage/dependencies join row to a BuildJoinRow."""
    return BuildJoinRow(
        hostname=row.hostname,
        architecture=row.architecture,
        go_version=row.goversion,
        source_url=row.sourceurl,
        binary_url=row.binaryurl,
        version=row.version,
        language=row.language,
        name=row.name,
        branch=row.branch or "",
        timestamp=int(row.timestamp),
        package=row.package,
        percentage=round(row.percentage, 2) if row.percentage is not None else None,
        import_path=row.importpath,
        commit=row.commit,
        merge_base_date=_from_unix(row.mergebasedate),
    )


def _row_to_coverage_row(row: Row) -> CoverageRow:
    """Convert one coverage history row to a CoverageRow."""
    return CoverageRow(
        service=row.service,
        version=row.version,
        branch=row.branch or "",
        package=row.package,
        percentage=round(row.percentage, 2),
        timestamp=int(row.timestamp),
    )


# ============================================================================
# Build Queries
# ============================================================================


def _joined_builds(builds) -> Select:
    """Select builds LEFT JOIN coverage LEFT JOIN dependencies.

    Args:
        builds: BuildRecord or an alias of a limited BuildRecord subquery.
    """
    return (
        select(
            builds.hostname,
            builds.architecture,
            builds.goversion,
            builds.sourceurl,
            builds.binaryurl,
            builds.version,
            builds.language,
            builds.name,
            builds.branch,
            builds.timestamp,
            CoverageRecord.package,
            CoverageRecord.percentage,
            DependencyRecord.importpath,
            DependencyRecord.commit,
            DependencyRecord.mergebasedate,
        )
        .select_from(builds)
        .outerjoin(
            CoverageRecord,
            and_(builds.name == CoverageRecord.service, builds.version == CoverageRecord.version),
        )
        .outerjoin(
            DependencyRecord,
            and_(
                builds.name == DependencyRecord.service,
                builds.version == DependencyRecord.version,
            ),
        )
        .order_by(builds.timestamp.desc(), builds.id.desc())
    )


def _fetch_builds(session: DbSession, stmt: Select) -> list[Build]:
    result = session.execute(stmt)
    return aggregate_build_rows(_row_to_join_row(row) for row in result)


def _latest_builds(limit: int, name: str | None = None):
    """Alias of the newest `limit` builds, optionally for one service.

    The limit is applied before joining so a build's child rows are
    never cut off.
    """
    stmt = select(BuildRecord)
    if name is not None:
        stmt = stmt.where(BuildRecord.name == name)
    stmt = stmt.order_by(BuildRecord.timestamp.desc(), BuildRecord.id.desc()).limit(limit)
    return aliased(BuildRecord, stmt.subquery())


def get_all(session: DbSession, limit: int) -> list[Build]:
    """Get the newest builds across all services."""
    return _fetch_builds(session, _joined_builds(_latest_builds(limit)))


def get_all_with_name(session: DbSession, name: str, limit: int) -> list[Build]:
    """Get the newest builds of one service."""
    return _fetch_builds(session, _joined_builds(_latest_builds(limit, name)))


def get_version(session: DbSession, name: str, version: str) -> Build | None:
    """Get a single build by service name and version."""
    stmt = _joined_builds(BuildRecord).where(
        BuildRecord.name == name, BuildRecord.version == version
    )
    builds = _fetch_builds(session, stmt)
    return builds[0] if builds else None


def get_names(session: DbSession, filter: str = "") -> list[str]:
    """Get distinct service names containing `filter`, sorted ascending."""
    stmt = (
        select(BuildRecord.name)
        .where(BuildRecord.name.contains(filter, autoescape=True))
        .distinct()
        .order_by(BuildRecord.name.asc())
    )
    return list(session.scalars(stmt))


# ============================================================================
# Build Mutations
# ============================================================================


def create_build(session: DbSession, build: Build) -> Build:
    """Insert a build with its coverage and dependency rows.

    Flushes so constraint violations surface here; the caller commits.
    """
    session.add(
        BuildRecord(
            hostname=build.hostname,
            architecture=build.architecture,
            goversion=build.go_version,
            sourceurl=build.source_url,
            binaryurl=build.binary_url,
            version=build.version,
            language=build.language,
            name=build.name,
            branch=build.branch,
            timestamp=build.timestamp,
        )
    )
    for package, percentage in build.coverage.items():
        session.add(
            CoverageRecord(
                service=build.name,
                version=build.version,
                package=package,
                percentage=percentage,
            )
        )
    for import_path, commit in build.dependencies.items():
        session.add(
            DependencyRecord(
                service=build.name,
                version=build.version,
                importpath=import_path,
                commit=commit,
            )
        )
    session.flush()
    return build


def delete_build(session: DbSession, name: str, version: str) -> int:
    """Delete a build and its coverage and dependency rows.

    Returns:
        Number of build rows deleted (0 or 1).
    """
    session.execute(
        delete(CoverageRecord).where(
            CoverageRecord.service == name, CoverageRecord.version == version
        )
    )
    session.execute(
        delete(DependencyRecord).where(
            DependencyRecord.service == name, DependencyRecord.version == version
        )
    )
    result = session.execute(
        delete(BuildRecord).where(BuildRecord.name == name, BuildRecord.version == version)
    )
    return result.rowcount


def set_merge_base_date(
    session: DbSession,
    name: str,
    version: str,
    import_path: str,
    commit: str,
    date: datetime,
) -> int:
    """Record the merge base date of one dependency of a build.

    Only the row whose commit still matches is updated.

    Returns:
        Number of dependency rows updated.
    """
    result = session.execute(
        update(DependencyRecord)
        .where(
            DependencyRecord.service == name,
            DependencyRecord.version == version,
            DependencyRecord.importpath == import_path,
            DependencyRecord.commit == commit,
        )
        .values(mergebasedate=int(date.timestamp()))
    )
    return result.rowcount


# ============================================================================
# Coverage Queries
# ============================================================================


def get_coverage(session: DbSession, name: str, version: str) -> dict[str, float]:
    """Get package -> percentage for one build, rounded to two decimals."""
    stmt = (
        select(CoverageRecord.package, CoverageRecord.percentage)
        .where(CoverageRecord.service == name, CoverageRecord.version == version)
        .order_by(CoverageRecord.package.asc())
    )
    return {row.package: round(row.percentage, 2) for row in session.execute(stmt)}


def get_coverage_trend(session: DbSession, name: str, since: datetime) -> list[CoverageSnapshot]:
    """Get coverage snapshots of a service for builds after `since`."""
    stmt = (
        select(
            CoverageRecord.service,
            CoverageRecord.version,
            BuildRecord.branch,
            CoverageRecord.package,
            CoverageRecord.percentage,
            BuildRecord.timestamp,
        )
        .join(
            BuildRecord,
            and_(
                BuildRecord.name == CoverageRecord.service,
                BuildRecord.version == CoverageRecord.version,
            ),
        )
        .where(CoverageRecord.service == name, BuildRecord.timestamp > int(since.timestamp()))
        .order_by(BuildRecord.timestamp.asc(), CoverageRecord.package.asc())
    )
    result = session.execute(stmt)
    return group_coverage_rows(_row_to_coverage_row(row) for row in result)
