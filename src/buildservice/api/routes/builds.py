"""Builds API endpoints.

POST   /builds                               - Register a build
DELETE /builds/{name}/{version}              - Delete a build
GET    /builds/names?filter=                 - List service names
GET    /builds/{name}/{version}/coverage     - Coverage of one build
GET    /builds/{name}/coverage?since=        - Coverage trend of a service
GET    /builds/{name}/{version}              - Get one build
GET    /builds/{name}?limit=                 - Latest builds of a service
GET    /builds?limit=                        - Latest builds
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from buildservice.api.app import get_db_session, get_enrichment_worker
from buildservice.config import DEFAULT_COVERAGE_TREND_WINDOW, DEFAULT_LIMIT, SINCE_FORMAT
from buildservice.core.validation import validate_build
from buildservice.db import repo
from buildservice.db.repo import DbSession
from buildservice.models.domain import Build, CoverageSnapshot
from buildservice.models.types import (
    BuildDetail,
    BuildPayload,
    CoverageDetail,
    CoverageSnapshotDetail,
)
from buildservice.worker.enrichment import EnrichmentWorker

logger = logging.getLogger(__name__)

router = APIRouter()


def _payload_to_build(payload: BuildPayload) -> Build:
    """Convert a payload to a Build, coverage rounded as it is read back."""
    return Build(
        hostname=payload.hostname,
        architecture=payload.architecture,
        go_version=payload.go_version,
        source_url=payload.source_url,
        binary_url=payload.binary_url,
        version=payload.version,
        language=payload.language,
        name=payload.name,
        branch=payload.branch,
        timestamp=payload.timestamp,
        coverage={pkg: round(pct, 2) for pkg, pct in (payload.coverage or {}).items()},
        dependencies=dict(payload.dependencies or {}),
    )


def _build_to_detail(build: Build) -> BuildDetail:
    """Convert a Build to its response model, empty maps as None."""
    return BuildDetail(
        hostname=build.hostname,
        architecture=build.architecture,
        go_version=build.go_version,
        source_url=build.source_url,
        binary_url=build.binary_url,
        version=build.version,
        language=build.language,
        name=build.name,
        branch=build.branch,
        timestamp=build.timestamp,
        coverage=build.coverage or None,
        dependencies=build.dependencies or None,
        merge_base_dates=build.merge_base_dates or None,
    )


def _snapshot_to_detail(snapshot: CoverageSnapshot) -> CoverageSnapshotDetail:
    return CoverageSnapshotDetail(
        coverages=[
            CoverageDetail(package_name=c.package_name, percentage=c.percentage)
            for c in snapshot.coverages
        ],
        branch=snapshot.branch,
        version=snapshot.version,
        timestamp=snapshot.timestamp,
    )


def _parse_limit(limit: str | None) -> int:
    """Parse the limit query parameter, falling back to the default."""
    try:
        return int(limit)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT


def _parse_since(since: str | None) -> datetime:
    """Parse a YYYYMMDDHHMMSS timestamp (UTC), defaulting to 90 days ago."""
    try:
        return datetime.strptime(since, SINCE_FORMAT).replace(tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return datetime.now(timezone.utc) - DEFAULT_COVERAGE_TREND_WINDOW


@router.post(
    "/builds",
    response_model=BuildDetail,
    response_model_exclude_none=True,
    status_code=201,
)
def create_build(
    payload: BuildPayload,
    session: DbSession = Depends(get_db_session),
    enrichment_worker: EnrichmentWorker = Depends(get_enrichment_worker),
) -> BuildDetail:
    """Register a build.

    Dependency merge base dates are resolved in the background after the
    build is committed; the response never waits for them.

    Raises:
        HTTPException: 400 if required fields are blank, 409 if the build
            already exists, 500 if it could not be saved.
    """
    logger.info(f"POST /builds name={payload.name} version={payload.version}")

    errors = validate_build(payload)
    if errors:
        logger.warning(f"Invalid build: {errors}")
        raise HTTPException(status_code=400, detail=f"Invalid build: {'; '.join(errors)}")

    build = _payload_to_build(payload)

    try:
        repo.create_build(session, build)
        session.commit()
    except IntegrityError as e:
        session.rollback()
        logger.error(f"Build {build.name} {build.version} already exists: {e}")
        raise HTTPException(status_code=409, detail="Build already exists") from e
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error saving build: {e}")
        raise HTTPException(status_code=500, detail=f"Error saving build: {e}") from e

    enrichment_worker.submit(build)

    return _build_to_detail(build)


@router.delete("/builds/{name}/{version}", status_code=204)
def delete_build(
    name: str,
    version: str,
    session: DbSession = Depends(get_db_session),
) -> Response:
    """Delete a build and its coverage and dependency rows."""
    logger.info(f"DELETE /builds name={name} version={version}")

    try:
        repo.delete_build(session, name, version)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Error deleting build: {e}")
        raise HTTPException(status_code=500, detail="Error deleting build") from e

    return Response(status_code=204)


@router.get("/builds/names", response_model=list[str])
def get_names(
    filter: str = "",
    session: DbSession = Depends(get_db_session),
) -> list[str]:
    """List distinct service names containing `filter`."""
    logger.info(f"GET /builds/names filter={filter}")

    try:
        return repo.get_names(session, filter)
    except SQLAlchemyError as e:
        logger.error(f"Error getting names: {e}")
        raise HTTPException(status_code=500, detail="Error getting names") from e


@router.get("/builds/{name}/{version}/coverage", response_model=dict[str, float])
def get_coverage(
    name: str,
    version: str,
    session: DbSession = Depends(get_db_session),
) -> dict[str, float]:
    """Get package coverage of one build."""
    logger.info(f"GET coverage name={name} version={version}")

    try:
        coverage = repo.get_coverage(session, name, version)
    except SQLAlchemyError as e:
        logger.error(f"Error getting code coverage: {e}")
        raise HTTPException(status_code=500, detail=f"Error getting code coverage: {e}") from e

    logger.debug(f"Coverage: {coverage}")
    return coverage


@router.get("/builds/{name}/coverage", response_model=list[CoverageSnapshotDetail])
def get_coverage_trend(
    name: str,
    since: str | None = None,
    session: DbSession = Depends(get_db_session),
) -> list[CoverageSnapshotDetail]:
    """Get coverage snapshots of a service since a YYYYMMDDHHMMSS timestamp."""
    logger.info(f"GET coverage trend name={name} since={since}")

    try:
        snapshots = repo.get_coverage_trend(session, name, _parse_since(since))
    except (SQLAlchemyError, TypeError, ValueError) as e:
        logger.error(f"Error getting code coverage trend: {e}")
        raise HTTPException(
            status_code=500, detail=f"Error getting code coverage trend: {e}"
        ) from e

    return [_snapshot_to_detail(s) for s in snapshots]


@router.get("/builds/{name}/{version}", response_model=BuildDetail, response_model_exclude_none=True)
def get_build(
    name: str,
    version: str,
    session: DbSession = Depends(get_db_session),
) -> BuildDetail:
    """Get one build.

    Raises:
        HTTPException: 404 if the build does not exist.
    """
    logger.info(f"GET build name={name} version={version}")

    try:
        build = repo.get_version(session, name, version)
    except (SQLAlchemyError, TypeError, ValueError) as e:
        logger.error(f"Error getting build: {e}")
        raise HTTPException(status_code=500, detail=f"Error getting build: {e}") from e

    if build is None:
        raise HTTPException(status_code=404, detail="Build not found")

    return _build_to_detail(build)


@router.get("/builds/{name}", response_model=list[BuildDetail], response_model_exclude_none=True)
def get_builds_with_name(
    name: str,
    limit: str | None = None,
    session: DbSession = Depends(get_db_session),
) -> list[BuildDetail]:
    """Get the latest builds of a service."""
    logger.info(f"GET builds name={name} limit={limit}")

    try:
        builds = repo.get_all_with_name(session, name, _parse_limit(limit))
    except (SQLAlchemyError, TypeError, ValueError) as e:
        logger.error(f"Error getting builds: {e}")
        raise HTTPException(status_code=500, detail=f"Error getting builds: {e}") from e

    return [_build_to_detail(b) for b in builds]


@router.get("/builds", response_model=list[BuildDetail], response_model_exclude_none=True)
def get_builds(
    limit: str | None = None,
    session: DbSession = Depends(get_db_session),
) -> list[BuildDetail]:
    """Get the latest builds across all services."""
    logger.info(f"GET builds limit={limit}")

    try:
        builds = repo.get_all(session, _parse_limit(limit))
    except (SQLAlchemyError, TypeError, ValueError) as e:
        logger.error(f"Error getting builds: {e}")
        raise HTTPException(status_code=500, detail=f"Error getting builds: {e}") from e

    return [_build_to_detail(b) for b in builds]
