"""Reconstruction of Build records from flat join rows.

A build with m coverage rows and n dependency rows comes back from the
double LEFT JOIN as m x n rows that all repeat the build's scalar
columns. Every row is treated as an upsert into the build's coverage and
dependency maps, so the repetition collapses without pre-grouping.
"""

from __future__ import annotations

from typing import Iterable

from buildservice.models.domain import Build, BuildJoinRow


def _new_build(row: BuildJoinRow) -> Build:
    """Start a Build from the scalar columns of its first row."""
    return Build(
        hostname=row.hostname,
        architecture=row.architecture,
        go_version=row.go_version,
        source_url=row.source_url,
        binary_url=row.binary_url,
        version=row.version,
        language=row.language,
        name=row.name,
        branch=row.branch,
        timestamp=row.timestamp,
    )


def aggregate_build_rows(rows: Iterable[BuildJoinRow]) -> list[Build]:
    """Fold joined rows into one Build per (name, version).

    Builds are returned in the order their key was first seen. Map
    contents do not depend on row order within a build.

    Args:
        rows: Ordered join rows, consumed once.

    Returns:
        List of Build records, empty if there were no rows.
    """
    builds: list[Build] = []
    by_key: dict[tuple[str, str], Build] = {}

    for row in rows:
        key = (row.name, row.version)
        build = by_key.get(key)
        if build is None:
            build = _new_build(row)
            by_key[key] = build
            builds.append(build)

        if row.package is not None:
            build.coverage[row.package] = row.percentage

        if row.import_path is not None:
            build.dependencies[row.import_path] = row.commit
            if row.merge_base_date is not None:
                build.merge_base_dates[row.import_path] = row.merge_base_date

    return builds
