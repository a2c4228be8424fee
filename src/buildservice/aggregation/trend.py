"""Coverage trend grouping.

Turns a service's coverage history rows into one snapshot per build
timestamp, ordered oldest first.
"""

from __future__ import annotations

from typing import Iterable

from buildservice.models.domain import Coverage, CoverageRow, CoverageSnapshot


def group_coverage_rows(rows: Iterable[CoverageRow]) -> list[CoverageSnapshot]:
    """Group coverage rows into snapshots keyed by timestamp.

    Rows keep their relative order inside a snapshot. Branch and version
    come from the first row seen for the timestamp; if two builds share a
    timestamp their packages end up in the same snapshot under that
    first row's identity, and a package name can then appear more than
    once in that snapshot.

    Args:
        rows: Coverage rows for one service, ordered by (timestamp, package).

    Returns:
        Snapshots sorted by timestamp ascending.
    """
    by_timestamp: dict[int, CoverageSnapshot] = {}

    for row in rows:
        snapshot = by_timestamp.get(row.timestamp)
        if snapshot is None:
            snapshot = CoverageSnapshot(
                timestamp=row.timestamp,
                branch=row.branch,
                version=row.version,
            )
            by_timestamp[row.timestamp] = snapshot
        snapshot.coverages.append(
            Coverage(package_name=row.package, percentage=row.percentage)
        )

    return sorted(by_timestamp.values(), key=lambda s: s.timestamp)
