"""Domain models for the build service.

Pure Python dataclasses representing domain entities.
These models are independent of SQLAlchemy and used throughout
the application for clean separation from the database layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


# ============================================================================
# Build Domain
# ============================================================================


@dataclass
class Build:
    """Domain model for a single build of a service.

    Identity is (name, version). merge_base_dates only ever holds keys
    that are also present in dependencies.
    """

    hostname: str
    architecture: str
    source_url: str
    binary_url: str
    version: str
    language: str
    name: str
    branch: str
    timestamp: int
    go_version: str | None = None
    coverage: dict[str, float] = field(default_factory=dict)
    dependencies: dict[str, str] = field(default_factory=dict)
    merge_base_dates: dict[str, datetime] = field(default_factory=dict)

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.version)


@dataclass
class BuildJoinRow:
    """One denormalized row of builds LEFT JOIN coverage LEFT JOIN dependencies.

    The child columns are None when the outer join found no match.
    """

    hostname: str
    architecture: str
    go_version: str | None
    source_url: str
    binary_url: str
    version: str
    language: str
    name: str
    branch: str
    timestamp: int
    package: str | None = None
    percentage: float | None = None
    import_path: str | None = None
    commit: str | None = None
    merge_base_date: datetime | None = None


# ============================================================================
# Coverage Domain
# ============================================================================


@dataclass
class Coverage:
    """Coverage percentage of a single package."""

    package_name: str
    percentage: float


@dataclass
class CoverageRow:
    """One row of a service's coverage history."""

    service: str
    version: str
    branch: str
    package: str
    percentage: float
    timestamp: int


@dataclass
class CoverageSnapshot:
    """Per-package coverage of one service version at one instant."""

    timestamp: int
    branch: str
    version: str
    coverages: list[Coverage] = field(default_factory=list)
