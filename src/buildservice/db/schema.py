"""Database schema for the build service.

Three tables: builds, plus the two independent one-to-many children
(coverage and dependencies) keyed by (service, version).
"""

from sqlalchemy import BigInteger, Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class BuildRecord(Base):
    """A registered build of a service.

    Invariant: UNIQUE(name, version)
    """

    __tablename__ = "builds"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hostname: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    architecture: Mapped[str] = mapped_column(String(10), nullable=False, default="")
    goversion: Mapped[str | None] = mapped_column(String(255), nullable=True)
    sourceurl: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    binaryurl: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    version: Mapped[str] = mapped_column(String(32), nullable=False, default="")
    language: Mapped[str] = mapped_column(String(127), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    branch: Mapped[str | None] = mapped_column(String(255), nullable=True)
    timestamp: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("name", "version", name="uq_build_identity"),
        Index("idx_timestamp", "timestamp"),
    )


class CoverageRecord(Base):
    """Coverage percentage of one package in one build."""

    __tablename__ = "coverage"

    service: Mapped[str] = mapped_column(String(255), primary_key=True)
    version: Mapped[str] = mapped_column(String(32), primary_key=True)
    package: Mapped[str] = mapped_column(String(255), primary_key=True)
    percentage: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)


class DependencyRecord(Base):
    """Commit of one dependency used by one build.

    mergebasedate is unix seconds, filled in after the build is created.
    """

    __tablename__ = "dependencies"

    service: Mapped[str] = mapped_column(String(255), primary_key=True)
    version: Mapped[str] = mapped_column(String(32), primary_key=True)
    importpath: Mapped[str] = mapped_column(String(255), primary_key=True)
    commit: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    mergebasedate: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (Index("idx_importpath_commit", "importpath", "commit"),)
