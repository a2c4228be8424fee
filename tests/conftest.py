"""Shared pytest fixtures for buildservice tests."""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from buildservice.db.schema import Base
from buildservice.models.domain import Build


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def session(engine):
    """Create a database session for testing."""
    Session = sessionmaker(bind=engine)
    session = Session()
    yield session
    session.close()


def _make_build(**overrides) -> Build:
    """Build with every required field filled in."""
    fields = dict(
        hostname="localhost",
        architecture="amd64",
        go_version="1.1.1",
        source_url="https://github.com/hailocab/build-service/commit/53d6db9a88494e948b64415f53e1bf9da7efcc4b",
        binary_url="http://s3.amazon.com/abcdefg",
        version="20130627091746",
        language="Go",
        name="com.hailocab.kernel.build-service",
        branch="master",
        timestamp=1372346773,
        coverage={"dao": 12.3, "domain": 100.0},
        dependencies={
            "github.com/hailocab/go-server-layer": "e6dc54ee3618c7b354dccdb6425cf4f82e07423c",
        },
    )
    fields.update(overrides)
    return Build(**fields)


@pytest.fixture
def make_build():
    """Factory for valid builds; keyword arguments override fields."""
    return _make_build


@pytest.fixture
def build() -> Build:
    """A valid build with two coverage entries and one dependency."""
    return _make_build()
