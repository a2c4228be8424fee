"""Pydantic models for the build service API.

Field aliases keep the wire format used by existing build agents
(``Hostname``, ``SourceURL``, ``TimeStamp``...).
"""

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# Unix seconds, stored as a signed 64-bit integer
Timestamp = Annotated[int, Field(ge=0, le=2**63 - 1)]

# Percentage of statements covered
Percentage = Annotated[float, Field(ge=0, le=100)]


class BuildPayload(BaseModel):
    """Build registration body for POST /builds.

    Required fields default to blank so validation can report every
    missing field at once instead of failing on the first one.
    """

    model_config = ConfigDict(populate_by_name=True)

    hostname: str = Field("", alias="Hostname")
    architecture: str = Field("", alias="Architecture")
    go_version: str | None = Field(None, alias="GoVersion")
    source_url: str = Field("", alias="SourceURL")
    binary_url: str = Field("", alias="BinaryURL")
    version: str = Field("", alias="Version")
    language: str = Field("", alias="Language")
    name: str = Field("", alias="Name")
    branch: str = Field("", alias="Branch")
    timestamp: Timestamp = Field(0, alias="TimeStamp")
    coverage: dict[str, Percentage] | None = Field(None, alias="Coverage")
    dependencies: dict[str, str] | None = Field(None, alias="Dependencies")


class BuildDetail(BaseModel):
    """Build details for API response.

    Empty maps are carried as None so routes can drop them with
    response_model_exclude_none.
    """

    model_config = ConfigDict(populate_by_name=True)

    hostname: str = Field(alias="Hostname")
    architecture: str = Field(alias="Architecture")
    go_version: str | None = Field(None, alias="GoVersion")
    source_url: str = Field(alias="SourceURL")
    binary_url: str = Field(alias="BinaryURL")
    version: str = Field(alias="Version")
    language: str = Field(alias="Language")
    name: str = Field(alias="Name")
    branch: str = Field(alias="Branch")
    timestamp: int = Field(alias="TimeStamp")
    coverage: dict[str, float] | None = Field(None, alias="Coverage")
    dependencies: dict[str, str] | None = Field(None, alias="Dependencies")
    merge_base_dates: dict[str, datetime] | None = Field(None, alias="MergeBaseDates")


class CoverageDetail(BaseModel):
    """Coverage of one package inside a snapshot."""

    model_config = ConfigDict(populate_by_name=True)

    package_name: str = Field(alias="PackageName")
    percentage: float = Field(alias="Percentage")


class CoverageSnapshotDetail(BaseModel):
    """Coverage snapshot for API response."""

    model_config = ConfigDict(populate_by_name=True)

    coverages: list[CoverageDetail] = Field(alias="Coverages")
    branch: str = Field(alias="Branch")
    version: str = Field(alias="Version")
    timestamp: int = Field(alias="Timestamp")
