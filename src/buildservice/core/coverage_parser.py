"""Parser for `go test -cover` output.

Build agents pipe test output through `buildservice coverage` to get the
{package: percentage} map that is posted with the build:

    ok   _/jobs/svc-1234/workspace/dao   0.01s   coverage: 12.3% of statements

becomes {"dao": 12.3}. The package name is the path below the checkout
directory ("workspace"); the checkout root itself is "main".
"""

from __future__ import annotations

import json
import re
from typing import Iterable, TextIO

from buildservice.models.domain import Coverage

# Directory the build checks the service out into
PACKAGES_FROM = "workspace"

_PERCENTAGE_RE = re.compile(r"[0-9]{1,3}\.[0-9]{1,2}%")
_PACKAGE_PATH_RE = re.compile(r"_.*?\s")
_COVERAGE_LINE_RE = re.compile(r"ok.*?coverage")


class CoverageParseError(ValueError):
    """Raised when a coverage line cannot be parsed."""


def parse_line(line: str) -> Coverage:
    """Parse one `ok ... coverage: N% of statements` line.

    Raises:
        CoverageParseError: If the percentage or package path is missing.
    """
    match = _PERCENTAGE_RE.search(line)
    if match is None:
        raise CoverageParseError(f"Couldn't parse percentage: {line!r}")
    percentage = float(match.group()[:-1])

    path_match = _PACKAGE_PATH_RE.search(line)
    package_path = path_match.group().strip() if path_match else ""
    index = package_path.find(PACKAGES_FROM)
    if index == -1:
        raise CoverageParseError(f"Couldn't parse package name: {line!r}")

    package_name = package_path[index + len(PACKAGES_FROM):].lstrip("/")
    if not package_name:
        # Packages at the root of a service are normally main
        package_name = "main"

    return Coverage(package_name=package_name, percentage=percentage)


def parse_coverage(lines: Iterable[str]) -> list[Coverage]:
    """Parse every coverage line of a test run, ignoring other output."""
    return [parse_line(line) for line in lines if _COVERAGE_LINE_RE.search(line)]


def write_coverage(stream: TextIO, coverages: Iterable[Coverage]) -> None:
    """Write coverages as the JSON object the build service expects."""
    data = {c.package_name: c.percentage for c in coverages}
    stream.write(json.dumps(data, sort_keys=True, separators=(",", ":")))
    stream.write("\n")
