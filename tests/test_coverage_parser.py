"""Tests for the `go test -cover` output parser."""

import io

import pytest

from buildservice.core.coverage_parser import (
    CoverageParseError,
    parse_coverage,
    parse_line,
    write_coverage,
)
from buildservice.models.domain import Coverage

TEST_OUTPUT = """Testing (normal)
=== RUN TestValidateBuild
--- PASS: TestValidateBuild (0.00 seconds)
=== RUN TestGetNames
--- PASS: TestGetNames (0.00 seconds)
PASS
coverage: 36.1% of statements
ok  \t_/ebs/jenkins/jobs/build-service-23b9ac1515dd/workspace\t0.007s\tcoverage: 36.1% of statements
?   \t_/ebs/jenkins/jobs/build-service-23b9ac1515dd/workspace/models\t[no test files]
=== RUN TestBlank
--- PASS: TestBlank (0.00 seconds)
PASS
coverage: 95.8% of statements
ok  \t_/ebs/jenkins/jobs/build-service-23b9ac1515dd/workspace/validate\t0.004s\tcoverage: 95.8% of statements
"""


class TestParseLine:
    """Parsing single coverage lines."""

    @pytest.mark.parametrize(
        "line,expected",
        [
            (
                "ok  \t_/ebs/jenkins/jobs/build-service-23b9ac1515dd/workspace\t0.007s\t"
                "coverage: 36.1% of statements",
                Coverage("main", 36.1),
            ),
            (
                "ok  \t_/ebs/jenkins/jobs/build-service-23b9ac1515dd/workspace/validate\t0.004s\t"
                "coverage: 95.8% of statements",
                Coverage("validate", 95.8),
            ),
            (
                "ok  \t_/jobs/svc/workspace/dao/mysql\t0.01s\tcoverage: 100.0% of statements",
                Coverage("dao/mysql", 100.0),
            ),
        ],
    )
    def test_parse_line(self, line, expected):
        """Package name is the path under the workspace."""
        assert parse_line(line) == expected

    def test_missing_percentage(self):
        """No percentage -> parse error."""
        with pytest.raises(CoverageParseError):
            parse_line("ok  \t_/jobs/svc/workspace\t0.007s\tcoverage: none")

    def test_missing_workspace(self):
        """Path outside a workspace -> parse error."""
        with pytest.raises(CoverageParseError):
            parse_line("ok  \t_/jobs/svc/checkout\t0.007s\tcoverage: 10.0% of statements")


class TestParseCoverage:
    """Parsing whole test runs."""

    def test_only_ok_lines_counted(self):
        """Summary lines and packages without tests are skipped."""
        coverages = parse_coverage(io.StringIO(TEST_OUTPUT))

        assert coverages == [Coverage("main", 36.1), Coverage("validate", 95.8)]


class TestWriteCoverage:
    """Writing the JSON map."""

    def test_compact_sorted_json(self):
        """Output is the compact {package: percentage} object."""
        out = io.StringIO()

        write_coverage(out, [Coverage("two", 99.99), Coverage("one", 10.01)])

        assert out.getvalue().strip() == '{"one":10.01,"two":99.99}'
