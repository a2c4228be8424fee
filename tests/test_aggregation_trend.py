"""Tests for coverage trend grouping."""

from buildservice.aggregation.trend import group_coverage_rows
from buildservice.models.domain import Coverage, CoverageRow, CoverageSnapshot


def _row(version, package, percentage, timestamp, branch="master") -> CoverageRow:
    return CoverageRow(
        service="service",
        version=version,
        branch=branch,
        package=package,
        percentage=percentage,
        timestamp=timestamp,
    )


class TestGroupCoverageRows:
    """Grouping rows by timestamp."""

    def test_two_timestamps(self):
        """Two builds with two packages each -> two ordered snapshots."""
        rows = [
            _row("123", "pkg1", 50.0, 312234234),
            _row("123", "pkg2", 60.0, 312234234),
            _row("124", "pkg1", 51.0, 312234235),
            _row("124", "pkg2", 61.0, 312234235),
        ]

        snapshots = group_coverage_rows(rows)

        assert snapshots == [
            CoverageSnapshot(
                timestamp=312234234,
                branch="master",
                version="123",
                coverages=[Coverage("pkg1", 50.0), Coverage("pkg2", 60.0)],
            ),
            CoverageSnapshot(
                timestamp=312234235,
                branch="master",
                version="124",
                coverages=[Coverage("pkg1", 51.0), Coverage("pkg2", 61.0)],
            ),
        ]

    def test_empty_input(self):
        """No rows -> no snapshots."""
        assert group_coverage_rows([]) == []

    def test_output_sorted_even_if_input_is_not(self):
        """Snapshots are sorted by timestamp ascending."""
        rows = [
            _row("3", "a", 3.0, 300),
            _row("1", "a", 1.0, 100),
            _row("2", "a", 2.0, 200),
        ]

        snapshots = group_coverage_rows(rows)

        assert [s.timestamp for s in snapshots] == [100, 200, 300]
        assert [s.version for s in snapshots] == ["1", "2", "3"]

    def test_rows_keep_order_within_group(self):
        """Package order inside a snapshot is input order."""
        rows = [_row("1", "b", 2.0, 100), _row("1", "a", 1.0, 100), _row("1", "c", 3.0, 100)]

        [snapshot] = group_coverage_rows(rows)

        assert [c.package_name for c in snapshot.coverages] == ["b", "a", "c"]


class TestPartition:
    """Every row lands in exactly one snapshot."""

    def test_total_coverage_entries_equals_row_count(self):
        """Sum of snapshot sizes equals row count."""
        rows = [
            _row(str(ts), f"pkg{p}", float(p), ts)
            for ts in (10, 20, 30, 40)
            for p in range(ts // 10)
        ]

        snapshots = group_coverage_rows(rows)

        assert len(snapshots) == 4
        assert sum(len(s.coverages) for s in snapshots) == len(rows)
        assert [len(s.coverages) for s in snapshots] == [1, 2, 3, 4]


class TestSharedTimestamp:
    """Two builds recorded at the same second."""

    def test_first_row_sets_branch_and_version(self):
        """The first row seen for a timestamp names the snapshot."""
        rows = [
            _row("1", "a", 10.0, 100, branch="master"),
            _row("2", "a", 20.0, 100, branch="feature"),
            _row("2", "b", 30.0, 100, branch="feature"),
        ]

        [snapshot] = group_coverage_rows(rows)

        assert snapshot.branch == "master"
        assert snapshot.version == "1"
        assert [c.percentage for c in snapshot.coverages] == [10.0, 20.0, 30.0]

    def test_result_is_deterministic(self):
        """Same input, same output."""
        rows = [
            _row("1", "a", 10.0, 100, branch="master"),
            _row("2", "a", 20.0, 100, branch="feature"),
        ]
        assert group_coverage_rows(rows) == group_coverage_rows(list(rows))

    def test_shared_package_appears_once_per_build(self):
        """Both builds' rows for a package stay in the merged snapshot."""
        rows = [
            _row("1", "a", 10.0, 100),
            _row("2", "a", 20.0, 100),
        ]

        [snapshot] = group_coverage_rows(rows)

        assert [c.package_name for c in snapshot.coverages] == ["a", "a"]
