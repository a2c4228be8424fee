"""Tests for required-field validation."""

from dataclasses import dataclass

import pytest

from buildservice.core.validation import REQUIRED_FIELDS, validate_build, validate_required
from buildservice.models.types import BuildPayload


class TestValidateBuild:
    """Required fields of a build."""

    def test_valid_build(self, build):
        """A complete build has no errors."""
        assert validate_build(build) == []

    def test_missing_hostname(self, make_build):
        """One blank field -> one error."""
        errors = validate_build(make_build(hostname=""))
        assert errors == ["hostname cannot be blank"]

    def test_only_empty_string_is_blank(self, make_build):
        """Whitespace-only values are kept; only "" is blank."""
        assert validate_build(make_build(hostname="  ", branch="")) == ["branch cannot be blank"]

    def test_go_version_optional(self, make_build):
        """The toolchain version may be missing."""
        assert validate_build(make_build(go_version=None)) == []

    def test_empty_payload_reports_every_field(self):
        """An empty body reports each required field."""
        errors = validate_build(BuildPayload())
        assert len(errors) == len(REQUIRED_FIELDS["Build"])


class TestValidateRequired:
    """Generic required-field checks."""

    def test_unknown_record_type(self):
        """Record types must be configured."""

        @dataclass
        class Thing:
            a: str

        with pytest.raises(KeyError):
            validate_required(Thing("x"), "Thing")
