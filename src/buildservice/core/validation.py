"""Required-field validation for incoming records.

Each record type lists the fields that must not be blank. Fields are
read with getattr, so domain dataclasses and API payloads validate the
same way.
"""

from __future__ import annotations

# Record type name -> fields that must be non-blank
REQUIRED_FIELDS: dict[str, tuple[str, ...]] = {
    "Build": (
        "hostname",
        "architecture",
        "source_url",
        "binary_url",
        "version",
        "language",
        "name",
        "branch",
    ),
}


def validate_required(record: object, record_type: str) -> list[str]:
    """Check that every required field of `record_type` is non-blank.

    Args:
        record: Object carrying the fields as attributes.
        record_type: Key into REQUIRED_FIELDS.

    Returns:
        One message per blank field, empty if the record is valid.

    Raises:
        KeyError: If record_type has no required-field configuration.
    """
    errors = []
    for field_name in REQUIRED_FIELDS[record_type]:
        value = getattr(record, field_name, None)
        if value is None or (isinstance(value, str) and value == ""):
            errors.append(f"{field_name} cannot be blank")
    return errors


def validate_build(build: object) -> list[str]:
    """Validate a Build or BuildPayload."""
    return validate_required(build, "Build")
