"""Build metadata, coverage history and dependency staleness service."""

__version__ = "0.1.0"
