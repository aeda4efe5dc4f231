"""Shared utility modules."""

from .validators import (
    ValidationError,
    parse_rsid,
    validate_genome_build,
)

__all__ = [
    "ValidationError",
    "parse_rsid",
    "validate_genome_build",
]
