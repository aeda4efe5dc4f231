"""Input validation utilities."""

import re

from ..exceptions import InvalidVariantIdError


class ValidationError(ValueError):
    """Raised when input validation fails."""

    pass


RSID_PATTERN = re.compile(r"^rs(\d+)$")

RSID_PREFIX = "rs"

# Largest id a BIGINT column can hold.
MAX_VARIANT_ID = 2**63 - 1

GENOME_BUILD_ALIASES = {
    "grch38": "GRCh38",
    "hg38": "GRCh38",
    "grch37": "GRCh37",
    "hg19": "GRCh37",
}


def parse_rsid(value: str | None) -> int:
    """Parse the numeric part of an rsID.

    Args:
        value: Identifier such as ``rs12345``

    Returns:
        The numeric identifier (12345)

    Raises:
        InvalidVariantIdError: If the value is not ``rs`` followed by digits,
            or the number does not fit in a signed 64-bit integer
    """
    if value is None:
        raise InvalidVariantIdError(value)

    match = RSID_PATTERN.match(value.strip())
    if not match:
        raise InvalidVariantIdError(value)

    variant_id = int(match.group(1))
    if variant_id > MAX_VARIANT_ID:
        raise InvalidVariantIdError(value)

    return variant_id


def validate_genome_build(
    value: str | None,
    default: str = "GRCh38",
    required: bool = False,
) -> str:
    """Validate and normalize genome build.

    Accepts common aliases: GRCh38/hg38, GRCh37/hg19

    Args:
        value: Genome build string
        default: Default value if None or empty
        required: If True, None or empty raises instead of using the default

    Returns:
        Normalized genome build (GRCh38 or GRCh37)

    Raises:
        ValidationError: If build is not recognized, or missing when required
    """
    if value is None or value.strip() == "":
        if required:
            raise ValidationError("genome build is required")
        return default

    normalized = value.strip().lower()

    if normalized in GENOME_BUILD_ALIASES:
        return GENOME_BUILD_ALIASES[normalized]

    valid_values = list(GENOME_BUILD_ALIASES.keys())
    raise ValidationError(
        f"Invalid genome build: '{value}'. Valid values: {', '.join(valid_values)}"
    )
