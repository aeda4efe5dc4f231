"""Typed accessors for VCF INFO values.

cyvcf2 returns INFO values as Python scalars or tuples depending on the
header's Number/Type. These helpers pin each consumed key to one expected
encoding and fail with a distinguishable error when it is absent
(``FieldMissingError``) or encoded differently (``FieldTypeError``).
"""

from typing import Any

from .exceptions import FieldMissingError, FieldTypeError


def _get(info: Any, key: str) -> Any:
    value = info.get(key)
    if value is None:
        raise FieldMissingError(key)
    return value


def get_flag(info: Any, key: str) -> bool:
    """Read a Flag field. An absent flag is False.

    Older dbSNP releases encode flags as Integer 0/1; both are accepted.
    """
    value = info.get(key)
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    raise FieldTypeError(key, "flag", value)


def get_string(info: Any, key: str) -> str:
    value = _get(info, key)
    if isinstance(value, bytes):
        value = value.decode()
    if not isinstance(value, str):
        raise FieldTypeError(key, "string", value)
    return value


def get_float(info: Any, key: str) -> float:
    """Read a scalar Number=1 Float field."""
    value = _get(info, key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FieldTypeError(key, "float", value)
    return float(value)


def get_first_float(info: Any, key: str) -> float:
    """Read the first element of a Float array field (e.g. Number=A AF).

    cyvcf2 collapses single-element arrays to a scalar, so a bare number is
    accepted as a one-element array.
    """
    value = _get(info, key)
    if isinstance(value, (tuple, list)):
        if not value:
            raise FieldMissingError(key)
        value = value[0]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise FieldTypeError(key, "float array", value)
    return float(value)
