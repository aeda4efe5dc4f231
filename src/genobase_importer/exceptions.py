"""Exceptions raised by the import pipelines."""

from typing import Any


class ImporterError(Exception):
    """Base class for errors that abort an import run."""

    pass


class InvalidVariantIdError(ImporterError, ValueError):
    """Raised when a dbSNP identifier has no parsable numeric suffix."""

    def __init__(self, variant_id: str | None):
        self.variant_id = variant_id
        super().__init__(f"Could not parse variant ID: {variant_id!r}")


class FieldError(ImporterError):
    """Raised when a required INFO field cannot be read."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)


class FieldMissingError(FieldError):
    """The INFO key is absent from the record."""

    def __init__(self, key: str):
        super().__init__(key, f"INFO field {key} is missing")


class FieldTypeError(FieldError):
    """The INFO key is present but not encoded as expected."""

    def __init__(self, key: str, expected: str, value: Any):
        self.expected = expected
        self.value = value
        super().__init__(
            key,
            f"INFO field {key} should be {expected}, got {type(value).__name__}: {value!r}",
        )


class SourceOpenError(ImporterError):
    """Raised when an input file cannot be opened, decompressed or parsed."""

    pass


class ChainFileError(ImporterError):
    """Raised when a chain file contains a malformed header or block."""

    pass


class StoreError(ImporterError):
    """Raised when a bulk store call fails."""

    pass
