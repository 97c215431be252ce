"""URN Value - URN composition, parsing and validation

This package provides a string-based URN value type of the form
`urn:<entity>:<id>(:<key>:<value>)*` with percent-encoded segments,
length limits, and attribute editing.
"""

from .urn import (
    Urn,
    ParsedUrn,
    UrnError,
    UrnErrorKind,
    MissingSchemeError,
    MissingComponentError,
    EmptyComponentError,
    DanglingAttributeKeyError,
    EmptyAttributeError,
    MissingRequiredFieldError,
    TooLongError,
    InvalidFormatError,
)

__version__ = "0.1.0"

__all__ = [
    "Urn",
    "ParsedUrn",
    "UrnError",
    "UrnErrorKind",
    "MissingSchemeError",
    "MissingComponentError",
    "EmptyComponentError",
    "DanglingAttributeKeyError",
    "EmptyAttributeError",
    "MissingRequiredFieldError",
    "TooLongError",
    "InvalidFormatError",
]
