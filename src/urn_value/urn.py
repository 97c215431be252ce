"""URN Value Type

This module provides composition, parsing, validation, normalization and
attribute editing for URN strings of the form
`urn:<entity>:<id>(:<key>:<value>)*`.

All operations take and return plain strings. Parsing never decodes
percent-escapes: `entity`, `id` and `value` hand back segment text exactly as
it is stored. Use `Urn.decode` to reverse the encoding applied by `compose`.
"""

import logging
import re
import uuid
from enum import Enum
from typing import Dict, List, Mapping, Optional
from urllib.parse import quote, unquote

logger = logging.getLogger(__name__)


class UrnErrorKind(Enum):
    """Failure kinds reported by URN operations"""
    MISSING_SCHEME = "missing_scheme"
    MISSING_COMPONENT = "missing_component"
    EMPTY_COMPONENT = "empty_component"
    DANGLING_ATTRIBUTE_KEY = "dangling_attribute_key"
    EMPTY_ATTRIBUTE = "empty_attribute"
    MISSING_REQUIRED_FIELD = "missing_required_field"
    TOO_LONG = "too_long"
    INVALID_FORMAT = "invalid_format"


# Error classes
class UrnError(ValueError):
    """Base exception for URN errors"""
    kind: UrnErrorKind


class MissingSchemeError(UrnError):
    """Input does not start with `urn:`"""
    kind = UrnErrorKind.MISSING_SCHEME

    def __init__(self, urn: object):
        self.urn = urn
        super().__init__(f"URN must start with 'urn:': {urn!r}")


class MissingComponentError(UrnError):
    """Fewer than two segments after the scheme"""
    kind = UrnErrorKind.MISSING_COMPONENT

    def __init__(self, urn: str):
        self.urn = urn
        super().__init__(f"URN must have an entity and an id: {urn!r}")


class EmptyComponentError(UrnError):
    """Entity or id segment is empty"""
    kind = UrnErrorKind.EMPTY_COMPONENT

    def __init__(self, component: str):
        self.component = component
        super().__init__(f"URN {component} cannot be empty")


class DanglingAttributeKeyError(UrnError):
    """Attribute key without a paired value"""
    kind = UrnErrorKind.DANGLING_ATTRIBUTE_KEY

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Attribute key '{key}' has no value")


class EmptyAttributeError(UrnError):
    """Empty attribute key or value"""
    kind = UrnErrorKind.EMPTY_ATTRIBUTE

    def __init__(self, key: str):
        self.key = key
        if key:
            super().__init__(f"empty value for attribute '{key}'")
        else:
            super().__init__("empty attribute key")


class MissingRequiredFieldError(UrnError):
    """compose() called without entity or id"""
    kind = UrnErrorKind.MISSING_REQUIRED_FIELD

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"URN {field} is required")


class TooLongError(UrnError):
    """Composed URN exceeds the length limit"""
    kind = UrnErrorKind.TOO_LONG

    def __init__(self, length: int, limit: int):
        self.length = length
        self.limit = limit
        super().__init__(f"URN is {length} characters long, limit is {limit}")


class InvalidFormatError(UrnError):
    """Extraction attempted on a string that is not a valid URN"""
    kind = UrnErrorKind.INVALID_FORMAT

    def __init__(self, urn: object):
        self.urn = urn
        super().__init__(f"Invalid URN format: {urn!r}")


class ParsedUrn:
    """Components of a parsed URN

    Segments are kept exactly as they appear in the source string, so
    percent-escapes are still present.
    """

    def __init__(self, entity: str, id: str, attributes: Dict[str, str]):
        self.entity = entity
        self.id = id
        self.attributes = attributes

    def decoded(self) -> 'ParsedUrn':
        """Return a copy with every segment percent-decoded"""
        return ParsedUrn(
            unquote(self.entity),
            unquote(self.id),
            {unquote(k): unquote(v) for k, v in self.attributes.items()},
        )

    def to_string(self) -> str:
        """Join the raw segments back into a URN string

        No encoding and no length check; use Urn.compose for that.
        """
        return Urn._join(self.entity, self.id, self.attributes)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"ParsedUrn('{self.to_string()}')"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParsedUrn):
            return False
        return (self.entity == other.entity
                and self.id == other.id
                and self.attributes == other.attributes)

    def __hash__(self) -> int:
        return hash((self.entity, self.id, tuple(sorted(self.attributes.items()))))


class Urn:
    """URN composition, parsing and validation utilities

    Examples:
    - `urn:orders:1234`
    - `urn:product:65b2713b1267994147953b27:vendor:foo:sku:999`
    """

    SCHEME = "urn"
    SEPARATOR = ":"
    MAX_LENGTH = 255
    DEFAULT_UUID_ENTITY = "uuid"
    VENDOR_KEY = "vendor"
    # Letter or digit first, 2-32 characters, then letters, digits or hyphens
    ENTITY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9-]{1,31}$")

    @staticmethod
    def _encode(segment: str) -> str:
        """Percent-encode everything outside the unreserved set, including ':'"""
        return quote(segment, safe="")

    @staticmethod
    def decode(segment: str) -> str:
        """Reverse the percent-encoding applied by compose()"""
        return unquote(segment)

    @staticmethod
    def _split(urn: str) -> List[str]:
        """Split a URN into segments after the scheme"""
        prefix = Urn.SCHEME + Urn.SEPARATOR
        if not isinstance(urn, str) or not urn.lower().startswith(prefix):
            raise MissingSchemeError(urn)
        return urn[len(prefix):].split(Urn.SEPARATOR)

    @staticmethod
    def parse(urn: str) -> ParsedUrn:
        """Parse a URN string into its components

        Format: `urn:<entity>:<id>(:<key>:<value>)*`
        The scheme is matched case-insensitively.
        Later duplicate keys overwrite earlier ones.
        Percent-escapes are NOT decoded; segments are returned as stored.
        """
        segments = Urn._split(urn)

        if len(segments) < 2:
            raise MissingComponentError(urn)

        entity, id = segments[0], segments[1]
        if not entity:
            raise EmptyComponentError("entity")
        if not id:
            raise EmptyComponentError("id")

        tail = segments[2:]
        if len(tail) % 2 != 0:
            raise DanglingAttributeKeyError(tail[-1])

        attributes: Dict[str, str] = {}
        for i in range(0, len(tail), 2):
            key, value = tail[i], tail[i + 1]
            if not key or not value:
                raise EmptyAttributeError(key)
            attributes[key] = value

        return ParsedUrn(entity, id, attributes)

    @staticmethod
    def is_valid(urn: str) -> bool:
        """Check if a string is a valid URN

        Never raises. Rejects empty input, strings over MAX_LENGTH, anything
        parse() refuses, and entities that fail the token rule.
        """
        if not isinstance(urn, str) or not urn:
            logger.debug("Rejected URN %r: empty or not a string", urn)
            return False
        if len(urn) > Urn.MAX_LENGTH:
            logger.debug("Rejected URN of length %d: limit is %d", len(urn), Urn.MAX_LENGTH)
            return False

        try:
            parsed = Urn.parse(urn)
        except UrnError as e:
            logger.debug("Rejected URN %r: %s", urn, e)
            return False

        if not Urn.ENTITY_PATTERN.match(parsed.entity):
            logger.debug("Rejected URN %r: invalid entity '%s'", urn, parsed.entity)
            return False

        return True

    @staticmethod
    def compose(entity: str, id: str, attributes: Optional[Mapping[str, Optional[str]]] = None) -> str:
        """Build a canonical URN string from its components

        Entity, id, keys and values are percent-encoded individually.
        Attributes whose value is None are skipped; an empty key or an
        empty string value raises EmptyAttributeError, since the result
        could not be parsed back.
        """
        if not entity:
            raise MissingRequiredFieldError("entity")
        if not id:
            raise MissingRequiredFieldError("id")

        encoded: Dict[str, str] = {}
        for key, value in (attributes or {}).items():
            if value is None:
                continue
            if not key or not value:
                raise EmptyAttributeError(key)
            encoded[Urn._encode(key)] = Urn._encode(value)

        return Urn._checked_join(Urn._encode(entity), Urn._encode(id), encoded)

    @staticmethod
    def _join(entity: str, id: str, attributes: Mapping[str, str]) -> str:
        """Join already-encoded segments"""
        parts = [Urn.SCHEME, entity, id]
        for key, value in attributes.items():
            parts.append(key)
            parts.append(value)
        return Urn.SEPARATOR.join(parts)

    @staticmethod
    def _checked_join(entity: str, id: str, attributes: Mapping[str, str]) -> str:
        """Join already-encoded segments and enforce MAX_LENGTH"""
        result = Urn._join(entity, id, attributes)
        if len(result) > Urn.MAX_LENGTH:
            raise TooLongError(len(result), Urn.MAX_LENGTH)
        return result

    @staticmethod
    def _require_valid(urn: str) -> List[str]:
        if not Urn.is_valid(urn):
            raise InvalidFormatError(urn)
        return urn.split(Urn.SEPARATOR)

    @staticmethod
    def entity(urn: str) -> str:
        """Get the entity segment (not percent-decoded)"""
        return Urn._require_valid(urn)[1]

    @staticmethod
    def id(urn: str) -> str:
        """Get the id segment (not percent-decoded)"""
        return Urn._require_valid(urn)[2]

    @staticmethod
    def value(urn: str, key: str) -> Optional[str]:
        """Get the value of the first attribute matching key, or None

        Values are returned as stored, without percent-decoding.
        """
        parts = Urn._require_valid(urn)
        for i in range(3, len(parts) - 1, 2):
            if parts[i] == key:
                return parts[i + 1]
        return None

    @staticmethod
    def get_all_attributes(urn: str) -> Dict[str, str]:
        """Get all attributes in segment order"""
        parts = Urn._require_valid(urn)
        attributes: Dict[str, str] = {}
        for i in range(3, len(parts) - 1, 2):
            attributes[parts[i]] = parts[i + 1]
        return attributes

    @staticmethod
    def vendor(urn: str) -> Optional[str]:
        """Get the `vendor` attribute, or None"""
        return Urn.value(urn, Urn.VENDOR_KEY)

    @staticmethod
    def add_attribute(urn: str, key: str, value: str) -> str:
        """Add or overwrite an attribute, returning a new URN string

        Only the new key and value are percent-encoded; existing segments
        are kept exactly as stored.
        """
        if not key or not value:
            raise EmptyAttributeError(key)
        parsed = Urn.parse(urn)
        parsed.attributes[Urn._encode(key)] = Urn._encode(value)
        return Urn._checked_join(parsed.entity, parsed.id, parsed.attributes)

    @staticmethod
    def remove_attribute(urn: str, key: str) -> str:
        """Remove an attribute, returning a new URN string

        The key is matched against the raw segments, as reported by
        get_all_attributes(). Returns the input unchanged if it is absent.
        """
        parsed = Urn.parse(urn)
        if key not in parsed.attributes:
            return urn
        del parsed.attributes[key]
        return Urn._checked_join(parsed.entity, parsed.id, parsed.attributes)

    @staticmethod
    def normalize(urn: str) -> str:
        """Get the canonical form of a URN for equality comparison

        Only the scheme and entity are lowercased; id and attributes are
        kept byte for byte.
        """
        parsed = Urn.parse(urn)
        return Urn._checked_join(parsed.entity.lower(), parsed.id, parsed.attributes)

    @staticmethod
    def create_uuid(entity: str = DEFAULT_UUID_ENTITY) -> str:
        """Create `urn:<entity>:<uuid4>`"""
        urn = Urn.compose(entity, str(uuid.uuid4()))
        logger.debug("Generated URN %s", urn)
        return urn
