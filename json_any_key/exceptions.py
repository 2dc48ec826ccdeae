"""Exception hierarchy for json_any_key.

Every error raised by the package inherits from :class:`JsonAnyKeyError`.
Encoding failures derive from :class:`EncodeError`, decoding failures from
:class:`DecodeError`; each concrete class names the stage that failed through
its ``stage`` attribute, and the underlying pydantic/orjson error is chained
as ``__cause__``.
"""

from __future__ import annotations

from typing import Literal

Stage = Literal[
    "key_serialization",
    "value_serialization",
    "outer_json",
    "key_parse",
    "value_parse",
    "source",
    "strategy",
    "config",
]


def _short_repr(value: object, limit: int = 80) -> str:
    text = repr(value)
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


# ============================================================================
# Base Exception
# ============================================================================


class JsonAnyKeyError(Exception):
    """Base exception for all json_any_key errors.

    Catch this to handle every failure raised by the package.
    """

    stage: Stage | None = None


# ============================================================================
# Encoding Errors
# ============================================================================


class EncodeError(JsonAnyKeyError):
    """Raised when a pair cannot be written as a JSON object entry."""


class KeySerializationError(EncodeError):
    """Raised when a key cannot be serialized to JSON text.

    Examples
    --------
    Example usage::

        raise KeySerializationError(key, "Unable to serialize unknown type")
    """

    stage: Stage = "key_serialization"

    def __init__(self, key: object, reason: str) -> None:
        """Initialize key serialization error.

        Args
        ----
            key: The key that failed to serialize
            reason: Message reported by the serializer
        """
        super().__init__(f"Failed to serialize key {_short_repr(key)}: {reason}")
        self.key = key
        self.reason = reason


class ValueSerializationError(EncodeError):
    """Raised when the value of an entry cannot be serialized.

    Examples
    --------
    Example usage::

        raise ValueSerializationError(key, "Unable to serialize unknown type")
    """

    stage: Stage = "value_serialization"

    def __init__(self, key: object, reason: str) -> None:
        """Initialize value serialization error.

        Args
        ----
            key: Key of the entry whose value failed
            reason: Message reported by the serializer
        """
        super().__init__(f"Failed to serialize value for key {_short_repr(key)}: {reason}")
        self.key = key
        self.reason = reason


# ============================================================================
# Decoding Errors
# ============================================================================


class DecodeError(JsonAnyKeyError, ValueError):
    """Raised when JSON text cannot be turned back into pairs.

    Inherits from ``ValueError`` so pydantic validators convert it into a
    ``ValidationError`` when raised from a field strategy.
    """


class MalformedJSONError(DecodeError):
    """Raised when the input is not a JSON object.

    Covers syntax errors, a non-object top-level value and configured input
    limits.

    Examples
    --------
    Example usage::

        raise MalformedJSONError("unexpected end of data", line=1, col=9)
    """

    stage: Stage = "outer_json"

    def __init__(
        self,
        reason: str,
        line: int | None = None,
        col: int | None = None,
        preview: str | None = None,
    ) -> None:
        """Initialize malformed JSON error.

        Args
        ----
            reason: What is wrong with the input
            line: 1-based line of the syntax error (optional)
            col: 1-based column of the syntax error (optional)
            preview: Offending line with a caret under the column (optional)
        """
        msg = f"Malformed JSON object: {reason}"
        if line is not None and col is not None:
            msg += f" (line {line}, column {col})"
        if preview:
            msg += f"\n{preview}"
        super().__init__(msg)
        self.reason = reason
        self.line = line
        self.col = col
        self.preview = preview


class KeyParseError(DecodeError):
    """Raised when a field name cannot be parsed into the key type.

    Examples
    --------
    Example usage::

        raise KeyParseError("not json", "Invalid JSON: expected value")
    """

    stage: Stage = "key_parse"

    def __init__(self, field_name: str, reason: str) -> None:
        """Initialize key parse error.

        Args
        ----
            field_name: The JSON field name that failed
            reason: Validation message
        """
        super().__init__(f"Failed to parse field name {_short_repr(field_name)} as key: {reason}")
        self.field_name = field_name
        self.reason = reason


class ValueParseError(DecodeError):
    """Raised when a field value does not match the value type.

    Examples
    --------
    Example usage::

        raise ValueParseError("foo", "Input should be a valid integer")
    """

    stage: Stage = "value_parse"

    def __init__(self, field_name: str, reason: str) -> None:
        """Initialize value parse error.

        Args
        ----
            field_name: The JSON field name whose value failed
            reason: Validation message
        """
        super().__init__(f"Failed to parse value of field {_short_repr(field_name)}: {reason}")
        self.field_name = field_name
        self.reason = reason


# ============================================================================
# Usage Errors
# ============================================================================


class TypeMismatchError(JsonAnyKeyError, TypeError):
    """Raised when a source container has the wrong shape.

    Examples
    --------
    Example usage::

        raise TypeMismatchError("source", "mapping with items()", list)
    """

    stage: Stage = "source"

    def __init__(self, field: str, expected: type | str, actual: type | str) -> None:
        """Initialize type mismatch error.

        Args
        ----
            field: Name of the argument with the wrong type
            expected: Expected type or description
            actual: Actual type or description
        """
        exp_str = expected.__name__ if isinstance(expected, type) else str(expected)
        act_str = actual.__name__ if isinstance(actual, type) else str(actual)
        super().__init__(f"Type mismatch for '{field}': expected {exp_str}, got {act_str}")
        self.field = field
        self.expected = expected
        self.actual = actual


class StrategyError(JsonAnyKeyError, TypeError):
    """Raised when a field strategy is attached to an unsupported annotation.

    Examples
    --------
    Example usage::

        raise StrategyError("any_key_vec", set[int], "expected a sequence of pairs")
    """

    stage: Stage = "strategy"

    def __init__(self, strategy: str, annotation: object, reason: str) -> None:
        """Initialize strategy error.

        Args
        ----
            strategy: Name of the strategy (``any_key_map`` or ``any_key_vec``)
            annotation: The annotated field type
            reason: Why the annotation is not supported
        """
        super().__init__(f"Cannot apply '{strategy}' to {annotation!r}: {reason}")
        self.strategy = strategy
        self.annotation = annotation
        self.reason = reason


class ConfigurationError(JsonAnyKeyError):
    """Raised when a codec option is invalid.

    Examples
    --------
    Example usage::

        raise ConfigurationError("max_depth", "must be a positive integer")
    """

    stage: Stage = "config"

    def __init__(self, option: str, reason: str) -> None:
        """Initialize configuration error.

        Args
        ----
            option: Name of the invalid option
            reason: Explanation of what's wrong
        """
        super().__init__(f"Configuration error in '{option}': {reason}")
        self.option = option
        self.reason = reason


__all__ = [
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "JsonAnyKeyError",
    "KeyParseError",
    "KeySerializationError",
    "MalformedJSONError",
    "Stage",
    "StrategyError",
    "TypeMismatchError",
    "ValueParseError",
    "ValueSerializationError",
]
