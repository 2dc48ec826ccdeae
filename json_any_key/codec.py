"""Key-transcoding map codec.

Converts between a stream of ``(key, value)`` pairs and a JSON object whose
field names are either string keys verbatim or the compact JSON text of a
non-string key::

    >>> from json_any_key.codec import AnyKeyCodec
    >>> AnyKeyCodec(tuple[int, int], str).encode([((1, 2), "x")])
    '{"[1,2]":"x"}'

Pairs are written one at a time as they are pulled from the source, so any
one-shot iterator works and no string-keyed copy of the input is built.
Serialization and validation of individual keys and values are delegated to
pydantic ``TypeAdapter``s; the outer object is parsed with orjson.
"""

from __future__ import annotations

import io
from collections.abc import Callable, Iterable, Iterator
from typing import IO, Any

import orjson
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, PydanticSerializationUnexpectedValue

from json_any_key.config import DEFAULT_CONFIG, CodecConfig
from json_any_key.exceptions import (
    KeyParseError,
    KeySerializationError,
    MalformedJSONError,
    ValueParseError,
    ValueSerializationError,
)
from json_any_key.logging import get_logger

logger = get_logger(__name__)

JSONInput = str | bytes | bytearray | memoryview

_OPEN = b"{"
_CLOSE = b"}"
_COLON = b":"
_COMMA = b","

_STR_ADAPTER: TypeAdapter[str] = TypeAdapter(str)

_SERIALIZATION_ERRORS = (PydanticSerializationError, PydanticSerializationUnexpectedValue)

_JSON_TYPE_NAMES: dict[type, str] = {
    list: "array",
    str: "string",
    int: "number",
    float: "number",
    bool: "boolean",
    type(None): "null",
}


def is_string_schema(adapter: TypeAdapter[Any]) -> bool:
    """Return True if *adapter* validates and serializes plain JSON strings.

    Matches ``str`` itself as well as constrained or annotated strings
    (``Annotated[str, Field(min_length=1)]``, ``constr(...)``).
    """
    return adapter.core_schema.get("type") == "str"


def _describe(exc: PydanticValidationError) -> str:
    errors = exc.errors(include_url=False)
    parts = []
    for error in errors[:3]:
        loc = ".".join(str(item) for item in error["loc"])
        parts.append(f"{loc}: {error['msg']}" if loc else error["msg"])
    if len(errors) > 3:
        parts.append(f"... and {len(errors) - 3} more")
    return "; ".join(parts)


class AnyKeyCodec[K, V]:
    """Bidirectional codec between pairs and JSON object text.

    Parameters
    ----------
    key_type : Any, optional
        Type of the keys. ``None`` or ``typing.Any`` infers per key when
        encoding (``str`` keys are written verbatim, anything else as JSON
        text) and returns field names unchanged when decoding.
    value_type : Any, optional
        Type of the values. ``None`` means ``typing.Any``.
    config : CodecConfig, optional
        Serialization options and decode limits.

    Examples
    --------
    >>> codec = AnyKeyCodec(int, float)
    >>> codec.encode({5: 7.0}.items())
    '{"5":7.0}'
    >>> codec.decode('{"5":7.0}')
    {5: 7.0}
    """

    __slots__ = (
        "_dump_options",
        "_infer_keys",
        "_key_adapter",
        "_key_is_str",
        "_value_adapter",
        "config",
        "key_type",
        "value_type",
    )

    def __init__(
        self,
        key_type: Any = None,
        value_type: Any = None,
        config: CodecConfig | None = None,
    ) -> None:
        self.key_type = Any if key_type is None else key_type
        self.value_type = Any if value_type is None else value_type
        self.config = config or DEFAULT_CONFIG

        self._key_adapter: TypeAdapter[K] = TypeAdapter(self.key_type)
        self._value_adapter: TypeAdapter[V] = TypeAdapter(self.value_type)
        self._infer_keys = self.key_type is Any
        self._key_is_str = not self._infer_keys and is_string_schema(self._key_adapter)
        self._dump_options = self.config.dump_options()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(key_type={self.key_type!r}, value_type={self.value_type!r})"

    @property
    def string_keys(self) -> bool:
        """Whether field names are used verbatim as keys when decoding."""
        return self._infer_keys or self._key_is_str

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    def _encode_field(self, key: Any) -> bytes:
        """Return the quoted, escaped field name for *key*.

        Only exact ``str`` instances take the verbatim path when keys are
        inferred; ``str`` subclasses are serialized like their declared type.
        """
        try:
            if self._infer_keys:
                if type(key) is str:
                    return _STR_ADAPTER.dump_json(key)
                fragment = self._key_adapter.dump_json(key, **self._dump_options)
            elif self._key_is_str:
                return self._key_adapter.dump_json(key, **self._dump_options)
            else:
                fragment = self._key_adapter.dump_json(key, **self._dump_options)
        except _SERIALIZATION_ERRORS as exc:
            raise KeySerializationError(key, str(exc)) from exc
        return _STR_ADAPTER.dump_json(fragment.decode())

    def field_name(self, key: K) -> str:
        """Return the unescaped field name *key* is written under.

        Raises
        ------
        KeySerializationError
            If the key cannot be serialized
        """
        if self._infer_keys and type(key) is str:
            return key
        try:
            if self._key_is_str:
                return self._key_adapter.dump_python(key, mode="json", **self._dump_options)
            return self._key_adapter.dump_json(key, **self._dump_options).decode()
        except _SERIALIZATION_ERRORS as exc:
            raise KeySerializationError(key, str(exc)) from exc

    def decode_key(self, name: str) -> K:
        """Turn a field name back into a key.

        String keys are validated directly; other key types parse the field
        name as JSON text, subject to the configured ``max_depth``.

        Raises
        ------
        KeyParseError
            If the field name is not a valid key
        """
        if self.string_keys:
            try:
                return self._key_adapter.validate_python(name)
            except PydanticValidationError as exc:
                raise KeyParseError(name, _describe(exc)) from exc

        max_depth = self.config.max_depth
        if max_depth is not None and estimate_depth(name) > max_depth:
            raise KeyParseError(name, f"key exceeds depth limit of {max_depth}")
        try:
            return self._key_adapter.validate_json(name)
        except PydanticValidationError as exc:
            raise KeyParseError(name, _describe(exc)) from exc

    def coerce_key(self, key: Any) -> K:
        """Validate a key given as python data.

        A plain ``str`` is treated as a field name (see :meth:`decode_key`);
        any other object, ``str`` subclasses such as ``StrEnum`` members
        included, is validated as the key type directly.

        Raises
        ------
        KeyParseError
            If the key is not valid for the key type
        """
        if type(key) is str:
            return self.decode_key(key)
        try:
            return self._key_adapter.validate_python(key)
        except PydanticValidationError as exc:
            raise KeyParseError(repr(key), _describe(exc)) from exc

    # ------------------------------------------------------------------
    # Values
    # ------------------------------------------------------------------

    def _encode_value(self, key: Any, value: Any) -> bytes:
        try:
            return self._value_adapter.dump_json(value, **self._dump_options)
        except _SERIALIZATION_ERRORS as exc:
            raise ValueSerializationError(key, str(exc)) from exc

    def decode_value(self, name: str, raw: Any) -> V:
        """Validate the parsed JSON value stored under field *name*.

        Raises
        ------
        ValueParseError
            If the value does not match the value type
        """
        try:
            return self._value_adapter.validate_python(raw)
        except PydanticValidationError as exc:
            raise ValueParseError(name, _describe(exc)) from exc

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def iter_encode(self, pairs: Iterable[tuple[K, V]]) -> Iterator[bytes]:
        """Yield the JSON object for *pairs* as a stream of byte chunks.

        One chunk is produced per entry, right after the pair is pulled from
        *pairs*. If a key or value fails, the error is raised at that point
        and the chunks already yielded do not form valid JSON.

        Raises
        ------
        KeySerializationError
            If a key cannot be serialized
        ValueSerializationError
            If a value cannot be serialized
        """
        yield _OPEN
        count = 0
        for key, value in pairs:
            entry = self._encode_field(key) + _COLON + self._encode_value(key, value)
            yield entry if count == 0 else _COMMA + entry
            count += 1
        yield _CLOSE
        logger.debug(
            "Encoded {count} entries (key type {key_type})", count=count, key_type=self.key_type
        )

    def encode_bytes(self, pairs: Iterable[tuple[K, V]]) -> bytes:
        """Serialize *pairs* to UTF-8 encoded JSON object text."""
        return b"".join(self.iter_encode(pairs))

    def encode(self, pairs: Iterable[tuple[K, V]]) -> str:
        """Serialize *pairs* to JSON object text."""
        return self.encode_bytes(pairs).decode()

    def write(self, pairs: Iterable[tuple[K, V]], fp: IO[bytes] | IO[str]) -> None:
        """Stream the JSON object for *pairs* into a file-like object.

        Text streams (``io.TextIOBase`` or a file opened without ``"b"`` in its
        mode) receive ``str`` chunks, anything else receives ``bytes``.
        Nothing is rolled back on failure.
        """
        if _is_text_sink(fp):
            for chunk in self.iter_encode(pairs):
                fp.write(chunk.decode())
        else:
            for chunk in self.iter_encode(pairs):
                fp.write(chunk)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def _parse_object(self, data: JSONInput) -> dict[str, Any]:
        max_size = self.config.max_size_bytes
        if max_size is not None:
            size = len(data.encode()) if isinstance(data, str) else len(data)
            if size > max_size:
                raise MalformedJSONError(f"input exceeds size limit of {max_size} bytes")

        max_depth = self.config.max_depth
        if max_depth is not None:
            text = data if isinstance(data, str) else bytes(data).decode(errors="replace")
            if estimate_depth(text) > max_depth:
                raise MalformedJSONError(f"input exceeds depth limit of {max_depth}")

        try:
            parsed = orjson.loads(data)
        except orjson.JSONDecodeError as exc:
            text = data if isinstance(data, str) else bytes(data).decode(errors="replace")
            raise MalformedJSONError(
                exc.msg,
                line=exc.lineno,
                col=exc.colno,
                preview=_format_error_line(text, exc.lineno, exc.colno),
            ) from exc

        if not isinstance(parsed, dict):
            json_type = _JSON_TYPE_NAMES.get(type(parsed), type(parsed).__name__)
            raise MalformedJSONError(f"expected a JSON object, got {json_type}")
        return parsed

    def iter_decode(self, data: JSONInput) -> Iterator[tuple[K, V]]:
        """Parse *data* and return a lazy iterator of typed pairs.

        The outer object is parsed immediately, so malformed input raises
        here. Keys and values are validated as the iterator advances; a bad
        entry raises when it is reached.

        Raises
        ------
        MalformedJSONError
            If *data* is not a JSON object
        """
        return self._iter_entries(self._parse_object(data))

    def _iter_entries(self, obj: dict[str, Any]) -> Iterator[tuple[K, V]]:
        for name, raw in obj.items():
            yield self.decode_key(name), self.decode_value(name, raw)

    def decode[C](
        self,
        data: JSONInput,
        into: Callable[[Iterable[tuple[K, V]]], C] = dict,  # type: ignore[assignment]
    ) -> C:
        """Deserialize JSON object text into a collection built by *into*.

        Parameters
        ----------
        data : str | bytes | bytearray | memoryview
            JSON object text.
        into : Callable, default=dict
            Anything that builds a collection from an iterable of pairs
            (``dict``, ``OrderedDict``, ``list``, ``tuple``, ...).

        Raises
        ------
        MalformedJSONError
            If *data* is not a JSON object
        KeyParseError
            If a field name is not a valid key
        ValueParseError
            If a value does not match the value type
        """
        obj = self._parse_object(data)
        result = into(self._iter_entries(obj))
        logger.debug(
            "Decoded {count} entries into {target}",
            count=len(obj),
            target=getattr(into, "__name__", repr(into)),
        )
        return result


def _is_text_sink(fp: Any) -> bool:
    if isinstance(fp, io.TextIOBase):
        return True
    mode = getattr(fp, "mode", None)
    return isinstance(mode, str) and "b" not in mode


def estimate_depth(text: str) -> int:
    """Return the maximum container nesting depth of JSON *text*.

    Brackets inside string literals are ignored. The scan does not validate
    the text, it only bounds how deep a parser would have to go.
    """
    depth = 0
    max_depth = 0
    in_str = False
    esc = False
    for ch in text:
        if in_str:
            if esc:
                esc = False
            elif ch == "\\":
                esc = True
            elif ch == '"':
                in_str = False
            continue
        if ch == '"':
            in_str = True
        elif ch in "{[":
            depth += 1
            max_depth = max(max_depth, depth)
        elif ch in "]}":
            depth = max(depth - 1, 0)
    return max_depth


def _format_error_line(text: str, line_no: int, col_no: int) -> str | None:
    """Return the offending line with a caret under the error column."""
    lines = text.splitlines()
    if 1 <= line_no <= len(lines):
        line = lines[line_no - 1]
        caret_line = " " * max(col_no - 1, 0) + "^"
        return f"{line}\n{caret_line}"
    return None


__all__ = ["AnyKeyCodec", "JSONInput", "estimate_depth", "is_string_schema"]
