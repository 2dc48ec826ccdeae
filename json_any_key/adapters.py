"""Collection-level entry points for the key-transcoding codec.

These functions route any reasonable container shape to
:class:`~json_any_key.codec.AnyKeyCodec` without copying it first:

- mappings (``dict``, ``OrderedDict``, ``MappingProxyType``, custom classes
  with ``items()``)
- sequences of pairs (``list[tuple[K, V]]``, ``tuple`` of pairs, ``deque``)
- one-shot iterators of pairs (generators, ``zip``, ``dict.items()``)

and build any pair-constructible collection on the way back.

Examples
--------
>>> from json_any_key import json_to_map, map_to_json
>>> text = map_to_json({(1, 2): "a"})
>>> text
'{"[1,2]":"a"}'
>>> json_to_map(text, tuple[int, int], str)
{(1, 2): 'a'}
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import IO, Any, Protocol, runtime_checkable

from json_any_key.codec import AnyKeyCodec, JSONInput
from json_any_key.config import CodecConfig
from json_any_key.exceptions import TypeMismatchError

# Pairs are consumed in iteration order; nothing here reorders or deduplicates.


@runtime_checkable
class SupportsItems[K, V](Protocol):
    """Anything exposing a mapping-style ``items()`` view."""

    def items(self) -> Iterable[tuple[K, V]]: ...


type PairSource[K, V] = SupportsItems[K, V] | Iterable[tuple[K, V]]


def iter_pairs[K, V](source: PairSource[K, V]) -> Iterator[tuple[K, V]]:
    """Return an iterator over the ``(key, value)`` pairs of *source*.

    Objects with a callable ``items()`` are traversed through it; any other
    iterable is assumed to yield pairs already. The source is never copied.

    Raises
    ------
    TypeMismatchError
        If *source* is neither a mapping nor iterable
    """
    items = getattr(source, "items", None)
    if callable(items):
        return iter(items())
    if isinstance(source, (str, bytes, bytearray)) or not isinstance(source, Iterable):
        raise TypeMismatchError("source", "mapping or iterable of pairs", type(source))
    return iter(source)


def map_to_json(
    mapping: SupportsItems[Any, Any],
    *,
    key_type: Any = None,
    value_type: Any = None,
    config: CodecConfig | None = None,
) -> str:
    """Serialize a mapping to a JSON object, transcoding non-string keys.

    Parameters
    ----------
    mapping : SupportsItems
        ``dict``, ``OrderedDict`` or any object with ``items()``.
    key_type, value_type : Any, optional
        Declared key and value types. Omitted types are inferred per entry.
    config : CodecConfig, optional
        Serialization options.

    Raises
    ------
    TypeMismatchError
        If *mapping* has no ``items()`` method
    KeySerializationError
        If a key cannot be serialized
    ValueSerializationError
        If a value cannot be serialized

    Examples
    --------
    >>> map_to_json({"foo": 1234})
    '{"foo":1234}'
    """
    if not callable(getattr(mapping, "items", None)):
        raise TypeMismatchError("mapping", "mapping with items()", type(mapping))
    return AnyKeyCodec(key_type, value_type, config).encode(mapping.items())


def vec_to_json(
    pairs: Iterable[tuple[Any, Any]],
    *,
    key_type: Any = None,
    value_type: Any = None,
    config: CodecConfig | None = None,
) -> str:
    """Serialize a sequence of ``(key, value)`` tuples to a JSON object.

    The result is the same text :func:`map_to_json` produces for a mapping
    with the same entries in the same order.

    Raises
    ------
    TypeMismatchError
        If *pairs* is a mapping (iterating it would yield keys only)

    Examples
    --------
    >>> vec_to_json([(5, "five")])
    '{"5":"five"}'
    """
    if isinstance(pairs, Mapping):
        raise TypeMismatchError("pairs", "sequence of (key, value) tuples", type(pairs))
    return AnyKeyCodec(key_type, value_type, config).encode(iter_pairs(pairs))


def iter_to_json(
    source: PairSource[Any, Any],
    *,
    key_type: Any = None,
    value_type: Any = None,
    config: CodecConfig | None = None,
) -> str:
    """Serialize any pair source, consuming it, to a JSON object.

    Accepts mappings, sequences of pairs and one-shot iterators such as
    generators or ``zip`` objects.

    Examples
    --------
    >>> iter_to_json(zip([1, 2], ["a", "b"]))
    '{"1":"a","2":"b"}'
    """
    return AnyKeyCodec(key_type, value_type, config).encode(iter_pairs(source))


def write_json_map(
    source: PairSource[Any, Any],
    fp: IO[bytes] | IO[str],
    *,
    key_type: Any = None,
    value_type: Any = None,
    config: CodecConfig | None = None,
) -> None:
    """Stream the JSON object for *source* into a file-like object.

    Entries are written as they are read from *source*. On failure the data
    already written is not valid JSON; discarding it is up to the caller.
    """
    AnyKeyCodec(key_type, value_type, config).write(iter_pairs(source), fp)


def json_to_map[C](
    data: JSONInput,
    key_type: Any = str,
    value_type: Any = Any,
    *,
    into: Callable[[Iterable[tuple[Any, Any]]], C] = dict,  # type: ignore[assignment]
    config: CodecConfig | None = None,
) -> C:
    """Deserialize a JSON object into a mapping.

    Parameters
    ----------
    data : str | bytes | bytearray | memoryview
        JSON object text.
    key_type : Any, default=str
        Type the field names are parsed into. ``str`` keeps them verbatim.
    value_type : Any, default=Any
        Type the values are validated as.
    into : Callable, default=dict
        Mapping factory, e.g. ``OrderedDict``.
    config : CodecConfig, optional
        Decode limits.

    Raises
    ------
    MalformedJSONError
        If *data* is not a JSON object
    KeyParseError
        If a field name is not a valid key
    ValueParseError
        If a value does not match *value_type*
    """
    return AnyKeyCodec(key_type, value_type, config).decode(data, into=into)


def json_to_vec[C](
    data: JSONInput,
    key_type: Any = str,
    value_type: Any = Any,
    *,
    into: Callable[[Iterable[tuple[Any, Any]]], C] = list,  # type: ignore[assignment]
    config: CodecConfig | None = None,
) -> C:
    """Deserialize a JSON object into a list of ``(key, value)`` tuples.

    Entries keep the order of the fields in *data*.
    """
    return AnyKeyCodec(key_type, value_type, config).decode(data, into=into)


def json_to_iter(
    data: JSONInput,
    key_type: Any = str,
    value_type: Any = Any,
    *,
    config: CodecConfig | None = None,
) -> Iterator[tuple[Any, Any]]:
    """Parse a JSON object and return a lazy iterator of typed pairs.

    Useful to ``extend()`` an existing collection. The outer object is parsed
    immediately; each entry is validated when the iterator reaches it.

    Examples
    --------
    >>> sorted(json_to_iter('{"2":"b","1":"a"}', int, str))
    [(1, 'a'), (2, 'b')]
    """
    return AnyKeyCodec(key_type, value_type, config).iter_decode(data)


__all__ = [
    "PairSource",
    "SupportsItems",
    "iter_pairs",
    "iter_to_json",
    "json_to_iter",
    "json_to_map",
    "json_to_vec",
    "map_to_json",
    "vec_to_json",
    "write_json_map",
]
