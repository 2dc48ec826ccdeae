"""JSON objects with keys of any type.

JSON object keys must be strings, so a ``dict`` keyed by dataclasses, models,
tuples or numbers has no direct JSON object form. json_any_key writes each
non-string key as its own JSON text and uses that text as the field name::

    >>> from dataclasses import dataclass
    >>> from json_any_key import json_to_map, map_to_json
    >>> @dataclass(frozen=True)
    ... class Test:
    ...     a: int
    ...     b: int
    >>> text = map_to_json({Test(a=3, b=5): Test(a=7, b=9)})
    >>> print(text)
    {"{\\"a\\":3,\\"b\\":5}":{"a":7,"b":9}}
    >>> json_to_map(text, Test, Test)
    {Test(a=3, b=5): Test(a=7, b=9)}

String keys are written verbatim, giving the same output as pydantic's own
``dict[str, V]`` serialization. Nested fields opt in with
``Annotated[dict[K, V], any_key_map]`` or
``Annotated[list[tuple[K, V]], any_key_vec]``.
"""

from loguru import logger

try:
    from importlib.metadata import version

    __version__ = version("json-any-key")
except Exception:
    __version__ = "0.0.0.dev0"  # Fallback for source checkouts

from json_any_key.adapters import (
    PairSource,
    SupportsItems,
    iter_pairs,
    iter_to_json,
    json_to_iter,
    json_to_map,
    json_to_vec,
    map_to_json,
    vec_to_json,
    write_json_map,
)
from json_any_key.codec import AnyKeyCodec
from json_any_key.config import CodecConfig
from json_any_key.embedding import AnyKeyMap, AnyKeyVec, any_key_map, any_key_vec
from json_any_key.exceptions import (
    ConfigurationError,
    DecodeError,
    EncodeError,
    JsonAnyKeyError,
    KeyParseError,
    KeySerializationError,
    MalformedJSONError,
    StrategyError,
    TypeMismatchError,
    ValueParseError,
    ValueSerializationError,
)
from json_any_key.logging import configure_logging, disable_logging, get_logger

# Library code stays silent until the application calls configure_logging().
logger.disable("json_any_key")

__all__ = [
    "AnyKeyCodec",
    "AnyKeyMap",
    "AnyKeyVec",
    "CodecConfig",
    "ConfigurationError",
    "DecodeError",
    "EncodeError",
    "JsonAnyKeyError",
    "KeyParseError",
    "KeySerializationError",
    "MalformedJSONError",
    "PairSource",
    "StrategyError",
    "SupportsItems",
    "TypeMismatchError",
    "ValueParseError",
    "ValueSerializationError",
    "__version__",
    "any_key_map",
    "any_key_vec",
    "configure_logging",
    "disable_logging",
    "get_logger",
    "iter_pairs",
    "iter_to_json",
    "json_to_iter",
    "json_to_map",
    "json_to_vec",
    "map_to_json",
    "vec_to_json",
    "write_json_map",
]
