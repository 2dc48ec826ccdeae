"""Field strategies that store pair collections as JSON objects.

pydantic writes a ``dict`` with non-string keys as an object whose keys are
coerced with ``str()``, and a ``list[tuple[K, V]]`` as an array of arrays.
Attaching :data:`any_key_map` or :data:`any_key_vec` to a field switches it to
the key-transcoding object representation of :mod:`json_any_key.codec`::

    from typing import Annotated

    from pydantic import BaseModel

    from json_any_key import any_key_map, any_key_vec

    class Board(BaseModel):
        cells: Annotated[dict[Point, str], any_key_map]
        moves: Annotated[list[tuple[Point, str]], any_key_vec]

Both strategies write the same JSON for the same entries, so a map field can
read what a vec field wrote and the other way round. They work anywhere
pydantic builds a schema: models, pydantic dataclasses and ``TypeAdapter``.
"""

from __future__ import annotations

import collections
from collections.abc import Callable, Iterable, Mapping, MutableMapping, MutableSequence, Sequence
from typing import TYPE_CHECKING, Any, ClassVar, get_args, get_origin

from pydantic_core import PydanticCustomError, core_schema

from json_any_key.adapters import iter_pairs
from json_any_key.codec import AnyKeyCodec
from json_any_key.exceptions import StrategyError

if TYPE_CHECKING:
    from pydantic import GetCoreSchemaHandler

type Builder = Callable[[Iterable[tuple[Any, Any]]], Any]

_MAP_BUILDERS: dict[Any, Builder] = {
    dict: dict,
    collections.OrderedDict: collections.OrderedDict,
    Mapping: dict,
    MutableMapping: dict,
}

_VEC_BUILDERS: dict[Any, Builder] = {
    list: list,
    tuple: tuple,
    collections.deque: collections.deque,
    Sequence: list,
    MutableSequence: list,
}


def _input_pairs(data: Any) -> Iterable[Any]:
    if isinstance(data, Mapping):
        return data.items()
    if isinstance(data, (str, bytes, bytearray)) or not isinstance(data, Iterable):
        raise PydanticCustomError(
            "any_key_object",
            "Input should be a JSON object or a collection of (key, value) pairs",
        )
    return data


class _PairCollectionStrategy:
    """Shared pydantic hook for the map- and vec-shaped strategies."""

    name: ClassVar[str]

    __slots__ = ()

    def __repr__(self) -> str:
        return self.name

    def resolve(self, source_type: Any) -> tuple[Builder, Any, Any]:
        """Return ``(builder, key_type, value_type)`` for the annotated type."""
        raise NotImplementedError

    def __get_pydantic_core_schema__(
        self, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        build, key_type, value_type = self.resolve(source_type)
        codec: AnyKeyCodec[Any, Any] = AnyKeyCodec(key_type, value_type)
        object_schema = core_schema.dict_schema(
            keys_schema=core_schema.str_schema(),
            values_schema=handler.generate_schema(codec.value_type),
        )

        def validate(data: Any) -> Any:
            entries = []
            for item in _input_pairs(data):
                if not isinstance(item, (tuple, list)) or len(item) != 2:
                    raise PydanticCustomError(
                        "any_key_pair",
                        "Each entry should be a (key, value) pair, got {entry}",
                        {"entry": repr(item)},
                    )
                key, raw = item
                entries.append((codec.coerce_key(key), codec.decode_value(str(key), raw)))
            return build(entries)

        def serialize(data: Any) -> dict[str, Any]:
            return {codec.field_name(key): value for key, value in iter_pairs(data)}

        return core_schema.no_info_plain_validator_function(
            validate,
            json_schema_input_schema=object_schema,
            serialization=core_schema.plain_serializer_function_ser_schema(
                serialize,
                return_schema=object_schema,
            ),
        )


class AnyKeyMap(_PairCollectionStrategy):
    """Strategy for mapping fields: ``dict``, ``OrderedDict``, ``Mapping``."""

    name = "any_key_map"

    __slots__ = ()

    def resolve(self, source_type: Any) -> tuple[Builder, Any, Any]:
        origin = get_origin(source_type) or source_type
        build = _MAP_BUILDERS.get(origin)
        if build is None:
            raise StrategyError(self.name, source_type, "expected dict, OrderedDict or Mapping")
        args = get_args(source_type)
        if not args:
            return build, None, None
        if len(args) != 2:
            raise StrategyError(self.name, source_type, "expected exactly two type arguments")
        return build, args[0], args[1]


class AnyKeyVec(_PairCollectionStrategy):
    """Strategy for sequences of pairs: ``list[tuple[K, V]]`` and friends."""

    name = "any_key_vec"

    __slots__ = ()

    def resolve(self, source_type: Any) -> tuple[Builder, Any, Any]:
        origin = get_origin(source_type) or source_type
        build = _VEC_BUILDERS.get(origin)
        if build is None:
            raise StrategyError(self.name, source_type, "expected list, tuple, deque or Sequence")
        args = get_args(source_type)
        if origin is tuple:
            if len(args) != 2 or args[1] is not Ellipsis:
                raise StrategyError(self.name, source_type, "expected tuple[tuple[K, V], ...]")
            args = args[:1]
        if not args:
            return build, None, None

        pair_type = args[0]
        pair_args = get_args(pair_type)
        if get_origin(pair_type) is not tuple or len(pair_args) != 2 or Ellipsis in pair_args:
            raise StrategyError(self.name, source_type, "items must be annotated as tuple[K, V]")
        return build, pair_args[0], pair_args[1]


any_key_map = AnyKeyMap()
any_key_vec = AnyKeyVec()

__all__ = ["AnyKeyMap", "AnyKeyVec", "any_key_map", "any_key_vec"]
