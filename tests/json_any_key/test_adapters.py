"""Tests for the collection-level entry points."""

from __future__ import annotations

import io
from collections import OrderedDict, deque
from dataclasses import dataclass
from enum import StrEnum
from types import MappingProxyType

import pytest
from pydantic import BaseModel, TypeAdapter

from json_any_key import (
    CodecConfig,
    KeyParseError,
    MalformedJSONError,
    TypeMismatchError,
    iter_pairs,
    iter_to_json,
    json_to_iter,
    json_to_map,
    json_to_vec,
    map_to_json,
    vec_to_json,
    write_json_map,
)


@dataclass(frozen=True, order=True)
class Point:
    a: int
    b: int


class Color(StrEnum):
    RED = "red"
    BLUE = "blue"


class Tagged(BaseModel):
    tag: str | None = None


POINT_MAP_JSON = r'{"{\"a\":3,\"b\":5}":{"a":7,"b":9}}'


class TestIterPairs:
    """iter_pairs exposes any pair source as an iterator without copying."""

    def test_mapping_uses_items(self) -> None:
        """Test that mappings are traversed through items()."""
        assert list(iter_pairs({1: "a", 2: "b"})) == [(1, "a"), (2, "b")]

    def test_sequence_of_pairs(self) -> None:
        """Test that a sequence of pairs is iterated as-is."""
        assert list(iter_pairs([(1, "a")])) == [(1, "a")]

    def test_iterator_is_returned_as_is(self) -> None:
        """Test that an iterator source is returned without wrapping."""
        source = iter([(1, "a")])
        assert iter_pairs(source) is source

    @pytest.mark.parametrize("source", ["ab", b"ab", 42])
    def test_rejects_non_pair_sources(self, source: object) -> None:
        """Test that strings, bytes and non-iterables are rejected."""
        with pytest.raises(TypeMismatchError):
            iter_pairs(source)  # type: ignore[arg-type]


class TestMapToJson:
    def test_struct_map(self) -> None:
        """Test the struct-keyed map scenario."""
        assert map_to_json({Point(3, 5): Point(7, 9)}) == POINT_MAP_JSON

    def test_declared_types(self) -> None:
        """Test that declared key and value types give the same output."""
        data = {Point(3, 5): Point(7, 9)}
        assert map_to_json(data, key_type=Point, value_type=Point) == POINT_MAP_JSON

    def test_string_map_matches_pydantic(self) -> None:
        """Test that string keys match pydantic's dict[str, V] output."""
        data = {"foo": 1234}
        expected = TypeAdapter(dict[str, int]).dump_json(data).decode()
        assert map_to_json(data) == expected == '{"foo":1234}'

    def test_other_mappings(self) -> None:
        """Test OrderedDict and MappingProxyType sources."""
        assert map_to_json(OrderedDict([(Point(3, 5), Point(7, 9))])) == POINT_MAP_JSON
        assert map_to_json(MappingProxyType({Point(3, 5): Point(7, 9)})) == POINT_MAP_JSON

    def test_insertion_order_is_kept(self) -> None:
        """Test that entries keep insertion order."""
        text = map_to_json({Point(9, 9): 1, Point(1, 1): 2}, key_type=Point)
        assert text.index('\\"a\\":9') < text.index('\\"a\\":1')

    def test_rejects_sequences(self) -> None:
        """Test that a list of pairs is rejected by map_to_json."""
        with pytest.raises(TypeMismatchError) as exc_info:
            map_to_json([(1, 2)])  # type: ignore[arg-type]
        assert isinstance(exc_info.value, TypeError)

    def test_config_is_forwarded(self) -> None:
        """Test that CodecConfig options reach the value serializer."""
        data = {"k": Tagged()}
        assert map_to_json(data, value_type=Tagged) == '{"k":{"tag":null}}'
        text = map_to_json(data, value_type=Tagged, config=CodecConfig(exclude_none=True))
        assert text == '{"k":{}}'


class TestVecToJson:
    def test_same_output_as_map(self) -> None:
        """Test that a vec of pairs serializes like the equivalent map."""
        assert vec_to_json([(Point(3, 5), Point(7, 9))]) == POINT_MAP_JSON

    def test_tuple_and_deque_sources(self) -> None:
        """Test tuple and deque pair sources."""
        assert vec_to_json(((5, "five"),)) == '{"5":"five"}'
        assert vec_to_json(deque([(5, "five")])) == '{"5":"five"}'

    def test_duplicate_keys_are_kept(self) -> None:
        """Test that duplicate keys are written twice."""
        assert vec_to_json([(1, "a"), (1, "b")], key_type=int) == '{"1":"a","1":"b"}'

    def test_unordered_source(self) -> None:
        """Test that an unordered set of pairs still decodes to the same map."""
        text = vec_to_json({(1, "a"), (2, "b")}, key_type=int, value_type=str)
        assert json_to_map(text, int, str) == {1: "a", 2: "b"}

    def test_rejects_mappings(self) -> None:
        """Test that a mapping is rejected by vec_to_json."""
        with pytest.raises(TypeMismatchError):
            vec_to_json({1: "a"})  # type: ignore[arg-type]


class TestIterToJson:
    def test_generator(self) -> None:
        """Test serializing a one-shot generator."""
        pairs = ((Point(i, i), i) for i in range(2))
        text = iter_to_json(pairs, key_type=Point, value_type=int)
        assert text == r'{"{\"a\":0,\"b\":0}":0,"{\"a\":1,\"b\":1}":1}'

    def test_zip(self) -> None:
        """Test serializing a zip object."""
        assert iter_to_json(zip([1, 2], ["a", "b"])) == '{"1":"a","2":"b"}'

    def test_consuming_mapping(self) -> None:
        """Test that iter_to_json accepts a mapping."""
        assert iter_to_json({Point(3, 5): Point(7, 9)}) == POINT_MAP_JSON


class TestWriteJsonMap:
    def test_streams_to_binary_file(self) -> None:
        """Test streaming into a binary sink."""
        sink = io.BytesIO()
        write_json_map({Point(3, 5): Point(7, 9)}, sink)
        assert sink.getvalue() == POINT_MAP_JSON.encode()

    def test_streams_to_text_file(self) -> None:
        """Test streaming into a text sink."""
        sink = io.StringIO()
        write_json_map([("foo", 1234)], sink)
        assert sink.getvalue() == '{"foo":1234}'


class TestJsonToMap:
    def test_struct_map(self) -> None:
        """Test decoding the struct-keyed map scenario."""
        assert json_to_map(POINT_MAP_JSON, Point, Point) == {Point(3, 5): Point(7, 9)}

    def test_roundtrip(self) -> None:
        """Test that map_to_json output decodes back to the same map."""
        data = {Point(3, 5): Point(7, 9), Point(11, 12): Point(13, 14)}
        assert json_to_map(map_to_json(data), Point, Point) == data

    def test_default_string_keys(self) -> None:
        """Test that keys default to str."""
        assert json_to_map('{"foo":1234}') == {"foo": 1234}

    def test_struct_keys_read_as_strings(self) -> None:
        """Test that transcoded keys stay raw strings when read as str."""
        assert json_to_map(POINT_MAP_JSON) == {'{"a":3,"b":5}': {"a": 7, "b": 9}}

    def test_custom_mapping_type(self) -> None:
        """Test building a custom mapping type."""
        result = json_to_map('{"2":"b","1":"a"}', int, str, into=OrderedDict)
        assert isinstance(result, OrderedDict)
        assert list(result) == [2, 1]

    def test_empty_object(self) -> None:
        """Test decoding an empty object into a map."""
        assert json_to_map("{}", Point, Point) == {}

    def test_truncated_input(self) -> None:
        """Test that truncated input raises MalformedJSONError."""
        with pytest.raises(MalformedJSONError):
            json_to_map('{"{\\"a\\":3,\\"b\\":5}":{"a":7', Point, Point)

    def test_bad_key(self) -> None:
        """Test that a field name of the wrong shape raises KeyParseError."""
        with pytest.raises(KeyParseError):
            json_to_map('{"foo":{"a":7,"b":9}}', Point, Point)


class TestJsonToVec:
    def test_keeps_field_order(self) -> None:
        """Test that field order is preserved in the list."""
        text = vec_to_json([(Point(11, 12), 1), (Point(3, 5), 2)])
        assert json_to_vec(text, Point, int) == [(Point(11, 12), 1), (Point(3, 5), 2)]

    def test_string_pairs(self) -> None:
        """Test a round trip of string-keyed pairs."""
        data = [("bar", 7), ("foo", 5)]
        assert json_to_vec(vec_to_json(data), str, int) == data

    def test_tuple_target(self) -> None:
        """Test building a tuple of pairs."""
        assert json_to_vec('{"5":"x"}', int, str, into=tuple) == ((5, "x"),)

    def test_empty_object(self) -> None:
        """Test decoding an empty object into a list."""
        assert json_to_vec("{}", Point, Point) == []


class TestEnumKeys:
    def test_inferred_keys_read_back_typed(self) -> None:
        """Test that inferred enum keys decode with the declared enum type."""
        assert json_to_map(map_to_json({Color.RED: 1}), Color, int) == {Color.RED: 1}

    def test_declared_and_inferred_output_agree(self) -> None:
        """Test that inferred and declared enum keys serialize identically."""
        data = {Color.RED: 1, Color.BLUE: 2}
        assert map_to_json(data) == map_to_json(data, key_type=Color)


class TestJsonToIter:
    def test_extends_existing_collection(self) -> None:
        """Test extending an existing dict from the iterator."""
        target = {Point(0, 0): Point(0, 0)}
        target.update(json_to_iter(POINT_MAP_JSON, Point, Point))
        assert target == {Point(0, 0): Point(0, 0), Point(3, 5): Point(7, 9)}

    def test_sorted_collection(self) -> None:
        """Test collecting the iterator into a sorted list."""
        text = map_to_json({Point(11, 12): Point(13, 14), Point(3, 5): Point(7, 9)})
        assert sorted(json_to_iter(text, Point, Point)) == [
            (Point(3, 5), Point(7, 9)),
            (Point(11, 12), Point(13, 14)),
        ]

    def test_string_keys(self) -> None:
        """Test that the iterator yields raw field names for str keys."""
        assert list(json_to_iter(POINT_MAP_JSON, str, Point)) == [('{"a":3,"b":5}', Point(7, 9))]
