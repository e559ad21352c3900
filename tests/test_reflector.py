"""Tests for wren.openapi.reflector: Python type to JSON Schema."""

import datetime
import enum
import uuid
from dataclasses import dataclass, field
from typing import Annotated, Any, Literal

import pytest

from wren.config import ReflectorConfig
from wren.errors import SchemaError
from wren.openapi.params import body_field, header, path, query
from wren.openapi.reflector import REF_PREFIX, Reflector


class Status(enum.Enum):
    AVAILABLE = "available"
    SOLD = "sold"


@dataclass
class Category:
    """A pet category."""

    id: int
    name: str


@dataclass
class Pet:
    id: int
    name: str
    category: Category | None = None
    tags: list[str] = field(default_factory=list)
    status: Status = Status.AVAILABLE


@dataclass
class Node:
    value: int
    children: "list[Node]" = field(default_factory=list)


@dataclass
class GetPet:
    pet_id: int = path(name="petId", description="ID of pet to return")
    expand: bool = query(default=False)
    trace_id: str | None = header(name="X-Trace-Id", default=None)


@dataclass
class UpdatePet:
    pet_id: int = path(name="petId")
    name: str = body_field(description="New name")


class TestScalars:
    def test_builtins(self) -> None:
        reflector = Reflector()
        assert reflector.schema_for(str) == {"type": "string"}
        assert reflector.schema_for(int) == {"type": "integer"}
        assert reflector.schema_for(float) == {"type": "number"}
        assert reflector.schema_for(bool) == {"type": "boolean"}

    def test_formats(self) -> None:
        reflector = Reflector()
        assert reflector.schema_for(datetime.datetime) == {"type": "string", "format": "date-time"}
        assert reflector.schema_for(uuid.UUID) == {"type": "string", "format": "uuid"}
        assert reflector.schema_for(bytes) == {"type": "string", "format": "binary"}

    def test_any_is_empty_schema(self) -> None:
        assert Reflector().schema_for(Any) == {}

    def test_annotated_unwraps(self) -> None:
        assert Reflector().schema_for(Annotated[int, "meta"]) == {"type": "integer"}

    def test_type_mapping_overrides(self) -> None:
        config = ReflectorConfig(type_mappings={int: {"type": "string", "pattern": "^[0-9]+$"}})
        assert Reflector(config).schema_for(int) == {"type": "string", "pattern": "^[0-9]+$"}

    def test_unknown_type_raises(self) -> None:
        class Opaque:
            pass

        with pytest.raises(SchemaError, match="Opaque"):
            Reflector().schema_for(Opaque)


class TestEnumsAndLiterals:
    def test_enum(self) -> None:
        assert Reflector().schema_for(Status) == {"type": "string", "enum": ["available", "sold"]}

    def test_literal(self) -> None:
        assert Reflector().schema_for(Literal[1, 2]) == {"type": "integer", "enum": [1, 2]}

    def test_mixed_literal_has_no_type(self) -> None:
        assert Reflector().schema_for(Literal["a", 1]) == {"enum": ["a", 1]}


class TestContainers:
    def test_list(self) -> None:
        assert Reflector().schema_for(list[int]) == {"type": "array", "items": {"type": "integer"}}

    def test_set_is_unique(self) -> None:
        schema = Reflector().schema_for(set[str])
        assert schema["uniqueItems"] is True

    def test_fixed_tuple_31(self) -> None:
        schema = Reflector().schema_for(tuple[int, str])
        assert schema["prefixItems"] == [{"type": "integer"}, {"type": "string"}]
        assert schema["minItems"] == schema["maxItems"] == 2

    def test_fixed_tuple_30(self) -> None:
        schema = Reflector(openapi_31=False).schema_for(tuple[int, str])
        assert "prefixItems" not in schema
        assert schema["items"] == {"anyOf": [{"type": "integer"}, {"type": "string"}]}

    def test_variadic_tuple(self) -> None:
        assert Reflector().schema_for(tuple[int, ...]) == {
            "type": "array",
            "items": {"type": "integer"},
        }

    def test_dict(self) -> None:
        assert Reflector().schema_for(dict[str, float]) == {
            "type": "object",
            "additionalProperties": {"type": "number"},
        }

    def test_dict_with_non_string_keys_raises(self) -> None:
        with pytest.raises(SchemaError, match="keys must be strings"):
            Reflector().schema_for(dict[int, str])


class TestNullable:
    def test_optional_31(self) -> None:
        assert Reflector().schema_for(int | None) == {"type": ["integer", "null"]}

    def test_optional_30(self) -> None:
        assert Reflector(openapi_31=False).schema_for(int | None) == {
            "type": "integer",
            "nullable": True,
        }

    def test_optional_ref_31(self) -> None:
        schema = Reflector().schema_for(Category | None)
        assert schema == {"anyOf": [{"$ref": REF_PREFIX + "Category"}, {"type": "null"}]}

    def test_optional_ref_30(self) -> None:
        schema = Reflector(openapi_31=False).schema_for(Category | None)
        assert schema == {"allOf": [{"$ref": REF_PREFIX + "Category"}], "nullable": True}

    def test_union(self) -> None:
        assert Reflector().schema_for(int | str) == {
            "anyOf": [{"type": "integer"}, {"type": "string"}]
        }


class TestDataclasses:
    def test_ref_and_definition(self) -> None:
        reflector = Reflector()
        assert reflector.schema_for(Pet) == {"$ref": REF_PREFIX + "Pet"}

        pet = reflector.definitions["Pet"]
        assert pet["type"] == "object"
        assert pet["required"] == ["id", "name"]
        assert pet["properties"]["status"] == {
            "type": "string",
            "enum": ["available", "sold"],
            "default": "available",
        }
        assert "Category" in reflector.definitions

    def test_docstring_becomes_description(self) -> None:
        reflector = Reflector()
        reflector.schema_for(Category)
        assert reflector.definitions["Category"]["description"] == "A pet category."
        reflector.schema_for(Pet)
        assert "description" not in reflector.definitions["Pet"]

    def test_recursive(self) -> None:
        reflector = Reflector()
        reflector.schema_for(Node)
        children = reflector.definitions["Node"]["properties"]["children"]
        assert children["items"] == {"$ref": REF_PREFIX + "Node"}

    def test_inline_refs(self) -> None:
        reflector = Reflector(ReflectorConfig(inline_refs=True))
        schema = reflector.schema_for(Category)
        assert schema["type"] == "object"
        assert reflector.definitions == {}

    def test_strip_prefix(self) -> None:
        @dataclass
        class ApiUser:
            name: str

        reflector = Reflector(ReflectorConfig(strip_def_name_prefix=("Api",)))
        assert reflector.schema_for(ApiUser) == {"$ref": REF_PREFIX + "User"}

    def test_name_collision_gets_suffix(self) -> None:
        def make() -> type:
            @dataclass
            class Item:
                value: int

            return Item

        reflector = Reflector()
        assert reflector.schema_for(make()) == {"$ref": REF_PREFIX + "Item"}
        assert reflector.schema_for(make()) == {"$ref": REF_PREFIX + "Item2"}

    def test_bad_field_names_owner(self) -> None:
        @dataclass
        class Broken:
            value: type

        reflector = Reflector()
        with pytest.raises(SchemaError, match=r"Broken\.value"):
            reflector.schema_for(Broken)
        assert reflector.definitions == {}


class TestRequestInfo:
    def test_parameters_split_from_body(self) -> None:
        info = Reflector().request_info(GetPet)
        assert info.body is None
        by_name = {p.name: p for p in info.parameters}
        assert by_name["petId"].location == "path"
        assert by_name["petId"].required is True
        assert by_name["petId"].description == "ID of pet to return"
        assert by_name["expand"].required is False
        assert by_name["X-Trace-Id"].location == "header"

    def test_mixed_request_keeps_body_inline(self) -> None:
        reflector = Reflector()
        info = reflector.request_info(UpdatePet)
        assert [p.name for p in info.parameters] == ["petId"]
        assert info.body == {
            "type": "object",
            "properties": {"name": {"type": "string", "description": "New name"}},
            "required": ["name"],
        }
        assert reflector.definitions == {}

    def test_plain_body_is_component(self) -> None:
        info = Reflector().request_info(Pet)
        assert info.parameters == ()
        assert info.body == {"$ref": REF_PREFIX + "Pet"}

    def test_non_dataclass_body(self) -> None:
        info = Reflector().request_info(list[int])
        assert info.body == {"type": "array", "items": {"type": "integer"}}

    def test_parameter_to_dict(self) -> None:
        (param,) = [p for p in Reflector().request_info(GetPet).parameters if p.name == "petId"]
        assert param.to_dict() == {
            "name": "petId",
            "in": "path",
            "description": "ID of pet to return",
            "required": True,
            "schema": {"type": "integer"},
        }


class FailingReflector(Reflector):
    def _object_schema(self, fields, hints, owner=None):
        msg = "boom"
        raise RuntimeError(msg)


class TestUnhashableAndRollback:
    def test_annotated_with_dict_metadata(self) -> None:
        schema = Reflector().schema_for(Annotated[int, {"unit": "items"}])
        assert schema == {"type": "integer"}

    def test_type_mapping_with_unhashable_annotation(self) -> None:
        config = ReflectorConfig(type_mappings={int: {"type": "string"}})
        assert Reflector(config).schema_for(Annotated[int, {"unit": "items"}]) == {"type": "string"}

    def test_failed_definition_is_rolled_back(self) -> None:
        reflector = FailingReflector()
        with pytest.raises(RuntimeError, match="boom"):
            reflector.schema_for(Category)
        assert reflector.definitions == {}
