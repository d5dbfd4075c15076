from typing import Any, Mapping

import pytest

from toolhost.registry import (
    CapabilityProvider,
    Param,
    Tool,
    ToolRegistry,
    ToolSpec,
    ValueKind,
    tool,
)


class MathApi(CapabilityProvider):
    @tool(
        "add",
        "Add two integers",
        params=[
            Param("a", ValueKind.INTEGER),
            Param("b", ValueKind.INTEGER, default=0),
        ],
    )
    def add(self, args: Mapping[str, Any]) -> int:
        return args["a"] + args["b"]

    @tool("ident", params=[Param("value", ValueKind.OBJECT, nullable=True)])
    def ident(self, args: Mapping[str, Any]) -> Any:
        return args["value"]

    def helper(self) -> None:
        """Not a tool."""


class ExtendedMathApi(MathApi):
    @tool("negate", "Negate an integer", params=[Param("a", ValueKind.INTEGER)])
    def negate(self, args: Mapping[str, Any]) -> int:
        return -args["a"]


class ReplacementApi(CapabilityProvider):
    @tool("ADD", "Replacement add")
    def add(self, args: Mapping[str, Any]) -> str:
        return "replaced"


class ManualProvider:
    def manifest(self):
        return [
            ToolSpec(
                name="manual",
                handler=lambda args: "manual",
                description="Declared without the decorator",
                params=[Param("flag", ValueKind.BOOLEAN, default=False)],
            )
        ]


def test_manifest_collects_only_decorated_methods_in_order() -> None:
    names = [spec.name for spec in ExtendedMathApi().manifest()]
    assert names == ["add", "ident", "negate"]


def test_manifest_binds_handlers_to_the_instance() -> None:
    provider = MathApi()
    specs = {spec.name: spec for spec in provider.manifest()}
    assert specs["add"].handler({"a": 2, "b": 3}) == 5


def test_required_lists_exactly_the_params_without_defaults() -> None:
    registry = ToolRegistry()
    registry.register(MathApi())

    add = registry.get("add")
    assert add is not None
    schema = add.input_schema()
    assert schema["type"] == "object"
    assert schema["required"] == ["a"]
    assert set(schema["properties"]) == {"a", "b"}
    assert schema["properties"]["a"]["type"] == "integer"


def test_nullable_param_is_still_required_in_schema() -> None:
    registry = ToolRegistry()
    registry.register(MathApi())

    assert registry.get("ident").required() == ["value"]


def test_lookup_is_case_insensitive() -> None:
    registry = ToolRegistry()
    registry.register(MathApi())

    assert registry.get("ADD") is registry.get("add")
    assert "Add" in registry
    assert registry.get("missing") is None
    assert registry.get(None) is None  # type: ignore[arg-type]


def test_last_registration_wins_for_duplicate_names() -> None:
    registry = ToolRegistry()
    registry.register(MathApi())
    registry.register(ReplacementApi())

    replaced = registry.get("add")
    assert replaced.name == "ADD"
    assert replaced.handler({}) == "replaced"
    assert len(registry) == 2


def test_register_accepts_any_object_with_a_manifest() -> None:
    registry = ToolRegistry()
    registered = registry.register(ManualProvider())

    assert [entry.name for entry in registered] == ["manual"]
    assert registry.get("manual").required() == []


def test_register_rejects_objects_without_a_manifest() -> None:
    with pytest.raises(TypeError):
        ToolRegistry().register(object())


def test_list_tools_is_stable_between_calls() -> None:
    registry = ToolRegistry()
    registry.register_all([MathApi(), ManualProvider()])

    first = registry.list_tools()
    second = registry.list_tools()
    assert first == second
    names = [entry["name"] for entry in first["tools"]]
    assert names == ["add", "ident", "manual"]
    assert all("inputSchema" in entry for entry in first["tools"])


def test_tool_from_spec_validates_declarations() -> None:
    with pytest.raises(ValueError):
        Tool.from_spec(ToolSpec(name="  ", handler=lambda args: None))
    with pytest.raises(TypeError):
        Tool.from_spec(ToolSpec(name="x", handler="nope"))  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        Tool.from_spec(
            ToolSpec(name="x", handler=lambda args: None, params=[Param("a"), Param("a")])
        )


def test_param_schema_describes_containers() -> None:
    array = Param("values", ValueKind.ARRAY, items=ValueKind.INTEGER)
    int_map = Param("sizes", ValueKind.INT_MAP, description="Sizes by name")
    address = Param("where", ValueKind.ADDRESS)

    assert array.schema() == {
        "type": "array",
        "description": "values",
        "items": {"type": "integer"},
    }
    assert int_map.schema() == {
        "type": "object",
        "description": "Sizes by name",
        "additionalProperties": {"type": "integer"},
    }
    assert address.schema()["type"] == "integer"
