"""
Unit tests for the node registry, port generation and executor registry
"""

import json

import pytest

from agentflow.workflow.nodes import ExecutorRegistry, NodeCategory, NodeDefinition, NodeRegistry
from agentflow.workflow.nodes.ports import generate_ports, port_key


def _definition(type_key="custom", category="action", **extra):
    data = {
        "type": type_key,
        "name": type_key.title(),
        "category": category,
        "input_schema": {"message": {"type": "string", "required": True}},
        "output_schema": {"response": {"type": "string"}},
        "configuration_schema": {"model": {"type": "string", "required": True}},
    }
    data.update(extra)
    return data


def test_default_catalog_loads(registry):
    """Bundled catalog should provide the system node types"""
    for type_key in (
        "message_trigger", "webhook_trigger", "schedule_trigger",
        "send_message", "ai_response", "condition",
        "whatsapp_integration", "knowledge_base",
    ):
        assert type_key in registry

    trigger = registry.get("message_trigger")
    assert trigger.category == NodeCategory.TRIGGER
    assert trigger.required_fields() == []
    assert registry.get("ai_response").required_fields() == ["model"]


def test_list_by_category(registry):
    """listByCategory filters on the normalized category"""
    triggers = {d.type for d in registry.list_by_category("trigger")}
    assert {"message_trigger", "webhook_trigger", "schedule_trigger"} <= triggers
    assert all(d.category == NodeCategory.TRIGGER for d in registry.list_by_category("triggers"))
    assert registry.list_by_category("nonsense") == []


def test_load_from_path(tmp_path):
    """JSON catalog file with a nodes key"""
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({"nodes": [_definition()]}), encoding="utf-8")

    reg = NodeRegistry()
    assert reg.load(path) == 1
    assert reg.get("custom").name == "Custom"


def test_load_from_list_and_callable():
    reg = NodeRegistry()
    assert reg.load([_definition("a")]) == 1
    assert reg.load(lambda: [_definition("b")]) == 1
    assert len(reg) == 2


def test_load_overwrites_same_key():
    """Later loads replace identically-keyed entries"""
    reg = NodeRegistry()
    reg.load([_definition("a", name="First")])
    reg.load([_definition("a", name="Second")])
    assert len(reg) == 1
    assert reg.get("a").name == "Second"


def test_unavailable_source_leaves_registry_empty(tmp_path):
    """A missing catalog is not an error: the registry is just empty"""
    reg = NodeRegistry()
    assert reg.load(tmp_path / "missing.json") == 0
    assert len(reg) == 0
    assert reg.list_all() == []


def test_failing_callable_source():
    def _boom():
        raise RuntimeError("database down")

    reg = NodeRegistry()
    assert reg.load(_boom) == 0
    assert len(reg) == 0


def test_malformed_entries_are_skipped():
    reg = NodeRegistry()
    loaded = reg.load([
        _definition("good"),
        {"name": "no type key", "category": "action"},
        _definition("bad_category", category="teleport"),
        "not a mapping",
    ])
    assert loaded == 1
    assert "good" in reg


def test_legacy_category_aliases():
    reg = NodeRegistry()
    reg.load([
        _definition("t", category="triggers"),
        _definition("r", category="responses"),
        _definition("c", category="conditions"),
        _definition("i", category="integrations"),
    ])
    assert reg.get("t").category == NodeCategory.TRIGGER
    assert reg.get("r").category == NodeCategory.ACTION
    assert reg.get("c").category == NodeCategory.LOGIC
    assert reg.get("i").category == NodeCategory.INTEGRATION


def test_bare_type_strings_in_configuration_schema():
    definition = NodeDefinition.model_validate(
        _definition(configuration_schema={"model": "string"})
    )
    assert definition.configuration_schema["model"].type == "string"
    assert definition.required_fields() == []


def test_register_and_unregister():
    reg = NodeRegistry()
    reg.register(NodeDefinition.model_validate(_definition("x")))
    assert "x" in reg
    assert reg.unregister("x") is True
    assert reg.unregister("x") is False


# ── Ports ──


def test_generate_ports_ids_and_attributes():
    ports = generate_ports(
        {"message": {"type": "string", "required": True}, "context": {"type": "object"}},
        "input",
    )
    assert [p.id for p in ports] == ["input_message", "input_context"]
    assert ports[0].data_type == "string"
    assert ports[0].required is True
    assert ports[1].required is False


def test_generate_ports_is_deterministic():
    schema = {"a": {"type": "string"}, "b": {"type": "number"}}
    assert generate_ports(schema, "output") == generate_ports(schema, "output")


@pytest.mark.parametrize("schema", [None, [], "string", 42])
def test_generate_ports_malformed_schema(schema):
    """Malformed schemas produce no ports instead of raising"""
    assert generate_ports(schema, "input") == []


def test_port_key():
    assert port_key("output_response", "output") == "response"
    assert port_key("custom", "output") == "custom"


# ── Executors ──


def test_executor_registry_wraps_functions():
    executors = ExecutorRegistry()

    @executors.executor("echo")
    async def echo(node, input_data, context):
        return {"output": input_data}

    assert "echo" in executors
    assert executors.registered_types() == ["echo"]
    assert hasattr(executors.get("echo"), "execute")


def test_executor_registry_rejects_non_callables():
    with pytest.raises(TypeError):
        ExecutorRegistry().register("x", 42)


def test_builtin_executors(executors):
    assert set(executors.registered_types()) == {
        "message_trigger", "webhook_trigger", "schedule_trigger", "condition",
    }
