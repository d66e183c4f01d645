"""
Unit tests for the workflow builder
"""

import pytest

from agentflow.workflow.exceptions import InvalidConnection, NodeNotFound, UnknownNodeType
from agentflow.workflow.templates import create_customer_support_template, get_template
from agentflow.workflow.workflow_validator import ErrorKind


def test_add_node_instantiates_ports(builder, graph):
    node = builder.add_node(graph, "ai_response", {"x": 10, "y": 20}, {"model": "gpt-4"})

    assert node in graph.nodes
    assert node.id.startswith("node_")
    assert node.name == "AI Response"
    assert node.category == "action"
    assert [p.id for p in node.inputs] == ["input_message", "input_context"]
    assert [p.id for p in node.outputs] == ["output_response", "output_confidence"]
    assert node.configuration == {"model": "gpt-4"}
    assert node.position == {"x": 10, "y": 20}


def test_add_node_assigns_unique_ids(builder, graph):
    a = builder.add_node(graph, "send_message")
    b = builder.add_node(graph, "send_message")
    assert a.id != b.id


def test_add_node_unknown_type(builder, graph):
    with pytest.raises(UnknownNodeType):
        builder.add_node(graph, "does_not_exist")
    assert graph.nodes == []


def test_remove_node_cascades_connections(builder, graph):
    """Removing a node drops every connection touching it"""
    trigger = builder.add_node(graph, "message_trigger")
    reply = builder.add_node(graph, "ai_response", configuration={"model": "m"})
    send = builder.add_node(graph, "send_message")
    builder.create_connection(graph, trigger.id, "output_message", reply.id, "input_message")
    builder.create_connection(graph, reply.id, "output_response", send.id, "input_message")

    builder.remove_node(graph, reply.id)

    assert graph.get_node(reply.id) is None
    assert graph.connections == []
    assert [n.id for n in graph.nodes] == [trigger.id, send.id]


def test_remove_node_is_idempotent(builder, graph):
    node = builder.add_node(graph, "send_message")
    builder.remove_node(graph, node.id)
    builder.remove_node(graph, node.id)
    builder.remove_node(graph, "never_existed")
    assert graph.nodes == []


def test_update_node_merges_fields(builder, graph):
    node = builder.add_node(graph, "ai_response", configuration={"model": "a"})

    updated = builder.update_node(
        graph, node.id,
        {"name": "Reply", "configuration": {"model": "b"}, "type": "send_message"},
    )

    assert updated.name == "Reply"
    assert updated.configuration == {"model": "b"}
    assert updated.type == "ai_response"
    assert updated.id == node.id
    assert graph.get_node(node.id).name == "Reply"


def test_update_node_not_found(builder, graph):
    with pytest.raises(NodeNotFound):
        builder.update_node(graph, "missing", {"name": "x"})


def test_create_connection(builder, graph):
    a = builder.add_node(graph, "message_trigger")
    b = builder.add_node(graph, "send_message")

    conn = builder.create_connection(graph, a.id, "output_message", b.id, "input_message")

    assert conn.id.startswith("conn_")
    assert graph.connections == [conn]


def test_self_connection_rejected(builder, graph):
    node = builder.add_node(graph, "ai_response", configuration={"model": "m"})

    with pytest.raises(InvalidConnection) as exc_info:
        builder.create_connection(graph, node.id, "output_response", node.id, "input_message")

    assert exc_info.value.kind == ErrorKind.SELF_CONNECTION
    assert graph.connections == []


def test_duplicate_connection_rejected(builder, graph):
    """Second identical connection fails and leaves the list unchanged"""
    a = builder.add_node(graph, "message_trigger")
    b = builder.add_node(graph, "send_message")
    builder.create_connection(graph, a.id, "output_message", b.id, "input_message")

    with pytest.raises(InvalidConnection) as exc_info:
        builder.create_connection(graph, a.id, "output_message", b.id, "input_message")

    assert exc_info.value.kind == ErrorKind.DUPLICATE_CONNECTION
    assert len(graph.connections) == 1


def test_parallel_connections_on_different_ports(builder, graph):
    a = builder.add_node(graph, "message_trigger")
    b = builder.add_node(graph, "send_message")
    builder.create_connection(graph, a.id, "output_message", b.id, "input_message")
    builder.create_connection(graph, a.id, "output_sender", b.id, "input_recipient")
    assert len(graph.connections) == 2


def test_connection_to_missing_node(builder, graph):
    a = builder.add_node(graph, "message_trigger")

    with pytest.raises(InvalidConnection) as exc_info:
        builder.create_connection(graph, a.id, "output_message", "ghost", "input_message")

    assert exc_info.value.kind == ErrorKind.MISSING_NODE
    assert graph.connections == []


def test_validate_connection_reports_every_error(builder, validator, graph):
    result = validator.validate_connection(graph, "ghost", "output_x", "ghost", "input_x")
    kinds = [e.kind for e in result.errors]
    assert not result.valid
    assert kinds.count(ErrorKind.MISSING_NODE) == 2
    assert ErrorKind.SELF_CONNECTION in kinds


def test_remove_connection(builder, graph):
    a = builder.add_node(graph, "message_trigger")
    b = builder.add_node(graph, "send_message")
    conn = builder.create_connection(graph, a.id, "output_message", b.id, "input_message")

    builder.remove_connection(graph, conn.id)
    builder.remove_connection(graph, conn.id)

    assert graph.connections == []


def test_create_workflow_from_template(builder, registry):
    template = create_customer_support_template(registry)

    graph = builder.create_workflow("My support bot", owner="user-2", template=template)

    assert graph.id != template.id
    assert graph.metadata.template_id == template.id
    assert graph.metadata.created_by == "user-2"
    assert graph.metadata.is_template is False
    assert graph.structure() == template.structure()

    graph.nodes[0].name = "Changed"
    assert template.nodes[0].name != "Changed"


def test_customer_support_template_is_valid(registry, validator):
    template = create_customer_support_template(registry)

    assert template.metadata.is_template is True
    assert [n.type for n in template.nodes] == ["message_trigger", "ai_response", "send_message"]
    assert len(template.connections) == 2
    assert validator.validate(template).valid


def test_get_template_by_name(registry):
    template = get_template("customer_support", registry)

    assert template is not None
    assert template.name == "Customer Support"
    assert template.metadata.is_template is True
    assert get_template("customer_support", registry).id != template.id


def test_get_template_unknown_name():
    assert get_template("no_such_template") is None
