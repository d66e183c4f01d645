"""
Unit tests for whole-graph validation
"""

from agentflow.workflow.workflow_model import WorkflowConnection, WorkflowNode
from agentflow.workflow.workflow_validator import ErrorKind, WarningKind, is_empty_value


def _chain(builder, graph, *type_keys, configuration=None):
    """Add nodes and connect them output_response → input_message in order"""
    nodes = [
        builder.add_node(graph, key, configuration=(configuration or {}).get(key))
        for key in type_keys
    ]
    for src, tgt in zip(nodes, nodes[1:]):
        out_port = src.outputs[0].id
        in_port = tgt.inputs[0].id
        builder.create_connection(graph, src.id, out_port, tgt.id, in_port)
    return nodes


def test_valid_graph(builder, validator, graph):
    _chain(
        builder, graph, "message_trigger", "ai_response", "send_message",
        configuration={
            "message_trigger": {"channels": ["whatsapp"]},
            "ai_response": {"model": "gpt-4"},
        },
    )

    result = validator.validate(graph)

    assert result.valid
    assert result.errors == []
    assert result.warnings == []


def test_circular_dependency(builder, validator, graph):
    """A → B → C → A yields at least one circular dependency error"""
    a, b, c = _chain(
        builder, graph, "ai_response", "ai_response", "ai_response",
        configuration={"ai_response": {"model": "m"}},
    )
    builder.create_connection(graph, c.id, "output_response", a.id, "input_message")

    result = validator.validate(graph)

    assert not result.valid
    cycle_errors = result.errors_of(ErrorKind.CIRCULAR_DEPENDENCY)
    assert len(cycle_errors) >= 1
    assert cycle_errors[0].node_id in {a.id, b.id, c.id}


def test_two_independent_cycles(builder, validator, graph):
    a, b = _chain(builder, graph, "send_message", "send_message")
    c, d = _chain(builder, graph, "send_message", "send_message")
    builder.create_connection(graph, b.id, "output_sent", a.id, "input_message")
    builder.create_connection(graph, d.id, "output_sent", c.id, "input_message")

    flagged = validator.find_cycle_nodes(graph)

    assert len(flagged) == 2
    assert flagged[0] in {a.id, b.id}
    assert flagged[1] in {c.id, d.id}


def test_orphan_warning(builder, validator, graph):
    """Disconnected non-trigger nodes warn but do not block"""
    builder.add_node(graph, "message_trigger")
    orphan = builder.add_node(graph, "send_message")

    result = validator.validate(graph)

    assert result.valid
    orphans = result.warnings_of(WarningKind.ORPHAN_NODE)
    assert [w.node_id for w in orphans] == [orphan.id]


def test_missing_required_configuration(builder, validator, graph):
    trigger, reply = _chain(builder, graph, "message_trigger", "ai_response")

    result = validator.validate(graph)

    assert not result.valid
    errors = result.errors_of(ErrorKind.INVALID_CONFIGURATION)
    assert len(errors) == 1
    assert errors[0].node_id == reply.id
    assert errors[0].field == "model"


def test_zero_and_false_are_present_values():
    assert not is_empty_value(0)
    assert not is_empty_value(False)
    assert is_empty_value(None)
    assert is_empty_value("  ")
    assert is_empty_value([])
    assert is_empty_value({})


def test_dangling_connection(builder, validator, graph):
    trigger = builder.add_node(graph, "message_trigger")
    graph.connections.append(WorkflowConnection(
        source_node_id=trigger.id,
        source_port_id="output_message",
        target_node_id="deleted_node",
        target_port_id="input_message",
    ))

    result = validator.validate(graph)

    assert not result.valid
    dangling = result.errors_of(ErrorKind.DANGLING_CONNECTION)
    assert [e.node_id for e in dangling] == ["deleted_node"]


def test_unknown_node_type_is_a_warning(validator, graph):
    graph.nodes.append(WorkflowNode(type="legacy_node", category="trigger"))

    result = validator.validate(graph)

    assert result.valid
    assert len(result.warnings_of(WarningKind.UNKNOWN_NODE_TYPE)) == 1


def test_validation_collects_all_problems(builder, validator, graph):
    """Every error is reported at once, not just the first"""
    a, b = _chain(builder, graph, "ai_response", "knowledge_base")
    builder.create_connection(graph, b.id, b.outputs[0].id, a.id, "input_context")

    result = validator.validate(graph)

    kinds = {e.kind for e in result.errors}
    assert ErrorKind.CIRCULAR_DEPENDENCY in kinds
    assert len(result.errors_of(ErrorKind.INVALID_CONFIGURATION)) == 2


def test_validate_does_not_mutate(builder, validator, graph):
    _chain(builder, graph, "message_trigger", "ai_response")
    before = graph.model_dump()

    validator.validate(graph)

    assert graph.model_dump() == before


def test_topological_order_from_entry(builder, validator, graph):
    """Only nodes reachable from the start node are ordered"""
    unreachable = builder.add_node(graph, "send_message")
    trigger, reply, send = _chain(
        builder, graph, "message_trigger", "ai_response", "send_message",
        configuration={"ai_response": {"model": "m"}},
    )

    order = validator.topological_order(graph, trigger.id)

    assert order == [trigger.id, reply.id, send.id]
    assert unreachable.id not in order
    assert validator.reachable_from(graph, trigger.id) == {trigger.id, reply.id, send.id}


def test_topological_order_diamond(builder, validator, graph):
    trigger = builder.add_node(graph, "message_trigger")
    left = builder.add_node(graph, "send_message")
    right = builder.add_node(graph, "send_message")
    join = builder.add_node(graph, "send_message")
    builder.create_connection(graph, trigger.id, "output_message", right.id, "input_message")
    builder.create_connection(graph, trigger.id, "output_message", left.id, "input_message")
    builder.create_connection(graph, left.id, "output_sent", join.id, "input_message")
    builder.create_connection(graph, right.id, "output_sent", join.id, "input_recipient")

    order = validator.topological_order(graph, trigger.id)

    # ties broken by node order
    assert order == [trigger.id, left.id, right.id, join.id]


def test_message_trigger_without_channels_warns(builder, validator, graph):
    """Listening on every channel is allowed but flagged"""
    open_trigger = builder.add_node(graph, "message_trigger")
    builder.add_node(graph, "message_trigger", configuration={"channels": ["slack"]})

    result = validator.validate(graph)

    assert result.valid
    notices = result.warnings_of(WarningKind.BEST_PRACTICE)
    assert [w.node_id for w in notices] == [open_trigger.id]
    assert "No specific channels" in notices[0].message
