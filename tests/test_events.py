"""Tests for local/global event routing and the underlying emitter."""

import pytest
from appi.core import (
    Emitter,
    Event,
    LinkageError,
    Node,
    Propagation,
    VariableWriteEvent,
    ModuleAddedEvent,
)


@pytest.fixture
def deep_tree(tree, make_node):
    """trunk -> (ui -> user, backend)"""
    trunk, ui, backend = tree
    user = make_node("user")
    ui.add_module(user)
    return trunk, ui, backend, user


def record_roles(nodes, into):
    for node in nodes:
        node.on("ping", lambda e, role=node.role: into.append(role))


class TestFireLocal:
    """Local propagation reaches the node and its descendants only."""

    def test_reaches_node_and_descendants(self, deep_tree):
        trunk, ui, backend, user = deep_tree
        reached = []
        record_roles(deep_tree, reached)

        ui.fire_local(Event("ping"))

        assert reached == ["ui", "user"]

    def test_leaf_does_not_reach_siblings_or_ancestors(self, deep_tree):
        trunk, ui, backend, user = deep_tree
        reached = []
        record_roles(deep_tree, reached)

        user.fire_local(Event("ping"))

        assert reached == ["user"]

    def test_sets_local_and_down_scope(self, trunk):
        event = Event("ping")
        assert trunk.fire_local(event) is trunk
        assert event.propagation == Propagation.LOCAL | Propagation.DOWN
        assert event.target is trunk


class TestFireGlobal:
    """Global propagation reaches the whole tree from the trunk."""

    def test_leaf_reaches_every_node(self, deep_tree):
        trunk, ui, backend, user = deep_tree
        reached = []
        record_roles(deep_tree, reached)

        user.fire_global(Event("ping"))

        assert reached == ["trunk", "ui", "user", "backend"]

    def test_dispatches_from_trunk(self, deep_tree):
        trunk, _, backend, _ = deep_tree
        event = Event("ping")

        assert backend.fire_global(event) is backend
        assert event.target is trunk
        assert event.propagation == Propagation.LOCAL | Propagation.DOWN

    def test_orphan_degrades_to_local(self, trunk):
        orphan = Node("ui", trunk)
        child = Node("user", trunk)
        orphan.add_child(child)
        reached = []
        record_roles([trunk, orphan, child], reached)

        orphan.fire_global(Event("ping"))

        assert reached == ["ui", "user"]


class TestEvent:
    """The event value type."""

    def test_payload_readable_as_attributes(self):
        event = Event("custom", {"a": 1})
        assert event.a == 1
        assert event.payload == {"a": 1}
        with pytest.raises(AttributeError):
            event.b

    def test_payload_defaults_to_empty(self):
        event = Event("custom")
        assert event.payload == {}
        assert event.propagation == Propagation.LOCAL
        assert not event.stopped

    def test_typed_notifications_have_fixed_payloads(self, trunk):
        added = ModuleAddedEvent(trunk, "ui", None)
        assert added.kind == "moduleadd"
        assert set(added.payload) == {"module", "role", "parent"}

        write = VariableWriteEvent(trunk, "x", 2, 1)
        assert write.kind == "varwrite"
        assert (write.var_name, write.new_value, write.old_value) == ("x", 2, 1)


class TestEmitter:
    """Linkage and dispatch primitives."""

    def test_add_child_reparents(self):
        a, b, child = Emitter(), Emitter(), Emitter()
        a.add_child(child)
        b.add_child(child)

        assert child.get_parent() is b
        assert a.get_children() == []
        assert b.get_children() == [child]

    def test_cycles_are_rejected(self):
        root, mid, leaf = Emitter(), Emitter(), Emitter()
        root.add_child(mid)
        mid.add_child(leaf)

        with pytest.raises(LinkageError):
            leaf.add_child(root)
        with pytest.raises(LinkageError):
            root.add_child(root)

    def test_get_all_children_is_preorder(self):
        root, a, b, c = Emitter(), Emitter(), Emitter(), Emitter()
        root.add_child(a)
        root.add_child(b)
        a.add_child(c)

        assert root.get_all_children() == [a, c, b]

    def test_up_propagation_reaches_ancestors_only(self):
        root, a, b, c = Emitter(), Emitter(), Emitter(), Emitter()
        root.add_child(a)
        root.add_child(b)
        a.add_child(c)
        reached = []
        for name, node in (("root", root), ("a", a), ("b", b), ("c", c)):
            node.on("x", lambda e, name=name: reached.append(name))

        c.emit_event(Event("x").set_propagation(Propagation.LOCAL | Propagation.UP))

        assert reached == ["c", "a", "root"]

    def test_stop_propagation_halts_delivery(self):
        root, child = Emitter(), Emitter()
        root.add_child(child)
        reached = []
        root.on("x", lambda e: e.stop_propagation())
        child.on("x", reached.append)

        root.emit_event(Event("x").set_propagation(Propagation.LOCAL | Propagation.DOWN))

        assert reached == []

    def test_wildcard_and_off(self):
        node = Emitter()
        received = []
        node.on("*", received.append)
        node.emit_event(Event("anything"))
        node.off("*", received.append)
        node.emit_event(Event("anything"))

        assert len(received) == 1
        assert node.listener_count("*") == 0

    def test_handler_errors_propagate(self):
        node = Emitter()

        def boom(event):
            raise RuntimeError("handler failed")

        node.on("x", boom)
        with pytest.raises(RuntimeError, match="handler failed"):
            node.emit_event(Event("x"))

    def test_call_on_children_collects_results(self, tree):
        trunk, ui, backend = tree
        plain = Emitter()
        trunk.add_child(plain)

        results = trunk.call_on_children(
            "get_config",
            filter_fn=lambda c: isinstance(c, Node),
            key_fn=lambda c: c.role,
        )

        assert results == {"ui": ui.config, "backend": backend.config}

    def test_call_on_children_defaults_to_positions(self):
        root, a, b = Emitter(), Emitter(), Emitter()
        root.add_child(a)
        root.add_child(b)

        assert root.call_on_children("has_parent") == {0: True, 1: True}

    def test_shutdown_detaches_and_drops_listeners(self):
        root, child = Emitter(), Emitter()
        root.add_child(child)
        child.on("x", lambda e: None)

        child.shutdown()

        assert child.get_parent() is None
        assert root.get_children() == []
        assert child.listener_count("x") == 0
