"""Shared test fixtures for the module tree test suite."""

import pytest
import os

# Add parent directory to path so we can import appi without installing it
import sys
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from appi.core import Node


class RecordingNode(Node):
    """Node whose lifecycle hooks record every call, per node and in a shared journal."""

    def __init__(self, role, trunk=None, journal=None):
        super().__init__(role, trunk)
        self.calls = []
        self.journal = journal if journal is not None else []

    def _record(self, hook):
        self.calls.append(hook)
        self.journal.append((self.role, hook))

    def init_module(self):
        self._record("init_module")

    def init_trunk(self):
        self._record("init_trunk")

    def shutdown_module(self):
        self._record("shutdown_module")

    def shutdown_trunk(self):
        self._record("shutdown_trunk")

    def _before_suspend(self):
        self._record("before_suspend")

    def _after_wake(self):
        self._record("after_wake")


@pytest.fixture
def journal():
    """Shared, ordered record of hook calls across a tree."""
    return []


@pytest.fixture
def make_node(journal):
    """Factory for recording nodes that share the test's journal."""
    def _make(role, trunk=None):
        return RecordingNode(role, trunk, journal)
    return _make


@pytest.fixture
def trunk(make_node):
    return make_node("trunk")


@pytest.fixture
def tree(trunk, make_node):
    """A trunk with a ui and a backend module registered, in that order."""
    ui = make_node("ui", trunk)
    backend = make_node("backend", trunk)
    trunk.add_module(ui)
    trunk.add_module(backend)
    return trunk, ui, backend


@pytest.fixture
def listen():
    """Subscribe to every event kind on a node; returns the list events land in."""
    def _listen(node, kind="*", into=None):
        received = [] if into is None else into
        node.on(kind, received.append)
        return received
    return _listen
