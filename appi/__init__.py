"""Role-tagged module trees with shared lifecycle, configuration and events."""

from .core import Node, Event, Snapshot, ModuleLoader

__all__ = ["Node", "Event", "Snapshot", "ModuleLoader"]
