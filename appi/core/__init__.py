"""Core system functionality."""

from .node import Node, VariableAccessor
from .emitter import Emitter
from .event import (
    Event,
    Propagation,
    ModuleAddedEvent,
    ModuleBeforeRemoveEvent,
    ModuleRemovedEvent,
    VariableWriteEvent,
    BeforeSuspendEvent,
    AfterWakeEvent,
)
from .snapshot import Snapshot, SNAPSHOT_VERSION
from .loader import ModuleLoader
from .exceptions import (
    AppiError,
    TrunkReplacementError,
    ModuleAlreadyDefinedError,
    ModuleNotFoundInTreeError,
    ModuleShortcutError,
    LinkageError,
    ModuleAttachedError,
    SnapshotVersionError,
)

__all__ = [
    "Node",
    "VariableAccessor",
    "Emitter",
    "Event",
    "Propagation",
    "ModuleAddedEvent",
    "ModuleBeforeRemoveEvent",
    "ModuleRemovedEvent",
    "VariableWriteEvent",
    "BeforeSuspendEvent",
    "AfterWakeEvent",
    "Snapshot",
    "SNAPSHOT_VERSION",
    "ModuleLoader",
    "AppiError",
    "TrunkReplacementError",
    "ModuleAlreadyDefinedError",
    "ModuleNotFoundInTreeError",
    "ModuleShortcutError",
    "LinkageError",
    "ModuleAttachedError",
    "SnapshotVersionError",
]
