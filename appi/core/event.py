"""Event objects passed through the module tree."""

import enum
from typing import Any, Dict, Optional

from .constants import (
    EVENT_MODULE_ADDED,
    EVENT_MODULE_BEFORE_REMOVE,
    EVENT_MODULE_REMOVED,
    EVENT_VAR_WRITE,
    EVENT_BEFORE_SUSPEND,
    EVENT_AFTER_WAKE,
)


class Propagation(enum.IntFlag):
    """Where an emitted event travels, relative to the emitting node."""
    LOCAL = 1   # the emitting node's own listeners
    DOWN = 2    # every descendant
    UP = 4      # the parent chain


class Event:
    """
    A named event with a payload mapping.

    Payload keys can be read as attributes, so ``event.module`` is the same
    as ``event.payload["module"]``.
    """

    def __init__(self, kind: str, payload: Optional[Dict[str, Any]] = None):
        self.kind = kind
        self.payload = dict(payload) if payload else {}
        self.propagation = Propagation.LOCAL
        self.stopped = False
        self.target = None
        self.current_target = None

    def set_propagation(self, scope: Propagation) -> "Event":
        self.propagation = Propagation(scope)
        return self

    def stop_propagation(self):
        """Prevent delivery to any listener not yet reached."""
        self.stopped = True

    def __getattr__(self, name: str) -> Any:
        payload = self.__dict__.get("payload", {})
        if name in payload:
            return payload[name]
        raise AttributeError(f"{type(self).__name__} has no attribute '{name}'")

    def __repr__(self):
        return f"<Event: {self.kind} {sorted(self.payload)}>"


class ModuleAddedEvent(Event):
    """Broadcast after a module is registered."""

    def __init__(self, module, role: str, parent):
        super().__init__(EVENT_MODULE_ADDED, {"module": module, "role": role, "parent": parent})


class ModuleBeforeRemoveEvent(Event):
    """Broadcast before a module is unregistered and shut down."""

    def __init__(self, module, parent):
        super().__init__(EVENT_MODULE_BEFORE_REMOVE, {"module": module, "parent": parent})


class ModuleRemovedEvent(Event):
    """Broadcast after a module has been unregistered and shut down."""

    def __init__(self, module, parent):
        super().__init__(EVENT_MODULE_REMOVED, {"module": module, "parent": parent})


class VariableWriteEvent(Event):
    """Fired locally when a state variable is written."""

    def __init__(self, module, var_name: str, new_value: Any, old_value: Any):
        super().__init__(
            EVENT_VAR_WRITE,
            {
                "module": module,
                "var_name": var_name,
                "new_value": new_value,
                "old_value": old_value,
            },
        )


class BeforeSuspendEvent(Event):
    def __init__(self):
        super().__init__(EVENT_BEFORE_SUSPEND)


class AfterWakeEvent(Event):
    def __init__(self):
        super().__init__(EVENT_AFTER_WAKE)
