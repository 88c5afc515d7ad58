"""The module tree node: registry, event routing, lifecycle and configuration."""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Union

from .constants import (
    ROLE_TRUNK,
    ROLE_COMMS,
    ROLE_UI,
    ROLE_BACKEND,
    ROLE_USER,
    ROLE_CLIENTS,
    TRUNK_CONFIG_KEYS,
    ACTION_GET_PACKET,
    ACTION_SEND_REQUEST,
    LOG_PREFIX,
)
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
from .exceptions import (
    TrunkReplacementError,
    ModuleAlreadyDefinedError,
    ModuleNotFoundInTreeError,
    ModuleShortcutError,
    ModuleAttachedError,
)
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

FIRE_SCOPE = Propagation.LOCAL | Propagation.DOWN


@dataclass
class VariableAccessor:
    """Overrides for reading and/or writing one named variable."""
    getter: Optional[Callable[[str], Any]] = None
    setter: Optional[Callable[[str, Any], None]] = None


def _is_node(emitter: Emitter) -> bool:
    return isinstance(emitter, Node)


class Node(Emitter):
    """
    One component of an application, tagged with a role.

    A tree of nodes has a single trunk. Nodes find each other by role through
    the module registry rather than by position, talk through local or global
    events, and are driven through init/shutdown/suspend/wake by the trunk.

    Subclasses override the hooks (init_module, init_trunk, shutdown_module,
    shutdown_trunk, _before_suspend, _after_wake) and register their actions
    and variable accessors in __init__.
    """

    def __init__(self, role: str, trunk: Optional["Node"] = None):
        """
        Initialize the node.

        Args:
            role: One of the ROLE_* constants, or any custom role name.
            trunk: The tree's trunk, if it already exists. Without one the
                node is its own trunk until it gets attached to a tree.
        """
        super().__init__()
        self._logger = None
        self.role = role
        self.trunk: "Node" = self if trunk is None else trunk
        self.modules: Dict[str, "Node"] = {}
        self.state: Dict[str, Any] = {}
        self.config: Dict[str, Any] = {}
        self.initialized = False
        self._actions: Dict[str, Callable[[Dict[str, Any]], Any]] = {}
        self._accessors: Dict[str, VariableAccessor] = {}

    def add_logger(self, logger) -> "Node":
        """Attach a logger exposing one method per level (debug, info, ...)."""
        self._logger = logger
        return self

    # ─── Identity ─────────────────────────────────────────────────────────

    def is_trunk(self) -> bool:
        return self.trunk is self and not self.has_parent()

    def get_trunk(self) -> Optional["Node"]:
        """Return the trunk of this node's tree, or None if the chain is broken."""
        if self.is_trunk():
            return self
        if not self.has_parent():
            return None
        return self.get_parent().get_trunk()

    # ─── Module registry ──────────────────────────────────────────────────

    def get_module(self, role: str) -> Optional["Node"]:
        """
        Resolve the node providing ``role``.

        The trunk role resolves through the trunk walk. Any other role is looked
        up in this node's registry first, then in each ancestor's.

        Returns:
            The registered node, or None if no node in the chain has it.
        """
        if role == ROLE_TRUNK:
            return self.get_trunk()
        if role in self.modules:
            return self.modules[role]
        if not self.has_parent():
            return None
        return self.get_parent().get_module(role)

    def add_module(self, module: "Node", role: Optional[str] = None) -> "Node":
        """
        Register ``module`` under ``role`` here and attach it as a child.

        Broadcasts a global ModuleAddedEvent carrying the module, its role and
        this node as the parent.

        Args:
            module: The node to add.
            role: Registry key; defaults to the module's own role.

        Raises:
            TrunkReplacementError: if the role, or the module's own role, is
                the trunk role.
            ModuleAlreadyDefinedError: if the role is already registered here.
            ModuleAttachedError: if the module already has another parent.
        """
        if role is None:
            role = module.role
        if role == ROLE_TRUNK or module.role == ROLE_TRUNK:
            raise TrunkReplacementError()
        if role in self.modules:
            raise ModuleAlreadyDefinedError(role)
        # a module lives in exactly one registry; remove it there first
        if module.has_parent() and module.get_parent() is not self:
            raise ModuleAttachedError(role)

        self.add_child(module)
        self.modules[role] = module
        self._adopt(module)
        self.log("debug", f"added module {role}")
        self.fire_global(ModuleAddedEvent(module, role, self))
        return self

    def _adopt(self, module: "Node"):
        """Point an attached subtree at this tree's trunk."""
        for node in [module] + module.get_all_children():
            if _is_node(node):
                node.trunk = self.trunk

    def remove_module(self, module: Union["Node", str]) -> "Node":
        """
        Unregister a module, given as a node or as its role, and shut it down.

        If this node does not hold the registration, the request goes to the
        parent. Broadcasts ModuleBeforeRemoveEvent before and ModuleRemovedEvent
        after the removal.

        Raises:
            ModuleNotFoundInTreeError: if no node up the chain holds it.
        """
        role = self._registered_role(module)
        if role is None:
            if not self.has_parent():
                missing = module if isinstance(module, str) else module.role
                raise ModuleNotFoundInTreeError(missing)
            return self.get_parent().remove_module(module)

        removed = self.modules[role]
        self.fire_global(ModuleBeforeRemoveEvent(removed, self))
        del self.modules[role]
        self.remove_child(removed)
        removed.shutdown()
        self.log("debug", f"removed module {role}")
        self.fire_global(ModuleRemovedEvent(removed, self))
        return self

    def _registered_role(self, module: Union["Node", str]) -> Optional[str]:
        if isinstance(module, str):
            return module if module in self.modules else None
        for role, registered in self.modules.items():
            if registered is module:
                return role
        return None

    # ─── Event routing ────────────────────────────────────────────────────

    def fire_local(self, event: Event) -> "Node":
        """Emit ``event`` on this node and its descendants only."""
        event.set_propagation(FIRE_SCOPE)
        self.emit_event(event)
        return self

    def fire_global(self, event: Event) -> "Node":
        """Emit ``event`` from the trunk to the whole tree (locally if orphaned)."""
        trunk = self.get_trunk()
        if trunk is None:
            return self.fire_local(event)
        event.set_propagation(FIRE_SCOPE)
        trunk.emit_event(event)
        return self

    # ─── Actions and variables ────────────────────────────────────────────

    def register_action(self, name: str, handler: Callable[[Dict[str, Any]], Any]) -> "Node":
        self._actions[name] = handler
        return self

    def register_accessor(
        self,
        name: str,
        getter: Optional[Callable[[str], Any]] = None,
        setter: Optional[Callable[[str, Any], None]] = None,
    ) -> "Node":
        """
        Override how the variable ``name`` is read and/or written.

        Args:
            name: Variable name.
            getter: Called as getter(name) by read().
            setter: Called as setter(name, value) by write().
        """
        self._accessors[name] = VariableAccessor(getter=getter, setter=setter)
        return self

    def get_handlers(self) -> Dict[str, Callable]:
        return dict(self._actions)

    def action(self, descriptor: Union[str, Mapping[str, Any]], params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run a registered action.

        Args:
            descriptor: The action name, or a mapping {"action": name, "params": ...}.
            params: Parameters for the action when ``descriptor`` is a name.

        Returns:
            Whatever the handler returns (possibly an awaitable, returned as is),
            or None if no handler is registered under that name.
        """
        if isinstance(descriptor, str):
            descriptor = {"action": descriptor, "params": {} if params is None else params}
        handler = self._actions.get(descriptor.get("action"))
        if handler is None:
            return None
        return handler(descriptor)

    def read(self, name: str) -> Any:
        accessor = self._accessors.get(name)
        if accessor is not None and accessor.getter is not None:
            return accessor.getter(name)
        return self.state.get(name)

    def write(self, name: str, value: Any) -> "Node":
        """
        Set a variable, through its registered setter if there is one.

        Without a setter the value goes into ``state`` and a local
        VariableWriteEvent is fired with the old and new values.
        """
        accessor = self._accessors.get(name)
        if accessor is not None and accessor.setter is not None:
            accessor.setter(name, value)
            return self

        old_value = self.state.get(name)
        self.state[name] = value
        self.fire_local(VariableWriteEvent(self, name, value, old_value))
        return self

    def get_state(self) -> Dict[str, Any]:
        return self.state

    def set_state(self, new_state: Optional[Mapping[str, Any]]) -> "Node":
        self.state = dict(new_state) if new_state else {}
        return self

    # ─── Configuration ────────────────────────────────────────────────────

    def configure(self, config: Mapping[str, Any]) -> "Node":
        """
        Configure this node, and on the trunk, the registered modules.

        On the trunk the "trunk" and "app" blocks are merged into the trunk's
        own config and every other key is handed to the module with that
        role, if there is one. Anywhere else the keys are merged into this
        node's config.
        """
        if not self.is_trunk():
            self.config.update(config)
            return self

        for key, value in config.items():
            if key in TRUNK_CONFIG_KEYS:
                self.config.update(value or {})
                continue
            module = self.get_module(key)
            if module is not None:
                module.configure(value or {})
            else:
                self.log("debug", f"no module for config block {key}")
        return self

    def get_config(self, role: Optional[str] = None) -> Optional[Dict[str, Any]]:
        if role is None or role == self.role:
            return self.config
        module = self.get_module(role)
        if module is not None:
            return module.get_config()
        return None

    # ─── Lifecycle ────────────────────────────────────────────────────────

    def init(self) -> "Node":
        """
        Initialize this node; the trunk initializes the whole tree.

        Run once the tree is built and configured. The trunk runs its own
        init_module, then init on every descendant, then init_trunk. A node
        that is already initialized does nothing.
        """
        if not self.initialized:
            if self.is_trunk():
                logger.info(f"Initializing module tree ({len(self.modules)} modules)")
                self.init_module()
                self.call_on_children("init", filter_fn=_is_node, child_set=self.get_all_children())
                self.init_trunk()
            else:
                self.init_module()
        self.initialized = True
        return self

    def init_module(self):
        """Per-node initialization; on the trunk it runs before the children's."""
        pass

    def init_trunk(self):
        """Trunk-only initialization, run after every child is initialized."""
        pass

    def shutdown(self) -> "Node":
        """
        Shut this node down; the trunk shuts the whole tree down.

        Runs shutdown_module, then on the trunk shutdown on every descendant
        and shutdown_trunk. Finally releases the node's links and listeners
        and clears its registry.
        """
        self.shutdown_module()
        if self.is_trunk():
            self.call_on_children("shutdown", filter_fn=_is_node, child_set=self.get_all_children())
            self.shutdown_trunk()
            logger.info("Module tree shut down")
        super().shutdown()
        self.modules = {}
        self.initialized = False
        return self

    def shutdown_module(self):
        pass

    def shutdown_trunk(self):
        pass

    def suspend(self, accumulator: Optional[Dict[str, Any]] = None) -> Union[Snapshot, Dict[str, Any]]:
        """
        Save this node's state; the trunk saves the whole tree.

        The trunk broadcasts BeforeSuspendEvent, collects every descendant's
        state and its own, and returns a Snapshot keyed by role. Any other
        node runs _before_suspend and stores a copy of its state under its
        role in ``accumulator``, which it returns.

        Args:
            accumulator: Mapping shared by the nodes of one suspend pass.
        """
        if self.is_trunk():
            self.fire_global(BeforeSuspendEvent())
            collected: Dict[str, Any] = {}
            self.call_on_children("suspend", [collected], filter_fn=_is_node, child_set=self.get_all_children())
            self._before_suspend()
            collected[ROLE_TRUNK] = dict(self.get_state())
            snapshot = Snapshot(collected)
            logger.info(f"Suspended module tree: {sorted(snapshot)}")
            return snapshot

        if accumulator is None:
            accumulator = {}
        self._before_suspend()
        accumulator[self.role] = dict(self.get_state())
        return accumulator

    def _before_suspend(self):
        """Commit everything needed to resume into ``state``."""
        pass

    def wake(self, wake_data: Mapping[str, Any]) -> "Node":
        """
        Restore state saved by suspend; the trunk restores the whole tree.

        Args:
            wake_data: A Snapshot, or a plain role -> state mapping.

        Raises:
            SnapshotVersionError: if the data comes from a newer snapshot format.
        """
        if self.is_trunk():
            snapshot = Snapshot.from_mapping(wake_data)
            self.call_on_children("wake", [snapshot], filter_fn=_is_node, child_set=self.get_all_children())
            if ROLE_TRUNK in snapshot:
                self.set_state(snapshot[ROLE_TRUNK])
            self._after_wake()
            self.fire_global(AfterWakeEvent())
            logger.info("Woke module tree")
        elif self.role in wake_data:
            self.set_state(wake_data[self.role])
            self._after_wake()
        return self

    def _after_wake(self):
        """Bring live behavior back in line with the restored ``state``."""
        pass

    # ─── Convenience shortcuts ────────────────────────────────────────────

    def _require(self, role: str) -> "Node":
        module = self.get_module(role)
        if module is None:
            raise ModuleShortcutError(role)
        return module

    def backend(self) -> "Node":
        return self._require(ROLE_BACKEND)

    def ui(self) -> "Node":
        return self._require(ROLE_UI)

    def user(self) -> "Node":
        return self._require(ROLE_USER)

    def clients(self) -> "Node":
        return self._require(ROLE_CLIENTS)

    def comms(self) -> "Node":
        return self._require(ROLE_COMMS)

    def make_packet(self, command: str, data: Any = None) -> Any:
        """Build a packet through the comms module's get_packet action."""
        return self.comms().action(ACTION_GET_PACKET, {"command": command, "payload": data})

    def request(self, command: Union[str, Mapping[str, Any]], payload: Any = None) -> Any:
        """
        Send a request through the backend module's send_request action.

        Args:
            command: Command name, or a mapping with "command" and "payload".
            payload: Request payload when ``command`` is a name.

        Returns:
            The backend action's result, unmodified (typically an awaitable).
        """
        if not isinstance(command, str):
            payload = command.get("payload")
            command = command["command"]
        return self.backend().action(ACTION_SEND_REQUEST, self.make_packet(command, payload))

    # ─── Logging ──────────────────────────────────────────────────────────

    def log(self, level: str, *args: Any):
        """
        Log ``args`` at ``level``, labelled "APPI:<role>".

        An attached logger receives the label and the arguments as they are;
        the stdlib fallback gets them joined into one message.
        """
        label = f"{LOG_PREFIX}:{self.role}"
        if self._logger is not None:
            getattr(self._logger, level)(label, *args)
            return
        getattr(logger, level)(" ".join([label] + [str(arg) for arg in args]))

    def __repr__(self):
        return f"<Node: {self.role} (trunk={self.is_trunk()}, initialized={self.initialized})>"
