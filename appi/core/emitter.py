"""Parent/child linkage and propagation-aware event dispatch."""

from collections import defaultdict
from typing import Any, Callable, Dict, Iterable, List, Optional

from .event import Event, Propagation
from .exceptions import LinkageError


ANY_EVENT = "*"


class Emitter:
    """
    A node in a tree of event emitters.

    Each emitter has at most one parent and any number of children. Events
    are delivered synchronously on the caller's thread; where they travel is
    decided by the event's propagation flags.

    Usage:
        root, leaf = Emitter(), Emitter()
        root.add_child(leaf)
        leaf.on("ping", handler)
        root.emit_event(Event("ping").set_propagation(Propagation.LOCAL | Propagation.DOWN))
    """

    def __init__(self):
        self._parent: Optional["Emitter"] = None
        self._children: List["Emitter"] = []
        self._listeners: Dict[str, List[Callable[[Event], Any]]] = defaultdict(list)

    # ─── Linkage ──────────────────────────────────────────────────────────

    def add_child(self, child: "Emitter") -> "Emitter":
        """
        Attach ``child`` below this emitter, detaching it from any previous parent.

        Raises:
            LinkageError: if the link would create a cycle.
        """
        if child is self or child.is_ancestor_of(self):
            raise LinkageError("cannot attach an emitter below itself")
        if child._parent is self:
            return self
        if child._parent is not None:
            child._parent.remove_child(child)
        child._parent = self
        self._children.append(child)
        return self

    def remove_child(self, child: "Emitter") -> "Emitter":
        for i, existing in enumerate(self._children):
            if existing is child:
                del self._children[i]
                child._parent = None
                break
        return self

    def get_parent(self) -> Optional["Emitter"]:
        return self._parent

    def has_parent(self) -> bool:
        return self._parent is not None

    def get_children(self) -> List["Emitter"]:
        """Direct children, in attach order."""
        return list(self._children)

    def get_all_children(self) -> List["Emitter"]:
        """All descendants, depth-first pre-order, as observed right now."""
        result = []
        for child in self._children:
            result.append(child)
            result.extend(child.get_all_children())
        return result

    def is_ancestor_of(self, other: "Emitter") -> bool:
        parent = other._parent
        while parent is not None:
            if parent is self:
                return True
            parent = parent._parent
        return False

    # ─── Listeners ────────────────────────────────────────────────────────

    def on(self, kind: str, handler: Callable[[Event], Any]) -> "Emitter":
        """
        Register a handler for an event kind.

        Args:
            kind: The event kind to listen for, or "*" for every kind.
            handler: A callable that receives the event instance.
        """
        self._listeners[kind].append(handler)
        return self

    def off(self, kind: str, handler: Callable[[Event], Any]) -> "Emitter":
        """Remove a handler from an event kind."""
        handlers = self._listeners.get(kind, [])
        if handler in handlers:
            handlers.remove(handler)
        return self

    def listener_count(self, kind: str) -> int:
        return len(self._listeners.get(kind, []))

    # ─── Dispatch ─────────────────────────────────────────────────────────

    def emit_event(self, event: Event) -> "Emitter":
        """
        Deliver ``event`` according to its propagation flags.

        Handler exceptions are not caught; they abort the remaining delivery
        and reach the caller.
        """
        event.target = self
        scope = event.propagation

        if scope & Propagation.LOCAL:
            self._dispatch(event)
        if scope & Propagation.DOWN:
            for child in list(self._children):
                child._propagate_down(event)
        if scope & Propagation.UP:
            parent = self._parent
            while parent is not None and not event.stopped:
                parent._dispatch(event)
                parent = parent._parent
        return self

    def _propagate_down(self, event: Event):
        if event.stopped:
            return
        self._dispatch(event)
        for child in list(self._children):
            child._propagate_down(event)

    def _dispatch(self, event: Event):
        if event.stopped:
            return
        handlers = list(self._listeners.get(event.kind, [])) + list(self._listeners.get(ANY_EVENT, []))
        if not handlers:
            return
        event.current_target = self
        for handler in handlers:
            if event.stopped:
                break
            handler(event)

    def call_on_children(
        self,
        method_name: str,
        args: Iterable[Any] = (),
        filter_fn: Optional[Callable[["Emitter"], bool]] = None,
        child_set: Optional[Iterable["Emitter"]] = None,
        key_fn: Optional[Callable[["Emitter"], Any]] = None,
    ) -> Dict[Any, Any]:
        """
        Call a named method on a set of emitters and collect the results.

        Args:
            method_name: Name of the method to call on each emitter.
            args: Positional arguments passed to every call.
            filter_fn: Optional predicate; emitters it rejects are skipped.
            child_set: Emitters to call (defaults to the direct children).
            key_fn: Maps an emitter to its key in the result (defaults to its
                position in the set).

        Returns:
            Dict of return values keyed by ``key_fn``.
        """
        targets = self.get_children() if child_set is None else list(child_set)
        args = list(args)
        results = {}
        for position, child in enumerate(targets):
            if filter_fn is not None and not filter_fn(child):
                continue
            key = key_fn(child) if key_fn is not None else position
            results[key] = getattr(child, method_name)(*args)
        return results

    def shutdown(self) -> "Emitter":
        """Detach from the parent and drop every listener."""
        if self._parent is not None:
            self._parent.remove_child(self)
        self._listeners.clear()
        return self
