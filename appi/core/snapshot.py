"""Versioned, role-keyed snapshot produced by suspend and consumed by wake."""

from collections.abc import Mapping
from typing import Any, Dict, Iterator

from .exceptions import SnapshotVersionError

SNAPSHOT_VERSION = 1
VERSION_KEY = "__version__"


class Snapshot(Mapping):
    """
    Read-only mapping of role -> saved state.

    The keys are exactly the roles that were suspended (including ``trunk``);
    the format version travels separately in ``version`` so it never shows up
    as a role.
    """

    def __init__(self, states: Dict[str, Dict[str, Any]], version: int = SNAPSHOT_VERSION):
        if version > SNAPSHOT_VERSION:
            raise SnapshotVersionError(version, SNAPSHOT_VERSION)
        self.version = version
        self._states = {role: dict(state or {}) for role, state in states.items()}

    @classmethod
    def from_mapping(cls, data: Mapping) -> "Snapshot":
        """
        Build a snapshot from wake data.

        Args:
            data: A Snapshot, or a plain mapping of role -> state which may
                carry a "__version__" key (as written by to_dict()).

        Raises:
            SnapshotVersionError: if the data comes from a newer format.
        """
        if isinstance(data, Snapshot):
            return data
        states = {role: state for role, state in data.items() if role != VERSION_KEY}
        return cls(states, version=int(data.get(VERSION_KEY, SNAPSHOT_VERSION)))

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict form, with the version stored under "__version__"."""
        data: Dict[str, Any] = {role: dict(state) for role, state in self._states.items()}
        data[VERSION_KEY] = self.version
        return data

    def __getitem__(self, role: str) -> Dict[str, Any]:
        return self._states[role]

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __repr__(self):
        return f"<Snapshot v{self.version}: {sorted(self._states)}>"
