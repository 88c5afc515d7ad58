"""Errors raised when a caller breaks the module tree's contracts."""


class AppiError(Exception):
    """Base class for all module tree errors."""


class TrunkReplacementError(AppiError):
    """Raised when something tries to register a module in the trunk role."""

    def __init__(self):
        super().__init__("trunk cannot be replaced")


class ModuleAlreadyDefinedError(AppiError):
    """Raised when a role is registered twice on the same node."""

    def __init__(self, role: str):
        super().__init__(f"module already defined: {role}")
        self.role = role


class ModuleNotFoundInTreeError(AppiError):
    """Raised when a module to remove is not registered anywhere up the chain."""

    def __init__(self, role: str):
        super().__init__(f"module cannot be found: {role}")
        self.role = role


class ModuleShortcutError(AppiError):
    """Raised by the role shortcuts (backend(), ui(), ...) on a missing role."""

    def __init__(self, role: str):
        super().__init__(f"module shortcut to {role} failed")
        self.role = role


class LinkageError(AppiError):
    """Raised when a parent/child link would turn the tree into a cycle."""


class SnapshotVersionError(AppiError):
    """Raised when waking from a snapshot written by a newer format."""

    def __init__(self, version: int, supported: int):
        super().__init__(
            f"snapshot version {version} is not supported (max {supported})"
        )
        self.version = version
        self.supported = supported


class ModuleAttachedError(AppiError):
    """Raised when a module that already has another parent is registered."""

    def __init__(self, role: str):
        super().__init__(f"module already attached elsewhere: {role}")
        self.role = role
