"""Module loader for building a module tree from configuration."""

import logging
import yaml
import importlib
from pathlib import Path
from typing import Any, Dict, Optional

from .constants import ROLE_TRUNK
from .node import Node

logger = logging.getLogger(__name__)

DEFAULT_NODE_CLASS = "appi.core.node.Node"


class ModuleLoader:
    """Builds, configures and initializes a module tree from YAML configuration."""

    def __init__(self, config_path: str = "app.yaml", config: Optional[Dict[str, Any]] = None):
        """
        Initialize the module loader.

        Args:
            config_path: Path to the tree configuration file
            config: Already loaded configuration; the file is not read if given
        """
        self.config_path = Path(config_path)
        self.config = config
        self.trunk: Optional[Node] = None

    def load_config(self) -> Dict:
        """Load the tree configuration from YAML file."""
        if self.config is not None:
            return self.config

        if not self.config_path.exists():
            logger.warning(f"Tree config not found: {self.config_path}, using defaults")
            self.config = {"modules": {}, "module_settings": {}}
            return self.config

        with open(self.config_path, 'r') as f:
            self.config = yaml.safe_load(f) or {}

        logger.info(f"Loaded tree configuration from {self.config_path}")
        return self.config

    @staticmethod
    def resolve_class(dotted_path: str) -> type:
        """
        Import a node class from its dotted path.

        Raises:
            ImportError: if the module cannot be imported
            AttributeError: if the module has no such class
        """
        module_path, _, class_name = dotted_path.rpartition(".")
        if not module_path:
            raise ImportError(f"Not a dotted class path: {dotted_path}")
        return getattr(importlib.import_module(module_path), class_name)

    def build_trunk(self) -> Node:
        """Create the trunk node from the optional 'trunk.class' setting."""
        trunk_settings = self.load_config().get(ROLE_TRUNK) or {}
        trunk_class = self.resolve_class(trunk_settings.get("class", DEFAULT_NODE_CLASS))
        self.trunk = trunk_class(ROLE_TRUNK)
        return self.trunk

    def load_module(self, role: str, module_config: Dict) -> bool:
        """
        Load a single module and register it on the trunk.

        Args:
            role: Role the module is registered under
            module_config: Module configuration dict

        Returns:
            True if module loaded successfully
        """
        if self.trunk is None:
            self.build_trunk()

        class_path = module_config.get("class", DEFAULT_NODE_CLASS)
        try:
            module_class = self.resolve_class(class_path)
        except (ImportError, AttributeError) as e:
            logger.error(f"Failed to load module {role} ({class_path}): {e}")
            return False

        module = module_class(role, self.trunk)
        self.trunk.add_module(module, role)
        logger.info(f"Loaded module: {role} ({class_path})")
        return True

    def load_all_modules(self) -> bool:
        """
        Build the whole tree from configuration.

        Enabled modules are registered by priority (lower first), then the
        configuration is distributed through the trunk, then the tree is
        initialized unless 'module_settings.auto_init' is false.

        Returns:
            True if all modules loaded successfully
        """
        config = self.load_config()
        modules_config = config.get('modules') or {}
        module_settings = config.get('module_settings') or {}

        self.build_trunk()

        ordered = sorted(modules_config.items(), key=lambda item: (item[1] or {}).get('priority', 100))

        loaded = 0
        failed = 0
        distributed = {
            "app": config.get("app") or {},
            ROLE_TRUNK: (config.get(ROLE_TRUNK) or {}).get("config") or {},
        }

        for role, module_config in ordered:
            module_config = module_config or {}

            # Skip if explicitly disabled
            if not module_config.get('enabled', True):
                logger.info(f"Skipping disabled module: {role}")
                continue

            if self.load_module(role, module_config):
                loaded += 1
                distributed[role] = module_config.get('config') or {}
            else:
                failed += 1
                if module_settings.get('fail_on_error', False):
                    logger.error("Failing due to module load error (fail_on_error=true)")
                    return False

        logger.info(f"Module loading complete: {loaded} loaded, {failed} failed")

        self.trunk.configure(distributed)

        if module_settings.get('auto_init', True):
            self.trunk.init()

        return failed == 0

    def reload_module(self, role: str) -> bool:
        """
        Replace a module with a freshly built one (useful for development).

        Args:
            role: Role of the module to reload

        Returns:
            True if reload successful
        """
        if self.trunk is None or role not in self.trunk.modules:
            logger.warning(f"Cannot reload module {role}: not loaded")
            return False

        self.trunk.remove_module(role)

        module_config = (self.load_config().get('modules') or {}).get(role) or {}
        if not self.load_module(role, module_config):
            return False

        module = self.trunk.get_module(role)
        module.configure(module_config.get('config') or {})
        if self.trunk.initialized:
            module.init()
        return True

    def get_module_status(self) -> Dict:
        """
        Get status of all modules.

        Returns:
            Dict with module status information
        """
        modules = self.trunk.modules if self.trunk is not None else {}
        return {
            "total_modules": len(modules),
            "initialized": bool(self.trunk and self.trunk.initialized),
            "modules": [
                {
                    "role": role,
                    "class": f"{type(m).__module__}.{type(m).__qualname__}",
                    "initialized": m.initialized,
                    "config": dict(m.config),
                }
                for role, m in modules.items()
            ],
        }
