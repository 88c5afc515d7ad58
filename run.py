#!/usr/bin/env python3
"""Main entry point: build the module tree described in config/app.yaml."""

import logging
import logging.handlers
import sys
from pathlib import Path

# Add project to path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from appi.config import load_config, get, get_config
from appi.core import ModuleLoader

logger = logging.getLogger(__name__)


def setup_logging():
    """Configure logging from the 'logging' section of the config."""
    log_level = str(get("logging.level", "INFO")).upper()
    handlers = [logging.StreamHandler()]

    log_file = get("logging.file")
    if log_file:
        log_path = Path(log_file)
        if not log_path.is_absolute():
            log_path = project_root / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.TimedRotatingFileHandler(
            log_path,
            when='midnight',
            interval=1,
            backupCount=1,
        )
        file_handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


def main():
    """Build, initialize and report on the module tree."""
    config_path = project_root / "config" / "app.yaml"

    if not config_path.exists():
        print("Error: config/app.yaml not found")
        print("Copy config/app.example.yaml to config/app.yaml and configure it")
        sys.exit(1)

    load_config(str(config_path))
    setup_logging()

    loader = ModuleLoader(config=get_config())
    if not loader.load_all_modules():
        logger.error("Some modules failed to load")

    status = loader.get_module_status()
    logger.info(f"Module tree ready: {status['total_modules']} modules, initialized={status['initialized']}")
    for module in status['modules']:
        logger.info(f"  {module['role']}: {module['class']} {module['config']}")

    loader.trunk.shutdown()


if __name__ == "__main__":
    main()
