#!/usr/bin/env python3
"""
liveconfig Hot-Reload Demo

This script demonstrates loading a typed configuration, routing manager
hooks into logging, environment overrides, hot-reload with rollback of an
invalid edit, and persisting an update back to the file.
"""

import logging
import os
import sys
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

# Add the parent directory to the path so we can import liveconfig
sys.path.insert(0, str(Path(__file__).parent.parent))

from liveconfig import (
    ConfigManager,
    ConfigOption,
    LoggingConfig,
    attach_logging_hooks,
    setup_logging,
)


@dataclass
class DatabaseConfig:
    host: str = "localhost"
    port: int = 5432
    password: str = ""


@dataclass
class AppConfig:
    app_name: str = "demo"
    version: str = "1.0.0"
    debug: bool = False
    features: List[str] = field(default_factory=list)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


def wait_for(predicate, timeout=5.0):
    """Poll ``predicate`` until it returns True or ``timeout`` expires."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.1)
    return False


def demo_hot_reload(manager, config_file, logger):
    """Edit the file on disk and watch the manager pick it up."""
    logger.info("=== Hot-Reload Demo ===")

    config_file.write_text(config_file.read_text().replace("debug: false", "debug: true"))
    if wait_for(lambda: manager.get_config().debug):
        logger.info("Reloaded: debug is now enabled")
    else:
        logger.warning("No reload observed")

    # Give the debounce window time to pass before the next edit
    time.sleep(1.0)

    logger.info("Writing an invalid port; the previous value is kept")
    config_file.write_text(config_file.read_text().replace("port: 5432", "port: not-a-port"))
    time.sleep(1.5)
    logger.info(f"Database port after invalid edit: {manager.get_config().database.port}")


def demo_update(manager, logger):
    """Change a value through the manager and persist it."""
    logger.info("=== Update Demo ===")

    def add_feature(config):
        config.features.append("hot-reload")

    changes = manager.update_config(add_feature)
    logger.info(f"Persisted changes: {sorted(changes)}")


def main():
    """Run the demo."""
    logger = setup_logging("liveconfig", LoggingConfig(level="DEBUG"))
    hook_logger = logging.getLogger("liveconfig.hooks")

    os.environ.setdefault("DEMO_DATABASE_PASSWORD", "from-environment")

    with tempfile.TemporaryDirectory() as temp_dir:
        manager = ConfigManager(AppConfig)
        manager.set_option(ConfigOption(path=temp_dir, filename="app.yaml"))
        attach_logging_hooks(manager, hook_logger)
        manager.bind_env("database.password", "DEMO_DATABASE_PASSWORD")

        with manager:
            manager.init(lambda ctx: logger.info(f"Reload callback: {ctx.get_manager().get_config()}"))

            config = manager.get_config()
            logger.info(f"Initial configuration: {config}")
            logger.info(f"Password from environment: {config.database.password}")

            demo_hot_reload(manager, Path(manager.config_file), logger)
            demo_update(manager, logger)

    logger.info("Demo completed")


if __name__ == "__main__":
    main()
