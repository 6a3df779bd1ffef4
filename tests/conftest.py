"""
pytest configuration and shared fixtures for the liveconfig test suite.
"""

import pytest
import tempfile
import shutil
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from liveconfig.config.config_manager import ConfigManager
from liveconfig.config.config_models import ConfigOption

from support import FakeClock, HookRecorder, ServiceConfig


@pytest.fixture
def temp_config_dir():
    """Create a temporary configuration directory for testing."""
    temp_dir = tempfile.mkdtemp(prefix="liveconfig_test_")
    config_dir = Path(temp_dir) / "conf"
    config_dir.mkdir(parents=True)

    yield config_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def service_file(temp_config_dir):
    """A config.yaml holding a valid ServiceConfig."""
    path = temp_config_dir / "config.yaml"
    path.write_text("name: svc\nport: 8080\n")
    return path


@pytest.fixture
def hook_recorder():
    return HookRecorder()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def service_manager(temp_config_dir, service_file, hook_recorder, fake_clock):
    """A ServiceConfig manager with options set, hooks recorded and a fake debounce clock."""
    manager = ConfigManager(ServiceConfig)
    manager.set_option(ConfigOption(path=str(temp_config_dir), filename="config.yaml"))
    manager._debounce.clock = fake_clock
    hook_recorder.attach(manager)
    yield manager
    manager.close()


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests that use a real filesystem watcher"
    )
