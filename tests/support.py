"""
Configuration dataclasses and helpers shared by the liveconfig test suite.
"""

from dataclasses import dataclass, field
from typing import Any, List

from liveconfig.config.config_models import ChangeOperation, ConfigChangeEvent
from liveconfig.config.hooks import HookContext, HookPattern


@dataclass
class ServiceConfig:
    """Two-field service configuration."""
    name: str = "svc"
    port: int = 8080


@dataclass
class DatabaseConfig:
    host: str = "localhost"
    port: int = 5432
    password: str = ""


@dataclass
class AppConfig:
    """Nested configuration with a list field."""
    name: str = "app"
    debug: bool = False
    tags: List[str] = field(default_factory=list)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)


@dataclass
class PayloadConfig:
    """Configuration with an untyped field whose shape can change between reloads."""
    name: str = "payload"
    payload: Any = 0


@dataclass
class TaggedConfig:
    """Configuration providing its own clone(); clones are marked."""
    name: str = ""
    tags: List[str] = field(default_factory=list)
    cloned: bool = False

    def clone(self) -> "TaggedConfig":
        return TaggedConfig(name=self.name, tags=list(self.tags), cloned=True)


class HookRecorder:
    """Collects hook dispatches as (pattern, message) pairs."""

    def __init__(self):
        self.calls = []

    def __call__(self, ctx: HookContext) -> None:
        self.calls.append((ctx.pattern, ctx.message))

    def messages(self, pattern: HookPattern) -> List[str]:
        return [message for p, message in self.calls if p == pattern]

    def count(self, pattern: HookPattern) -> int:
        return len(self.messages(pattern))

    def attach(self, manager) -> "HookRecorder":
        for pattern in HookPattern:
            manager.set_hook(pattern, self)
        return self


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def write_event(path) -> ConfigChangeEvent:
    return ConfigChangeEvent(path=str(path), operation=ChangeOperation.WRITE)
