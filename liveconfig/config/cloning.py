"""
Deep-copy strategy for configuration snapshots.

A configuration type may implement ``clone()`` to control how snapshots are
made. Types that do not are copied by round-tripping through YAML text with
OmegaConf, which only works for fields OmegaConf can represent. Strings
are copied verbatim; ``${...}`` is never treated as an interpolation.

Example:
    @dataclass
    class AppConfig:
        name: str = ""
        tags: List[str] = field(default_factory=list)

        def clone(self) -> "AppConfig":
            return AppConfig(name=self.name, tags=list(self.tags))
"""

from typing import Any, Optional, Protocol, Type, TypeVar, runtime_checkable

from omegaconf import OmegaConf
from omegaconf.errors import OmegaConfBaseException

from .config_source import to_dataclass
from liveconfig.core.error_handling import ConfigParseError

T = TypeVar("T")


@runtime_checkable
class Cloneable(Protocol):
    """Configuration types that can produce an independent copy of themselves."""

    def clone(self) -> Any:
        ...


def serialized_copy(value: T, config_type: Optional[Type[T]] = None) -> T:
    """Copy ``value`` by serializing it to YAML text and reading it back."""
    config_type = config_type or type(value)
    try:
        text = OmegaConf.to_yaml(OmegaConf.structured(value))
        restored = OmegaConf.merge(OmegaConf.structured(config_type), OmegaConf.create(text))
        return to_dataclass(config_type, restored)
    except (OmegaConfBaseException, ValueError, TypeError) as e:
        raise ConfigParseError(
            f"Failed to copy configuration {config_type.__name__}: {e}",
            cause=e
        )


def deep_copy(value: T, config_type: Optional[Type[T]] = None) -> T:
    """
    Return a copy of ``value`` that shares no mutable state with it.

    Uses ``value.clone()`` when the type provides it, otherwise
    ``serialized_copy``.
    """
    if isinstance(value, Cloneable):
        return value.clone()
    return serialized_copy(value, config_type)
