"""
Structural change validation for configuration values.

Compares an old and a candidate configuration field by field over the
declared dataclass fields and reports whether they have the same shape,
collecting the fields whose values differ along the way.
"""

import dataclasses
from numbers import Number
from typing import Any, Dict, Optional, Tuple

from liveconfig.core.error_handling import ConfigTypeMismatchError

# dotted field path -> (old value, new value)
ChangeRecord = Dict[str, Tuple[Any, Any]]


def _same_kind(old: Any, new: Any) -> bool:
    """Leaf compatibility for fields whose runtime type may vary (``Any``)."""
    if old is None or new is None:
        return True
    if type(old) is type(new):
        return True
    numeric = (
        isinstance(old, Number) and isinstance(new, Number)
        and not isinstance(old, bool) and not isinstance(new, bool)
    )
    return numeric


def compare_structures(
    old: Any,
    new: Any,
    prefix: str = "",
    changes: Optional[ChangeRecord] = None
) -> bool:
    """
    Compare two configuration values and collect changed fields.

    Args:
        old: Currently held value
        new: Candidate value
        prefix: Dotted path of ``old`` within the root value
        changes: Mapping that receives ``path -> (old, new)`` for every
            differing leaf field

    Returns:
        True if both values have the same structure, False otherwise
    """
    if changes is None:
        changes = {}

    if type(old) is not type(new):
        return False

    if not dataclasses.is_dataclass(old):
        return True

    for f in dataclasses.fields(old):
        old_field = getattr(old, f.name)
        new_field = getattr(new, f.name)
        full_name = prefix + f.name

        nested = dataclasses.is_dataclass(old_field) or dataclasses.is_dataclass(new_field)
        if nested and old_field is not None and new_field is not None:
            if not compare_structures(old_field, new_field, full_name + ".", changes):
                return False
            continue

        if not _same_kind(old_field, new_field):
            return False

        if old_field != new_field:
            changes[full_name] = (old_field, new_field)

    return True


def diff_config(old: Any, new: Any) -> ChangeRecord:
    """
    Return the changed fields between two configurations.

    Raises:
        ConfigTypeMismatchError: If the two values differ in structure
    """
    changes: ChangeRecord = {}
    if not compare_structures(old, new, "", changes):
        raise ConfigTypeMismatchError(
            f"Configuration structure mismatch between "
            f"{type(old).__name__} and {type(new).__name__}",
            changes=changes
        )
    return changes
