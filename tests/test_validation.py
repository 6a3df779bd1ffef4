"""
Unit tests for structural change validation.
"""

import pytest
from dataclasses import dataclass
from typing import Optional

from liveconfig.config.validation import compare_structures, diff_config
from liveconfig.core.error_handling import ConfigTypeMismatchError

from support import AppConfig, DatabaseConfig, PayloadConfig, ServiceConfig


@dataclass
class OptionalNested:
    database: Optional[DatabaseConfig] = None


class TestCompareStructures:
    """Test compare_structures."""

    def test_identical_values(self):
        changes = {}
        assert compare_structures(AppConfig(), AppConfig(), "", changes)
        assert changes == {}

    def test_changed_leaf_recorded(self):
        changes = {}
        assert compare_structures(ServiceConfig(port=1), ServiceConfig(port=2), "", changes)
        assert changes == {"port": (1, 2)}

    def test_nested_paths_are_dotted(self):
        old = AppConfig(tags=["a"])
        new = AppConfig(tags=["a", "b"], database=DatabaseConfig(host="other"))
        changes = {}

        assert compare_structures(old, new, "", changes)
        assert changes == {
            "tags": (["a"], ["a", "b"]),
            "database.host": ("localhost", "other"),
        }

    def test_prefix_applied(self):
        changes = {}
        compare_structures(DatabaseConfig(port=1), DatabaseConfig(port=2), "db.", changes)
        assert changes == {"db.port": (1, 2)}

    def test_different_types_incompatible(self):
        assert not compare_structures(ServiceConfig(), AppConfig())

    def test_non_dataclass_values(self):
        assert compare_structures(1, 2)
        assert not compare_structures(1, "1")

    def test_any_field_changing_kind_incompatible(self):
        assert not compare_structures(PayloadConfig(payload=1), PayloadConfig(payload="text"))
        assert not compare_structures(PayloadConfig(payload={"a": 1}), PayloadConfig(payload=[1]))
        assert not compare_structures(PayloadConfig(payload=True), PayloadConfig(payload=1))

    def test_any_field_tolerances(self):
        numeric = {}
        assert compare_structures(PayloadConfig(payload=1), PayloadConfig(payload=1.5), "", numeric)
        assert numeric == {"payload": (1, 1.5)}

        unset = {}
        assert compare_structures(PayloadConfig(payload=None), PayloadConfig(payload="x"), "", unset)
        assert unset == {"payload": (None, "x")}

    def test_optional_nested_none(self):
        changes = {}
        old = OptionalNested()
        new = OptionalNested(database=DatabaseConfig())

        assert compare_structures(old, new, "", changes)
        assert changes == {"database": (None, DatabaseConfig())}

    def test_changes_default_is_fresh(self):
        assert compare_structures(ServiceConfig(port=1), ServiceConfig(port=2))


class TestDiffConfig:
    """Test diff_config."""

    def test_returns_changes(self):
        assert diff_config(ServiceConfig(name="a"), ServiceConfig(name="b")) == {"name": ("a", "b")}

    def test_raises_on_mismatch(self):
        with pytest.raises(ConfigTypeMismatchError) as exc_info:
            diff_config(PayloadConfig(payload=1), PayloadConfig(payload="x"))
        assert "structure mismatch" in exc_info.value.message
