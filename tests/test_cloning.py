"""
Unit tests for configuration snapshot copies.
"""

import threading

import pytest

from liveconfig.config.cloning import Cloneable, deep_copy, serialized_copy
from liveconfig.core.error_handling import ConfigParseError

from support import AppConfig, DatabaseConfig, PayloadConfig, TaggedConfig


class TestCloneable:

    def test_protocol_detection(self):
        assert isinstance(TaggedConfig(), Cloneable)
        assert not isinstance(AppConfig(), Cloneable)

    def test_clone_takes_precedence(self):
        original = TaggedConfig(name="t", tags=["a"])
        copy = deep_copy(original)

        assert copy.cloned is True
        assert copy.tags == ["a"]
        assert copy.tags is not original.tags


class TestSerializedCopy:

    def test_copy_is_equal_and_independent(self):
        original = AppConfig(name="n", tags=["a", "b"], database=DatabaseConfig(host="h"))
        copy = deep_copy(original)

        assert copy == original
        assert copy is not original
        assert copy.database is not original.database

        copy.tags.append("c")
        copy.database.port = 1
        assert original.tags == ["a", "b"]
        assert original.database.port == 5432

    def test_copy_preserves_type(self):
        copy = serialized_copy(AppConfig())
        assert type(copy) is AppConfig
        assert type(copy.database) is DatabaseConfig
        assert type(copy.tags) is list

    def test_untyped_field_copied(self):
        original = PayloadConfig(payload={"nested": [1, 2]})
        copy = deep_copy(original, PayloadConfig)

        assert copy.payload == {"nested": [1, 2]}
        copy.payload["nested"].append(3)
        assert original.payload == {"nested": [1, 2]}

    def test_dollar_brace_text_copied_verbatim(self):
        original = AppConfig(name="${nope}", database=DatabaseConfig(password="pa${ss}word"))
        copy = deep_copy(original)

        assert copy == original

    def test_unrepresentable_value(self):
        with pytest.raises(ConfigParseError, match="Failed to copy configuration PayloadConfig"):
            deep_copy(PayloadConfig(payload=threading.Lock()))
