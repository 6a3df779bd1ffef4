"""
Unit tests for configuration data models.
"""

import os
import pytest

from liveconfig.config.config_models import (
    DEFAULT_DEBOUNCE,
    DEFAULT_FILENAME,
    DEFAULT_PATH,
    ChangeOperation,
    ConfigChangeEvent,
    ConfigOption,
    LogFormat,
    LoggingConfig,
    LogLevel,
)


class TestConfigOption:
    """Test ConfigOption set-if-unset semantics and path resolution."""

    def test_fields_start_unset(self):
        opts = ConfigOption()
        for name in ConfigOption.option_names():
            assert not opts.is_set(name)

    def test_option_names(self):
        assert ConfigOption.option_names() == [
            "filename", "path", "file_type", "env", "debounce",
            "env_prefix", "automatic_env", "allow_empty_env", "env_key_replacer",
        ]

    def test_set_if_unset(self):
        opts = ConfigOption()
        opts.set("filename", "first.yaml")
        opts.set("filename", "second.yaml")
        assert opts.filename == "first.yaml"

    def test_set_with_override(self):
        opts = ConfigOption(filename="first.yaml")
        opts.set("filename", "second.yaml", override=True)
        assert opts.filename == "second.yaml"

    def test_set_chaining(self):
        opts = ConfigOption()
        assert opts.set("debounce", 0.1).set("env_prefix", "app") is opts

    def test_defaults_do_not_clobber_explicit_values(self):
        opts = ConfigOption(filename="app.yaml", debounce=0.25, automatic_env=True)
        opts.set_defaults()

        assert opts.filename == "app.yaml"
        assert opts.debounce == 0.25
        assert opts.automatic_env is True
        assert opts.path == DEFAULT_PATH
        assert opts.allow_empty_env is False
        assert opts.env_key_replacer is None

    def test_defaults_twice_is_idempotent(self):
        opts = ConfigOption().set_defaults()
        before = ConfigOption(**{name: getattr(opts, name) for name in ConfigOption.option_names()})
        opts.set_defaults()
        assert opts == before

    def test_default_values(self):
        opts = ConfigOption().set_defaults()
        assert opts.filename == DEFAULT_FILENAME == "config.yaml"
        assert opts.path == DEFAULT_PATH == "./configs"
        assert opts.debounce == DEFAULT_DEBOUNCE == 0.8
        assert opts.env_prefix == ""
        assert opts.env == ""

    def test_unknown_option(self):
        with pytest.raises(ValueError, match="Unknown option"):
            ConfigOption().set("colour", "blue")

    def test_negative_debounce(self):
        with pytest.raises(ValueError, match="debounce must be non-negative"):
            ConfigOption(debounce=-1)

    def test_invalid_set_is_rolled_back(self):
        opts = ConfigOption()
        with pytest.raises(ValueError):
            opts.set("file_type", "ini")
        assert not opts.is_set("file_type")

    def test_unsupported_file_type(self):
        with pytest.raises(ValueError, match="Invalid file_type"):
            ConfigOption(file_type="toml")

    def test_file_is_absolute(self, tmp_path):
        opts = ConfigOption(path=str(tmp_path), filename="app.yaml")
        assert opts.file == os.path.join(str(tmp_path), "app.yaml")
        assert os.path.isabs(ConfigOption().file)

    def test_file_is_cached(self, tmp_path):
        opts = ConfigOption(path=str(tmp_path))
        first = opts.file
        assert opts.file is first

    def test_file_cache_cleared_on_location_change(self, tmp_path):
        opts = ConfigOption(path=str(tmp_path), filename="a.yaml")
        assert opts.file.endswith("a.yaml")
        opts.set("filename", "b.yaml", override=True)
        assert opts.file.endswith("b.yaml")

    def test_env_infix(self, tmp_path):
        opts = ConfigOption(path=str(tmp_path), filename="config.yaml", env="dev")
        assert opts.file == os.path.join(str(tmp_path), "config.dev.yaml")

    def test_config_format(self):
        assert ConfigOption(filename="a.json").config_format == "json"
        assert ConfigOption(filename="a.yml").config_format == "yml"
        assert ConfigOption(filename="noext").config_format == "yaml"
        assert ConfigOption(filename="a.txt", file_type="JSON").config_format == "json"


class TestChangeEvent:

    def test_operations(self):
        assert [op.value for op in ChangeOperation] == ["write", "create", "rename", "remove", "chmod"]

    def test_event_is_immutable(self):
        event = ConfigChangeEvent(path="/tmp/config.yaml", operation=ChangeOperation.WRITE)
        with pytest.raises(Exception):
            event.path = "/other"


class TestLoggingConfig:
    """Test LoggingConfig validation."""

    def test_defaults(self):
        config = LoggingConfig()
        assert config.level == LogLevel.INFO
        assert config.format == LogFormat.SIMPLE
        assert config.output == ["console"]

    def test_string_enums(self):
        config = LoggingConfig(level="DEBUG", format="structured")
        assert config.level == LogLevel.DEBUG
        assert config.format == LogFormat.STRUCTURED

    def test_invalid_output(self):
        with pytest.raises(ValueError, match="Invalid log output"):
            LoggingConfig(output=["syslog"])

    def test_invalid_rotation(self):
        with pytest.raises(ValueError, match="Invalid rotation"):
            LoggingConfig(rotation="weekly")

    def test_invalid_sizes(self):
        with pytest.raises(ValueError, match="max_file_size_mb must be positive"):
            LoggingConfig(max_file_size_mb=0)
        with pytest.raises(ValueError, match="backup_count must be non-negative"):
            LoggingConfig(backup_count=-1)
