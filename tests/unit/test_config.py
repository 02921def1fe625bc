"""Tests for configuration loading and validation."""

import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

from stack_capture.config.loader import load_config, substitute_env_vars
from stack_capture.config.schema import (
    CaptureConfig,
    CollectorConfig,
    LoggingConfig,
    RedactionConfig,
    SourceCacheConfig,
)


class TestSubstituteEnvVars:
    """Test environment variable substitution."""

    def test_substitute_single_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting a single environment variable."""
        monkeypatch.setenv("TEST_VAR", "test_value")
        assert substitute_env_vars("Value is ${TEST_VAR}") == "Value is test_value"

    def test_substitute_multiple_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test substituting multiple environment variables."""
        monkeypatch.setenv("VAR1", "value1")
        monkeypatch.setenv("VAR2", "value2")
        assert substitute_env_vars("${VAR1} and ${VAR2}") == "value1 and value2"

    def test_missing_env_var_raises(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that missing environment variables raise ValueError."""
        monkeypatch.delenv("MISSING", raising=False)
        with pytest.raises(ValueError, match="Environment variable MISSING not found"):
            substitute_env_vars("Value is ${MISSING}")

    def test_no_substitution_needed(self) -> None:
        """Test text without environment variables passes through unchanged."""
        assert substitute_env_vars("plain text") == "plain text"


class TestCaptureConfig:
    """Test CaptureConfig validation."""

    def test_defaults(self) -> None:
        """Test default capture settings."""
        config = CaptureConfig()

        assert config.context_lines == 2
        assert config.max_frames == 100
        assert config.app_packages == []
        assert "_vendor" in config.excluded_markers

    def test_source_roots_default_to_sys_path(self) -> None:
        """Test source roots are taken from sys.path."""
        config = CaptureConfig()

        named = [Path(entry) for entry in sys.path if entry]
        assert all(root in config.source_roots for root in named)

    def test_context_lines_bounds(self) -> None:
        """Test context lines must be between -1 and 100."""
        assert CaptureConfig(context_lines=-1).context_lines == -1
        with pytest.raises(ValidationError):
            CaptureConfig(context_lines=-2)
        with pytest.raises(ValidationError):
            CaptureConfig(context_lines=101)

    def test_max_frames_bounds(self) -> None:
        """Test max_frames must be positive and bounded."""
        with pytest.raises(ValidationError):
            CaptureConfig(max_frames=0)
        with pytest.raises(ValidationError):
            CaptureConfig(max_frames=1001)

    def test_blank_app_package_rejected(self) -> None:
        """Test blank app package names are rejected."""
        with pytest.raises(ValidationError, match="must not be empty"):
            CaptureConfig(app_packages=["myapp", "  "])


class TestSectionDefaults:
    """Test defaults of the remaining sections."""

    def test_source_cache_defaults(self) -> None:
        """Test the default read limit."""
        assert SourceCacheConfig().max_file_bytes == 5 * 1024 * 1024

    def test_source_cache_minimum(self) -> None:
        """Test tiny read limits are rejected."""
        with pytest.raises(ValidationError):
            SourceCacheConfig(max_file_bytes=10)

    def test_redaction_disabled_by_default(self) -> None:
        """Test redaction is opt-in."""
        config = RedactionConfig()
        assert not config.enabled
        assert config.placeholder == "[REDACTED]"

    def test_logging_defaults(self) -> None:
        """Test default logging settings."""
        config = LoggingConfig()
        assert config.level == "INFO"
        assert config.format == "json"
        assert not config.file.enabled

    def test_invalid_log_level_rejected(self) -> None:
        """Test unknown log levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="VERBOSE")  # type: ignore[arg-type]


class TestCollectorConfig:
    """Test the root configuration."""

    def test_all_defaults(self) -> None:
        """Test the root config builds with no input."""
        config = CollectorConfig()

        assert config.capture.context_lines == 2
        assert not config.redaction.enabled

    def test_environment_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test nested values can be set from the environment."""
        monkeypatch.setenv("STACK_CAPTURE_CAPTURE__CONTEXT_LINES", "5")
        monkeypatch.setenv("STACK_CAPTURE_REDACTION__ENABLED", "true")

        config = CollectorConfig()

        assert config.capture.context_lines == 5
        assert config.redaction.enabled


class TestLoadConfig:
    """Test loading configuration files."""

    def test_load_yaml(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test loading a YAML file with environment substitution."""
        monkeypatch.setenv("APP_PACKAGE", "myapp")
        path = tmp_path / "config.yaml"
        path.write_text(
            "capture:\n"
            "  context_lines: 4\n"
            "  app_packages:\n"
            "    - ${APP_PACKAGE}\n"
            "    - __main__\n"
            "source_cache:\n"
            "  max_file_bytes: 65536\n"
            "redaction:\n"
            "  enabled: true\n"
            "  custom_patterns:\n"
            "    - ['internal-[0-9]+', 'Internal id']\n"
        )

        config = load_config(path)

        assert config.capture.context_lines == 4
        assert config.capture.app_packages == ["myapp", "__main__"]
        assert config.source_cache.max_file_bytes == 65536
        assert config.redaction.custom_patterns == [("internal-[0-9]+", "Internal id")]

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        """Test an empty file loads the default configuration."""
        path = tmp_path / "empty.yaml"
        path.write_text("")

        config = load_config(path)

        assert config.capture.context_lines == 2

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Configuration file not found"):
            load_config(tmp_path / "nope.yaml")

    def test_non_mapping_rejected(self, tmp_path: Path) -> None:
        """Test a YAML list at the root is rejected."""
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must be a mapping"):
            load_config(path)

    def test_invalid_values_rejected(self, tmp_path: Path) -> None:
        """Test schema violations raise ValidationError."""
        path = tmp_path / "bad.yaml"
        path.write_text("capture:\n  max_frames: 0\n")

        with pytest.raises(ValidationError):
            load_config(path)
