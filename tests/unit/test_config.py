"""
Unit tests for configuration.

Tests cover:
- AnalyzerOptions normalization and serialization
- CompilerSettings environment loading and validation
- Logging setup
"""

import logging

import json_log_formatter
import pytest

from schemac.config import AnalyzerOptions, CompilerSettings, load_settings, setup_logging


class TestAnalyzerOptions:
    """Tests for AnalyzerOptions."""

    def test_defaults(self):
        """Defaults are empty overrides and /api."""
        options = AnalyzerOptions()
        assert dict(options.pluralization) == {}
        assert dict(options.table_map) == {}
        assert options.api_prefix == "/api"

    def test_pluralization_lowercased(self):
        """Pluralization overrides are lowercased."""
        options = AnalyzerOptions(pluralization={"Staff": "Staff"})
        assert dict(options.pluralization) == {"staff": "staff"}

    def test_prefix_trailing_slash(self):
        """Trailing slashes are stripped from the prefix."""
        assert AnalyzerOptions(api_prefix="/v1/").api_prefix == "/v1"

    def test_mappings_read_only(self):
        """Override mappings cannot be mutated."""
        options = AnalyzerOptions(table_map={"user": "app_users"})
        with pytest.raises(TypeError):
            options.table_map["post"] = "posts"

    def test_dict_round_trip(self):
        """to_dict output parses back to equal options."""
        options = AnalyzerOptions(pluralization={"person": "persons"}, table_map={"user": "app_users"})
        assert AnalyzerOptions.from_dict(options.to_dict()) == options


class TestCompilerSettings:
    """Tests for CompilerSettings."""

    def test_defaults(self, monkeypatch):
        """Defaults need no environment."""
        monkeypatch.delenv("SCHEMAC_API_PREFIX", raising=False)
        settings = CompilerSettings()
        assert settings.api_prefix == "/api"
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"

    def test_from_environment(self, monkeypatch):
        """Settings are read from SCHEMAC_ variables."""
        monkeypatch.setenv("SCHEMAC_API_PREFIX", "/v2")
        monkeypatch.setenv("SCHEMAC_TABLE_MAP", '{"user": "app_users"}')
        settings = load_settings()
        assert settings.api_prefix == "/v2"
        assert settings.table_map == {"user": "app_users"}

    def test_to_options(self):
        """Settings convert to the analysis configuration bag."""
        settings = CompilerSettings(api_prefix="/v2", pluralization={"person": "persons"})
        options = settings.to_options()
        assert options.api_prefix == "/v2"
        assert dict(options.pluralization) == {"person": "persons"}

    def test_invalid_prefix(self):
        """Prefixes must start with a slash."""
        with pytest.raises(ValueError, match="must start with '/'"):
            CompilerSettings(api_prefix="api").validate_settings()

    def test_invalid_log_level(self):
        """Unknown log levels are rejected."""
        with pytest.raises(ValueError, match="Invalid SCHEMAC_LOG_LEVEL"):
            CompilerSettings(log_level="LOUD").validate_settings()

    def test_invalid_log_format(self):
        """Unknown log formats are rejected."""
        with pytest.raises(ValueError, match="Invalid SCHEMAC_LOG_FORMAT"):
            CompilerSettings(log_format="xml").validate_settings()

    def test_empty_table_name(self):
        """Table overrides cannot be empty."""
        with pytest.raises(ValueError, match="Empty table name"):
            CompilerSettings(table_map={"user": ""}).validate_settings()


class TestSetupLogging:
    """Tests for setup_logging."""

    @pytest.fixture(autouse=True)
    def restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers = handlers
        root.setLevel(level)

    def test_text_format(self):
        """Text format installs a plain formatter."""
        setup_logging(CompilerSettings(log_level="DEBUG"))
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)

    def test_json_format(self):
        """JSON format installs the JSON formatter."""
        setup_logging(CompilerSettings(log_format="json"))
        root = logging.getLogger()
        assert isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)
