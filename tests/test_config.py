"""Tests for engine settings loading."""
import pytest

from convivencia.config import EngineSettings, load_settings
from convivencia.exceptions import ConfigurationError


class TestLoadSettings:
    """Tests for YAML and environment configuration."""

    def test_defaults(self):
        settings = load_settings(environ={})
        assert settings == EngineSettings()
        assert settings.allow_backward_transitions
        assert settings.transition_attempts == 1
        assert settings.log_level == "INFO"
        assert settings.log_format == "json"
        assert settings.storage_path is None

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "convivencia.yaml"
        path.write_text(
            "allow_backward_transitions: false\n"
            "transition_attempts: 3\n"
            "log_level: debug\n",
            encoding="utf-8",
        )
        settings = load_settings(path, environ={})

        assert not settings.allow_backward_transitions
        assert settings.transition_attempts == 3
        assert settings.log_level == "DEBUG"

    def test_config_path_from_environment(self, tmp_path):
        path = tmp_path / "convivencia.yaml"
        path.write_text("log_format: text\n", encoding="utf-8")

        settings = load_settings(environ={"CONVIVENCIA_CONFIG": str(path)})
        assert settings.log_format == "text"

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / "convivencia.yaml"
        path.write_text("transition_attempts: 3\n", encoding="utf-8")

        settings = load_settings(path, environ={
            "CONVIVENCIA_TRANSITION_ATTEMPTS": "5",
            "CONVIVENCIA_ALLOW_BACKWARD": "false",
            "CONVIVENCIA_STORAGE_PATH": "/var/lib/convivencia/cases.json",
        })

        assert settings.transition_attempts == 5
        assert not settings.allow_backward_transitions
        assert settings.storage_path == "/var/lib/convivencia/cases.json"

    def test_empty_file(self, tmp_path):
        path = tmp_path / "convivencia.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path, environ={}) == EngineSettings()

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "convivencia.yaml"
        path.write_text("holidays: [2025-09-18]\n", encoding="utf-8")

        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(path, environ={})
        assert exc_info.value.code == "CV_CONFIGURATION_ERROR"

    def test_attempts_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            load_settings(environ={"CONVIVENCIA_TRANSITION_ATTEMPTS": "0"})

    def test_invalid_log_level(self):
        with pytest.raises(ConfigurationError):
            load_settings(environ={"CONVIVENCIA_LOG_LEVEL": "LOUD"})

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "convivencia.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_settings(path, environ={})

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_settings(tmp_path / "absent.yaml", environ={})
