"""
Unit tests for config module
"""
import json
import pytest
from pathlib import Path

from formfill.config import (
    ConfigurationError,
    ConfigurationManager,
    DEFAULT_TARGET_URL,
    FieldLocator,
    FillConfig,
    SecurityConfig
)
from formfill.utils import substitute_env_vars


def write_config(tmp_path: Path, data) -> Path:
    config_file = tmp_path / "config.json"
    config_file.write_text(json.dumps(data) if not isinstance(data, str) else data)
    return config_file


class TestDefaults:
    """Default settings mirror the original timings and limits"""

    def test_security_defaults(self):
        security = SecurityConfig()

        assert security.session_max_age == 1800
        assert security.cleanup_interval == 60
        assert security.rate_limit_max_attempts == 10
        assert security.rate_limit_window == 60
        assert security.encryption_key is None

    def test_fill_defaults(self):
        fill = FillConfig()

        assert fill.target_url == DEFAULT_TARGET_URL
        assert (fill.initial_delay, fill.retry_attempts, fill.retry_interval) == (0.5, 5, 1.0)
        assert fill.settle_delay == 3.0
        assert list(fill.fields) == ["country", "captcha"]


class TestConfigurationManager:
    """Test cases for ConfigurationManager class"""

    def test_initialization(self):
        config_manager = ConfigurationManager("test_config.json")

        assert config_manager.config_file == Path("test_config.json")
        assert config_manager.config == {}

    def test_load_valid_config(self, tmp_path):
        config_file = write_config(tmp_path, {
            "security": {"rate_limit_max_attempts": 3, "audit_max_entries": None},
            "fill": {
                "settle_delay": 0,
                "fields": {
                    "captcha": {"selectors": ["#code"]}
                }
            }
        })

        config_manager = ConfigurationManager(config_file).load()

        assert config_manager.security.rate_limit_max_attempts == 3
        assert config_manager.security.audit_max_entries is None
        assert config_manager.security.session_max_age == 1800
        assert config_manager.fill.settle_delay == 0
        assert config_manager.fill.fields == {
            "captcha": FieldLocator(name="captcha", xpath=None, selectors=["#code"])
        }

    def test_shipped_config_loads(self):
        config_file = Path(__file__).parent.parent / "config.json"

        config_manager = ConfigurationManager(config_file).load()

        assert config_manager.fill.fields["country"].xpath.endswith('ddlLocation"]')

    def test_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv("CEAC_FILLER_KEY", "ab" * 32)
        config_file = write_config(tmp_path, {"security": {"encryption_key": "${CEAC_FILLER_KEY}"}})

        config_manager = ConfigurationManager(config_file).load()

        assert config_manager.security.encryption_key == "ab" * 32

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigurationManager(tmp_path / "nope.json").load()

    def test_invalid_json(self, tmp_path):
        config_file = write_config(tmp_path, "{not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            ConfigurationManager(config_file).load()

    @pytest.mark.parametrize("data", [
        [],
        {"security": {"rate_limit_max_attempts": 0}},
        {"security": {"session_max_age": -1}},
        {"security": {"audit_max_entries": 0}},
        {"fill": {"retry_attempts": 0}},
        {"fill": {"settle_delay": -1}},
        {"fill": {"fields": {"country": {}}}},
        {"fill": {"initial_delay": "soon"}},
    ])
    def test_invalid_values(self, tmp_path, data):
        config_file = write_config(tmp_path, data)

        with pytest.raises(ConfigurationError):
            ConfigurationManager(config_file).load()


class TestSubstituteEnvVars:
    """Test cases for substitute_env_vars"""

    def test_substitutes(self, monkeypatch):
        monkeypatch.setenv("CEAC_FILLER_KEY", "00ff")
        assert substitute_env_vars("key=${CEAC_FILLER_KEY}") == "key=00ff"

    def test_missing_left_in_place(self, monkeypatch):
        monkeypatch.delenv("CEAC_FILLER_MISSING", raising=False)
        assert substitute_env_vars("${CEAC_FILLER_MISSING}") == "${CEAC_FILLER_MISSING}"
