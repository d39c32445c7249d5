"""
Unit Tests for Toolkit Configuration
"""

import pytest

from spt_toolkit.config import ToolkitConfig, load_config
from spt_toolkit.errors import ConfigError


class TestToolkitConfig:
    """Tests for ToolkitConfig validation."""

    def test_defaults_when_created_then_valid(self):
        config = ToolkitConfig()
        assert config.api_url == "http://localhost:5000"
        assert config.retry_policy.max_attempts == 3
        assert config.attainment.indirect_policy == "zero"

    @pytest.mark.parametrize("kwargs", [
        {"api_url": "localhost:5000"},
        {"timeout": 0},
        {"timeout": -1},
        {"throttle": float("nan")},
        {"retry_attempts": 0},
        {"max_workers": 2.5},
        {"max_workers": True},
    ])
    def test_init_when_invalid_then_raises_error(self, kwargs):
        with pytest.raises(ConfigError):
            ToolkitConfig(**kwargs)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_when_no_file_and_empty_env_then_defaults(self):
        assert load_config(environ={}) == ToolkitConfig()

    def test_load_when_file_then_values_applied(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(
            '{"api_url": "https://api.example.org", "max_workers": 4, "output_dir": "out",'
            ' "attainment": {"indirect_policy": "exclude"}}'
        )
        config = load_config(path, environ={})

        assert config.api_url == "https://api.example.org"
        assert config.max_workers == 4
        assert config.output_dir.name == "out"
        assert config.attainment.indirect_policy == "exclude"

    def test_load_when_env_set_then_overrides_file(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"timeout": 5}')
        config = load_config(path, environ={"SPT_TIMEOUT": "30", "SPT_API_URL": "http://other:1"})
        assert config.timeout == 30.0
        assert config.api_url == "http://other:1"

    def test_load_when_file_corrupted_then_defaults_with_warning(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with caplog.at_level("WARNING"):
            config = load_config(path, environ={})
        assert config == ToolkitConfig()
        assert "corrupted" in caplog.text

    def test_load_when_unknown_key_then_ignored(self, tmp_path, caplog):
        path = tmp_path / "config.json"
        path.write_text('{"colour": "blue"}')
        with caplog.at_level("WARNING"):
            load_config(path, environ={})
        assert "colour" in caplog.text

    def test_load_when_env_not_numeric_then_raises_error(self):
        with pytest.raises(ConfigError):
            load_config(environ={"SPT_MAX_WORKERS": "many"})

    def test_load_when_attainment_invalid_then_raises_error(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text('{"attainment": {"x": 0.5}}')
        with pytest.raises(ConfigError):
            load_config(path, environ={})
