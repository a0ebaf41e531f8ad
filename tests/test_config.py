# tests/test_config.py
import pytest
import yaml

from termroute.config import (
    DEFAULT_QUERY_TIMEOUT,
    AppConfig,
    AutoPasteConfig,
    ConfigError,
    DebugConfig,
    load_config,
)


def _write(tmp_path, data):
    config_file = tmp_path / "config.yaml"
    config_file.write_text(yaml.dump(data))
    return str(config_file)


class TestLoadConfig:
    def test_loads_valid_config(self, tmp_path):
        path = _write(tmp_path, {
            "auto_paste": {
                "applications": ["kiro-cli", "copilot"],
                "platforms": ["linux", "darwin"],
            },
            "process": {"query_timeout": 2},
            "debug": {"enabled": True},
        })
        config = load_config(path)
        assert config.auto_paste.applications == ["kiro-cli", "copilot"]
        assert config.auto_paste.platforms == ["linux", "darwin"]
        assert config.process.query_timeout == 2.0
        assert config.debug.enabled is True

    def test_missing_file_raises(self):
        with pytest.raises(ConfigError, match="not found"):
            load_config("/nonexistent/config.yaml")

    def test_defaults_applied(self, tmp_path):
        config = load_config(_write(tmp_path, {}))
        assert config.auto_paste.applications == []
        assert config.auto_paste.platforms == ["linux"]
        assert config.process.query_timeout == DEFAULT_QUERY_TIMEOUT
        assert config.debug.enabled is False

    def test_empty_file_uses_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        config = load_config(str(config_file))
        assert config.auto_paste.applications == []

    def test_null_sections_use_defaults(self, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("auto_paste:\nprocess:\ndebug:\n")
        config = load_config(str(config_file))
        assert config.process.query_timeout == DEFAULT_QUERY_TIMEOUT

    def test_non_mapping_root_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="mapping"):
            load_config(_write(tmp_path, ["kiro-cli"]))

    def test_non_mapping_section_raises(self, tmp_path):
        with pytest.raises(ConfigError, match="auto_paste"):
            load_config(_write(tmp_path, {"auto_paste": "kiro-cli"}))

    def test_applications_must_be_list(self, tmp_path):
        with pytest.raises(ConfigError, match="applications"):
            load_config(_write(tmp_path, {"auto_paste": {"applications": "kiro-cli"}}))

    def test_platforms_must_be_list(self, tmp_path):
        with pytest.raises(ConfigError, match="platforms"):
            load_config(_write(tmp_path, {"auto_paste": {"platforms": "linux"}}))

    @pytest.mark.parametrize("value", [0, -1, "fast", True])
    def test_invalid_query_timeout_raises(self, tmp_path, value):
        with pytest.raises(ConfigError, match="query_timeout"):
            load_config(_write(tmp_path, {"process": {"query_timeout": value}}))


class TestTargetApplications:
    def test_empty_by_default(self):
        assert AutoPasteConfig().target_applications() == []

    def test_returns_configured(self):
        config = AutoPasteConfig(applications=["kiro-cli", "copilot"])
        assert config.target_applications() == ["kiro-cli", "copilot"]

    def test_filters_invalid_entries(self):
        config = AutoPasteConfig(applications=["kiro-cli", "", "  ", "copilot", None, 42])
        assert config.target_applications() == ["kiro-cli", "copilot"]

    def test_trims_entries(self):
        config = AutoPasteConfig(applications=["  kiro-cli\t"])
        assert config.target_applications() == ["kiro-cli"]


class TestIsAutoPasteEnabled:
    def test_false_on_non_linux_by_default(self):
        config = AppConfig(auto_paste=AutoPasteConfig(applications=["kiro-cli"]))
        assert config.is_auto_paste_enabled("Windows") is False
        assert config.is_auto_paste_enabled("Darwin") is False

    def test_false_on_linux_without_applications(self):
        assert AppConfig().is_auto_paste_enabled("Linux") is False

    def test_true_on_linux_with_applications(self):
        config = AppConfig(auto_paste=AutoPasteConfig(applications=["kiro-cli"]))
        assert config.is_auto_paste_enabled("Linux") is True

    def test_platform_list_is_case_insensitive(self):
        config = AppConfig(auto_paste=AutoPasteConfig(applications=["kiro-cli"], platforms=["Darwin"]))
        assert config.is_auto_paste_enabled("Darwin") is True

    def test_detects_platform(self, monkeypatch):
        monkeypatch.setattr("platform.system", lambda: "Linux")
        config = AppConfig(auto_paste=AutoPasteConfig(applications=["kiro-cli"]))
        assert config.is_auto_paste_enabled() is True


class TestDebugConfig:
    def test_debug_config_defaults(self):
        dc = DebugConfig()
        assert dc.enabled is False
        assert dc.trace is False
        assert dc.verbose is False
        assert dc.trace_dir is None

    def test_debug_section_loaded(self, tmp_path):
        config = load_config(_write(tmp_path, {
            "debug": {"trace": True, "verbose": True, "trace_dir": "/tmp/traces"},
        }))
        assert config.debug.trace is True
        assert config.debug.verbose is True
        assert config.debug.trace_dir == "/tmp/traces"
