"""Configuration tests: modes, ScanConfig validation and environment loading."""
import pytest

from i18n_scanner.analyzer.errors import ConfigError
from i18n_scanner.config import EnvConfig, ScanConfig, ScanMode, get_config


class TestScanMode:

    @pytest.mark.parametrize("name,expected", [
        ("convention-aware", ScanMode.CONVENTION),
        ("rails", ScanMode.CONVENTION),
        ("Convention", ScanMode.CONVENTION),
        ("plain", ScanMode.PLAIN),
        (" ruby ", ScanMode.PLAIN),
        (ScanMode.PLAIN, ScanMode.PLAIN),
    ])
    def test_parse(self, name, expected):
        assert ScanMode.parse(name) is expected

    def test_unknown_mode(self):
        with pytest.raises(ConfigError, match="Invalid value for 'mode'"):
            ScanMode.parse("erb")


class TestScanConfig:

    def test_defaults(self):
        config = ScanConfig()

        assert config.mode is ScanMode.CONVENTION
        assert config.relative_roots == ()
        assert config.translation_methods == ("t", "translate")
        assert "before_action" in config.callback_macros
        assert config.magic_comment_marker == "i18n-tasks-use"
        assert config.strict is False

    def test_normalizes_values(self):
        config = ScanConfig(mode="ruby", relative_roots=["app/controllers"])

        assert config.mode is ScanMode.PLAIN
        assert config.relative_roots == ("app/controllers",)

    def test_rejects_bare_string_sequences(self):
        with pytest.raises(ConfigError, match="relative_roots"):
            ScanConfig(relative_roots="app/controllers")

    def test_is_immutable(self):
        with pytest.raises(AttributeError):
            ScanConfig().strict = True


class TestEnvConfig:

    def test_defaults(self, clean_env, tmp_path):
        env = EnvConfig(env_file=tmp_path / "missing.env")

        assert env.mode is ScanMode.CONVENTION
        assert env.relative_roots == ()
        assert env.strict is False
        assert env.log_level == "WARNING"

    def test_reads_environment(self, clean_env, monkeypatch, tmp_path):
        monkeypatch.setenv("I18N_SCAN_MODE", "plain")
        monkeypatch.setenv("I18N_SCAN_RELATIVE_ROOTS", "app/controllers, app/mailers,")
        monkeypatch.setenv("I18N_SCAN_MAGIC_MARKER", "keys-used")
        monkeypatch.setenv("I18N_SCAN_STRICT", "yes")

        config = EnvConfig(env_file=tmp_path / "missing.env").to_scan_config()

        assert config.mode is ScanMode.PLAIN
        assert config.relative_roots == ("app/controllers", "app/mailers")
        assert config.magic_comment_marker == "keys-used"
        assert config.strict is True

    def test_reads_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("I18N_SCAN_MODE=ruby\nI18N_SCAN_LOG_LEVEL=DEBUG\n")

        env = EnvConfig(env_file=env_file)

        assert env.mode is ScanMode.PLAIN
        assert env.log_level == "DEBUG"

    def test_environment_wins_over_dotenv(self, clean_env, monkeypatch, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("I18N_SCAN_MODE=plain\n")
        monkeypatch.setenv("I18N_SCAN_MODE", "rails")

        assert EnvConfig(env_file=env_file).mode is ScanMode.CONVENTION

    def test_overrides(self, clean_env, monkeypatch, tmp_path):
        monkeypatch.setenv("I18N_SCAN_MODE", "plain")
        env = EnvConfig(env_file=tmp_path / "missing.env")

        assert env.to_scan_config(mode=None).mode is ScanMode.PLAIN
        assert env.to_scan_config(mode="rails").mode is ScanMode.CONVENTION
        assert env.to_scan_config(relative_roots=("lib",)).relative_roots == ("lib",)

    def test_invalid_mode(self, clean_env, monkeypatch, tmp_path):
        monkeypatch.setenv("I18N_SCAN_MODE", "haml")

        with pytest.raises(ConfigError):
            EnvConfig(env_file=tmp_path / "missing.env").to_scan_config()

    def test_singleton(self, clean_env):
        assert get_config() is get_config()
