"""
Unit tests for configuration loading.
"""

import logging

import pytest

from scrooge.core.config import LedgerConfig, load_config


ENV_KEYS = [
    "SCROOGE_LOG_LEVEL",
    "SCROOGE_LOG_TO_FILE",
    "SCROOGE_LOG_DIR",
    "SCROOGE_MAX_INPUTS_PER_TX",
    "SCROOGE_MAX_OUTPUTS_PER_TX",
    "SCROOGE_MAX_BATCH_SIZE",
]


@pytest.fixture
def clean_env(monkeypatch):
    """
    Clear SCROOGE_* variables and restore them afterwards.

    setenv-then-delenv registers each key with monkeypatch, so values that
    load_dotenv writes into os.environ are removed on teardown too.
    """
    for key in ENV_KEYS:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


class TestLedgerConfig:
    """Tests for the config dataclass."""

    def test_defaults(self):
        cfg = LedgerConfig()
        assert cfg.log_level == logging.INFO
        assert cfg.log_to_file is False
        assert cfg.max_batch_size == 10_000

    def test_level_name_is_resolved(self):
        assert LedgerConfig(log_level="debug").log_level == logging.DEBUG

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            LedgerConfig(log_level="chatty")

    def test_limits_must_be_positive(self):
        with pytest.raises(ValueError):
            LedgerConfig(max_batch_size=0)


class TestLoadConfig:
    """Tests for environment/dotenv loading."""

    def test_environment_overrides(self, clean_env, tmp_path):
        clean_env.setenv("SCROOGE_LOG_LEVEL", "WARNING")
        clean_env.setenv("SCROOGE_MAX_BATCH_SIZE", "5")
        clean_env.setenv("SCROOGE_LOG_TO_FILE", "yes")
        clean_env.setenv("SCROOGE_LOG_DIR", str(tmp_path / "logs"))

        cfg = load_config(str(tmp_path / "missing.env"))

        assert cfg.log_level == logging.WARNING
        assert cfg.max_batch_size == 5
        assert cfg.log_to_file is True
        assert cfg.log_dir == tmp_path / "logs"

    def test_dotenv_file(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SCROOGE_MAX_INPUTS_PER_TX=3\nSCROOGE_LOG_LEVEL=ERROR\n")

        cfg = load_config(str(env_file))

        assert cfg.max_inputs_per_tx == 3
        assert cfg.log_level == logging.ERROR

    def test_environment_wins_over_dotenv(self, clean_env, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("SCROOGE_MAX_OUTPUTS_PER_TX=3\n")
        clean_env.setenv("SCROOGE_MAX_OUTPUTS_PER_TX", "9")

        assert load_config(str(env_file)).max_outputs_per_tx == 9


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
