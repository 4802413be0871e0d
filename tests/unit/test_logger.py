"""
Unit tests for logging setup.
"""

import logging

import pytest

from scrooge.core.config import LedgerConfig
from scrooge.utils.logger import ROOT_LOGGER, get_logger, setup_from_config, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    setup_logging()


class TestLogger:

    def test_subsystem_names(self):
        assert get_logger("pool").name == "scrooge.pool"
        assert get_logger("handler").parent is logging.getLogger(ROOT_LOGGER)

    def test_reconfigure_replaces_handlers(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1

    def test_debug_flag_overrides_config(self):
        setup_from_config(LedgerConfig(log_level="WARNING"), debug=True)
        assert logging.getLogger(ROOT_LOGGER).level == logging.DEBUG

    def test_file_logging(self, tmp_path):
        setup_from_config(LedgerConfig(log_to_file=True, log_dir=tmp_path))
        get_logger("pool").info("written to file")
        for handler in logging.getLogger(ROOT_LOGGER).handlers:
            handler.flush()
        assert "written to file" in (tmp_path / "scrooge.log").read_text()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
