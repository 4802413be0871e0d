"""
Configuration parameters for Scrooge.

Defines logging settings and the structural limits applied to
transactions and batches before they reach the handler.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "SCROOGE_"


@dataclass
class LedgerConfig:
    """Ledger-wide configuration parameters"""

    # Logging
    log_level: int = logging.INFO
    log_to_file: bool = False
    log_dir: Path = Path("logs")

    # Structural limits
    max_inputs_per_tx: int = 256
    max_outputs_per_tx: int = 256
    max_batch_size: int = 10_000

    def __post_init__(self):
        if isinstance(self.log_level, str):
            level = logging.getLevelName(self.log_level.upper())
            if not isinstance(level, int):
                raise ValueError(f"Unknown log level: {self.log_level}")
            self.log_level = level
        self.log_dir = Path(self.log_dir)
        for name in ("max_inputs_per_tx", "max_outputs_per_tx", "max_batch_size"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(env_file: Optional[str] = None) -> LedgerConfig:
    """
    Load configuration from the environment.

    A ``.env`` file (``env_file`` or the nearest one found by python-dotenv)
    is loaded first without overriding variables already set. Recognised
    variables: SCROOGE_LOG_LEVEL, SCROOGE_LOG_TO_FILE, SCROOGE_LOG_DIR,
    SCROOGE_MAX_INPUTS_PER_TX, SCROOGE_MAX_OUTPUTS_PER_TX,
    SCROOGE_MAX_BATCH_SIZE.

    Args:
        env_file: Optional path to a dotenv file

    Returns:
        LedgerConfig instance
    """
    load_dotenv(dotenv_path=env_file, override=False)

    kwargs = {}
    if f"{ENV_PREFIX}LOG_LEVEL" in os.environ:
        kwargs["log_level"] = os.environ[f"{ENV_PREFIX}LOG_LEVEL"]
    if f"{ENV_PREFIX}LOG_TO_FILE" in os.environ:
        kwargs["log_to_file"] = _env_bool(os.environ[f"{ENV_PREFIX}LOG_TO_FILE"])
    if f"{ENV_PREFIX}LOG_DIR" in os.environ:
        kwargs["log_dir"] = Path(os.environ[f"{ENV_PREFIX}LOG_DIR"])
    for name in ("max_inputs_per_tx", "max_outputs_per_tx", "max_batch_size"):
        key = f"{ENV_PREFIX}{name.upper()}"
        if key in os.environ:
            kwargs[name] = int(os.environ[key])

    return LedgerConfig(**kwargs)
