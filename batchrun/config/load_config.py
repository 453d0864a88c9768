from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from batchrun.options import validate_runner_options
from batchrun.utils.logging import setup_logger


class ConfigError(RuntimeError):
    pass


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _as_int(value: Any, *, key: str) -> int:
    if isinstance(value, (bool, float)):
        raise ConfigError(f"Invalid int for {key}: {value!r}")
    if isinstance(value, str):
        value = value.strip()
        if not value.lstrip("-").isdigit():
            raise ConfigError(f"Invalid int for {key}: {value!r}")
    try:
        return int(value)
    except Exception as e:
        raise ConfigError(f"Invalid int for {key}: {value!r}") from e


def _as_log_level(value: Any, *, key: str) -> str:
    s = str(value).strip().upper()
    if s not in _LOG_LEVELS:
        raise ConfigError(f"Invalid {key}: must be one of {', '.join(_LOG_LEVELS)}, got {value!r}")
    return s


@dataclass(frozen=True)
class RunnerConfig:
    batch_size: int = 1
    concurrency: int = 1
    log_level: str = "WARNING"


def default_config_path() -> Path:
    return Path(os.getenv("BATCHRUN_CONFIG_PATH", "config/default.toml")).expanduser().resolve()


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def load_runner_config(path: Path | None = None) -> RunnerConfig:
    """Load runner defaults from TOML, then apply BATCHRUN_* environment overrides.

    An explicitly given path must exist; the default path is optional.
    """
    cfg_path = path or default_config_path()
    raw: dict[str, Any] = {}
    if cfg_path.exists():
        raw = _read_toml(cfg_path)
    elif path is not None:
        raise ConfigError(f"Config file not found: {cfg_path}")

    runner = dict(raw.get("runner", {}) or {})
    logging_cfg = dict(raw.get("logging", {}) or {})

    batch_size = _as_int(os.getenv("BATCHRUN_BATCH_SIZE", runner.get("batch_size", 1)), key="runner.batch_size")
    concurrency = _as_int(os.getenv("BATCHRUN_CONCURRENCY", runner.get("concurrency", 1)), key="runner.concurrency")
    log_level = _as_log_level(
        os.getenv("BATCHRUN_LOG_LEVEL", logging_cfg.get("level", "WARNING")), key="logging.level"
    )

    checked = validate_runner_options(batch_size=batch_size, concurrency=concurrency)
    if not checked.ok:
        raise ConfigError(f"Invalid runner config: {checked.error}")

    return RunnerConfig(batch_size=batch_size, concurrency=concurrency, log_level=log_level)


def configure_logging(config: RunnerConfig, *, log_file: Path | None = None) -> logging.Logger:
    return setup_logger(level=config.log_level, log_file=log_file)
