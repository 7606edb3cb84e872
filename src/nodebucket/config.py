"""Load server settings from the environment and an optional `config.yaml`."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from loguru import logger

from .constants import (
    CONFIG_FILE,
    DATA_DIR_NAME,
    DEFAULT_HOST,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PORT,
    ENV_DEVELOPMENT,
    ENV_PRODUCTION,
)
from .io_utils import load_optional_yaml

VALID_ENVIRONMENTS = {ENV_DEVELOPMENT, ENV_PRODUCTION}


@dataclass
class Settings:
    """Runtime settings for the task board server."""

    data_dir: Path = field(default_factory=lambda: Path.cwd() / DATA_DIR_NAME)
    environment: str = ENV_PRODUCTION
    log_level: str = DEFAULT_LOG_LEVEL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    enable_cors: bool = False

    @property
    def debug(self) -> bool:
        """Whether error responses may carry diagnostic detail."""
        return self.environment == ENV_DEVELOPMENT


def _get_nested(config: dict[str, Any], *keys: str) -> Any:
    cur: Any = config
    for key in keys:
        if not isinstance(cur, dict):
            return None
        cur = cur.get(key)
    return cur


def _as_int(raw: Any, default: int) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _as_bool(raw: Any, default: bool) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    return default


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    config_path: Optional[Path] = None,
) -> Settings:
    """Build :class:`Settings` from a YAML file overlaid with environment variables.

    Args:
        environ: Environment mapping (defaults to ``os.environ``).
        config_path: Explicit config file. Falls back to ``NODEBUCKET_CONFIG``
            and then to ``<data_dir>/config.yaml``.

    Returns:
        The resolved settings. A malformed config file is logged and ignored.
    """
    env = os.environ if environ is None else environ
    settings = Settings()

    if env.get("NODEBUCKET_DATA_DIR"):
        settings.data_dir = Path(env["NODEBUCKET_DATA_DIR"]).expanduser()

    path = config_path
    if path is None and env.get("NODEBUCKET_CONFIG"):
        path = Path(env["NODEBUCKET_CONFIG"]).expanduser()
    if path is None:
        path = settings.data_dir / CONFIG_FILE

    data, err = load_optional_yaml(path)
    if err:
        logger.warning(f"Ignoring unreadable config file: {err}")

    server = _get_nested(data, "server")
    server = server if isinstance(server, dict) else {}
    if data.get("data_dir") and not env.get("NODEBUCKET_DATA_DIR"):
        settings.data_dir = Path(str(data["data_dir"])).expanduser()
    settings.environment = str(data.get("environment") or settings.environment)
    settings.log_level = str(_get_nested(data, "logging", "level") or settings.log_level)
    settings.host = str(server.get("host") or settings.host)
    settings.port = _as_int(server.get("port"), settings.port)
    settings.enable_cors = _as_bool(server.get("cors"), settings.enable_cors)

    settings.environment = env.get("NODEBUCKET_ENV", settings.environment).strip().lower()
    settings.log_level = env.get("NODEBUCKET_LOG_LEVEL", settings.log_level).upper()
    settings.host = env.get("NODEBUCKET_HOST", settings.host)
    settings.port = _as_int(env.get("PORT"), settings.port)
    settings.enable_cors = _as_bool(env.get("NODEBUCKET_CORS"), settings.enable_cors)

    if settings.environment not in VALID_ENVIRONMENTS:
        logger.warning(
            f"Unknown environment {settings.environment!r}; using {ENV_PRODUCTION!r}"
        )
        settings.environment = ENV_PRODUCTION
    return settings
