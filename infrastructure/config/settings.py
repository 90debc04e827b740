# infrastructure/config/settings.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import dotenv_values

from domain.exceptions import ConfigurationError

# .env at the project root; real environment variables take precedence
_env_path = Path(__file__).parent.parent.parent / ".env"

PREFIX = "REQFLOW_"
LOG_BACKENDS = ("console", "loguru", "both")


@dataclass(frozen=True)
class Settings:
    db_url: str = "sqlite:///reqflow.db"
    timeout_sec: float = 20.0
    log_level: str = "INFO"
    log_backend: str = "console"
    continue_on_error: bool = False
    check_context_version: bool = False
    clip_command: Optional[str] = None


def _parse_bool(key: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(f"{key} must be a boolean, got {raw!r}")


def load_settings(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> Settings:
    """
    Read REQFLOW_* settings from a .env file and the process environment.
    """
    values = {}
    path = env_file or _env_path
    if path.exists():
        values.update({k: v for k, v in dotenv_values(path).items() if v is not None})
    values.update(os.environ if environ is None else environ)

    def get(name: str) -> Optional[str]:
        return values.get(PREFIX + name)

    defaults = Settings()

    timeout_raw = get("TIMEOUT_SEC")
    try:
        timeout = float(timeout_raw) if timeout_raw else defaults.timeout_sec
    except ValueError as e:
        raise ConfigurationError(f"{PREFIX}TIMEOUT_SEC must be a number, got {timeout_raw!r}") from e
    if timeout <= 0:
        raise ConfigurationError(f"{PREFIX}TIMEOUT_SEC must be positive, got {timeout}")

    backend = (get("LOG_BACKEND") or defaults.log_backend).lower()
    if backend not in LOG_BACKENDS:
        raise ConfigurationError(f"{PREFIX}LOG_BACKEND must be one of {', '.join(LOG_BACKENDS)}, got {backend!r}")

    continue_raw = get("CONTINUE_ON_ERROR")
    version_raw = get("CHECK_CONTEXT_VERSION")
    return Settings(
        db_url=get("DB_URL") or defaults.db_url,
        timeout_sec=timeout,
        log_level=(get("LOG_LEVEL") or defaults.log_level).upper(),
        log_backend=backend,
        continue_on_error=_parse_bool(PREFIX + "CONTINUE_ON_ERROR", continue_raw) if continue_raw is not None else False,
        check_context_version=_parse_bool(PREFIX + "CHECK_CONTEXT_VERSION", version_raw) if version_raw is not None else False,
        clip_command=get("CLIP_COMMAND") or None,
    )
