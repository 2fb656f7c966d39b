"""
Configuration loaded from environment variables (and an optional .env file).
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_CACHE_TTL_SECONDS = 60 * 60
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


@dataclass(frozen=True)
class Settings:
    pattern_repo_path: Path
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    allowed_origins: List[str] = field(default_factory=list)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    contract_version: str = "v1"


def _int_setting(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None, env_file: Optional[Path] = None) -> Settings:
    """Build Settings from the environment.

    Args:
        env: Mapping to read instead of os.environ (no .env loading then)
        env_file: .env file to load; defaults to the project root's .env

    Returns:
        Settings with paths resolved
    """
    if env is None:
        env_path = env_file or BASE_DIR / ".env"
        if env_path.exists():
            load_dotenv(env_path)
            logger.info(f"Loaded environment from {env_path}")
        env = os.environ

    repo_path = Path(env.get("PATTERN_REPO_PATH") or ".").expanduser()
    if not repo_path.is_absolute():
        repo_path = (Path.cwd() / repo_path).resolve()

    origins = [origin.strip() for origin in (env.get("ALLOWED_ORIGINS") or "").split(",") if origin.strip()]

    return Settings(
        pattern_repo_path=repo_path,
        cache_ttl_seconds=_int_setting(env, "CACHE_TTL_SECONDS", DEFAULT_CACHE_TTL_SECONDS),
        allowed_origins=origins,
        host=env.get("HOST") or DEFAULT_HOST,
        port=_int_setting(env, "PORT", DEFAULT_PORT),
        contract_version=env.get("CONTRACT_VERSION") or "v1",
    )
