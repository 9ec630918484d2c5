"""
Centralized configuration for opclient.

Values come from an optional YAML file and environment variables, with the
environment taking precedence. Nothing here is read at import time.

Usage:
    from opclient.config import get_config
    cfg = get_config()
    print(cfg.executable)        # ".../ext/op-darwin-21001" or "op"
    print(cfg.command_timeout)   # 60.0
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from opclient.session import SESSION_LEASE

logger = logging.getLogger(__name__)

DEFAULT_BIN_DIR = Path(__file__).parent / "ext"
DEFAULT_COMMAND_TIMEOUT = 60.0

PERSON_AVATAR_DEFAULT = "https://a.1password.com/app/images/avatar-person-default.png"
VAULT_AVATAR_DEFAULT = "https://a.1password.com/app/images/avatar-vault-default.png"


def default_executable(bin_dir: Path = DEFAULT_BIN_DIR, platform: str = sys.platform) -> Path:
    """Pick the vendored op binary for the running platform."""
    if platform == "darwin":
        return bin_dir / "op-darwin-21001"
    if platform.startswith("win"):
        return bin_dir / "op-win-21001.exe"
    # No vendored build for other platforms; rely on PATH
    return Path("op")


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by every call an OnePasswordClient makes."""

    executable: Path = field(default_factory=default_executable)
    session_lease: timedelta = SESSION_LEASE
    command_timeout: float | None = DEFAULT_COMMAND_TIMEOUT  # None = wait forever
    person_avatar_default: str = PERSON_AVATAR_DEFAULT
    vault_avatar_default: str = VAULT_AVATAR_DEFAULT


# Singleton
_config: ClientConfig | None = None


def get_config() -> ClientConfig:
    """Get or create the singleton config from the config file and environment."""
    global _config
    if _config is not None:
        return _config
    _config = _load_from_env()
    return _config


def load_config_file(path: Path) -> dict[str, Any]:
    """Load a YAML config file. Returns {} when missing or empty."""
    if not path.exists():
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping, got {type(data).__name__}")
    return data


def _timeout_from(value: Any) -> float | None:
    timeout = float(value)
    return timeout if timeout > 0 else None


def _load_from_env() -> ClientConfig:
    """Load configuration from OPCLIENT_* environment variables."""
    file_path = os.environ.get("OPCLIENT_CONFIG_FILE")
    data = load_config_file(Path(file_path)) if file_path else {}

    bin_dir = Path(os.environ.get("OPCLIENT_BIN_DIR", data.get("bin_dir", DEFAULT_BIN_DIR)))
    executable = os.environ.get("OPCLIENT_EXECUTABLE", data.get("executable"))

    lease_minutes = os.environ.get(
        "OPCLIENT_SESSION_LEASE_MINUTES",
        data.get("session_lease_minutes", SESSION_LEASE.total_seconds() / 60),
    )
    timeout = os.environ.get(
        "OPCLIENT_COMMAND_TIMEOUT", data.get("command_timeout", DEFAULT_COMMAND_TIMEOUT)
    )

    return ClientConfig(
        executable=Path(executable) if executable else default_executable(bin_dir),
        session_lease=timedelta(minutes=float(lease_minutes)),
        command_timeout=_timeout_from(timeout),
        person_avatar_default=os.environ.get(
            "OPCLIENT_PERSON_AVATAR", data.get("person_avatar_default", PERSON_AVATAR_DEFAULT)
        ),
        vault_avatar_default=os.environ.get(
            "OPCLIENT_VAULT_AVATAR", data.get("vault_avatar_default", VAULT_AVATAR_DEFAULT)
        ),
    )


def reset_config() -> None:
    """Reset the singleton config (for testing)."""
    global _config
    _config = None
