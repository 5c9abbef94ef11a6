"""Centralized path constants for connected component applications."""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT = PACKAGE_ROOT.parent

# Configuration
CONFIG_PATH = PROJECT_ROOT / "config.txt"

# Logging
LOGS_DIR = PROJECT_ROOT / "logs"
DEMO_LOG_FILE = LOGS_DIR / "demo.log"

# User-specific state (allows running from read-only project directories)
_USER_STATE_ENV = os.environ.get("CONNECTED_STATE_DIR")
USER_STATE_DIR = (
    Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".connected_components")
)
USER_CONFIG_OVERRIDES_DIR = USER_STATE_DIR / "config_overrides"


def ensure_directories() -> None:
    """Create necessary directories if they don't exist."""

    LOGS_DIR.mkdir(parents=True, exist_ok=True)
    USER_STATE_DIR.mkdir(parents=True, exist_ok=True)
    USER_CONFIG_OVERRIDES_DIR.mkdir(parents=True, exist_ok=True)


__all__ = [
    'PROJECT_ROOT',
    'PACKAGE_ROOT',
    'CONFIG_PATH',
    'LOGS_DIR',
    'DEMO_LOG_FILE',
    'USER_STATE_DIR',
    'USER_CONFIG_OVERRIDES_DIR',
    'ensure_directories',
]
