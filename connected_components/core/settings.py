"""Runtime settings loaded from config.txt."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from .config_manager import ConfigManager, get_config_manager
from .paths import CONFIG_PATH


@dataclass(frozen=True)
class CoordinatorSettings:
    """Tunables for a coordinator and the actors it spawns.

    actor_mailbox_size: Capacity of each actor mailbox; 0 means unbounded.
    actor_stop_timeout: Seconds a stopping coordinator waits for its
        actors to exit before cancelling them.
    """
    actor_mailbox_size: int = 0
    actor_stop_timeout: float = 1.0

    @classmethod
    def from_config(
        cls,
        config: Dict[str, str],
        config_manager: Optional[ConfigManager] = None,
    ) -> "CoordinatorSettings":
        manager = config_manager or get_config_manager()
        defaults = cls()
        mailbox_size = manager.get_int(config, "actor_mailbox_size", default=defaults.actor_mailbox_size)
        stop_timeout = manager.get_float(config, "actor_stop_timeout", default=defaults.actor_stop_timeout)
        return cls(
            actor_mailbox_size=max(0, mailbox_size),
            actor_stop_timeout=max(0.0, stop_timeout),
        )


def load_settings(config_path: Path = CONFIG_PATH) -> CoordinatorSettings:
    manager = get_config_manager()
    return CoordinatorSettings.from_config(manager.read_config(config_path), manager)


__all__ = ["CoordinatorSettings", "load_settings"]
