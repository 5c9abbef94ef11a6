import asyncio
import hashlib
import re
from pathlib import Path
from typing import Callable, Dict, Iterable, TypeVar

import aiofiles

from .logging_utils import get_module_logger
from .paths import PROJECT_ROOT, USER_CONFIG_OVERRIDES_DIR


logger = get_module_logger("ConfigManager")

TRUE_VALUES = frozenset(("true", "1", "yes", "on"))
QUOTES = ("'", '"')

Number = TypeVar("Number", int, float)


class ConfigManager:
    """Reads ``key = value`` config files merged with per-user overrides."""

    def __init__(self):
        try:
            self._project_root = PROJECT_ROOT.resolve()
        except OSError:  # pragma: no cover - unresolvable checkout
            self._project_root = PROJECT_ROOT

    # ------------------------------------------------------------------
    # Internal helpers

    def _parse_config_lines(self, lines: Iterable[str]) -> Dict[str, str]:
        config: Dict[str, str] = {}

        for raw_line in lines:
            key, sep, value = raw_line.strip().partition('=')
            if not sep or key.startswith('#'):
                continue

            value = value.split('#', 1)[0].strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in QUOTES:
                value = value[1:-1]

            config[key.strip()] = value

        return config

    def _resolve_override_path(self, config_path: Path) -> Path:
        try:
            rel_path = config_path.resolve().relative_to(self._project_root)
        except ValueError:
            digest = hashlib.sha1(str(config_path).encode('utf-8')).hexdigest()[:10]
            safe_name = re.sub(r'[^a-zA-Z0-9._-]+', '_', config_path.stem or 'config')
            rel_path = Path('external') / f"{safe_name}_{digest}{config_path.suffix or '.txt'}"
        return USER_CONFIG_OVERRIDES_DIR / rel_path

    def _read_overrides(self, config_path: Path) -> Dict[str, str]:
        override_path = self._resolve_override_path(config_path)
        if not override_path.exists():
            return {}

        try:
            with open(override_path, 'r', encoding='utf-8') as fh:
                return self._parse_config_lines(fh)
        except OSError as exc:
            logger.warning("Failed to read override config %s: %s", override_path, exc)
            return {}

    # ------------------------------------------------------------------
    # Reading

    def read_config(self, config_path: Path) -> Dict[str, str]:
        """Read ``config_path`` merged with its user override. Blocking."""
        config: Dict[str, str] = {}

        if config_path.exists():
            try:
                with open(config_path, 'r', encoding='utf-8') as f:
                    config = self._parse_config_lines(f)
            except OSError as e:
                logger.error("Failed to read config %s: %s", config_path, e)

        config.update(self._read_overrides(config_path))

        return config

    async def read_config_async(self, config_path: Path) -> Dict[str, str]:
        """Async version for use inside a running event loop."""
        config: Dict[str, str] = {}

        if await asyncio.to_thread(config_path.exists):
            try:
                async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                    config = self._parse_config_lines(await f.readlines())
            except OSError as e:
                logger.error("Failed to read config %s: %s", config_path, e)

        config.update(await asyncio.to_thread(self._read_overrides, config_path))

        return config

    # ------------------------------------------------------------------
    # Typed accessors

    def _get_number(self, config: Dict[str, str], key: str, default: Number, cast: Callable[[str], Number]) -> Number:
        raw = config.get(key)
        if raw is None:
            return default
        try:
            return cast(raw)
        except ValueError:
            logger.warning("Invalid %s value for %s: %r, using default %r", cast.__name__, key, raw, default)
            return default

    def get_bool(self, config: Dict[str, str], key: str, default: bool = False) -> bool:
        raw = config.get(key)
        if raw is None:
            return default
        return raw.lower() in TRUE_VALUES

    def get_int(self, config: Dict[str, str], key: str, default: int = 0) -> int:
        return self._get_number(config, key, default, int)

    def get_float(self, config: Dict[str, str], key: str, default: float = 0.0) -> float:
        return self._get_number(config, key, default, float)

    def get_str(self, config: Dict[str, str], key: str, default: str = "") -> str:
        return config.get(key, default)


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager
