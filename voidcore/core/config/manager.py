"""
Balance configuration management with YAML backing.

Features:
- Hierarchical config access with dot notation (e.g., 'staking.default_apr')
- Built-in defaults deep-merged with every YAML file under CONFIG_DIR
- Runtime overrides via `set` for live balance changes
- Graceful degradation to defaults when a YAML file is unreadable
- Access metrics for monitoring

Note:
- Static process settings (log level, database URL) live in `Config`
- ConfigManager handles only tunable balance values
"""

import copy
import time
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml

from voidcore.core.config.config import Config
from voidcore.core.exceptions import ConfigurationError
from voidcore.core.logging.logger import get_logger

logger = get_logger(__name__)

_MISSING = object()


def _deep_merge(base: Dict[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into ``base`` recursively, returning ``base``."""
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


class ConfigManager:
    """
    Balance configuration with dot-notation access.

    Args:
        config_dir: Directory scanned recursively for ``*.yaml``/``*.yml``
            (defaults to ``Config.CONFIG_DIR``)
        overrides: Values merged on top of defaults and YAML, mainly for tests

    Example:
        >>> manager = ConfigManager(overrides={"staking": {"default_apr": 7.5}})
        >>> manager.initialize()
        >>> manager.get("staking.default_apr")
        7.5
    """

    # =========================================================================
    # DEFAULT CONFIGURATIONS
    # =========================================================================
    # Fallback values used when no YAML file provides a key.
    DEFAULTS: Dict[str, Any] = {
        "staking": {
            "default_apr": 5.0,
            "default_daily_limit": 10000,
        },
        "leaderboard": {
            "max_page_size": 100,
            "default_page_size": 10,
            "sync_progression": True,
        },
        "progression": {
            "tracks": ["explorer", "builder", "operator"],
        },
        "bank": {
            "transaction_history_limit": 100,
        },
    }

    def __init__(
        self,
        config_dir: Optional[Path] = None,
        overrides: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._config_dir = Path(config_dir) if config_dir is not None else Config.CONFIG_DIR
        self._overrides: Dict[str, Any] = copy.deepcopy(dict(overrides or {}))
        self._cache: Dict[str, Any] = {}
        self._initialized = False
        self._metrics: Dict[str, Any] = {
            "gets": 0,
            "sets": 0,
            "cache_misses": 0,
            "yaml_files_loaded": 0,
            "yaml_errors": 0,
            "total_get_time_ms": 0.0,
        }

    # =========================================================================
    # INITIALIZATION
    # =========================================================================

    def _load_yaml_configs(self) -> Dict[str, Any]:
        """
        Recursively load every YAML file under the config directory.

        Files are merged in sorted path order so the result is deterministic.
        A file that fails to parse is logged and skipped.
        """
        merged: Dict[str, Any] = {}
        if not self._config_dir.exists():
            logger.warning(
                f"Config directory {self._config_dir} not found, using built-in defaults",
                extra={"config_dir": str(self._config_dir)},
            )
            return merged

        yaml_files = sorted(
            list(self._config_dir.rglob("*.yaml")) + list(self._config_dir.rglob("*.yml"))
        )
        for yaml_file in yaml_files:
            try:
                with open(yaml_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f)
            except (OSError, yaml.YAMLError) as e:
                self._metrics["yaml_errors"] += 1
                logger.warning(
                    f"Failed to load YAML config {yaml_file.name}: {e}",
                    extra={"file": str(yaml_file), "error": str(e)},
                )
                continue

            if data is None:
                continue
            if not isinstance(data, Mapping):
                self._metrics["yaml_errors"] += 1
                logger.warning(
                    f"Ignoring YAML config {yaml_file.name}: top level must be a mapping",
                    extra={"file": str(yaml_file)},
                )
                continue

            _deep_merge(merged, data)
            self._metrics["yaml_files_loaded"] += 1
            logger.debug(f"Loaded YAML config: {yaml_file.name}")

        return merged

    def initialize(self) -> None:
        """Build the cache: built-in defaults, then YAML files, then overrides."""
        cache = copy.deepcopy(self.DEFAULTS)
        _deep_merge(cache, self._load_yaml_configs())
        _deep_merge(cache, self._overrides)
        self._cache = cache
        self._initialized = True
        logger.info(
            "ConfigManager initialized",
            extra={
                "config_dir": str(self._config_dir),
                "yaml_count": self._metrics["yaml_files_loaded"],
                "total_keys": len(self._cache),
            },
        )

    # =========================================================================
    # PUBLIC METHODS
    # =========================================================================

    def get(self, key: str, default: Any = None) -> Any:
        """
        Retrieve config value by dot notation path.

        Args:
            key: Dot-notation config path (e.g., 'fees.split')
            default: Value returned when the key is missing

        Example:
            >>> manager.get("staking.default_daily_limit")
            10000
        """
        start_time = time.perf_counter()
        self._metrics["gets"] += 1

        if not self._initialized:
            self.initialize()

        value: Any = self._cache
        for part in key.split("."):
            if not isinstance(value, dict):
                value = _MISSING
                break
            value = value.get(part, _MISSING)
            if value is _MISSING:
                break

        self._metrics["total_get_time_ms"] += (time.perf_counter() - start_time) * 1000
        if value is _MISSING:
            self._metrics["cache_misses"] += 1
            return default
        return value

    def require(self, key: str) -> Any:
        """Like `get`, but a missing key raises ConfigurationError."""
        value = self.get(key, _MISSING)
        if value is _MISSING:
            raise ConfigurationError(key, f"Required configuration key '{key}' is missing")
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Override a config value at runtime.

        The override survives `clear_cache` and re-initialization.
        """
        if not self._initialized:
            self.initialize()

        parts = key.split(".")
        for target in (self._cache, self._overrides):
            current = target
            for part in parts[:-1]:
                child = current.get(part)
                if not isinstance(child, dict):
                    child = {}
                    current[part] = child
                current = child
            current[parts[-1]] = copy.deepcopy(value)

        self._metrics["sets"] += 1
        logger.info(f"ConfigManager updated: key={key}", extra={"config_key": key})

    def clear_cache(self) -> None:
        """Drop the merged cache; the next read reloads YAML files."""
        self._cache = {}
        self._initialized = False
        logger.info("ConfigManager cache cleared")

    def get_all_keys(self) -> List[str]:
        """List of all top-level config keys."""
        if not self._initialized:
            self.initialize()
        return list(self._cache.keys())

    # =========================================================================
    # METRICS & MONITORING
    # =========================================================================

    def get_metrics(self) -> Dict[str, Any]:
        gets = self._metrics["gets"]
        return {
            "gets": gets,
            "sets": self._metrics["sets"],
            "cache_misses": self._metrics["cache_misses"],
            "yaml_files_loaded": self._metrics["yaml_files_loaded"],
            "yaml_errors": self._metrics["yaml_errors"],
            "avg_get_time_ms": round(self._metrics["total_get_time_ms"] / gets, 4) if gets else 0.0,
            "initialized": self._initialized,
            "cached_configs": len(self._cache),
        }
