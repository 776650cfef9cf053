"""
Configuration Module for the Invoice Ledger.

Loads config/settings.yaml once per process. Row and total tolerances,
the stale-margin policy, display thresholds and the extraction service
endpoint are all read from here instead of being hard-coded.
"""

import yaml
from pathlib import Path
from typing import Any, Dict, Optional


class ConfigurationManager:
    """
    Process-wide access to the ledger settings.

    The first instantiation fixes which YAML file is used; later calls
    return the same object until reset() is called (tests do this
    between cases).

    Attributes:
        config_path (Path): YAML file the settings were read from.

    Example:
        >>> config = ConfigurationManager()
        >>> config.get("ledger.total_tolerance")
        0.05
        >>> config.get("extraction.model")
        'gemini-2.5-flash'
    """

    _instance: Optional['ConfigurationManager'] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[str] = None) -> 'ConfigurationManager':
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[str] = None) -> None:
        """
        Load settings on first use.

        Args:
            config_path: YAML file to read; the bundled settings.yaml
                         when None. Ignored once loaded.
        """
        if self._initialized:
            return

        self.config_path = (
            Path(config_path) if config_path
            else Path(__file__).parent / "settings.yaml"
        )
        self._config = self._read(self.config_path)
        self._initialized = True

    @staticmethod
    def _read(path: Path) -> Dict[str, Any]:
        """
        Parse a settings file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            yaml.YAMLError: If the file is not valid YAML.
        """
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def get(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as "ledger.row_tolerance".

        Missing sections and keys fall back to default.

        Example:
            >>> config.get("ledger.clear_stale_margin")
            False
            >>> config.get("ledger.unknown", 1)
            1
        """
        value: Any = self._config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next access reloads them."""
        cls._instance = None


def get_config(key: str, default: Any = None) -> Any:
    """Shortcut for ConfigurationManager().get(key, default)."""
    return ConfigurationManager().get(key, default)


__all__ = ['ConfigurationManager', 'get_config']
