"""
Configuration management for the Rosetta client
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger("rosetta_client")

DEFAULT_CONFIG = {
    "url": "http://localhost:8080",
    "blockchain": "bitcoin",
    "network": "regtest",
    "keyfile": str(Path.home() / ".rosetta" / "keyfile"),
    "timeout": 30,
    "max_retries": 3,
}


class Config:
    """Configuration manager for the Rosetta client"""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager"""
        if config_path:
            self.config_path = Path(config_path)
        else:
            # Default to ~/.rosetta/config.json
            self.config_path = Path.home() / ".rosetta" / "config.json"

        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        self.config = self._load_config()
        logger.debug(f"Loaded configuration from {self.config_path}")

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file or create default"""
        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    config = json.load(f)
                # Merge with defaults for any missing keys
                return {**DEFAULT_CONFIG, **config}
            except (OSError, ValueError) as e:
                logger.warning(f"Error loading config file: {e}")
                return DEFAULT_CONFIG.copy()
        self._save_config(DEFAULT_CONFIG)
        return DEFAULT_CONFIG.copy()

    def _save_config(self, config: Dict[str, Any]) -> None:
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except OSError as e:
            logger.error(f"Error saving config file: {e}")

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.config[key] = value
        self._save_config(self.config)

    def get_all(self) -> Dict[str, Any]:
        return self.config.copy()

    def reset(self) -> None:
        """Reset configuration to defaults"""
        self.config = DEFAULT_CONFIG.copy()
        self._save_config(self.config)

    @property
    def url(self) -> str:
        return self.get("url")

    @url.setter
    def url(self, value: str) -> None:
        self.set("url", value)

    @property
    def keyfile(self) -> Path:
        return Path(self.get("keyfile")).expanduser()
