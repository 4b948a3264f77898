"""
Configuration module for the Rosetta gateway.
Contains environment variables and other configuration settings.
"""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Retry Configuration
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.5  # seconds
DEFAULT_MAX_DELAY = 8.0  # seconds

# Node RPC Configuration
DEFAULT_TIMEOUT = 30.0  # seconds

# Server Configuration
DEFAULT_BLOCKCHAIN = 'bitcoin'
DEFAULT_NETWORK = 'regtest'
DEFAULT_BIND_ADDR = '0.0.0.0:8080'
DEFAULT_DATA_DIR = 'data'
CACHE_DB_NAME = 'cache.db'

ROSETTA_VERSION = '1.4.13'
MIDDLEWARE_VERSION = '0.1.0'


@dataclass
class Settings:
    """
    Process wide settings, one server per network.
    """
    blockchain: str = DEFAULT_BLOCKCHAIN
    network: str = DEFAULT_NETWORK
    bind_addr: str = DEFAULT_BIND_ADDR
    node_addr: Optional[str] = None
    data_dir: str = DEFAULT_DATA_DIR
    # import path "module:Class" or entry point name, defaults to the blockchain
    connector: Optional[str] = None
    log_level: str = 'INFO'
    log_dir: Optional[str] = None
    max_attempts: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_BASE_DELAY
    max_delay: float = DEFAULT_MAX_DELAY
    node_timeout: float = DEFAULT_TIMEOUT
    cache_enabled: bool = True

    @property
    def cache_path(self) -> str:
        return os.path.join(self.data_dir, CACHE_DB_NAME)

    @property
    def host(self) -> str:
        return self.bind_addr.rsplit(':', 1)[0] or '0.0.0.0'

    @property
    def port(self) -> int:
        return int(self.bind_addr.rsplit(':', 1)[1])

    @classmethod
    def from_env(cls, **overrides) -> "Settings":
        """Build settings from ROSETTA_* environment variables, explicit overrides win."""
        values = dict(
            blockchain=os.getenv('ROSETTA_BLOCKCHAIN', DEFAULT_BLOCKCHAIN),
            network=os.getenv('ROSETTA_NETWORK', DEFAULT_NETWORK),
            bind_addr=os.getenv('ROSETTA_BIND_ADDR', DEFAULT_BIND_ADDR),
            node_addr=os.getenv('ROSETTA_NODE_ADDR'),
            data_dir=os.getenv('ROSETTA_DATA_DIR', DEFAULT_DATA_DIR),
            connector=os.getenv('ROSETTA_CONNECTOR'),
            log_level=os.getenv('ROSETTA_LOG_LEVEL', 'INFO'),
            log_dir=os.getenv('ROSETTA_LOG_DIR'),
            max_attempts=int(os.getenv('ROSETTA_MAX_RETRIES', DEFAULT_MAX_RETRIES)),
            base_delay=float(os.getenv('ROSETTA_RETRY_BASE_DELAY', DEFAULT_BASE_DELAY)),
            max_delay=float(os.getenv('ROSETTA_RETRY_MAX_DELAY', DEFAULT_MAX_DELAY)),
            node_timeout=float(os.getenv('ROSETTA_NODE_TIMEOUT', DEFAULT_TIMEOUT)),
            cache_enabled=os.getenv('ROSETTA_CACHE', 'true').lower() == 'true',
        )
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
