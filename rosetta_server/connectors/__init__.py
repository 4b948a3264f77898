"""
Connector contract and discovery.
"""
import importlib
import logging
from importlib.metadata import entry_points
from typing import Any, Callable, Optional

from ..chains import BlockchainConfig
from ..utils.errors import UnsupportedNetwork
from .base import BlockchainConnector, ConnectorBase, derive_account, normalize_genesis
from .jsonrpc import JsonRpcClient

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "rosetta.connectors"


def _resolve(target: str) -> Callable[..., Any]:
    if ":" in target:
        module_name, attr = target.split(":", 1)
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    matches = entry_points(group=ENTRY_POINT_GROUP, name=target)
    for entry_point in matches:
        return entry_point.load()
    raise UnsupportedNetwork(f"No connector registered for '{target}'", {"connector": target})


def load_connector(target: Optional[str], config: BlockchainConfig, node_addr: Optional[str] = None,
                   **kwargs) -> BlockchainConnector:
    """
    Instantiate a connector from ``"package.module:Class"`` or an entry point
    name in the ``rosetta.connectors`` group; the blockchain name is used when
    ``target`` is empty.
    """
    target = target or config.blockchain
    factory = _resolve(target)
    connector = factory(config, node_addr, **kwargs)
    if not isinstance(connector, BlockchainConnector):
        raise TypeError(f"{target} does not implement BlockchainConnector")
    logger.info(f"Loaded connector {target} for {config.blockchain}/{config.network}")
    return connector


__all__ = [
    'BlockchainConnector',
    'ConnectorBase',
    'JsonRpcClient',
    'derive_account',
    'load_connector',
    'normalize_genesis',
    'ENTRY_POINT_GROUP',
]
