"""
Capability contract every chain connector implements.
"""
import logging
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable

from rosetta_crypto import InvalidKey, UnsupportedCurve, encode_address

from ..chains import BlockchainConfig
from ..config import DEFAULT_TIMEOUT
from ..models import (
    AccountBalanceResponse,
    AccountCoinsResponse,
    AccountIdentifier,
    Block,
    BlockIdentifier,
    CallResponse,
    ConstructionMetadataResponse,
    ConstructionParseResponse,
    ConstructionPayloadsResponse,
    ConstructionPreprocessResponse,
    NetworkStatusResponse,
    Operation,
    PartialBlockIdentifier,
    PublicKey,
    Signature,
    Transaction,
    TransactionIdentifier,
)
from ..utils.errors import MalformedRequest, UnsupportedOperation

logger = logging.getLogger(__name__)

DEFAULT_OPERATION_STATUSES = (("success", True), ("failure", False))


@runtime_checkable
class BlockchainConnector(Protocol):
    """
    Chain specific implementation of the Data and Construction API.

    All I/O is async. Transient node failures must surface as
    ``NodeUnavailable`` so the gateway can retry them; every other
    ``RosettaError`` is treated as permanent. Blocks fetched by hash and
    balances at a fixed block must not change between calls.
    """
    config: BlockchainConfig
    operation_types: List[str]
    call_methods: List[str]

    @property
    def genesis_block(self) -> BlockIdentifier:
        ...

    async def connect(self) -> None:
        """Open the process lifetime node connection."""
        ...

    async def close(self) -> None:
        ...

    async def node_version(self) -> str:
        ...

    async def network_status(self) -> NetworkStatusResponse:
        ...

    async def current_block(self) -> BlockIdentifier:
        """The current tip, used as the cache epoch."""
        ...

    async def block(self, block_identifier: PartialBlockIdentifier) -> Block:
        """BlockNotFound when neither index nor hash resolves."""
        ...

    async def block_transaction(self, block_identifier: BlockIdentifier,
                                transaction_identifier: TransactionIdentifier) -> Transaction:
        ...

    async def account_balance(self, account: AccountIdentifier,
                              block_identifier: Optional[PartialBlockIdentifier]) -> AccountBalanceResponse:
        """Balance at the given block or the tip, returning the block actually used."""
        ...

    async def account_coins(self, account: AccountIdentifier, include_mempool: bool) -> AccountCoinsResponse:
        ...

    async def mempool(self) -> List[TransactionIdentifier]:
        ...

    async def mempool_transaction(self, transaction_identifier: TransactionIdentifier) -> Transaction:
        ...

    async def derive(self, public_key: PublicKey, metadata: Optional[Dict[str, Any]]) -> AccountIdentifier:
        ...

    async def preprocess(self, operations: List[Operation],
                         metadata: Optional[Dict[str, Any]]) -> ConstructionPreprocessResponse:
        ...

    async def metadata(self, options: Optional[Dict[str, Any]],
                       public_keys: List[PublicKey]) -> ConstructionMetadataResponse:
        ...

    async def payloads(self, operations: List[Operation], metadata: Optional[Dict[str, Any]],
                       public_keys: List[PublicKey]) -> ConstructionPayloadsResponse:
        ...

    async def combine(self, unsigned_transaction: str, signatures: List[Signature]) -> str:
        ...

    async def parse(self, transaction: str, signed: bool) -> ConstructionParseResponse:
        ...

    async def hash(self, signed_transaction: str) -> TransactionIdentifier:
        ...

    async def submit(self, signed_transaction: str) -> TransactionIdentifier:
        """Broadcast. Not idempotent; AlreadyKnown when the node has seen it."""
        ...

    async def call(self, method: str, parameters: Dict[str, Any]) -> CallResponse:
        ...


def derive_account(config: BlockchainConfig, public_key: PublicKey) -> AccountIdentifier:
    """Generic derive: encode the chain address of a public key."""
    if public_key.curve_type != config.curve_type:
        raise UnsupportedCurve(
            f"{config.blockchain} uses {config.curve_type}, got {public_key.curve_type}",
            {"curve_type": public_key.curve_type}
        )
    try:
        key = public_key.to_crypto(config.algorithm)
    except (InvalidKey, ValueError) as e:
        raise MalformedRequest(f"Invalid public key: {e}")
    return AccountIdentifier(address=encode_address(key, config.address_format))


def normalize_genesis(block: Block, genesis: BlockIdentifier) -> Block:
    """The genesis block's parent is the genesis block itself."""
    if block.block_identifier == genesis and block.parent_block_identifier != genesis:
        return block.model_copy(update={"parent_block_identifier": genesis})
    return block


class ConnectorBase:
    """
    Defaults shared by most connectors: generic derive, no UTXO endpoint on
    account chains and no chain specific calls.
    """
    operation_types: List[str] = ["transfer"]
    call_methods: List[str] = []

    def __init__(self, config: BlockchainConfig, node_addr: Optional[str] = None,
                 timeout: float = DEFAULT_TIMEOUT):
        self.config = config
        self.node_addr = node_addr
        self.timeout = timeout

    async def connect(self) -> None:
        logger.info(f"Connector for {self.config.blockchain}/{self.config.network} ready")

    async def close(self) -> None:
        pass

    async def derive(self, public_key: PublicKey, metadata: Optional[Dict[str, Any]]) -> AccountIdentifier:
        return derive_account(self.config, public_key)

    async def account_coins(self, account: AccountIdentifier, include_mempool: bool) -> AccountCoinsResponse:
        raise UnsupportedOperation(f"{self.config.blockchain} is not a UTXO chain")

    async def call(self, method: str, parameters: Dict[str, Any]) -> CallResponse:
        raise UnsupportedOperation(f"Call method '{method}' not supported")
