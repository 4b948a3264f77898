"""
Request and response envelopes for every endpoint.
"""
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator

from .types import (
    AccountIdentifier,
    Allow,
    Amount,
    Block,
    BlockIdentifier,
    Coin,
    Currency,
    NetworkIdentifier,
    Operation,
    PartialBlockIdentifier,
    Peer,
    PublicKey,
    RosettaModel,
    Signature,
    SigningPayload,
    SyncStatus,
    Transaction,
    TransactionIdentifier,
    Version,
    check_operations,
)


class MetadataRequest(RosettaModel):
    metadata: Optional[Dict[str, Any]] = None


class NetworkRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    metadata: Optional[Dict[str, Any]] = None


class NetworkListResponse(RosettaModel):
    network_identifiers: List[NetworkIdentifier]


class NetworkOptionsResponse(RosettaModel):
    version: Version
    allow: Allow


class NetworkStatusResponse(RosettaModel):
    current_block_identifier: BlockIdentifier
    # milliseconds
    current_block_timestamp: int
    genesis_block_identifier: BlockIdentifier
    oldest_block_identifier: Optional[BlockIdentifier] = None
    sync_status: Optional[SyncStatus] = None
    peers: List[Peer] = Field(default_factory=list)


class AccountBalanceRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    account_identifier: AccountIdentifier
    block_identifier: Optional[PartialBlockIdentifier] = None
    currencies: Optional[List[Currency]] = None


class AccountBalanceResponse(RosettaModel):
    block_identifier: BlockIdentifier
    balances: List[Amount]
    metadata: Optional[Dict[str, Any]] = None


class AccountCoinsRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    account_identifier: AccountIdentifier
    include_mempool: bool = False
    currencies: Optional[List[Currency]] = None


class AccountCoinsResponse(RosettaModel):
    block_identifier: BlockIdentifier
    coins: List[Coin]
    metadata: Optional[Dict[str, Any]] = None


class BlockRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    block_identifier: PartialBlockIdentifier = Field(default_factory=PartialBlockIdentifier)


class BlockResponse(RosettaModel):
    block: Optional[Block] = None
    other_transactions: Optional[List[TransactionIdentifier]] = None


class BlockTransactionRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    block_identifier: BlockIdentifier
    transaction_identifier: TransactionIdentifier


class BlockTransactionResponse(RosettaModel):
    transaction: Transaction


class MempoolResponse(RosettaModel):
    transaction_identifiers: List[TransactionIdentifier]


class MempoolTransactionRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    transaction_identifier: TransactionIdentifier


class MempoolTransactionResponse(RosettaModel):
    transaction: Transaction
    metadata: Optional[Dict[str, Any]] = None


class ConstructionDeriveRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    public_key: PublicKey
    metadata: Optional[Dict[str, Any]] = None


class ConstructionDeriveResponse(RosettaModel):
    address: Optional[str] = None
    account_identifier: Optional[AccountIdentifier] = None
    metadata: Optional[Dict[str, Any]] = None


class _OperationsRequest(RosettaModel):
    operations: List[Operation]

    @field_validator('operations')
    @classmethod
    def _check_operations(cls, v):
        return check_operations(v)


class ConstructionPreprocessRequest(_OperationsRequest):
    network_identifier: NetworkIdentifier
    metadata: Optional[Dict[str, Any]] = None
    max_fee: Optional[List[Amount]] = None
    suggested_fee_multiplier: Optional[float] = None


class ConstructionPreprocessResponse(RosettaModel):
    options: Optional[Dict[str, Any]] = None
    required_public_keys: Optional[List[AccountIdentifier]] = None


class ConstructionMetadataRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    options: Optional[Dict[str, Any]] = None
    public_keys: Optional[List[PublicKey]] = None


class ConstructionMetadataResponse(RosettaModel):
    metadata: Dict[str, Any]
    suggested_fee: Optional[List[Amount]] = None


class ConstructionPayloadsRequest(_OperationsRequest):
    network_identifier: NetworkIdentifier
    metadata: Optional[Dict[str, Any]] = None
    public_keys: Optional[List[PublicKey]] = None


class ConstructionPayloadsResponse(RosettaModel):
    unsigned_transaction: str
    payloads: List[SigningPayload]


class ConstructionCombineRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    unsigned_transaction: str
    signatures: List[Signature]


class ConstructionCombineResponse(RosettaModel):
    signed_transaction: str


class ConstructionParseRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    signed: bool
    transaction: str


class ConstructionParseResponse(RosettaModel):
    operations: List[Operation]
    account_identifier_signers: Optional[List[AccountIdentifier]] = None
    metadata: Optional[Dict[str, Any]] = None


class ConstructionHashRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    signed_transaction: str


class ConstructionSubmitRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    signed_transaction: str


class TransactionIdentifierResponse(RosettaModel):
    transaction_identifier: TransactionIdentifier
    metadata: Optional[Dict[str, Any]] = None


class CallRequest(RosettaModel):
    network_identifier: NetworkIdentifier
    method: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class CallResponse(RosettaModel):
    result: Dict[str, Any]
    idempotent: bool
