"""
Canonical, chain agnostic Rosetta value types.
"""
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

from rosetta_crypto import Algorithm
from rosetta_crypto import PublicKey as CryptoPublicKey
from rosetta_crypto import Signature as CryptoSignature
from rosetta_crypto import public_key_from_bytes

_INTEGER = re.compile(r"-?[0-9]+")


class RosettaModel(BaseModel):
    """Immutable base model, unknown fields are ignored."""
    model_config = ConfigDict(frozen=True, extra='ignore', use_enum_values=True)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', exclude_none=True)


class CurveType(str, Enum):
    SECP256K1 = "secp256k1"
    EDWARDS25519 = "edwards25519"
    SCHNORRKEL = "schnorrkel"


class SignatureType(str, Enum):
    ECDSA = "ecdsa"
    ECDSA_RECOVERY = "ecdsa_recovery"
    ED25519 = "ed25519"
    SCHNORRKEL = "schnorrkel"


class CoinAction(str, Enum):
    COIN_CREATED = "coin_created"
    COIN_SPENT = "coin_spent"


class SubNetworkIdentifier(RosettaModel):
    network: str
    metadata: Optional[Dict[str, Any]] = None


class NetworkIdentifier(RosettaModel):
    """Selects the blockchain and network a request is for."""
    blockchain: str
    network: str
    sub_network_identifier: Optional[SubNetworkIdentifier] = None

    def key(self) -> str:
        base = f"{self.blockchain}/{self.network}"
        if self.sub_network_identifier:
            return f"{base}/{self.sub_network_identifier.network}"
        return base


class BlockIdentifier(RosettaModel):
    index: int = Field(ge=0)
    hash: str


class PartialBlockIdentifier(RosettaModel):
    """Both fields empty means the current tip."""
    index: Optional[int] = Field(default=None, ge=0)
    hash: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.index is None and self.hash is None


class SubAccountIdentifier(RosettaModel):
    address: str
    metadata: Optional[Dict[str, Any]] = None


class AccountIdentifier(RosettaModel):
    address: str
    sub_account: Optional[SubAccountIdentifier] = None
    metadata: Optional[Dict[str, Any]] = None


class Currency(RosettaModel):
    symbol: str
    decimals: int = Field(ge=0)
    metadata: Optional[Dict[str, Any]] = None


class Amount(RosettaModel):
    """
    Value in the currency's smallest unit.

    Held as an arbitrary precision int, always a decimal string on the wire.
    """
    value: int
    currency: Currency
    metadata: Optional[Dict[str, Any]] = None

    @field_validator('value', mode='before')
    @classmethod
    def _parse_value(cls, v):
        if isinstance(v, bool) or isinstance(v, float):
            raise ValueError("amount value must be an integer string, not a float")
        if isinstance(v, str):
            if not _INTEGER.fullmatch(v):
                raise ValueError(f"amount value is not an integer: {v!r}")
            return int(v)
        return v

    @field_serializer('value')
    def _serialize_value(self, v: int) -> str:
        return str(v)


class OperationIdentifier(RosettaModel):
    index: int = Field(ge=0)
    network_index: Optional[int] = Field(default=None, ge=0)


class CoinIdentifier(RosettaModel):
    identifier: str


class CoinChange(RosettaModel):
    coin_identifier: CoinIdentifier
    coin_action: CoinAction


class Coin(RosettaModel):
    coin_identifier: CoinIdentifier
    amount: Amount


class Operation(RosettaModel):
    """One atomic effect within a transaction."""
    operation_identifier: OperationIdentifier
    related_operations: Optional[List[OperationIdentifier]] = None
    type: str
    status: Optional[str] = None
    account: Optional[AccountIdentifier] = None
    amount: Optional[Amount] = None
    coin_change: Optional[CoinChange] = None
    metadata: Optional[Dict[str, Any]] = None


def check_operations(operations: List[Operation]) -> List[Operation]:
    """
    Operation indices must be unique and dense from 0, related operations
    must point at other operations of the same list.
    """
    indices = sorted(op.operation_identifier.index for op in operations)
    if indices != list(range(len(operations))):
        raise ValueError(f"operation indices must be unique and dense from 0, got {indices}")
    for op in operations:
        for related in op.related_operations or []:
            if related.index == op.operation_identifier.index or related.index >= len(operations):
                raise ValueError(
                    f"operation {op.operation_identifier.index} references invalid operation {related.index}"
                )
    return operations


class TransactionIdentifier(RosettaModel):
    hash: str


class Transaction(RosettaModel):
    transaction_identifier: TransactionIdentifier
    operations: List[Operation] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None

    @model_validator(mode='after')
    def _check_operations(self):
        check_operations(self.operations)
        return self


class Block(RosettaModel):
    """A block; the genesis block's parent is itself."""
    block_identifier: BlockIdentifier
    parent_block_identifier: BlockIdentifier
    # milliseconds since the unix epoch
    timestamp: int = Field(ge=0)
    transactions: List[Transaction] = Field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None


class PublicKey(RosettaModel):
    hex_bytes: str
    curve_type: CurveType

    @classmethod
    def from_crypto(cls, key: CryptoPublicKey) -> "PublicKey":
        return cls(hex_bytes=key.hex(), curve_type=key.curve_type)

    def to_crypto(self, algorithm: Algorithm) -> CryptoPublicKey:
        return public_key_from_bytes(algorithm, bytes.fromhex(self.hex_bytes))


class SigningPayload(RosettaModel):
    """Bytes a signer must sign, and who must sign them."""
    address: Optional[str] = None
    account_identifier: Optional[AccountIdentifier] = None
    hex_bytes: str
    signature_type: Optional[SignatureType] = None

    @property
    def signer_address(self) -> Optional[str]:
        if self.account_identifier is not None:
            return self.account_identifier.address
        return self.address


class Signature(RosettaModel):
    signing_payload: SigningPayload
    public_key: PublicKey
    signature_type: SignatureType
    hex_bytes: str

    def to_crypto(self) -> CryptoSignature:
        return CryptoSignature(Algorithm.from_signature_type(self.signature_type), bytes.fromhex(self.hex_bytes))


class Peer(RosettaModel):
    peer_id: str
    metadata: Optional[Dict[str, Any]] = None


class SyncStatus(RosettaModel):
    current_index: Optional[int] = None
    target_index: Optional[int] = None
    stage: Optional[str] = None
    synced: Optional[bool] = None


class Version(RosettaModel):
    rosetta_version: str
    node_version: str
    middleware_version: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class OperationStatus(RosettaModel):
    status: str
    successful: bool


class Error(RosettaModel):
    code: int
    message: str
    description: Optional[str] = None
    retriable: bool
    details: Optional[Dict[str, Any]] = None


class Allow(RosettaModel):
    operation_statuses: List[OperationStatus]
    operation_types: List[str]
    errors: List[Error]
    historical_balance_lookup: bool
    call_methods: List[str] = Field(default_factory=list)
    mempool_coins: bool = False
