"""
Rosetta data model: value types and endpoint envelopes.
"""
from .requests import (
    MetadataRequest,
    NetworkRequest,
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkStatusResponse,
    AccountBalanceRequest,
    AccountBalanceResponse,
    AccountCoinsRequest,
    AccountCoinsResponse,
    BlockRequest,
    BlockResponse,
    BlockTransactionRequest,
    BlockTransactionResponse,
    MempoolResponse,
    MempoolTransactionRequest,
    MempoolTransactionResponse,
    ConstructionDeriveRequest,
    ConstructionDeriveResponse,
    ConstructionPreprocessRequest,
    ConstructionPreprocessResponse,
    ConstructionMetadataRequest,
    ConstructionMetadataResponse,
    ConstructionPayloadsRequest,
    ConstructionPayloadsResponse,
    ConstructionCombineRequest,
    ConstructionCombineResponse,
    ConstructionParseRequest,
    ConstructionParseResponse,
    ConstructionHashRequest,
    ConstructionSubmitRequest,
    TransactionIdentifierResponse,
    CallRequest,
    CallResponse,
)
from .types import (
    RosettaModel,
    CurveType,
    SignatureType,
    CoinAction,
    SubNetworkIdentifier,
    NetworkIdentifier,
    BlockIdentifier,
    PartialBlockIdentifier,
    SubAccountIdentifier,
    AccountIdentifier,
    Currency,
    Amount,
    OperationIdentifier,
    CoinIdentifier,
    CoinChange,
    Coin,
    Operation,
    TransactionIdentifier,
    Transaction,
    Block,
    PublicKey,
    SigningPayload,
    Signature,
    Peer,
    SyncStatus,
    Version,
    OperationStatus,
    Error,
    Allow,
    check_operations,
)

__all__ = [
    'RosettaModel',
    'CurveType',
    'SignatureType',
    'CoinAction',
    'SubNetworkIdentifier',
    'NetworkIdentifier',
    'BlockIdentifier',
    'PartialBlockIdentifier',
    'SubAccountIdentifier',
    'AccountIdentifier',
    'Currency',
    'Amount',
    'OperationIdentifier',
    'CoinIdentifier',
    'CoinChange',
    'Coin',
    'Operation',
    'TransactionIdentifier',
    'Transaction',
    'Block',
    'PublicKey',
    'SigningPayload',
    'Signature',
    'Peer',
    'SyncStatus',
    'Version',
    'OperationStatus',
    'Error',
    'Allow',
    'check_operations',
    'MetadataRequest',
    'NetworkRequest',
    'NetworkListResponse',
    'NetworkOptionsResponse',
    'NetworkStatusResponse',
    'AccountBalanceRequest',
    'AccountBalanceResponse',
    'AccountCoinsRequest',
    'AccountCoinsResponse',
    'BlockRequest',
    'BlockResponse',
    'BlockTransactionRequest',
    'BlockTransactionResponse',
    'MempoolResponse',
    'MempoolTransactionRequest',
    'MempoolTransactionResponse',
    'ConstructionDeriveRequest',
    'ConstructionDeriveResponse',
    'ConstructionPreprocessRequest',
    'ConstructionPreprocessResponse',
    'ConstructionMetadataRequest',
    'ConstructionMetadataResponse',
    'ConstructionPayloadsRequest',
    'ConstructionPayloadsResponse',
    'ConstructionCombineRequest',
    'ConstructionCombineResponse',
    'ConstructionParseRequest',
    'ConstructionParseResponse',
    'ConstructionHashRequest',
    'ConstructionSubmitRequest',
    'TransactionIdentifierResponse',
    'CallRequest',
    'CallResponse',
]
