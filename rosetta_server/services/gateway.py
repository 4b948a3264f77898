"""
Dispatch of Data and Construction API requests to the connector.

Every connector call runs under the retry policy (submit excepted) and
cacheable responses go through the response cache, keyed by the tip they
were computed at.
"""
import logging
from typing import Awaitable, Callable, Optional, Type, TypeVar

from rosetta_crypto import UnsupportedCurve

from ..config import MIDDLEWARE_VERSION, ROSETTA_VERSION
from ..connectors.base import DEFAULT_OPERATION_STATUSES, BlockchainConnector, normalize_genesis
from ..database.cache import Epoch, ResponseCache, make_key
from ..models import (
    AccountBalanceRequest,
    AccountBalanceResponse,
    AccountCoinsRequest,
    AccountCoinsResponse,
    Allow,
    BlockIdentifier,
    BlockRequest,
    BlockResponse,
    BlockTransactionRequest,
    BlockTransactionResponse,
    CallRequest,
    CallResponse,
    ConstructionCombineRequest,
    ConstructionCombineResponse,
    ConstructionDeriveRequest,
    ConstructionDeriveResponse,
    ConstructionHashRequest,
    ConstructionMetadataRequest,
    ConstructionMetadataResponse,
    ConstructionParseRequest,
    ConstructionParseResponse,
    ConstructionPayloadsRequest,
    ConstructionPayloadsResponse,
    ConstructionPreprocessRequest,
    ConstructionPreprocessResponse,
    ConstructionSubmitRequest,
    Error,
    MempoolResponse,
    MempoolTransactionRequest,
    MempoolTransactionResponse,
    NetworkIdentifier,
    NetworkListResponse,
    NetworkOptionsResponse,
    NetworkRequest,
    NetworkStatusResponse,
    OperationStatus,
    RosettaModel,
    TransactionIdentifierResponse,
    Version,
)
from ..utils.errors import UnsupportedNetwork, UnsupportedOperation, catalogue
from ..utils.metrics import reorgs
from ..utils.retry import NO_RETRY, RetryPolicy, call_with_retry

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=RosettaModel)


class RosettaGateway:
    """Serves one network through one connector and one response cache."""

    def __init__(self, connector: BlockchainConnector, cache: Optional[ResponseCache] = None,
                 policy: RetryPolicy = RetryPolicy()):
        self.connector = connector
        self.config = connector.config
        self.cache = cache
        self.policy = policy
        self.network_identifier = NetworkIdentifier(
            blockchain=self.config.blockchain,
            network=self.config.network
        )
        self._last_tip: Optional[BlockIdentifier] = None

    def check_network(self, network_identifier: NetworkIdentifier):
        if network_identifier != self.network_identifier:
            raise UnsupportedNetwork(
                f"Unsupported network {network_identifier.key()}",
                {"supported": [self.network_identifier.key()]}
            )

    async def _call(self, operation: str, func: Callable[..., Awaitable], *args, retry: bool = True):
        return await call_with_retry(
            operation, func, *args,
            policy=self.policy if retry else NO_RETRY
        )

    def _observe_tip(self, tip: BlockIdentifier):
        last = self._last_tip
        if last is not None and (
            tip.index < last.index or (tip.index == last.index and tip.hash != last.hash)
        ):
            reorgs.inc()
            logger.warning(
                f"Reorg detected: tip moved from {last.index}/{last.hash} to {tip.index}/{tip.hash}"
            )
        self._last_tip = tip

    async def current_epoch(self) -> Epoch:
        tip = await self._call("current_block", self.connector.current_block)
        self._observe_tip(tip)
        return Epoch(tip.index, tip.hash)

    async def _cached(self, endpoint: str, request: RosettaModel, response_type: Type[R],
                      compute: Callable[[], Awaitable[R]], pinned: bool = False) -> R:
        """
        Serve ``request`` from the cache when possible. Pinned entries describe
        immutable data and carry no epoch.
        """
        if self.cache is None:
            return await compute()
        key = make_key(self.network_identifier.key(), endpoint, request.to_dict())
        epoch = None if pinned else await self.current_epoch()
        data = await self.cache.get(key, endpoint, epoch)
        if data is not None:
            return response_type.model_validate(data)
        response = await compute()
        await self.cache.set(key, endpoint, response.to_dict(), epoch)
        return response

    # Data API

    async def network_list(self) -> NetworkListResponse:
        return NetworkListResponse(network_identifiers=[self.network_identifier])

    async def network_options(self, request: NetworkRequest) -> NetworkOptionsResponse:
        self.check_network(request.network_identifier)
        node_version = await self._call("node_version", self.connector.node_version)
        return NetworkOptionsResponse(
            version=Version(
                rosetta_version=ROSETTA_VERSION,
                node_version=node_version,
                middleware_version=MIDDLEWARE_VERSION,
            ),
            allow=Allow(
                operation_statuses=[
                    OperationStatus(status=status, successful=successful)
                    for status, successful in DEFAULT_OPERATION_STATUSES
                ],
                operation_types=list(self.connector.operation_types),
                errors=[Error(**error) for error in catalogue()],
                historical_balance_lookup=True,
                call_methods=list(self.connector.call_methods),
                mempool_coins=False,
            ),
        )

    async def network_status(self, request: NetworkRequest) -> NetworkStatusResponse:
        self.check_network(request.network_identifier)
        status = await self._call("network_status", self.connector.network_status)
        self._observe_tip(status.current_block_identifier)
        return status

    async def account_balance(self, request: AccountBalanceRequest) -> AccountBalanceResponse:
        self.check_network(request.network_identifier)
        block = request.block_identifier
        if block is not None and block.is_empty:
            block = None

        async def compute():
            return await self._call(
                "account_balance", self.connector.account_balance, request.account_identifier, block
            )

        pinned = block is not None and block.hash is not None
        return await self._cached("account/balance", request, AccountBalanceResponse, compute, pinned)

    async def account_coins(self, request: AccountCoinsRequest) -> AccountCoinsResponse:
        self.check_network(request.network_identifier)
        if not self.config.utxo:
            raise UnsupportedOperation(f"{self.config.blockchain} is not a UTXO chain")

        async def compute():
            return await self._call(
                "account_coins", self.connector.account_coins,
                request.account_identifier, request.include_mempool
            )

        if request.include_mempool:
            return await compute()
        return await self._cached("account/coins", request, AccountCoinsResponse, compute)

    async def block(self, request: BlockRequest) -> BlockResponse:
        self.check_network(request.network_identifier)

        async def compute():
            block = await self._call("block", self.connector.block, request.block_identifier)
            return BlockResponse(block=normalize_genesis(block, self.connector.genesis_block))

        pinned = request.block_identifier.hash is not None
        return await self._cached("block", request, BlockResponse, compute, pinned)

    async def block_transaction(self, request: BlockTransactionRequest) -> BlockTransactionResponse:
        self.check_network(request.network_identifier)

        async def compute():
            transaction = await self._call(
                "block_transaction", self.connector.block_transaction,
                request.block_identifier, request.transaction_identifier
            )
            return BlockTransactionResponse(transaction=transaction)

        return await self._cached("block/transaction", request, BlockTransactionResponse, compute, pinned=True)

    async def mempool(self, request: NetworkRequest) -> MempoolResponse:
        self.check_network(request.network_identifier)
        identifiers = await self._call("mempool", self.connector.mempool)
        return MempoolResponse(transaction_identifiers=identifiers)

    async def mempool_transaction(self, request: MempoolTransactionRequest) -> MempoolTransactionResponse:
        self.check_network(request.network_identifier)
        transaction = await self._call(
            "mempool_transaction", self.connector.mempool_transaction, request.transaction_identifier
        )
        return MempoolTransactionResponse(transaction=transaction)

    # Construction API

    async def derive(self, request: ConstructionDeriveRequest) -> ConstructionDeriveResponse:
        self.check_network(request.network_identifier)
        if request.public_key.curve_type != self.config.curve_type:
            raise UnsupportedCurve(
                f"{self.config.blockchain} uses {self.config.curve_type}, got {request.public_key.curve_type}",
                {"curve_type": request.public_key.curve_type}
            )

        async def compute():
            account = await self._call("derive", self.connector.derive, request.public_key, request.metadata)
            return ConstructionDeriveResponse(address=account.address, account_identifier=account)

        return await self._cached("construction/derive", request, ConstructionDeriveResponse, compute, pinned=True)

    async def preprocess(self, request: ConstructionPreprocessRequest) -> ConstructionPreprocessResponse:
        self.check_network(request.network_identifier)

        async def compute():
            return await self._call("preprocess", self.connector.preprocess, request.operations, request.metadata)

        return await self._cached(
            "construction/preprocess", request, ConstructionPreprocessResponse, compute, pinned=True
        )

    async def metadata(self, request: ConstructionMetadataRequest) -> ConstructionMetadataResponse:
        self.check_network(request.network_identifier)
        return await self._call(
            "metadata", self.connector.metadata, request.options, list(request.public_keys or [])
        )

    async def payloads(self, request: ConstructionPayloadsRequest) -> ConstructionPayloadsResponse:
        self.check_network(request.network_identifier)

        async def compute():
            return await self._call(
                "payloads", self.connector.payloads,
                request.operations, request.metadata, list(request.public_keys or [])
            )

        return await self._cached("construction/payloads", request, ConstructionPayloadsResponse, compute, pinned=True)

    async def combine(self, request: ConstructionCombineRequest) -> ConstructionCombineResponse:
        self.check_network(request.network_identifier)

        async def compute():
            signed = await self._call(
                "combine", self.connector.combine, request.unsigned_transaction, list(request.signatures)
            )
            return ConstructionCombineResponse(signed_transaction=signed)

        return await self._cached("construction/combine", request, ConstructionCombineResponse, compute, pinned=True)

    async def parse(self, request: ConstructionParseRequest) -> ConstructionParseResponse:
        self.check_network(request.network_identifier)

        async def compute():
            return await self._call("parse", self.connector.parse, request.transaction, request.signed)

        return await self._cached("construction/parse", request, ConstructionParseResponse, compute, pinned=True)

    async def hash(self, request: ConstructionHashRequest) -> TransactionIdentifierResponse:
        self.check_network(request.network_identifier)

        async def compute():
            identifier = await self._call("hash", self.connector.hash, request.signed_transaction)
            return TransactionIdentifierResponse(transaction_identifier=identifier)

        return await self._cached("construction/hash", request, TransactionIdentifierResponse, compute, pinned=True)

    async def submit(self, request: ConstructionSubmitRequest) -> TransactionIdentifierResponse:
        self.check_network(request.network_identifier)
        identifier = await self._call("submit", self.connector.submit, request.signed_transaction, retry=False)
        logger.info(f"Submitted transaction {identifier.hash}")
        return TransactionIdentifierResponse(transaction_identifier=identifier)

    async def call(self, request: CallRequest) -> CallResponse:
        self.check_network(request.network_identifier)
        return await self._call("call", self.connector.call, request.method, request.parameters)
