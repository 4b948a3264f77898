"""
Pytest configuration and an in-memory connector for the gateway tests.
"""
import hashlib
import json
from collections import Counter
from typing import Any, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from rosetta_crypto import verify_prehashed
from rosetta_server.chains import PRESETS
from rosetta_server.config import Settings
from rosetta_server.connectors import ConnectorBase, derive_account
from rosetta_server.database.cache import ResponseCache
from rosetta_server.main import create_app
from rosetta_server.models import (
    AccountBalanceResponse,
    AccountIdentifier,
    Amount,
    Block,
    BlockIdentifier,
    CallResponse,
    ConstructionMetadataResponse,
    ConstructionParseResponse,
    ConstructionPayloadsResponse,
    ConstructionPreprocessResponse,
    Currency,
    NetworkStatusResponse,
    Operation,
    PartialBlockIdentifier,
    Peer,
    SigningPayload,
    Transaction,
    TransactionIdentifier,
)
from rosetta_server.utils.errors import (
    AlreadyKnown,
    BlockNotFound,
    MalformedRequest,
    NodeUnavailable,
    TransactionNotFound,
    UnsupportedOperation,
)
from rosetta_client.api import RosettaAPI
from rosetta_client.signer import Signer

TEST_MNEMONIC = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)
MINER = "0x0000000000000000000000000000000000000001"
GENESIS_TIMESTAMP = 1_600_000_000_000


# Register the asyncio marker
def pytest_configure(config):
    config.addinivalue_line("markers", "asyncio: mark test as running with asyncio")


def block_hash(index: int, fork: str = "") -> str:
    return "0x" + hashlib.sha256(f"block-{index}{fork}".encode()).hexdigest()


class FakeConnector(ConnectorBase):
    """
    Account chain held in memory.

    Unsigned transactions are hex encoded JSON, the signing payload is the
    SHA-256 of that JSON and the transaction hash is the SHA-256 of the
    signed encoding. ``failures[op] = n`` makes the next n calls of ``op``
    raise NodeUnavailable.
    """
    call_methods = ["faucet"]

    def __init__(self, config, node_addr=None, tip: int = 100, **kwargs):
        super().__init__(config, node_addr)
        self.blocks: List[BlockIdentifier] = []
        self.balances: Dict[str, int] = {MINER: 5_000_000}
        self.mempool_txs: Dict[str, Transaction] = {}
        self.submitted: set = set()
        self.failures: Counter = Counter()
        self.calls: Counter = Counter()
        self.connected = False
        self.closed = False
        for index in range(tip + 1):
            self.blocks.append(BlockIdentifier(index=index, hash=block_hash(index)))

    @property
    def currency(self) -> Currency:
        return Currency(**self.config.currency())

    @property
    def genesis_block(self) -> BlockIdentifier:
        return self.blocks[0]

    @property
    def tip(self) -> BlockIdentifier:
        return self.blocks[-1]

    def advance(self, count: int = 1):
        for _ in range(count):
            index = len(self.blocks)
            self.blocks.append(BlockIdentifier(index=index, hash=block_hash(index)))

    def reorg(self, depth: int = 1):
        """Replace the last ``depth`` blocks with a fork of the same height."""
        start = len(self.blocks) - depth
        for index in range(start, len(self.blocks)):
            self.blocks[index] = BlockIdentifier(index=index, hash=block_hash(index, "fork"))

    def _enter(self, operation: str):
        self.calls[operation] += 1
        if self.failures[operation] > 0:
            self.failures[operation] -= 1
            raise NodeUnavailable(f"{operation} unavailable")

    def _reward(self, index: int) -> Transaction:
        return Transaction(
            transaction_identifier=TransactionIdentifier(hash=f"0xreward{index}"),
            operations=[
                Operation(
                    operation_identifier={"index": 0},
                    type="reward",
                    status="success",
                    account=AccountIdentifier(address=MINER),
                    amount=Amount(value="2000", currency=self.currency),
                )
            ],
        )

    def _find(self, partial: PartialBlockIdentifier) -> BlockIdentifier:
        if partial.hash is not None:
            for block in self.blocks:
                if block.hash == partial.hash and (partial.index is None or partial.index == block.index):
                    return block
            raise BlockNotFound(f"Block {partial.hash} not found")
        if partial.index is not None:
            if partial.index >= len(self.blocks):
                raise BlockNotFound(f"Block {partial.index} not found")
            return self.blocks[partial.index]
        return self.tip

    async def connect(self):
        self.connected = True

    async def close(self):
        self.closed = True

    async def node_version(self) -> str:
        self._enter("node_version")
        return "fake/1.0"

    async def network_status(self) -> NetworkStatusResponse:
        self._enter("network_status")
        return NetworkStatusResponse(
            current_block_identifier=self.tip,
            current_block_timestamp=GENESIS_TIMESTAMP + self.tip.index * 1000,
            genesis_block_identifier=self.genesis_block,
            peers=[Peer(peer_id="peer-1")],
        )

    async def current_block(self) -> BlockIdentifier:
        self._enter("current_block")
        return self.tip

    async def block(self, block_identifier: PartialBlockIdentifier) -> Block:
        self._enter("block")
        found = self._find(block_identifier)
        if found.index == 0:
            # deliberately not self-parented, the gateway fixes it up
            parent = BlockIdentifier(index=0, hash="0x00")
        else:
            parent = self.blocks[found.index - 1]
        return Block(
            block_identifier=found,
            parent_block_identifier=parent,
            timestamp=GENESIS_TIMESTAMP + found.index * 1000,
            transactions=[self._reward(found.index)],
        )

    async def block_transaction(self, block_identifier, transaction_identifier) -> Transaction:
        self._enter("block_transaction")
        found = self._find(PartialBlockIdentifier(index=block_identifier.index, hash=block_identifier.hash))
        transaction = self._reward(found.index)
        if transaction.transaction_identifier != transaction_identifier:
            raise TransactionNotFound(f"Transaction {transaction_identifier.hash} not found")
        return transaction

    async def account_balance(self, account, block_identifier) -> AccountBalanceResponse:
        self._enter("account_balance")
        block = self._find(block_identifier) if block_identifier else self.tip
        return AccountBalanceResponse(
            block_identifier=block,
            balances=[Amount(value=self.balances.get(account.address, 0), currency=self.currency)],
        )

    async def mempool(self) -> List[TransactionIdentifier]:
        self._enter("mempool")
        return [TransactionIdentifier(hash=tx_hash) for tx_hash in self.mempool_txs]

    async def mempool_transaction(self, transaction_identifier) -> Transaction:
        self._enter("mempool_transaction")
        try:
            return self.mempool_txs[transaction_identifier.hash]
        except KeyError:
            raise TransactionNotFound(f"Transaction {transaction_identifier.hash} not in mempool")

    @staticmethod
    def _sender(operations: List[Operation]) -> str:
        for operation in operations:
            if operation.amount is not None and operation.amount.value < 0:
                return operation.account.address
        raise MalformedRequest("No sending operation")

    async def preprocess(self, operations, metadata) -> ConstructionPreprocessResponse:
        self._enter("preprocess")
        sender = self._sender(operations)
        return ConstructionPreprocessResponse(
            options={"from": sender},
            required_public_keys=[AccountIdentifier(address=sender)],
        )

    async def metadata(self, options, public_keys) -> ConstructionMetadataResponse:
        self._enter("metadata")
        nonce = len(self.submitted)
        return ConstructionMetadataResponse(
            metadata={"nonce": nonce, "gas_price": "1"},
            suggested_fee=[Amount(value="21000", currency=self.currency)],
        )

    async def payloads(self, operations, metadata, public_keys) -> ConstructionPayloadsResponse:
        self._enter("payloads")
        sender = self._sender(operations)
        unsigned = json.dumps(
            {"operations": [op.to_dict() for op in operations], "metadata": metadata or {}, "from": sender},
            sort_keys=True,
        ).encode()
        return ConstructionPayloadsResponse(
            unsigned_transaction=unsigned.hex(),
            payloads=[
                SigningPayload(
                    account_identifier=AccountIdentifier(address=sender),
                    hex_bytes=hashlib.sha256(unsigned).hexdigest(),
                    signature_type=self.config.signature_type,
                )
            ],
        )

    async def combine(self, unsigned_transaction, signatures) -> str:
        self._enter("combine")
        unsigned = bytes.fromhex(unsigned_transaction)
        digest = hashlib.sha256(unsigned).digest()
        signers = []
        for signature in signatures:
            public = signature.public_key.to_crypto(self.config.algorithm)
            if not verify_prehashed(public, digest, signature.to_crypto()):
                raise MalformedRequest("Invalid signature")
            signers.append(derive_account(self.config, signature.public_key).address)
        signed = {
            "unsigned": unsigned_transaction,
            "signatures": [signature.hex_bytes for signature in signatures],
            "signers": signers,
        }
        return json.dumps(signed, sort_keys=True).encode().hex()

    async def parse(self, transaction, signed) -> ConstructionParseResponse:
        self._enter("parse")
        try:
            decoded = json.loads(bytes.fromhex(transaction))
            unsigned = json.loads(bytes.fromhex(decoded["unsigned"])) if signed else decoded
        except (ValueError, KeyError) as e:
            raise MalformedRequest(f"Cannot decode transaction: {e}")
        response = {"operations": unsigned["operations"]}
        if signed:
            response["account_identifier_signers"] = [{"address": a} for a in decoded["signers"]]
        return ConstructionParseResponse.model_validate(response)

    async def hash(self, signed_transaction) -> TransactionIdentifier:
        self._enter("hash")
        return TransactionIdentifier(hash="0x" + hashlib.sha256(bytes.fromhex(signed_transaction)).hexdigest())

    async def submit(self, signed_transaction) -> TransactionIdentifier:
        self._enter("submit")
        identifier = await self.hash(signed_transaction)
        if identifier.hash in self.submitted:
            raise AlreadyKnown(f"Transaction {identifier.hash} already known")
        parsed = await self.parse(signed_transaction, True)
        self.submitted.add(identifier.hash)
        self.mempool_txs[identifier.hash] = Transaction(
            transaction_identifier=identifier, operations=parsed.operations
        )
        return identifier

    async def call(self, method, parameters) -> CallResponse:
        self._enter("call")
        if method != "faucet":
            raise UnsupportedOperation(f"Call method '{method}' not supported")
        address = parameters["address"]
        self.balances[address] = self.balances.get(address, 0) + int(parameters["value"])
        return CallResponse(result={"address": address, "balance": str(self.balances[address])}, idempotent=False)


@pytest.fixture
def eth_config():
    return PRESETS[("ethereum", "dev")]


@pytest.fixture
def connector(eth_config) -> FakeConnector:
    return FakeConnector(eth_config)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        blockchain="ethereum",
        network="dev",
        data_dir=str(tmp_path),
        base_delay=0.0,
        max_delay=0.0,
    )


@pytest.fixture
def cache(tmp_path):
    response_cache = ResponseCache(str(tmp_path / "cache.db"))
    yield response_cache
    response_cache.close()


@pytest.fixture
def app(settings, connector):
    return create_app(settings, connector=connector)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def network_identifier() -> Dict[str, Any]:
    return {"blockchain": "ethereum", "network": "dev"}


@pytest.fixture
def signer(eth_config) -> Signer:
    return Signer(eth_config, TEST_MNEMONIC)


@pytest.fixture
def api(client) -> RosettaAPI:
    return RosettaAPI("http://testserver", "ethereum", "dev", session=client, retry_delay=0)


@pytest.fixture
def funded_account(signer, connector) -> str:
    from rosetta_server.models import PublicKey

    public = signer.keypair().public
    address = derive_account(connector.config, PublicKey.from_crypto(public)).address
    connector.balances[address] = 1_000_000
    return address
