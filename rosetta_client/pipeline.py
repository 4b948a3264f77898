"""
Client side state machine for the multi stage construction protocol.

Stages run in a fixed order:

    DERIVE -> PREPROCESS -> METADATA -> PAYLOADS -> PARSE_UNSIGNED -> SIGN
    -> COMBINE -> PARSE_SIGNED -> HASH -> SUBMIT -> DONE

Every stage is one request to the gateway; the results are kept on the
pipeline object, which the caller owns. Nothing is submitted unless both
parse checks passed.
"""
import json
import logging
from enum import IntEnum
from typing import Any, Dict, List, Optional

from rosetta_crypto import KeyPair

from .api import APIError, RosettaAPI
from .signer import Signer

logger = logging.getLogger("rosetta_client")

ALREADY_KNOWN = 9
NODE_UNAVAILABLE = 1


class Stage(IntEnum):
    DERIVE = 0
    PREPROCESS = 1
    METADATA = 2
    PAYLOADS = 3
    PARSE_UNSIGNED = 4
    SIGN = 5
    COMBINE = 6
    PARSE_SIGNED = 7
    HASH = 8
    SUBMIT = 9
    DONE = 10


class PipelineError(Exception):
    """Base class for pipeline errors."""
    pass


class PipelineStateError(PipelineError):
    """Raised when a stage is called out of order."""

    def __init__(self, expected: Stage, called: Stage):
        self.expected = expected
        self.called = called
        super().__init__(f"Cannot run {called.name}, pipeline is at {expected.name}")


class OperationMismatch(PipelineError):
    """Raised when a parsed transaction does not match the intended operations."""

    def __init__(self, message: str, expected: List[Any], parsed: List[Any]):
        self.expected = expected
        self.parsed = parsed
        super().__init__(message)


class SubmitUnconfirmed(PipelineError):
    """Raised when the outcome of a submit is unknown and the hash is not in the mempool."""

    def __init__(self, tx_hash: str, cause: Exception):
        self.tx_hash = tx_hash
        self.cause = cause
        super().__init__(f"Submission of {tx_hash} unconfirmed: {cause}")


def _canonical_operation(operation: Dict[str, Any]) -> str:
    """Operation reduced to the fields that define its effect."""
    reduced: Dict[str, Any] = {"type": operation.get("type")}
    account = operation.get("account")
    if account:
        reduced["account"] = {"address": account.get("address")}
        if account.get("sub_account"):
            reduced["account"]["sub_account"] = account["sub_account"].get("address")
    amount = operation.get("amount")
    if amount:
        reduced["amount"] = {
            "value": str(amount.get("value")),
            "symbol": amount.get("currency", {}).get("symbol"),
            "decimals": amount.get("currency", {}).get("decimals"),
        }
    coin_change = operation.get("coin_change")
    if coin_change:
        reduced["coin_change"] = {
            "identifier": coin_change.get("coin_identifier", {}).get("identifier"),
            "action": coin_change.get("coin_action"),
        }
    return json.dumps(reduced, sort_keys=True)


def operations_match(expected: List[Dict[str, Any]], parsed: List[Dict[str, Any]]) -> bool:
    """Compare operations ignoring index, status, metadata and order."""
    return sorted(map(_canonical_operation, expected)) == sorted(map(_canonical_operation, parsed))


class ConstructionPipeline:
    """One transaction through the construction stages."""

    def __init__(self, api: RosettaAPI, signer: Signer, operations: List[Dict[str, Any]],
                 metadata: Optional[Dict[str, Any]] = None, keypair: Optional[KeyPair] = None):
        self.api = api
        self.signer = signer
        self.keypair = keypair or signer.keypair()
        self.operations = operations
        self.request_metadata = metadata
        self.stage = Stage.DERIVE

        self.account: Optional[Dict[str, Any]] = None
        self.options: Optional[Dict[str, Any]] = None
        self.required_public_keys: List[Dict[str, Any]] = []
        self.metadata: Optional[Dict[str, Any]] = None
        self.suggested_fee: Optional[List[Dict[str, Any]]] = None
        self.unsigned_transaction: Optional[str] = None
        self.payloads: List[Dict[str, Any]] = []
        self.signatures: List[Dict[str, Any]] = []
        self.signed_transaction: Optional[str] = None
        self.tx_hash: Optional[str] = None

    @property
    def public_key(self) -> Dict[str, Any]:
        public = self.keypair.public
        return {"hex_bytes": public.hex(), "curve_type": public.curve_type}

    @property
    def done(self) -> bool:
        return self.stage is Stage.DONE

    def _enter(self, stage: Stage):
        if self.stage is not stage:
            raise PipelineStateError(self.stage, stage)
        logger.debug(f"Construction stage {stage.name}")

    def _advance(self):
        self.stage = Stage(self.stage + 1)

    def derive(self) -> Dict[str, Any]:
        self._enter(Stage.DERIVE)
        response = self.api.derive(self.public_key)
        self.account = response.get("account_identifier") or {"address": response["address"]}
        self._advance()
        return self.account

    def preprocess(self) -> Dict[str, Any]:
        self._enter(Stage.PREPROCESS)
        response = self.api.preprocess(self.operations, self.request_metadata)
        self.options = response.get("options")
        self.required_public_keys = response.get("required_public_keys") or []
        self._advance()
        return response

    def fetch_metadata(self) -> Dict[str, Any]:
        self._enter(Stage.METADATA)
        response = self.api.metadata(self.options, [self.public_key])
        self.metadata = response["metadata"]
        self.suggested_fee = response.get("suggested_fee")
        self._advance()
        return response

    def create_payloads(self) -> Dict[str, Any]:
        self._enter(Stage.PAYLOADS)
        response = self.api.payloads(self.operations, self.metadata, [self.public_key])
        self.unsigned_transaction = response["unsigned_transaction"]
        self.payloads = response["payloads"]
        self._advance()
        return response

    def parse_unsigned(self) -> Dict[str, Any]:
        self._enter(Stage.PARSE_UNSIGNED)
        response = self.api.parse(self.unsigned_transaction, signed=False)
        self._check_operations(response.get("operations", []))
        self._advance()
        return response

    def sign(self) -> List[Dict[str, Any]]:
        self._enter(Stage.SIGN)
        self.signatures = [self.signer.sign_payload(payload, self.keypair) for payload in self.payloads]
        self._advance()
        return self.signatures

    def combine(self) -> str:
        self._enter(Stage.COMBINE)
        response = self.api.combine(self.unsigned_transaction, self.signatures)
        self.signed_transaction = response["signed_transaction"]
        self._advance()
        return self.signed_transaction

    def parse_signed(self) -> Dict[str, Any]:
        self._enter(Stage.PARSE_SIGNED)
        response = self.api.parse(self.signed_transaction, signed=True)
        self._check_operations(response.get("operations", []))
        signers = [signer.get("address") for signer in response.get("account_identifier_signers") or []]
        if self.account["address"] not in signers:
            raise OperationMismatch(
                f"Signer {self.account['address']} missing from parsed signers",
                [self.account["address"]], signers
            )
        self._advance()
        return response

    def hash(self) -> str:
        self._enter(Stage.HASH)
        response = self.api.hash(self.signed_transaction)
        self.tx_hash = response["transaction_identifier"]["hash"]
        self._advance()
        return self.tx_hash

    def submit(self) -> Dict[str, Any]:
        """
        Broadcast once. AlreadyKnown counts as success. When the outcome is
        unknown the mempool decides; the submit is never repeated here.
        """
        self._enter(Stage.SUBMIT)
        identifier = {"hash": self.tx_hash}
        try:
            response = self.api.submit(self.signed_transaction)
            identifier = response["transaction_identifier"]
        except APIError as e:
            if e.code == ALREADY_KNOWN:
                logger.info(f"Transaction {self.tx_hash} already known to the node")
            elif e.transport or e.code == NODE_UNAVAILABLE:
                logger.warning(f"Submit of {self.tx_hash} unconfirmed, checking mempool: {e.message}")
                if not self._in_mempool():
                    raise SubmitUnconfirmed(self.tx_hash, e)
            else:
                raise
        self._advance()
        return identifier

    def _in_mempool(self) -> bool:
        try:
            return self.tx_hash in self.api.mempool()
        except APIError as e:
            logger.warning(f"Mempool check failed: {e.message}")
            return False

    def _check_operations(self, parsed: List[Dict[str, Any]]):
        if not operations_match(self.operations, parsed):
            raise OperationMismatch(
                f"Parsed operations differ from intended operations at {self.stage.name}",
                self.operations, parsed
            )

    def run(self) -> Dict[str, Any]:
        """Run every remaining stage and return the transaction identifier."""
        steps = {
            Stage.DERIVE: self.derive,
            Stage.PREPROCESS: self.preprocess,
            Stage.METADATA: self.fetch_metadata,
            Stage.PAYLOADS: self.create_payloads,
            Stage.PARSE_UNSIGNED: self.parse_unsigned,
            Stage.SIGN: self.sign,
            Stage.COMBINE: self.combine,
            Stage.PARSE_SIGNED: self.parse_signed,
            Stage.HASH: self.hash,
        }
        while self.stage in steps:
            steps[self.stage]()
        return self.submit()
