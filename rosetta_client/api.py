"""
API client for interacting with a Rosetta gateway
"""
import logging
import time
from typing import Any, Dict, List, Optional

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from rosetta_server.utils.errors import ERROR_CATALOGUE

logger = logging.getLogger("rosetta_client")


class APIError(Exception):
    """Exception raised for API errors"""

    def __init__(self, message: str, code: Optional[int] = None, retriable: bool = False,
                 details: Optional[Dict[str, Any]] = None, status_code: Optional[int] = None,
                 transport: bool = False):
        self.message = message
        self.code = code
        self.retriable = retriable
        self.details = details or {}
        self.status_code = status_code
        # the request may or may not have reached the server
        self.transport = transport
        super().__init__(message)

    @property
    def kind(self) -> Optional[str]:
        """Error kind name such as ``AlreadyKnown``."""
        if self.code in ERROR_CATALOGUE:
            return ERROR_CATALOGUE[self.code][0]
        return None

    @classmethod
    def from_body(cls, body: Dict[str, Any], status_code: int) -> "APIError":
        return cls(
            body.get("message", "Unknown error"),
            code=body.get("code"),
            retriable=bool(body.get("retriable", False)),
            details=body.get("details"),
            status_code=status_code,
        )


class RosettaAPI:
    """Client for the Rosetta Data and Construction API of one network"""

    def __init__(self, base_url: str, blockchain: str, network: str, timeout: int = 30,
                 max_retries: int = 3, retry_delay: float = 1.0, session: Optional[Any] = None):
        """
        Initialize the API client.

        ``session`` defaults to a ``requests.Session``; anything with the same
        ``request`` signature works.
        """
        self.base_url = base_url.rstrip('/')
        self.network_identifier = {"blockchain": blockchain, "network": network}
        self.timeout = timeout
        self.max_retries = max(max_retries, 1)
        self.retry_delay = retry_delay
        self.session = session or requests.Session()

        logger.debug(f"Initialized API client for {base_url}")

    def _make_request(self, endpoint: str, data: Dict[str, Any], retry: bool = True) -> Dict[str, Any]:
        """POST to the API, retrying transport failures and retriable errors"""
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        attempts = self.max_retries if retry else 1

        for attempt in range(attempts):
            last_attempt = attempt == attempts - 1
            try:
                start_time = time.time()
                response = self.session.request(
                    method="POST",
                    url=url,
                    json=data,
                    headers=headers,
                    timeout=self.timeout
                )
                elapsed = time.time() - start_time
                logger.debug(f"POST {url} completed in {elapsed:.2f}s (status: {response.status_code})")

            except (Timeout, ConnectionError) as e:
                logger.warning(f"Transport error on {endpoint}: {str(e)} (attempt {attempt+1}/{attempts})")
                if last_attempt:
                    raise APIError(f"Request to {endpoint} failed after {attempts} attempts: {str(e)}",
                                   retriable=True, transport=True)
                self._sleep(attempt)
                continue

            except RequestException as e:
                raise APIError(f"Request to {endpoint} failed: {str(e)}", transport=True)

            try:
                body = response.json()
            except ValueError:
                raise APIError(f"Response is not valid JSON: {response.text[:100]}",
                               status_code=response.status_code)

            if response.status_code == 200:
                return body

            error = APIError.from_body(body if isinstance(body, dict) else {}, response.status_code)
            if error.retriable and not last_attempt:
                logger.warning(f"Retriable error on {endpoint}: {error.message} (attempt {attempt+1}/{attempts})")
                self._sleep(attempt)
                continue
            logger.debug(f"API error on {endpoint}: {error.code} {error.message}")
            raise error

        raise APIError(f"Request to {endpoint} failed")

    def _sleep(self, attempt: int):
        # Exponential backoff
        sleep_time = self.retry_delay * (2 ** attempt)
        logger.debug(f"Retrying in {sleep_time} seconds...")
        time.sleep(sleep_time)

    def _post(self, endpoint: str, retry: bool = True, **fields) -> Dict[str, Any]:
        data = {"network_identifier": self.network_identifier}
        data.update({k: v for k, v in fields.items() if v is not None})
        return self._make_request(endpoint, data, retry=retry)

    # Network endpoints
    def network_list(self) -> Dict[str, Any]:
        return self._make_request("network/list", {})

    def network_options(self) -> Dict[str, Any]:
        return self._post("network/options")

    def network_status(self) -> Dict[str, Any]:
        return self._post("network/status")

    # Account endpoints
    def account_balance(self, address: str, block_index: Optional[int] = None,
                        block_hash: Optional[str] = None) -> Dict[str, Any]:
        block = None
        if block_index is not None or block_hash is not None:
            block = {k: v for k, v in (("index", block_index), ("hash", block_hash)) if v is not None}
        return self._post("account/balance", account_identifier={"address": address}, block_identifier=block)

    def account_coins(self, address: str, include_mempool: bool = False) -> Dict[str, Any]:
        return self._post("account/coins", account_identifier={"address": address}, include_mempool=include_mempool)

    # Block endpoints
    def block(self, index: Optional[int] = None, block_hash: Optional[str] = None) -> Dict[str, Any]:
        block = {k: v for k, v in (("index", index), ("hash", block_hash)) if v is not None}
        return self._post("block", block_identifier=block)

    def block_transaction(self, block_identifier: Dict[str, Any], tx_hash: str) -> Dict[str, Any]:
        return self._post("block/transaction", block_identifier=block_identifier,
                          transaction_identifier={"hash": tx_hash})

    # Mempool endpoints
    def mempool(self) -> List[str]:
        response = self._post("mempool")
        return [tx["hash"] for tx in response.get("transaction_identifiers", [])]

    def mempool_transaction(self, tx_hash: str) -> Dict[str, Any]:
        return self._post("mempool/transaction", transaction_identifier={"hash": tx_hash})

    # Construction endpoints
    def derive(self, public_key: Dict[str, Any], metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._post("construction/derive", public_key=public_key, metadata=metadata)

    def preprocess(self, operations: List[Dict[str, Any]],
                   metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._post("construction/preprocess", operations=operations, metadata=metadata)

    def metadata(self, options: Optional[Dict[str, Any]] = None,
                 public_keys: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        return self._post("construction/metadata", options=options, public_keys=public_keys)

    def payloads(self, operations: List[Dict[str, Any]], metadata: Optional[Dict[str, Any]] = None,
                 public_keys: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        return self._post("construction/payloads", operations=operations, metadata=metadata,
                          public_keys=public_keys)

    def combine(self, unsigned_transaction: str, signatures: List[Dict[str, Any]]) -> Dict[str, Any]:
        return self._post("construction/combine", unsigned_transaction=unsigned_transaction,
                          signatures=signatures)

    def parse(self, transaction: str, signed: bool) -> Dict[str, Any]:
        return self._post("construction/parse", transaction=transaction, signed=signed)

    def hash(self, signed_transaction: str) -> Dict[str, Any]:
        return self._post("construction/hash", signed_transaction=signed_transaction)

    def submit(self, signed_transaction: str) -> Dict[str, Any]:
        """Broadcast once; never retried since submit is not idempotent"""
        return self._post("construction/submit", retry=False, signed_transaction=signed_transaction)

    def call(self, method: str, parameters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._post("call", method=method, parameters=parameters or {})
