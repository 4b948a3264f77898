"""
Async JSON-RPC 2.0 node client for connector implementations.

Failures are classified so the gateway's retry loop only sees
``NodeUnavailable`` for conditions worth retrying.
"""
import asyncio
import itertools
import logging
import time
from typing import Any, Dict, List, Optional, Union

import aiohttp

from ..config import DEFAULT_TIMEOUT
from ..utils.errors import MalformedRequest, NodeError, NodeUnavailable

logger = logging.getLogger(__name__)

# JSON-RPC error codes
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
RESOURCE_UNAVAILABLE = -32002
LIMIT_EXCEEDED = -32005

CLIENT_ERROR_CODES = (INVALID_REQUEST, METHOD_NOT_FOUND, INVALID_PARAMS)
TRANSIENT_ERROR_CODES = (INTERNAL_ERROR, RESOURCE_UNAVAILABLE, LIMIT_EXCEEDED)


class JsonRpcClient:
    """Single endpoint JSON-RPC client over one aiohttp session."""

    def __init__(self, endpoint: str, timeout: float = DEFAULT_TIMEOUT,
                 headers: Optional[Dict[str, str]] = None):
        self.endpoint = endpoint
        self.timeout = timeout
        self.headers = headers or {}
        self._client: Optional[aiohttp.ClientSession] = None
        self._ids = itertools.count(1)

    @property
    def closed(self) -> bool:
        return self._client is None or self._client.closed

    async def connect(self):
        """Open the HTTP session"""
        if self.closed:
            self._client = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(
                    total=self.timeout,
                    connect=min(5.0, self.timeout / 2),
                ),
                headers=self.headers,
            )
            logger.debug(f"Opened session for {self.endpoint}")

    async def close(self):
        """Close the HTTP session"""
        if self._client is not None:
            await self._client.close()
            logger.debug(f"Closed session for {self.endpoint}")
            self._client = None

    async def __aenter__(self) -> "JsonRpcClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def call(self, method: str, params: Optional[Union[List[Any], Dict[str, Any]]] = None,
                   timeout: Optional[float] = None) -> Any:
        """
        Make a JSON-RPC call and return its ``result``.

        Raises:
            NodeUnavailable: connection failure, timeout, HTTP 429/5xx,
                unparseable body or a transient JSON-RPC error
            MalformedRequest: invalid request, params or unknown method
            NodeError: any other JSON-RPC or HTTP error
        """
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params if params is not None else [],
        }
        start_time = time.time()
        if self.closed:
            await self.connect()

        try:
            async with asyncio.timeout(timeout or self.timeout):
                async with self._client.post(self.endpoint, json=payload) as response:
                    if response.status == 429 or response.status >= 500:
                        logger.warning(f"HTTP error {response.status} for {method}")
                        raise NodeUnavailable(f"HTTP error {response.status}", {"status": response.status})
                    if response.status >= 400:
                        logger.error(f"HTTP error {response.status} for {method}")
                        raise NodeError(f"HTTP error {response.status}", {"status": response.status})
                    try:
                        body = await response.json(content_type=None)
                    except ValueError as e:
                        logger.warning(f"Failed to parse JSON response for {method}: {str(e)}")
                        raise NodeUnavailable("Failed to parse node response")

        except asyncio.TimeoutError:
            elapsed = time.time() - start_time
            logger.warning(f"Timeout after {elapsed:.2f}s for {method} on {self.endpoint}")
            raise NodeUnavailable(f"Timeout after {elapsed:.2f}s")

        except aiohttp.ClientError as e:
            logger.warning(f"Client error in {method}: {str(e)}")
            raise NodeUnavailable(f"Connection error: {str(e)}")

        if not isinstance(body, dict):
            raise NodeError(f"Unexpected response for {method}")
        if body.get("error"):
            raise self._classify(method, body["error"])
        return body.get("result")

    def _classify(self, method: str, error: Any) -> Exception:
        if not isinstance(error, dict):
            return NodeError(f"RPC error: {error}")
        message = error.get("message", str(error))
        code = error.get("code", 0)
        details = {"rpc_code": code, "method": method}

        if code in TRANSIENT_ERROR_CODES or "rate limit" in message.lower():
            logger.warning(f"Retryable RPC error for {method}: {message}")
            return NodeUnavailable(f"Retryable RPC error: {message}", details)
        if code in CLIENT_ERROR_CODES:
            logger.warning(f"Invalid RPC call {method}: {message}")
            return MalformedRequest(f"RPC error: {message}", details)
        logger.error(f"RPC error in {method}: {message}")
        return NodeError(f"RPC error: {message}", details)
