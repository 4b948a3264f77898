"""
Error types for the Rosetta gateway.

Every error carries a stable numeric ``code`` and a ``retriable`` flag and is
rendered as a Rosetta ``Error`` body by the exception handlers in ``main``.
Key handling errors live in ``rosetta_crypto.errors`` and share the same
codes.
"""
from typing import Any, Dict, List, Optional

from rosetta_crypto.errors import (
    CryptoError,
    InsufficientEntropy,
    InvalidKey,
    InvalidMnemonic,
    UnsupportedCurve,
)


class RosettaError(Exception):
    """Base class for gateway errors."""
    code = 14
    retriable = False
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class NodeUnavailable(RosettaError):
    """Raised when the node cannot be reached or is temporarily failing."""
    code = 1
    retriable = True
    default_message = "Node unavailable"


class BlockNotFound(RosettaError):
    """Raised when neither the block index nor hash resolves."""
    code = 2
    default_message = "Block not found"


class TransactionNotFound(RosettaError):
    """Raised when a transaction is not in the block or has left the mempool."""
    code = 3
    default_message = "Transaction not found"


class AccountNotFound(RosettaError):
    code = 4
    default_message = "Account not found"


class RejectedByNode(RosettaError):
    """Raised when the node refuses a submitted transaction."""
    code = 8
    default_message = "Transaction rejected by node"


class AlreadyKnown(RosettaError):
    """Raised when a submitted transaction is already in the mempool or chain."""
    code = 9
    default_message = "Transaction already known"


class MalformedRequest(RosettaError):
    code = 10
    default_message = "Malformed request"


class UnsupportedNetwork(RosettaError):
    code = 11
    default_message = "Unsupported network"


class UnsupportedOperation(RosettaError):
    code = 12
    default_message = "Operation not supported by this chain"


class NodeError(RosettaError):
    """Raised for permanent node side failures."""
    code = 13
    default_message = "Node returned an error"


class InternalError(RosettaError):
    code = 14
    default_message = "Internal error"


# code -> (name, message, retriable)
ERROR_CATALOGUE = {
    1: ("NodeUnavailable", NodeUnavailable.default_message, True),
    2: ("BlockNotFound", BlockNotFound.default_message, False),
    3: ("TransactionNotFound", TransactionNotFound.default_message, False),
    4: ("AccountNotFound", AccountNotFound.default_message, False),
    5: ("UnsupportedCurve", "Curve not supported by this chain", False),
    6: ("InvalidMnemonic", "Invalid mnemonic", False),
    7: ("InsufficientEntropy", "Randomness source unavailable", False),
    8: ("RejectedByNode", RejectedByNode.default_message, False),
    9: ("AlreadyKnown", AlreadyKnown.default_message, False),
    10: ("MalformedRequest", MalformedRequest.default_message, False),
    11: ("UnsupportedNetwork", UnsupportedNetwork.default_message, False),
    12: ("UnsupportedOperation", UnsupportedOperation.default_message, False),
    13: ("NodeError", NodeError.default_message, False),
    14: ("InternalError", InternalError.default_message, False),
}

_ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        NodeUnavailable, BlockNotFound, TransactionNotFound, AccountNotFound,
        RejectedByNode, AlreadyKnown, MalformedRequest, UnsupportedNetwork,
        UnsupportedOperation, NodeError, InternalError,
    )
}


def catalogue() -> List[Dict[str, Any]]:
    """All error kinds as Rosetta ``Error`` dicts, ordered by code."""
    return [
        {"code": code, "message": message, "description": name, "retriable": retriable}
        for code, (name, message, retriable) in sorted(ERROR_CATALOGUE.items())
    ]


def error_body(error: Exception) -> Dict[str, Any]:
    """Render a gateway or crypto error as a Rosetta ``Error`` dict."""
    code = getattr(error, "code", InternalError.code)
    name = ERROR_CATALOGUE.get(code, ERROR_CATALOGUE[InternalError.code])[0]
    body = {
        "code": code,
        "message": getattr(error, "message", None) or str(error),
        "description": name,
        "retriable": bool(getattr(error, "retriable", False)),
    }
    details = getattr(error, "details", None)
    if details:
        body["details"] = details
    return body


def error_from_body(body: Dict[str, Any]) -> Exception:
    """Rebuild the exception for a Rosetta ``Error`` dict."""
    code = body.get("code", InternalError.code)
    message = body.get("message")
    details = body.get("details")
    crypto = {
        UnsupportedCurve.code: UnsupportedCurve,
        InvalidMnemonic.code: InvalidMnemonic,
        InsufficientEntropy.code: InsufficientEntropy,
    }
    if code in crypto:
        return crypto[code](message or ERROR_CATALOGUE[code][1], details)
    return _ERRORS_BY_CODE.get(code, InternalError)(message, details)


# Public exports
__all__ = [
    'RosettaError',
    'CryptoError',
    'NodeUnavailable',
    'BlockNotFound',
    'TransactionNotFound',
    'AccountNotFound',
    'UnsupportedCurve',
    'InvalidMnemonic',
    'InsufficientEntropy',
    'InvalidKey',
    'RejectedByNode',
    'AlreadyKnown',
    'MalformedRequest',
    'UnsupportedNetwork',
    'UnsupportedOperation',
    'NodeError',
    'InternalError',
    'ERROR_CATALOGUE',
    'catalogue',
    'error_body',
    'error_from_body',
]
