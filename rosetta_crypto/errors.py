"""
Custom error types for key handling and signing.
"""
from typing import Any, Dict, Optional


class CryptoError(Exception):
    """Base class for crypto errors."""
    code = 0
    retriable = False

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class UnsupportedCurve(CryptoError):
    """Raised when a curve or algorithm is not usable for the requested operation."""
    code = 5


class InvalidMnemonic(CryptoError):
    """Raised when a mnemonic has unknown words or a bad checksum."""
    code = 6


class InsufficientEntropy(CryptoError):
    """Raised when the OS randomness source is unavailable."""
    code = 7


class InvalidKey(CryptoError):
    """Raised when key, signature or path bytes cannot be decoded."""
    code = 10


# Public exports
__all__ = [
    'CryptoError',
    'UnsupportedCurve',
    'InvalidMnemonic',
    'InsufficientEntropy',
    'InvalidKey',
]
