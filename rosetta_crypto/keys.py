"""
Signing keys, public keys and signatures for every supported algorithm.

Key material is held in plain dataclasses tagged with an ``Algorithm``. The
module level functions dispatch on that tag, so adding a scheme means adding
one entry to each table below rather than a new class.

- secp256k1 uses coincurve (libsecp256k1, constant time, RFC6979 nonces)
- ed25519 uses PyNaCl (libsodium)
- sr25519 uses py-sr25519-bindings (schnorrkel, "substrate" signing context)
"""
import hashlib
import logging
import secrets
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Optional

import coincurve
import nacl.exceptions
import nacl.signing
import sr25519

from .errors import InsufficientEntropy, InvalidKey, UnsupportedCurve

logger = logging.getLogger(__name__)

SECRET_KEY_LENGTH = 32


class Algorithm(str, Enum):
    """Signing algorithm."""
    ECDSA_SECP256K1 = "ecdsa_secp256k1"
    # ECDSA with secp256k1 in Ethereum compatible format (65 byte r||s||v)
    ECDSA_RECOVERABLE_SECP256K1 = "ecdsa_recoverable_secp256k1"
    ED25519 = "ed25519"
    # Schnorrkel used by substrate/polkadot
    SR25519 = "sr25519"

    @property
    def curve_type(self) -> str:
        return _CURVE_TYPES[self]

    @property
    def signature_type(self) -> str:
        return _SIGNATURE_TYPES[self]

    @property
    def is_recoverable(self) -> bool:
        return self is Algorithm.ECDSA_RECOVERABLE_SECP256K1

    @classmethod
    def from_signature_type(cls, signature_type: str) -> "Algorithm":
        for algorithm, name in _SIGNATURE_TYPES.items():
            if name == signature_type:
                return algorithm
        raise UnsupportedCurve(f"Unsupported signature type: {signature_type}")


_CURVE_TYPES = {
    Algorithm.ECDSA_SECP256K1: "secp256k1",
    Algorithm.ECDSA_RECOVERABLE_SECP256K1: "secp256k1",
    Algorithm.ED25519: "edwards25519",
    Algorithm.SR25519: "schnorrkel",
}

_SIGNATURE_TYPES = {
    Algorithm.ECDSA_SECP256K1: "ecdsa",
    Algorithm.ECDSA_RECOVERABLE_SECP256K1: "ecdsa_recovery",
    Algorithm.ED25519: "ed25519",
    Algorithm.SR25519: "schnorrkel",
}


@dataclass(frozen=True)
class PublicKey:
    """Public key used for verifying signatures."""
    algorithm: Algorithm
    data: bytes

    @property
    def curve_type(self) -> str:
        return self.algorithm.curve_type

    def hex(self) -> str:
        return self.data.hex()

    def to_uncompressed_bytes(self) -> bytes:
        """Return the 65 byte SEC1 encoding for secp256k1, the raw key otherwise."""
        if self.curve_type == "secp256k1":
            return coincurve.PublicKey(self.data).format(compressed=False)
        return self.data


@dataclass(frozen=True)
class Signature:
    """Signature bytes tagged with the algorithm that produced them."""
    algorithm: Algorithm
    data: bytes

    @property
    def signature_type(self) -> str:
        return self.algorithm.signature_type

    def hex(self) -> str:
        return self.data.hex()


@dataclass(frozen=True)
class SecretKey:
    """
    Secret key used for constructing signatures.

    ``data`` is the 32 byte scalar for secp256k1, the 32 byte seed for
    ed25519 and the 64 byte expanded secret for sr25519. ``public`` caches
    the encoded public key.
    """
    algorithm: Algorithm
    data: bytes = field(repr=False)
    public: bytes

    def public_key(self) -> PublicKey:
        return PublicKey(self.algorithm, self.public)

    def to_bytes(self) -> bytes:
        return self.data

    def sign(self, message: bytes) -> Signature:
        return sign(self, message)

    def sign_prehashed(self, digest: bytes) -> Signature:
        return sign_prehashed(self, digest)


@dataclass(frozen=True)
class KeyPair:
    secret: SecretKey
    public: PublicKey


def _secp256k1_public(data: bytes) -> bytes:
    return coincurve.PrivateKey(data).public_key.format(compressed=True)


def _ed25519_public(data: bytes) -> bytes:
    return bytes(nacl.signing.SigningKey(data).verify_key)


def _sr25519_public(data: bytes) -> bytes:
    return bytes(sr25519.public_from_secret_key(data))


_PUBLIC_FROM_SECRET: Dict[Algorithm, Callable[[bytes], bytes]] = {
    Algorithm.ECDSA_SECP256K1: _secp256k1_public,
    Algorithm.ECDSA_RECOVERABLE_SECP256K1: _secp256k1_public,
    Algorithm.ED25519: _ed25519_public,
    Algorithm.SR25519: _sr25519_public,
}


def secret_key_from_bytes(algorithm: Algorithm, data: bytes) -> SecretKey:
    """
    Create a secret key from its byte representation.

    A 32 byte input for sr25519 is treated as a mini secret and expanded.
    """
    algorithm = Algorithm(algorithm)
    try:
        if algorithm is Algorithm.SR25519 and len(data) == SECRET_KEY_LENGTH:
            public, secret = sr25519.pair_from_seed(bytes(data))
            return SecretKey(algorithm, bytes(secret), bytes(public))
        if algorithm is not Algorithm.SR25519 and len(data) != SECRET_KEY_LENGTH:
            raise InvalidKey(f"{algorithm.value} secret key must be {SECRET_KEY_LENGTH} bytes")
        public = _PUBLIC_FROM_SECRET[algorithm](bytes(data))
    except (ValueError, TypeError) as e:
        raise InvalidKey(f"Invalid {algorithm.value} secret key: {e}")
    return SecretKey(algorithm, bytes(data), public)


def public_key_from_bytes(algorithm: Algorithm, data: bytes) -> PublicKey:
    """Parse and validate an encoded public key. secp256k1 keys are stored compressed."""
    algorithm = Algorithm(algorithm)
    if algorithm.curve_type == "secp256k1":
        try:
            data = coincurve.PublicKey(bytes(data)).format(compressed=True)
        except (ValueError, TypeError) as e:
            raise InvalidKey(f"Invalid secp256k1 public key: {e}")
    elif len(data) != 32:
        raise InvalidKey(f"{algorithm.value} public key must be 32 bytes")
    return PublicKey(algorithm, bytes(data))


def random_bytes(length: int = SECRET_KEY_LENGTH) -> bytes:
    """Read ``length`` bytes from the OS CSPRNG."""
    try:
        return secrets.token_bytes(length)
    except (OSError, NotImplementedError) as e:
        logger.error(f"Randomness source unavailable: {e}")
        raise InsufficientEntropy(f"Randomness source unavailable: {e}")


def generate_keypair(algorithm: Algorithm) -> KeyPair:
    """Generate a fresh keypair from OS randomness."""
    algorithm = Algorithm(algorithm)
    while True:
        try:
            secret = secret_key_from_bytes(algorithm, random_bytes())
        except InvalidKey:
            # scalar outside [1, n) for secp256k1, draw again
            continue
        return KeyPair(secret, secret.public_key())


def _sign_secp256k1(key: SecretKey, message: bytes, hasher: Optional[Callable]) -> bytes:
    signature = coincurve.PrivateKey(key.data).sign_recoverable(message, hasher=hasher)
    if key.algorithm.is_recoverable:
        return signature
    return signature[:64]


def _sign_ed25519(key: SecretKey, message: bytes) -> bytes:
    return nacl.signing.SigningKey(key.data).sign(message).signature


def _sign_sr25519(key: SecretKey, message: bytes) -> bytes:
    return bytes(sr25519.sign((key.public, key.data), message))


def sign(key: SecretKey, message: bytes) -> Signature:
    """
    Sign a message.

    ECDSA variants hash the message with SHA-256 first; ed25519 and sr25519
    sign the raw message.
    """
    if key.algorithm.curve_type == "secp256k1":
        data = _sign_secp256k1(key, message, _sha256)
    elif key.algorithm is Algorithm.ED25519:
        data = _sign_ed25519(key, message)
    else:
        data = _sign_sr25519(key, message)
    return Signature(key.algorithm, data)


def sign_prehashed(key: SecretKey, digest: bytes) -> Signature:
    """Sign a 32 byte digest directly. Only ECDSA supports prehashed input."""
    if key.algorithm.curve_type != "secp256k1":
        raise UnsupportedCurve(f"{key.algorithm.value} does not support prehashed signing")
    if len(digest) != 32:
        raise InvalidKey("Prehashed message must be 32 bytes")
    return Signature(key.algorithm, _sign_secp256k1(key, digest, None))


def _sha256(message: bytes) -> bytes:
    return hashlib.sha256(message).digest()


def _recover(signature: bytes, message: bytes, hasher: Optional[Callable]) -> bytes:
    recovered = coincurve.PublicKey.from_signature_and_message(signature, message, hasher=hasher)
    return recovered.format(compressed=True)


def _verify_secp256k1(public: PublicKey, message: bytes, signature: Signature,
                      hasher: Optional[Callable]) -> bool:
    data = signature.data
    if len(data) == 65:
        candidates = [data]
    elif len(data) == 64:
        candidates = [data + bytes([recovery_id]) for recovery_id in range(4)]
    else:
        return False
    for candidate in candidates:
        try:
            if _recover(candidate, message, hasher) == public.data:
                return True
        except (ValueError, TypeError):
            continue
    return False


def _verify_ed25519(public: PublicKey, message: bytes, signature: Signature) -> bool:
    try:
        nacl.signing.VerifyKey(public.data).verify(message, signature.data)
        return True
    except (nacl.exceptions.BadSignatureError, ValueError, TypeError):
        return False


def _verify_sr25519(public: PublicKey, message: bytes, signature: Signature) -> bool:
    if len(signature.data) != 64 or len(public.data) != 32:
        return False
    try:
        return bool(sr25519.verify(signature.data, message, public.data))
    except (ValueError, TypeError):
        return False


def verify(public: PublicKey, message: bytes, signature: Signature) -> bool:
    """Verify a signature. Malformed input returns False instead of raising."""
    if public.curve_type != signature.algorithm.curve_type:
        return False
    if public.curve_type == "secp256k1":
        return _verify_secp256k1(public, message, signature, _sha256)
    if public.algorithm is Algorithm.ED25519:
        return _verify_ed25519(public, message, signature)
    return _verify_sr25519(public, message, signature)


def verify_prehashed(public: PublicKey, digest: bytes, signature: Signature) -> bool:
    if public.curve_type != "secp256k1" or len(digest) != 32:
        return False
    return _verify_secp256k1(public, digest, signature, None)


def recover(signature: Signature, message: bytes) -> Optional[PublicKey]:
    """Return the signer's public key for recoverable signatures, None otherwise."""
    if not signature.algorithm.is_recoverable or len(signature.data) != 65:
        return None
    try:
        data = _recover(signature.data, message, _sha256)
    except (ValueError, TypeError):
        return None
    return PublicKey(signature.algorithm, data)
