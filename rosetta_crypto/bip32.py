"""
Hierarchical deterministic key derivation.

- secp256k1: BIP32 (hardened and normal children)
- ed25519: SLIP-10, hardened children only
- sr25519: substrate junctions (``//hard/soft``); BIP32 style indices are
  mapped onto numeric junctions
"""
import hashlib
import hmac
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import coincurve
import sr25519

from .errors import InvalidKey, UnsupportedCurve
from .keys import Algorithm, KeyPair, SecretKey, secret_key_from_bytes

logger = logging.getLogger(__name__)

HARDENED = 0x80000000
BIP32_SEED_KEY = b"Bitcoin seed"
SLIP10_ED25519_SEED_KEY = b"ed25519 seed"
JUNCTION_ID_LEN = 32
# numeric junctions are little endian u64
MAX_NUMERIC_JUNCTION = 1 << 64

_BIP32_COMPONENT = re.compile(r"([0-9]+)(['hH]?)")


@dataclass(frozen=True)
class Junction:
    """One step of a derivation path."""
    hard: bool
    index: Optional[int] = None
    name: Optional[str] = None

    @property
    def child_number(self) -> int:
        if self.index is None:
            raise InvalidKey(f"Junction '{self.name}' has no numeric index")
        if self.index >= HARDENED:
            raise InvalidKey(f"Child index out of range: {self.index}")
        return self.index | HARDENED if self.hard else self.index

    def chain_code(self) -> bytes:
        """Substrate chain code for this junction."""
        if self.index is not None:
            return self.index.to_bytes(8, "little").ljust(JUNCTION_ID_LEN, b"\x00")
        encoded = _compact_length(len(self.name.encode("utf-8"))) + self.name.encode("utf-8")
        if len(encoded) > JUNCTION_ID_LEN:
            return hashlib.blake2b(encoded, digest_size=32).digest()
        return encoded.ljust(JUNCTION_ID_LEN, b"\x00")


def _compact_length(n: int) -> bytes:
    # SCALE compact encoding, enough for junction names
    if n < 1 << 6:
        return bytes([n << 2])
    if n < 1 << 14:
        return ((n << 2) | 0b01).to_bytes(2, "little")
    return ((n << 2) | 0b10).to_bytes(4, "little")


def parse_path(path: str) -> List[Junction]:
    """
    Parse ``m/44'/60'/0'/0/0`` or a substrate path such as ``//polkadot//0/1``.

    An empty string or ``m`` is the root.
    """
    path = path.strip()
    if path in ("", "m"):
        return []
    if path.startswith("/"):
        return _parse_substrate_path(path)
    parts = path.split("/")
    if parts[0] != "m":
        raise InvalidKey(f"Invalid derivation path: {path}")
    junctions = []
    for part in parts[1:]:
        match = _BIP32_COMPONENT.fullmatch(part)
        if not match:
            raise InvalidKey(f"Invalid derivation path component '{part}' in {path}")
        index = int(match.group(1))
        if index >= HARDENED:
            raise InvalidKey(f"Child index out of range: {index}")
        junctions.append(Junction(hard=bool(match.group(2)), index=index))
    return junctions


def _parse_substrate_path(path: str) -> List[Junction]:
    junctions = []
    for match in re.finditer(r"(//?)([^/]+)", path):
        hard = match.group(1) == "//"
        value = match.group(2)
        if value.isascii() and value.isdigit() and int(value) < MAX_NUMERIC_JUNCTION:
            junctions.append(Junction(hard=hard, index=int(value)))
        else:
            junctions.append(Junction(hard=hard, name=value))
    if "".join(m.group(0) for m in re.finditer(r"(//?)([^/]+)", path)) != path:
        raise InvalidKey(f"Invalid derivation path: {path}")
    return junctions


@dataclass(frozen=True)
class ExtendedSecretKey:
    """Secret key together with the chain code needed to derive children."""
    secret: SecretKey
    chain_code: bytes
    depth: int = 0

    @property
    def algorithm(self) -> Algorithm:
        return self.secret.algorithm

    @classmethod
    def from_seed(cls, seed: bytes, algorithm: Algorithm) -> "ExtendedSecretKey":
        algorithm = Algorithm(algorithm)
        if algorithm is Algorithm.SR25519:
            if len(seed) != 32:
                raise InvalidKey("sr25519 derivation expects a 32 byte mini secret")
            return cls(secret_key_from_bytes(algorithm, seed), b"\x00" * 32)
        key = SLIP10_ED25519_SEED_KEY if algorithm is Algorithm.ED25519 else BIP32_SEED_KEY
        digest = hmac.new(key, seed, hashlib.sha512).digest()
        return cls(secret_key_from_bytes(algorithm, digest[:32]), digest[32:])

    def derive_child(self, junction: Junction) -> "ExtendedSecretKey":
        if self.algorithm is Algorithm.SR25519:
            return self._derive_sr25519(junction)
        if self.algorithm is Algorithm.ED25519:
            return self._derive_ed25519(junction)
        if self.algorithm.curve_type == "secp256k1":
            return self._derive_secp256k1(junction)
        raise UnsupportedCurve(f"Derivation not supported for {self.algorithm.value}")

    def derive_path(self, path: Union[str, List[Junction]]) -> "ExtendedSecretKey":
        junctions = parse_path(path) if isinstance(path, str) else path
        key = self
        for junction in junctions:
            key = key.derive_child(junction)
        return key

    def keypair(self) -> KeyPair:
        return KeyPair(self.secret, self.secret.public_key())

    def _derive_secp256k1(self, junction: Junction) -> "ExtendedSecretKey":
        index = junction.child_number
        if junction.hard:
            data = b"\x00" + self.secret.data + index.to_bytes(4, "big")
        else:
            data = self.secret.public + index.to_bytes(4, "big")
        digest = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        try:
            child = coincurve.PrivateKey(self.secret.data).add(digest[:32])
        except ValueError as e:
            # probability below 2^-127; BIP32 says skip to the next index
            raise InvalidKey(f"Derived key for index {index} is invalid: {e}")
        secret = secret_key_from_bytes(self.algorithm, child.secret)
        return ExtendedSecretKey(secret, digest[32:], self.depth + 1)

    def _derive_ed25519(self, junction: Junction) -> "ExtendedSecretKey":
        if not junction.hard:
            raise InvalidKey("ed25519 supports hardened derivation only")
        index = junction.child_number
        data = b"\x00" + self.secret.data + index.to_bytes(4, "big")
        digest = hmac.new(self.chain_code, data, hashlib.sha512).digest()
        secret = secret_key_from_bytes(self.algorithm, digest[:32])
        return ExtendedSecretKey(secret, digest[32:], self.depth + 1)

    def _derive_sr25519(self, junction: Junction) -> "ExtendedSecretKey":
        chain_code = junction.chain_code()
        keypair: Tuple[bytes, bytes, bytes] = (chain_code, self.secret.public, self.secret.data)
        if junction.hard:
            _, public, secret = sr25519.hard_derive_keypair(keypair, b"")
        else:
            _, public, secret = sr25519.derive_keypair(keypair, b"")
        key = SecretKey(self.algorithm, bytes(secret), bytes(public))
        return ExtendedSecretKey(key, chain_code, self.depth + 1)


def derive_child(seed: bytes, path: str, algorithm: Algorithm) -> KeyPair:
    """Derive the keypair at ``path`` from a master seed. Deterministic."""
    master = ExtendedSecretKey.from_seed(seed, algorithm)
    return master.derive_path(path).keypair()
