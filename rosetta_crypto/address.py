"""
Chain specific address encodings.
"""
import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import base58
import bech32
from Crypto.Hash import RIPEMD160, keccak

from .errors import InvalidKey, UnsupportedCurve
from .keys import PublicKey

SS58_PREFIX = b"SS58PRE"


class AddressKind(str, Enum):
    P2PKH = "p2pkh"
    P2WPKH = "p2wpkh"
    EIP55 = "eip55"
    SS58 = "ss58"


@dataclass(frozen=True)
class AddressFormat:
    """How a chain turns a public key into an address string."""
    kind: AddressKind
    # P2PKH version byte
    version: int = 0
    # bech32 human readable part
    hrp: str = ""
    # SS58 network prefix
    ss58_prefix: int = 42

    @classmethod
    def p2pkh(cls, version: int) -> "AddressFormat":
        return cls(AddressKind.P2PKH, version=version)

    @classmethod
    def bech32(cls, hrp: str) -> "AddressFormat":
        return cls(AddressKind.P2WPKH, hrp=hrp)

    @classmethod
    def eip55(cls) -> "AddressFormat":
        return cls(AddressKind.EIP55)

    @classmethod
    def ss58(cls, prefix: int) -> "AddressFormat":
        return cls(AddressKind.SS58, ss58_prefix=prefix)


def hash160(data: bytes) -> bytes:
    return RIPEMD160.new(hashlib.sha256(data).digest()).digest()


def keccak256(data: bytes) -> bytes:
    return keccak.new(data=data, digest_bits=256).digest()


def _require_secp256k1(public_key: PublicKey, kind: AddressKind) -> None:
    if public_key.curve_type != "secp256k1":
        raise UnsupportedCurve(f"{kind.value} addresses require a secp256k1 key, got {public_key.curve_type}")


def to_checksum_address(address: str) -> str:
    """EIP-55 mixed case checksum encoding of a 20 byte hex address."""
    hex_address = address.lower().replace("0x", "", 1)
    if len(hex_address) != 40:
        raise InvalidKey(f"Invalid ethereum address: {address}")
    digest = keccak256(hex_address.encode("ascii")).hex()
    return "0x" + "".join(
        c.upper() if c.isalpha() and int(digest[i], 16) >= 8 else c
        for i, c in enumerate(hex_address)
    )


def ss58_encode(public: bytes, prefix: int) -> str:
    if prefix < 0 or prefix > 16383 or prefix in (46, 47):
        raise InvalidKey(f"Invalid SS58 prefix: {prefix}")
    if prefix < 64:
        head = bytes([prefix])
    else:
        head = bytes([
            ((prefix & 0b0000_0000_1111_1100) >> 2) | 0b0100_0000,
            (prefix >> 8) | ((prefix & 0b0000_0000_0000_0011) << 6),
        ])
    payload = head + public
    checksum = hashlib.blake2b(SS58_PREFIX + payload, digest_size=64).digest()[:2]
    return base58.b58encode(payload + checksum).decode("ascii")


def ss58_decode(address: str) -> Optional[bytes]:
    """Return the 32 byte public key of a valid SS58 address, else None."""
    try:
        raw = base58.b58decode(address)
    except ValueError:
        return None
    if len(raw) not in (35, 36):
        return None
    head_len = 1 if raw[0] < 64 else 2
    payload, checksum = raw[:-2], raw[-2:]
    expected = hashlib.blake2b(SS58_PREFIX + payload, digest_size=64).digest()[:2]
    if checksum != expected:
        return None
    return payload[head_len:]


def encode_address(public_key: PublicKey, address_format: AddressFormat) -> str:
    kind = address_format.kind
    if kind is AddressKind.P2PKH:
        _require_secp256k1(public_key, kind)
        payload = bytes([address_format.version]) + hash160(public_key.data)
        return base58.b58encode_check(payload).decode("ascii")
    if kind is AddressKind.P2WPKH:
        _require_secp256k1(public_key, kind)
        address = bech32.encode(address_format.hrp, 0, hash160(public_key.data))
        if address is None:
            raise InvalidKey(f"Cannot encode bech32 address with hrp '{address_format.hrp}'")
        return address
    if kind is AddressKind.EIP55:
        _require_secp256k1(public_key, kind)
        digest = keccak256(public_key.to_uncompressed_bytes()[1:])
        return to_checksum_address(digest[-20:].hex())
    if kind is AddressKind.SS58:
        if public_key.curve_type == "secp256k1":
            # substrate ECDSA accounts are the blake2b-256 of the compressed key
            public = hashlib.blake2b(public_key.data, digest_size=32).digest()
        else:
            public = public_key.data
        return ss58_encode(public, address_format.ss58_prefix)
    raise UnsupportedCurve(f"Unknown address format: {kind}")
