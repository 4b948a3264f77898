"""
Curve agnostic keys, signatures, HD derivation, mnemonics and addresses.
"""
from .address import AddressFormat, AddressKind, encode_address
from .bip32 import ExtendedSecretKey, derive_child, parse_path
from .bip44 import bip44_path
from .errors import CryptoError, InsufficientEntropy, InvalidKey, InvalidMnemonic, UnsupportedCurve
from .keys import (
    Algorithm,
    KeyPair,
    PublicKey,
    SecretKey,
    Signature,
    generate_keypair,
    public_key_from_bytes,
    secret_key_from_bytes,
    sign,
    sign_prehashed,
    verify,
    verify_prehashed,
)
from .mnemonic import (
    generate_mnemonic,
    mnemonic_to_mini_secret,
    mnemonic_to_seed,
    validate_mnemonic,
)

__all__ = [
    'AddressFormat',
    'AddressKind',
    'Algorithm',
    'CryptoError',
    'ExtendedSecretKey',
    'InsufficientEntropy',
    'InvalidKey',
    'InvalidMnemonic',
    'KeyPair',
    'PublicKey',
    'SecretKey',
    'Signature',
    'UnsupportedCurve',
    'bip44_path',
    'derive_child',
    'encode_address',
    'generate_keypair',
    'generate_mnemonic',
    'mnemonic_to_mini_secret',
    'mnemonic_to_seed',
    'parse_path',
    'public_key_from_bytes',
    'secret_key_from_bytes',
    'sign',
    'sign_prehashed',
    'validate_mnemonic',
    'verify',
    'verify_prehashed',
]
