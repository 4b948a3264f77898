"""
BIP39 mnemonic helpers backed by the ``mnemonic`` package.
"""
import hashlib
import logging

from mnemonic import Mnemonic

from .errors import InvalidMnemonic
from .keys import random_bytes

logger = logging.getLogger(__name__)

LANGUAGE = "english"
# 24 words
DEFAULT_STRENGTH = 256
VALID_STRENGTHS = (128, 160, 192, 224, 256)

_mnemo = Mnemonic(LANGUAGE)


def generate_mnemonic(strength: int = DEFAULT_STRENGTH) -> str:
    if strength not in VALID_STRENGTHS:
        raise ValueError(f"Strength must be one of {VALID_STRENGTHS}, got {strength}")
    return _mnemo.to_mnemonic(random_bytes(strength // 8))


def normalize_mnemonic(phrase: str) -> str:
    return " ".join(phrase.strip().lower().split())


def validate_mnemonic(phrase: str) -> str:
    """Return the normalized phrase, raising InvalidMnemonic on unknown words or a bad checksum."""
    phrase = normalize_mnemonic(phrase)
    words = phrase.split(" ")
    unknown = [w for w in words if w not in _mnemo.wordlist]
    if unknown:
        raise InvalidMnemonic("Mnemonic contains unknown words", {"words": unknown})
    if len(words) * 11 * 32 // 33 not in VALID_STRENGTHS:
        raise InvalidMnemonic(f"Invalid mnemonic length: {len(words)} words")
    if not _mnemo.check(phrase):
        raise InvalidMnemonic("Mnemonic checksum mismatch")
    return phrase


def mnemonic_to_entropy(phrase: str) -> bytes:
    return bytes(_mnemo.to_entropy(validate_mnemonic(phrase)))


def mnemonic_to_seed(phrase: str, password: str = "") -> bytes:
    """64 byte BIP39 seed used for BIP32 and SLIP-10 derivation."""
    return Mnemonic.to_seed(validate_mnemonic(phrase), passphrase=password)


def mnemonic_to_mini_secret(phrase: str, password: str = "") -> bytes:
    """
    32 byte substrate mini secret.

    Substrate runs PBKDF2 over the mnemonic entropy instead of the phrase
    itself, so the same words yield a different key than BIP39 would.
    """
    entropy = mnemonic_to_entropy(phrase)
    salt = ("mnemonic" + password).encode("utf-8")
    return hashlib.pbkdf2_hmac("sha512", entropy, salt, 2048)[:32]
