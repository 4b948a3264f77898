"""
BIP44 account paths.
"""
from .keys import Algorithm

PURPOSE = 44


def bip44_path(coin: int, account: int = 0, change: int = 0, index: int = 0,
               algorithm: Algorithm = Algorithm.ECDSA_SECP256K1) -> str:
    """
    Return ``m/44'/coin'/account'/change/index``.

    ed25519 and sr25519 keys harden every level since SLIP-10 ed25519 has no
    normal derivation.
    """
    if Algorithm(algorithm) in (Algorithm.ED25519, Algorithm.SR25519):
        return f"m/{PURPOSE}'/{coin}'/{account}'/{change}'/{index}'"
    return f"m/{PURPOSE}'/{coin}'/{account}'/{change}/{index}"
