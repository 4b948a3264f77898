"""
Key management for the client: mnemonic key files and per chain account keys.
"""
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rosetta_crypto import (
    Algorithm,
    ExtendedSecretKey,
    KeyPair,
    Signature,
    UnsupportedCurve,
    bip44_path,
    generate_mnemonic,
    mnemonic_to_mini_secret,
    mnemonic_to_seed,
    secret_key_from_bytes,
    sign,
    sign_prehashed,
    validate_mnemonic,
)
from rosetta_server.chains import BlockchainConfig

logger = logging.getLogger("rosetta_client")


def read_keyfile(path: Union[str, Path]) -> str:
    """Read and validate the mnemonic stored in ``path``."""
    with open(path, 'r') as f:
        return validate_mnemonic(f.read())


def write_keyfile(path: Union[str, Path], mnemonic: str) -> None:
    """Write a mnemonic readable by the owner only."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, 'w') as f:
        f.write(mnemonic)


def load_or_generate_mnemonic(path: Union[str, Path]) -> str:
    path = Path(path)
    if path.exists():
        return read_keyfile(path)
    mnemonic = generate_mnemonic()
    write_keyfile(path, mnemonic)
    logger.info(f"Generated new mnemonic in {path}")
    return mnemonic


class Signer:
    """Derives the account key of one chain from a mnemonic and signs payloads with it."""

    def __init__(self, config: BlockchainConfig, mnemonic: str, password: str = ""):
        self.config = config
        self._mnemonic = validate_mnemonic(mnemonic)
        self._password = password
        self._keypairs: Dict[tuple, KeyPair] = {}

    @classmethod
    def from_keyfile(cls, config: BlockchainConfig, path: Union[str, Path], password: str = "") -> "Signer":
        return cls(config, load_or_generate_mnemonic(path), password)

    def master_key(self) -> ExtendedSecretKey:
        if self.config.algorithm is Algorithm.SR25519:
            seed = mnemonic_to_mini_secret(self._mnemonic, self._password)
        else:
            seed = mnemonic_to_seed(self._mnemonic, self._password)
        return ExtendedSecretKey.from_seed(seed, self.config.algorithm)

    def keypair(self, account: int = 0, index: int = 0) -> KeyPair:
        """
        BIP44 account key for chains configured with ``bip44``, the master
        key otherwise.
        """
        cache_key = (account, index)
        if cache_key not in self._keypairs:
            master = self.master_key()
            if self.config.bip44:
                path = bip44_path(self.config.coin, account, 0, index, self.config.algorithm)
                key = master.derive_path(path)
            else:
                key = master
            self._keypairs[cache_key] = key.keypair()
        return self._keypairs[cache_key]

    def public_key(self, account: int = 0, index: int = 0) -> Dict[str, Any]:
        """Rosetta PublicKey dict."""
        public = self.keypair(account, index).public
        return {"hex_bytes": public.hex(), "curve_type": public.curve_type}

    def sign_payload(self, payload: Dict[str, Any], keypair: Optional[KeyPair] = None) -> Dict[str, Any]:
        """
        Sign one SigningPayload and return the Rosetta Signature dict.

        32 byte payloads on secp256k1 are digests and are signed as is.
        """
        keypair = keypair or self.keypair()
        signature_type = payload.get("signature_type") or self.config.signature_type
        algorithm = Algorithm.from_signature_type(signature_type)
        secret = keypair.secret
        if algorithm.curve_type != secret.algorithm.curve_type:
            raise UnsupportedCurve(
                f"Payload wants {signature_type}, key is {secret.algorithm.curve_type}"
            )
        if algorithm is not secret.algorithm:
            secret = secret_key_from_bytes(algorithm, secret.data)

        message = bytes.fromhex(payload["hex_bytes"])
        if algorithm.curve_type == "secp256k1" and len(message) == 32:
            signature: Signature = sign_prehashed(secret, message)
        else:
            signature = sign(secret, message)
        return {
            "signing_payload": payload,
            "public_key": {"hex_bytes": keypair.public.hex(), "curve_type": keypair.public.curve_type},
            "signature_type": signature.signature_type,
            "hex_bytes": signature.hex(),
        }
