"""
Per chain configuration presets.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

from rosetta_crypto import AddressFormat, Algorithm

from .utils.errors import UnsupportedNetwork


@dataclass(frozen=True)
class BlockchainConfig:
    """Static description of one network of one blockchain."""
    blockchain: str
    network: str
    algorithm: Algorithm
    address_format: AddressFormat
    # BIP44 coin type
    coin: int
    # derive account keys along m/44'/coin'/0'/0/0 instead of the master key
    bip44: bool
    utxo: bool
    currency_symbol: str
    currency_decimals: int
    node_port: int

    @property
    def curve_type(self) -> str:
        return self.algorithm.curve_type

    @property
    def signature_type(self) -> str:
        return self.algorithm.signature_type

    def currency(self) -> dict:
        return {"symbol": self.currency_symbol, "decimals": self.currency_decimals}


def _bitcoin(network: str, hrp: str, coin: int, port: int) -> BlockchainConfig:
    return BlockchainConfig(
        blockchain="bitcoin",
        network=network,
        algorithm=Algorithm.ECDSA_SECP256K1,
        address_format=AddressFormat.bech32(hrp),
        coin=coin,
        bip44=True,
        utxo=True,
        currency_symbol="BTC",
        currency_decimals=8,
        node_port=port,
    )


def _ethereum(network: str, coin: int) -> BlockchainConfig:
    return BlockchainConfig(
        blockchain="ethereum",
        network=network,
        algorithm=Algorithm.ECDSA_RECOVERABLE_SECP256K1,
        address_format=AddressFormat.eip55(),
        coin=coin,
        bip44=True,
        utxo=False,
        currency_symbol="ETH",
        currency_decimals=18,
        node_port=8545,
    )


def _polkadot(network: str, ss58_prefix: int, symbol: str, decimals: int) -> BlockchainConfig:
    return BlockchainConfig(
        blockchain="polkadot",
        network=network,
        algorithm=Algorithm.SR25519,
        address_format=AddressFormat.ss58(ss58_prefix),
        coin=354,
        bip44=False,
        utxo=False,
        currency_symbol=symbol,
        currency_decimals=decimals,
        node_port=9944,
    )


PRESETS: Dict[Tuple[str, str], BlockchainConfig] = {
    ("bitcoin", "regtest"): _bitcoin("regtest", "bcrt", 1, 18443),
    ("bitcoin", "mainnet"): _bitcoin("mainnet", "bc", 0, 8332),
    ("ethereum", "dev"): _ethereum("dev", 1),
    ("ethereum", "mainnet"): _ethereum("mainnet", 60),
    ("polkadot", "dev"): _polkadot("dev", 42, "DOT", 10),
    ("polkadot", "westend"): _polkadot("westend", 42, "WND", 12),
    ("polkadot", "mainnet"): _polkadot("mainnet", 0, "DOT", 10),
}


def blockchain_config(blockchain: str, network: str) -> BlockchainConfig:
    try:
        return PRESETS[(blockchain, network)]
    except KeyError:
        raise UnsupportedNetwork(
            f"Unsupported network {blockchain}/{network}",
            {"supported": supported_networks()}
        )


def supported_networks() -> List[str]:
    return [f"{blockchain}/{network}" for blockchain, network in PRESETS]
