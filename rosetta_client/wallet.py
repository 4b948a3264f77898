"""
High level wallet built on the API client, signer and construction pipeline.
"""
import logging
from typing import Any, Dict, List, Optional

from .api import RosettaAPI
from .pipeline import ConstructionPipeline
from .signer import Signer

logger = logging.getLogger("rosetta_client")


class InsufficientFunds(Exception):
    """Raised when the selected coins or balance cannot cover a transfer."""
    pass


class Wallet:
    """Account, balance and transfers of the signer's account on one network"""

    def __init__(self, api: RosettaAPI, signer: Signer):
        self.api = api
        self.signer = signer
        self.config = signer.config
        self._account: Optional[Dict[str, Any]] = None

    @property
    def currency(self) -> Dict[str, Any]:
        return self.config.currency()

    def public_key(self) -> Dict[str, Any]:
        return self.signer.public_key()

    def account(self) -> Dict[str, Any]:
        """AccountIdentifier of the signer, derived by the gateway"""
        if self._account is None:
            response = self.api.derive(self.public_key())
            self._account = response.get("account_identifier") or {"address": response["address"]}
        return self._account

    def balance(self, block_index: Optional[int] = None, block_hash: Optional[str] = None) -> Dict[str, Any]:
        """Native currency Amount of the account"""
        response = self.api.account_balance(self.account()["address"], block_index, block_hash)
        for amount in response.get("balances", []):
            if amount["currency"]["symbol"] == self.config.currency_symbol:
                return amount
        return {"value": "0", "currency": self.currency}

    def coins(self, include_mempool: bool = False) -> List[Dict[str, Any]]:
        response = self.api.account_coins(self.account()["address"], include_mempool)
        return response.get("coins", [])

    def faucet(self, value: int) -> Dict[str, Any]:
        """Ask a dev network to fund the account through the connector's call method"""
        return self.api.call("faucet", {"address": self.account()["address"], "value": str(value)})

    def transfer_operations(self, to_address: str, value: int) -> List[Dict[str, Any]]:
        if value <= 0:
            raise ValueError("Transfer value must be positive")
        if self.config.utxo:
            return self._utxo_operations(to_address, value)
        return [
            {
                "operation_identifier": {"index": 0},
                "type": "transfer",
                "account": self.account(),
                "amount": {"value": str(-value), "currency": self.currency},
            },
            {
                "operation_identifier": {"index": 1},
                "related_operations": [{"index": 0}],
                "type": "transfer",
                "account": {"address": to_address},
                "amount": {"value": str(value), "currency": self.currency},
            },
        ]

    def select_coins(self, value: int) -> List[Dict[str, Any]]:
        """Largest first until the value is covered"""
        selected = []
        total = 0
        for coin in sorted(self.coins(), key=lambda c: int(c["amount"]["value"]), reverse=True):
            selected.append(coin)
            total += int(coin["amount"]["value"])
            if total >= value:
                return selected
        raise InsufficientFunds(f"Coins total {total}, need {value}")

    def _utxo_operations(self, to_address: str, value: int) -> List[Dict[str, Any]]:
        account = self.account()
        coins = self.select_coins(value)
        operations = []
        total = 0
        for coin in coins:
            total += int(coin["amount"]["value"])
            operations.append({
                "operation_identifier": {"index": len(operations)},
                "type": "input",
                "account": account,
                "amount": {"value": str(-int(coin["amount"]["value"])), "currency": self.currency},
                "coin_change": {"coin_identifier": coin["coin_identifier"], "coin_action": "coin_spent"},
            })
        operations.append({
            "operation_identifier": {"index": len(operations)},
            "type": "output",
            "account": {"address": to_address},
            "amount": {"value": str(value), "currency": self.currency},
        })
        change = total - value
        if change > 0:
            operations.append({
                "operation_identifier": {"index": len(operations)},
                "type": "output",
                "account": account,
                "amount": {"value": str(change), "currency": self.currency},
            })
        return operations

    def transfer(self, to_address: str, value: int, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Build, check, sign and submit a transfer; returns the TransactionIdentifier"""
        operations = self.transfer_operations(to_address, value)
        pipeline = ConstructionPipeline(self.api, self.signer, operations, metadata)
        identifier = pipeline.run()
        logger.info(f"Transferred {value} to {to_address} in {identifier['hash']}")
        return identifier
