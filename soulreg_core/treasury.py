# soulreg_core/treasury.py
from __future__ import annotations
from typing import Dict, Tuple

from soulreg_core.errors import InvalidContractInteraction


class ValueTransfer:
    # Interface
    def is_live_asset(self, token_handle: str) -> bool: ...
    def transfer(self, token_handle: str, destination: str, amount: int) -> None: ...


class InMemoryTreasury(ValueTransfer):
    """
    Reference value-transfer collaborator: balances held by the registry,
    per asset handle. Only registered handles count as live assets.
    """

    def __init__(self):
        self.balances: Dict[str, int] = {}
        self.transfers: list[Tuple[str, str, int]] = []

    def register_asset(self, token_handle: str, balance: int = 0) -> None:
        self.balances[token_handle] = balance

    def is_live_asset(self, token_handle: str) -> bool:
        return token_handle in self.balances

    def transfer(self, token_handle: str, destination: str, amount: int) -> None:
        if not self.is_live_asset(token_handle):
            raise InvalidContractInteraction(f"{token_handle} is not a live asset")
        balance = self.balances[token_handle]
        if amount > balance:
            raise InvalidContractInteraction(
                f"insufficient balance on {token_handle}: {balance} < {amount}")
        self.balances[token_handle] = balance - amount
        self.transfers.append((token_handle, destination, amount))
