"""Relayer signing credential.

The credential is created once at startup and handed to the settlement adapter.
It is immutable and never exposes the key material through repr or logs.
"""

from __future__ import annotations

from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from pydantic import SecretStr


class RelayerCredential:
    """Immutable handle on the key that signs settlement transactions."""

    __slots__ = ("_account",)

    def __init__(self, private_key: SecretStr):
        account: LocalAccount = Account.from_key(private_key.get_secret_value())
        object.__setattr__(self, "_account", account)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("RelayerCredential is immutable")

    @property
    def address(self) -> str:
        return str(self._account.address)

    def sign_transaction(self, transaction: dict[str, Any]) -> bytes:
        """Sign a transaction dict and return the raw signed bytes."""
        signed = self._account.sign_transaction(transaction)
        return bytes(signed.raw_transaction)

    def __repr__(self) -> str:
        return f"RelayerCredential(address={self.address})"
