"""
Boundaries to the ledger / contract layer

Implementations own their transport, timeouts and retry policy; the vault core
only relies on these two calls completing or raising.
"""

from abc import ABC, abstractmethod

from ..vault import Transaction, Vault


class VaultSource(ABC):
    """Reads vault state from the authoritative ledger"""

    @abstractmethod
    def fetch_vault(self, address: str) -> Vault:
        """Return a snapshot of the vault, or raise NotFound"""


class Broadcaster(ABC):
    """Submits an approved transaction to the ledger"""

    @abstractmethod
    def broadcast(self, tx: Transaction) -> str:
        """Return the on-chain reference, or raise BroadcastError"""
