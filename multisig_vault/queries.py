"""
Read-only views over a vault

A view reads the vault it was bound to at construction, or the registry's
active vault when none was given. Nothing here raises domain errors: unknown
ids and a missing vault degrade to None, empty lists, zero or False. Returned
transactions are copies.
"""

import copy
from typing import List, Optional

from .errors import NotFound
from .identity import IdentityProvider
from .quorum import is_ready, signature_count
from .registry import VaultRegistry
from .vault import Transaction, TransactionStatus, Vault


class VaultQueries:
    """Query surface for presentation layers"""

    def __init__(self, registry: VaultRegistry, identity: IdentityProvider,
                 vault_address: Optional[str] = None):
        self.registry = registry
        self.identity = identity
        self.vault_address = vault_address

    def _vault(self) -> Optional[Vault]:
        if self.vault_address is None:
            return self.registry.active_vault
        try:
            return self.registry.get(self.vault_address)
        except NotFound:
            return None

    def _find(self, tx_id: str) -> Optional[Transaction]:
        vault = self._vault()
        if vault is None:
            return None
        return vault.get_transaction(tx_id)

    def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        tx = self._find(tx_id)
        return copy.deepcopy(tx) if tx is not None else None

    def get_transactions(self) -> List[Transaction]:
        """All transactions in proposal order"""
        vault = self._vault()
        if vault is None:
            return []
        return [copy.deepcopy(tx) for tx in vault.transactions]

    def get_pending_transactions(self) -> List[Transaction]:
        """Transactions not yet executed; failed ones are included"""
        vault = self._vault()
        if vault is None:
            return []
        return [copy.deepcopy(tx) for tx in vault.transactions
                if tx.status != TransactionStatus.EXECUTED]

    def get_executed_transactions(self) -> List[Transaction]:
        vault = self._vault()
        if vault is None:
            return []
        return [copy.deepcopy(tx) for tx in vault.transactions
                if tx.status == TransactionStatus.EXECUTED]

    def get_signature_count(self, tx_id: str) -> int:
        tx = self._find(tx_id)
        if tx is None:
            return 0
        return signature_count(tx)

    def is_ready_to_execute(self, tx_id: str) -> bool:
        vault = self._vault()
        if vault is None:
            return False
        tx = vault.get_transaction(tx_id)
        if tx is None:
            return False
        return is_ready(tx, vault.threshold)

    def has_signed(self, tx_id: str, address: Optional[str] = None) -> bool:
        """Whether address (default: the current identity) signed tx_id

        Always False while no identity is signed in.
        """
        current = self.identity.current_address
        if not current:
            return False
        if address is None:
            address = current

        tx = self._find(tx_id)
        if tx is None:
            return False

        signer = tx.find_signer(address)
        return signer is not None and signer.has_signed

    def is_authorized_signer(self) -> bool:
        """Advisory check for gating UI; the state machine enforces signers itself"""
        vault = self._vault()
        if vault is None:
            return False
        return vault.is_signer(self.identity.current_address)

    def summary(self) -> Optional[dict]:
        vault = self._vault()
        if vault is None:
            return None

        executed = sum(1 for tx in vault.transactions if tx.status == TransactionStatus.EXECUTED)
        return {
            'address': vault.address,
            'balance': vault.balance,
            'threshold': vault.threshold,
            'total_signers': len(vault.signers),
            'signers': list(vault.signers),
            'transaction_count': len(vault.transactions),
            'pending_count': len(vault.transactions) - executed,
            'executed_count': executed,
            'is_signer': vault.is_signer(self.identity.current_address),
        }
