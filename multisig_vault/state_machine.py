"""
Transaction lifecycle for a vault

    pending -> signed -> ready-to-execute -> executed
    failed is reachable from any non-terminal state

Every mutation of a transaction runs under that transaction's registry lock,
so the readiness check in execute cannot interleave with a concurrent sign.
"""

import copy
import logging
from typing import Dict, Optional

from .address import is_valid_address, parse_contract_principal
from .errors import AlreadyTerminal, BroadcastError, NotFound, QuorumNotMet, UnknownSigner, ValidationError
from .ledger.interfaces import Broadcaster
from .quorum import is_ready, refresh_status, signature_count
from .registry import VaultRegistry
from .vault import Signer, Transaction, TransactionKind, TransactionStatus, Vault, parse_amount

logger = logging.getLogger(__name__)


class TransactionStateMachine:
    """Propose, sign, execute and fail vault transactions"""

    def __init__(self, registry: VaultRegistry, broadcaster: Optional[Broadcaster] = None):
        self.registry = registry
        self.broadcaster = broadcaster
        self._sequences: Dict[str, int] = {}

    def propose(
        self,
        vault_address: str,
        kind,
        amount,
        recipient: str,
        token_contract: Optional[str] = None
    ) -> Transaction:
        """Create a pending transaction with an unsigned snapshot of the vault's signers"""

        vault = self.registry.get(vault_address)

        # Validate everything before touching the vault
        try:
            kind = TransactionKind(kind)
        except ValueError:
            raise ValidationError(f"Unknown transaction kind: {kind!r}")

        amount = parse_amount(amount)
        if amount == 0:
            raise ValidationError("Amount must be greater than zero")

        if not is_valid_address(recipient):
            raise ValidationError(f"Malformed recipient address: {recipient!r}")

        if kind == TransactionKind.TOKEN_TRANSFER:
            parse_contract_principal(token_contract)
        elif token_contract:
            raise ValidationError("Native transfers do not take a token contract")

        with self.registry.vault_lock(vault_address):
            tx = Transaction(
                id=self._next_id(vault),
                kind=kind,
                amount=amount,
                recipient=recipient,
                signers=[Signer(address) for address in vault.signers],
                status=TransactionStatus.PENDING,
                token_contract=token_contract if kind == TransactionKind.TOKEN_TRANSFER else None
            )
            vault.transactions.append(tx)

        logger.info(
            "Proposed %s %s of %d to %s in vault %s",
            tx.id, kind.value, amount, recipient, vault_address
        )
        return copy.deepcopy(tx)

    def sign(self, vault_address: str, tx_id: str, signer_address: str) -> Transaction:
        """Record a signer's approval; signing twice is a no-op"""

        vault = self.registry.get(vault_address)

        with self.registry.lock_for(vault_address, tx_id):
            tx = self._get_transaction(vault, tx_id)
            self._ensure_open(tx)

            signer = tx.find_signer(signer_address)
            if signer is None:
                raise UnknownSigner(f"{signer_address} is not a signer of transaction {tx_id}")

            if signer.has_signed:
                logger.debug("%s already signed %s", signer_address, tx_id)
            else:
                signer.has_signed = True

            status = refresh_status(tx, vault.threshold)
            logger.info(
                "%s signed %s (%d/%d, %s)",
                signer_address, tx_id, signature_count(tx), vault.threshold, status.value
            )
            return copy.deepcopy(tx)

    def execute(self, vault_address: str, tx_id: str, executed_ref: Optional[str] = None) -> Transaction:
        """
        Execute a transaction that has reached its threshold.

        executed_ref is used when the caller broadcast the transaction itself;
        otherwise the configured broadcaster supplies it. A rejected broadcast
        marks the transaction failed before the error propagates.
        """

        vault = self.registry.get(vault_address)

        with self.registry.lock_for(vault_address, tx_id):
            tx = self._get_transaction(vault, tx_id)
            self._ensure_open(tx)

            if not is_ready(tx, vault.threshold):
                raise QuorumNotMet(
                    f"Transaction {tx_id} has {signature_count(tx)} of {vault.threshold} required signatures"
                )

            if executed_ref is None:
                if self.broadcaster is None:
                    raise ValidationError("No broadcaster configured and no executed reference given")
                executed_ref = self._broadcast(vault_address, tx)

            tx.status = TransactionStatus.EXECUTED
            tx.executed_ref = executed_ref

            logger.info("Executed %s in vault %s as %s", tx_id, vault_address, executed_ref)
            return copy.deepcopy(tx)

    def mark_failed(self, vault_address: str, tx_id: str, reason: str) -> Transaction:
        """Move a non-terminal transaction to failed"""

        vault = self.registry.get(vault_address)

        with self.registry.lock_for(vault_address, tx_id):
            tx = self._get_transaction(vault, tx_id)
            self._ensure_open(tx)

            tx.status = TransactionStatus.FAILED
            tx.failure_reason = reason

            logger.info("Marked %s in vault %s failed: %s", tx_id, vault_address, reason)
            return copy.deepcopy(tx)

    def _broadcast(self, vault_address: str, tx: Transaction) -> str:
        try:
            reference = self.broadcaster.broadcast(copy.deepcopy(tx))
            if not reference:
                raise BroadcastError(f"Broadcaster returned no reference for {tx.id}")
        except BroadcastError as e:
            tx.status = TransactionStatus.FAILED
            tx.failure_reason = str(e)
            logger.warning("Broadcast of %s in vault %s failed: %s", tx.id, vault_address, e)
            raise
        except Exception as e:
            tx.status = TransactionStatus.FAILED
            tx.failure_reason = f"{type(e).__name__}: {e}"
            logger.exception("Broadcaster error for %s in vault %s", tx.id, vault_address)
            raise BroadcastError(f"Broadcast of {tx.id} failed: {tx.failure_reason}") from e
        return reference

    def _next_id(self, vault: Vault) -> str:
        sequence = self._sequences.get(vault.address, len(vault.transactions))
        while True:
            sequence += 1
            tx_id = f"txn-{sequence:03d}"
            if vault.get_transaction(tx_id) is None:
                break
        self._sequences[vault.address] = sequence
        return tx_id

    @staticmethod
    def _get_transaction(vault: Vault, tx_id: str) -> Transaction:
        tx = vault.get_transaction(tx_id)
        if tx is None:
            raise NotFound(f"Transaction {tx_id} not found in vault {vault.address}")
        return tx

    @staticmethod
    def _ensure_open(tx: Transaction) -> None:
        if tx.status.is_terminal:
            raise AlreadyTerminal(f"Transaction {tx.id} is already {tx.status.value}")
