"""
Vault registry - the set of known vaults for one caller context
"""

import copy
import logging
import threading
from typing import Dict, Optional, Tuple

from .address import validate_address
from .errors import MultisigError, NotFound
from .ledger.interfaces import VaultSource
from .quorum import refresh_status
from .vault import Transaction, Vault

logger = logging.getLogger(__name__)


class VaultRegistry:
    """Known vaults keyed by address, plus the active one"""

    def __init__(self, source: VaultSource):
        self.source = source
        self.active_address: Optional[str] = None
        self.is_loading = False
        self.last_error: Optional[str] = None
        self._vaults: Dict[str, Vault] = {}
        self._lock = threading.Lock()
        self._vault_locks: Dict[str, threading.RLock] = {}
        self._tx_locks: Dict[Tuple[str, str], threading.RLock] = {}

    def vault_lock(self, address: str) -> threading.RLock:
        """Lock for structural changes to a vault (new transactions, refresh)"""
        with self._lock:
            return self._vault_locks.setdefault(address, threading.RLock())

    def lock_for(self, address: str, tx_id: str) -> threading.RLock:
        """Lock serializing every mutation of one transaction"""
        with self._lock:
            return self._tx_locks.setdefault((address, tx_id), threading.RLock())

    def fetch(self, address: str) -> Vault:
        """Load or refresh a vault and make it active; returns a snapshot"""
        self.last_error = None
        try:
            validate_address(address)
        except MultisigError as e:
            self.last_error = str(e)
            raise

        self.is_loading = True
        try:
            snapshot = self.source.fetch_vault(address)
        except MultisigError as e:
            self.last_error = str(e)
            logger.warning("Fetching vault %s failed: %s", address, e)
            raise
        finally:
            self.is_loading = False

        with self.vault_lock(address):
            current = self._vaults.get(address)
            if current is None:
                self._register(snapshot)
                logger.info("Loaded vault %s (%d transactions)", address, len(snapshot.transactions))
            else:
                try:
                    self._merge(current, snapshot)
                except MultisigError as e:
                    self.last_error = str(e)
                    logger.warning("Refreshing vault %s rejected: %s", address, e)
                    raise
                logger.info("Refreshed vault %s", address)

            self.active_address = address
            return copy.deepcopy(self._vaults[address])

    def get(self, address: str) -> Vault:
        """Live registered vault"""
        vault = self._vaults.get(address)
        if vault is None:
            raise NotFound(f"Vault {address} has not been fetched")
        return vault

    def activate(self, address: str) -> Vault:
        """Make an already fetched vault active without re-reading the ledger"""
        vault = self.get(address)
        self.active_address = address
        return vault

    def is_registered(self, address: str) -> bool:
        return address in self._vaults

    @property
    def active_vault(self) -> Optional[Vault]:
        if self.active_address is None:
            return None
        return self._vaults.get(self.active_address)

    def clear(self) -> None:
        """Forget all session state"""
        with self._lock:
            self._vaults.clear()
            self._tx_locks.clear()
            self._vault_locks.clear()
            self.active_address = None
            self.last_error = None

    def _register(self, snapshot: Vault) -> None:
        # Stored labels from the source are never trusted over a recomputation
        for tx in snapshot.transactions:
            refresh_status(tx, snapshot.threshold)
        self._vaults[snapshot.address] = snapshot

    def _merge(self, current: Vault, snapshot: Vault) -> None:
        """Apply a re-fetch without moving signatures or statuses backward

        The ledger owns balance and the signer set. The threshold is fixed once
        a vault is registered, so a signer set that no longer covers it is
        rejected before anything changes.
        """
        Vault.validate_signer_set(snapshot.signers, current.threshold)
        if snapshot.threshold != current.threshold:
            logger.warning(
                "Vault %s: ledger reports threshold %s, keeping %s",
                current.address, snapshot.threshold, current.threshold
            )

        current.signers = list(snapshot.signers)
        current.balance = snapshot.balance

        for remote in snapshot.transactions:
            with self.lock_for(current.address, remote.id):
                local = current.get_transaction(remote.id)
                if local is None:
                    refresh_status(remote, current.threshold)
                    current.transactions.append(remote)
                    logger.debug("Vault %s: new transaction %s from ledger", current.address, remote.id)
                else:
                    self._merge_transaction(local, remote)
                    refresh_status(local, current.threshold)

    @staticmethod
    def _merge_transaction(local: Transaction, remote: Transaction) -> None:
        if local.status.is_terminal:
            return

        remote_signed = {s.address for s in remote.signers if s.has_signed}
        for signer in local.signers:
            if signer.address in remote_signed:
                signer.has_signed = True

        if remote.status.is_terminal:
            local.status = remote.status
            local.executed_ref = remote.executed_ref
            local.failure_reason = remote.failure_reason
