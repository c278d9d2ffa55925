"""
In-memory ledger stand-ins

Placeholder data mirrors what a contract read would return; swap these for a
real VaultSource / Broadcaster without touching the state machine.
"""

import copy
import hashlib
import logging
import threading
from typing import Dict, Iterable, List, Optional

from ..address import validate_address
from ..errors import BroadcastError, NotFound
from ..vault import Signer, Transaction, TransactionKind, TransactionStatus, Vault
from .interfaces import Broadcaster, VaultSource

logger = logging.getLogger(__name__)

PLACEHOLDER_SIGNERS = [
    "SP2RVXN8ZCJQY8ZCJQY8ZCJQY8ZCJQY8ZCJQY8Z",
    "ST2RVXN8ZCJQY8ZCJQY8ZCJQY8ZCJQY8ZCJQY8Z",
    "SP3RVXN8ZCJQY8ZCJQY8ZCJQY8ZCJQY8ZCJQY8Z",
]
PLACEHOLDER_THRESHOLD = 2
PLACEHOLDER_BALANCE = 5_000_000_000  # 5000 STX in micro-STX


def placeholder_vault(address: str) -> Vault:
    """Vault with the expected shape of a contract read"""
    first_tx = Transaction(
        id="txn-001",
        kind=TransactionKind.NATIVE_TRANSFER,
        amount=1_000_000,  # 1 STX
        recipient=PLACEHOLDER_SIGNERS[1],
        signers=[
            Signer(PLACEHOLDER_SIGNERS[0], has_signed=True),
            Signer(PLACEHOLDER_SIGNERS[1]),
            Signer(PLACEHOLDER_SIGNERS[2]),
        ],
        # Stored label is stale on purpose; the registry re-derives it
        status=TransactionStatus.PENDING,
    )

    return Vault(
        address=address,
        signers=list(PLACEHOLDER_SIGNERS),
        threshold=PLACEHOLDER_THRESHOLD,
        balance=PLACEHOLDER_BALANCE,
        transactions=[first_tx],
    )


class InMemoryLedger(VaultSource):
    """Vault snapshots kept in process memory"""

    def __init__(self, vaults: Iterable[Vault] = (), generate_placeholders: bool = False):
        self.generate_placeholders = generate_placeholders
        self._vaults: Dict[str, Vault] = {}
        self._lock = threading.Lock()
        for vault in vaults:
            self.put(vault)

    def put(self, vault: Vault) -> None:
        """Store (or replace) the ledger's view of a vault"""
        with self._lock:
            self._vaults[vault.address] = copy.deepcopy(vault)

    def fetch_vault(self, address: str) -> Vault:
        validate_address(address)

        with self._lock:
            if address not in self._vaults:
                if not self.generate_placeholders:
                    raise NotFound(f"Vault {address} not found")
                logger.debug("Generating placeholder vault for %s", address)
                self._vaults[address] = placeholder_vault(address)

            return copy.deepcopy(self._vaults[address])


class PlaceholderBroadcaster(Broadcaster):
    """Deterministic broadcast results with optional rejections"""

    def __init__(self, reject_ids: Optional[Iterable[str]] = None, reject_all: bool = False):
        self.reject_ids = set(reject_ids or ())
        self.reject_all = reject_all
        self.broadcasts: List[str] = []
        self._lock = threading.Lock()

    def broadcast(self, tx: Transaction) -> str:
        if self.reject_all or tx.id in self.reject_ids:
            raise BroadcastError(f"Ledger rejected transaction {tx.id}")

        with self._lock:
            self.broadcasts.append(tx.id)
            sequence = len(self.broadcasts)

        hasher = hashlib.sha256()
        hasher.update(b"MULTISIG_BROADCAST_V1")
        hasher.update(tx.tx_hash.encode())
        hasher.update(sequence.to_bytes(8, 'big'))
        return "0x" + hasher.hexdigest()
