"""
Multisig Vault - threshold-approved transfers
Transactions collect signatures from a vault's signer set and become
executable once the vault's threshold is reached
"""

from .errors import (
    MultisigError, InvalidAddress, ValidationError, UnknownSigner,
    AlreadyTerminal, QuorumNotMet, NotFound, BroadcastError
)
from .vault import Signer, Transaction, TransactionKind, TransactionStatus, Vault
from .registry import VaultRegistry
from .state_machine import TransactionStateMachine
from .queries import VaultQueries
from .identity import IdentityProvider, StaticIdentity, WalletSession
from .address import AccountKey, Network

__version__ = "0.1.0"
__all__ = [
    "MultisigError",
    "InvalidAddress",
    "ValidationError",
    "UnknownSigner",
    "AlreadyTerminal",
    "QuorumNotMet",
    "NotFound",
    "BroadcastError",
    "Signer",
    "Transaction",
    "TransactionKind",
    "TransactionStatus",
    "Vault",
    "VaultRegistry",
    "TransactionStateMachine",
    "VaultQueries",
    "IdentityProvider",
    "StaticIdentity",
    "WalletSession",
    "AccountKey",
    "Network"
]
