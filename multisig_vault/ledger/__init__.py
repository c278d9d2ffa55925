"""
Ledger collaborators - vault reads and transaction broadcast
"""

from .interfaces import VaultSource, Broadcaster
from .placeholder import InMemoryLedger, PlaceholderBroadcaster, placeholder_vault

__all__ = [
    "VaultSource",
    "Broadcaster",
    "InMemoryLedger",
    "PlaceholderBroadcaster",
    "placeholder_vault"
]
