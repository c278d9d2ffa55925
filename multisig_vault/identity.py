"""
Identity providers - who is the current caller
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from .address import Network, is_valid_address, network_of

logger = logging.getLogger(__name__)


class IdentityProvider(ABC):
    """Supplies the signed-in account; None means no signer present"""

    @property
    @abstractmethod
    def current_address(self) -> Optional[str]:
        pass

    @property
    def network(self) -> Network:
        address = self.current_address
        if address is None or not is_valid_address(address):
            return Network.DISCONNECTED
        return network_of(address)


class StaticIdentity(IdentityProvider):
    """Fixed address, e.g. taken from a request header"""

    def __init__(self, address: Optional[str] = None):
        self._address = address or None

    @property
    def current_address(self) -> Optional[str]:
        return self._address


class WalletSession(IdentityProvider):
    """
    Session built from wallet user data.

    The user data mapping has the shape a wallet connection returns:
    {"profile": {"stxAddress": {"mainnet": ..., "testnet": ...}}}.
    When both addresses are present the testnet one is used.
    """

    def __init__(self, user_data: Optional[Dict[str, Any]] = None):
        self._user_data = user_data
        self._lock = threading.Lock()

    def sign_in(self, user_data: Dict[str, Any]) -> None:
        with self._lock:
            self._user_data = user_data
        logger.info("Wallet session signed in as %s", self.current_address)

    def sign_out(self) -> None:
        with self._lock:
            self._user_data = None
        logger.info("Wallet session signed out")

    @property
    def is_signed_in(self) -> bool:
        return bool(self._user_data)

    def _stx_addresses(self) -> Dict[str, Optional[str]]:
        profile = (self._user_data or {}).get('profile') or {}
        return profile.get('stxAddress') or {}

    @property
    def network(self) -> Network:
        addresses = self._stx_addresses()
        if addresses.get('testnet'):
            return Network.TESTNET
        if addresses.get('mainnet'):
            return Network.MAINNET
        return Network.DISCONNECTED

    @property
    def current_address(self) -> Optional[str]:
        addresses = self._stx_addresses()
        return addresses.get('testnet') or addresses.get('mainnet') or None
