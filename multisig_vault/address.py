"""
Account address utilities
"""

import hashlib
import re
from enum import Enum
from typing import Optional, Tuple

from ecdsa import SigningKey, SECP256k1

from .errors import InvalidAddress, ValidationError

C32_ALPHABET = "0123456789ABCDEFGHJKMNPQRSTVWXYZ"

MIN_ADDRESS_LENGTH = 28
MAX_ADDRESS_LENGTH = 41

_ADDRESS_RE = re.compile(r"^S[PMTN][%s]+$" % C32_ALPHABET)
_CONTRACT_NAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]{0,127}$")


class Network(Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"
    DISCONNECTED = "disconnected"


# Single-sig address versions
ADDRESS_VERSIONS = {
    Network.MAINNET: 22,  # 'P'
    Network.TESTNET: 26,  # 'T'
}

_NETWORK_BY_VERSION_CHAR = {
    "P": Network.MAINNET,
    "M": Network.MAINNET,
    "T": Network.TESTNET,
    "N": Network.TESTNET,
}


def is_valid_address(address: Optional[str]) -> bool:
    """Check address syntax (checksums are left to the ledger)"""
    if not isinstance(address, str):
        return False
    if not (MIN_ADDRESS_LENGTH <= len(address) <= MAX_ADDRESS_LENGTH):
        return False
    return _ADDRESS_RE.match(address) is not None


def validate_address(address: Optional[str]) -> str:
    """Return address unchanged, or raise InvalidAddress"""
    if not address:
        raise InvalidAddress("Address is required")
    if not is_valid_address(address):
        raise InvalidAddress(f"Malformed address: {address!r}")
    return address


def network_of(address: str) -> Network:
    """Network an address belongs to, judged by its version character"""
    validate_address(address)
    return _NETWORK_BY_VERSION_CHAR[address[1]]


def parse_contract_principal(reference: Optional[str]) -> Tuple[str, str]:
    """Split 'ADDRESS.contract-name' into its parts"""
    if not reference or not isinstance(reference, str):
        raise ValidationError("Token contract reference is required")

    address, sep, name = reference.partition(".")
    if not sep or not is_valid_address(address):
        raise ValidationError(f"Malformed token contract reference: {reference!r}")
    if not _CONTRACT_NAME_RE.match(name):
        raise ValidationError(f"Malformed contract name: {name!r}")

    return address, name


def c32_encode(data: bytes) -> str:
    """Crockford-style base32 encoding used by c32check addresses"""
    number = int.from_bytes(data, "big")
    encoded = ""
    while number:
        number, remainder = divmod(number, 32)
        encoded = C32_ALPHABET[remainder] + encoded

    # Leading zero bytes survive as leading '0' characters
    leading_zeros = len(data) - len(data.lstrip(b"\x00"))
    return "0" * leading_zeros + encoded


def c32check_address(version: int, hash160: bytes) -> str:
    """Build an address from a version byte and a 20-byte hash"""
    if not (0 <= version < 32):
        raise ValueError("Address version must fit in one c32 character")
    if len(hash160) != 20:
        raise ValueError("Address hash must be 20 bytes")

    checksum = double_sha256(bytes([version]) + hash160)[:4]
    return "S" + C32_ALPHABET[version] + c32_encode(hash160 + checksum)


def double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """HASH160 stand-in (RIPEMD160 is not reliably present in hashlib)"""
    return double_sha256(data)[:20]


class AccountKey:
    """secp256k1 key pair for a vault participant"""

    def __init__(self, private_key: bytes = None):
        if private_key:
            self.private_key = SigningKey.from_string(private_key, curve=SECP256k1)
        else:
            self.private_key = SigningKey.generate(curve=SECP256k1)

        self.public_key = self.private_key.get_verifying_key()

    def private_key_hex(self) -> str:
        return self.private_key.to_string().hex()

    def public_key_hex(self) -> str:
        """Compressed public key in hex format"""
        point = self.public_key.pubkey.point
        prefix = b"\x02" if point.y() % 2 == 0 else b"\x03"
        return (prefix + point.x().to_bytes(32, "big")).hex()

    def address(self, network: Network = Network.TESTNET) -> str:
        """Single-sig account address for this key on the given network"""
        if network not in ADDRESS_VERSIONS:
            raise ValueError(f"No address version for network {network.value}")
        digest = hash160(bytes.fromhex(self.public_key_hex()))
        return c32check_address(ADDRESS_VERSIONS[network], digest)

    @staticmethod
    def generate_address(network: Network = Network.TESTNET) -> Tuple[str, str]:
        """Generate a new key and return (private_key_hex, address)"""
        key = AccountKey()
        return key.private_key_hex(), key.address(network)
