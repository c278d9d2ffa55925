import hashlib
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .address import is_valid_address, validate_address
from .errors import ValidationError


class TransactionKind(str, Enum):
    NATIVE_TRANSFER = "stx-transfer"
    TOKEN_TRANSFER = "token-transfer"


class TransactionStatus(str, Enum):
    PENDING = "pending"
    SIGNED = "signed"
    READY_TO_EXECUTE = "ready-to-execute"
    EXECUTED = "executed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TransactionStatus.EXECUTED, TransactionStatus.FAILED)


def now_millis() -> int:
    return int(time.time() * 1000)


def parse_amount(value) -> int:
    """Amounts arrive as ints or decimal strings in the smallest unit"""
    if isinstance(value, bool):
        raise ValidationError("Amount must be an integer")
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise ValidationError(f"Amount must be a non-negative integer, got {value!r}")
        return int(value)
    if not isinstance(value, int):
        raise ValidationError(f"Amount must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ValidationError("Amount must not be negative")
    return value


@dataclass
class Signer:
    """One entry of a transaction's signer snapshot"""
    address: str
    has_signed: bool = False

    def to_dict(self) -> dict:
        return {'address': self.address, 'hasSigned': self.has_signed}

    @classmethod
    def from_dict(cls, data: dict) -> 'Signer':
        return cls(address=data['address'], has_signed=bool(data.get('hasSigned', False)))


@dataclass
class Transaction:
    """A proposed transfer out of a vault"""
    id: str
    kind: TransactionKind
    amount: int  # smallest unit (micro-STX or token base units)
    recipient: str
    signers: List[Signer]
    status: TransactionStatus = TransactionStatus.PENDING
    token_contract: Optional[str] = None
    created_at: int = field(default_factory=now_millis)  # epoch ms
    executed_ref: Optional[str] = None
    tx_hash: Optional[str] = None
    failure_reason: Optional[str] = None

    def __post_init__(self):
        try:
            self.kind = TransactionKind(self.kind)
            self.status = TransactionStatus(self.status)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        self.amount = parse_amount(self.amount)

        if self.kind == TransactionKind.TOKEN_TRANSFER and not self.token_contract:
            raise ValidationError("Token transfers require a token contract reference")

        if self.tx_hash is None:
            self.tx_hash = self.content_hash()

    def content_hash(self) -> str:
        """Deterministic digest of what was proposed"""
        hasher = hashlib.sha256()
        hasher.update(b"MULTISIG_TX_V1")
        hasher.update(self.id.encode())
        hasher.update(TransactionKind(self.kind).value.encode())
        hasher.update(self.amount.to_bytes(16, 'big'))
        hasher.update(self.recipient.encode())
        hasher.update((self.token_contract or "").encode())
        for signer in self.signers:
            hasher.update(signer.address.encode())
        return "0x" + hasher.hexdigest()

    def signer_addresses(self) -> List[str]:
        return [s.address for s in self.signers]

    def find_signer(self, address: Optional[str]) -> Optional[Signer]:
        for signer in self.signers:
            if signer.address == address:
                return signer
        return None

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'type': self.kind.value,
            'amount': self.amount,
            'recipient': self.recipient,
            'tokenContract': self.token_contract,
            'txHash': self.tx_hash,
            'status': self.status.value,
            'signers': [s.to_dict() for s in self.signers],
            'timestamp': self.created_at,
            'executedTxId': self.executed_ref,
            'failureReason': self.failure_reason,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Transaction':
        return cls(
            id=data['id'],
            kind=data['type'],
            amount=parse_amount(data['amount']),
            recipient=data['recipient'],
            signers=[Signer.from_dict(s) for s in data.get('signers', [])],
            status=data.get('status', TransactionStatus.PENDING.value),
            token_contract=data.get('tokenContract'),
            created_at=int(data.get('timestamp') or now_millis()),
            executed_ref=data.get('executedTxId'),
            tx_hash=data.get('txHash'),
            failure_reason=data.get('failureReason'),
        )


@dataclass
class Vault:
    """Account controlled by a signer set and an approval threshold"""
    address: str
    signers: List[str]
    threshold: int
    balance: int = 0  # smallest unit
    transactions: List[Transaction] = field(default_factory=list)

    def __post_init__(self):
        validate_address(self.address)
        self.signers = list(self.signers)
        self.validate_signer_set(self.signers, self.threshold)

        if isinstance(self.balance, bool) or not isinstance(self.balance, int) or self.balance < 0:
            raise ValidationError(f"Balance must be a non-negative integer, got {self.balance!r}")

        ids = [tx.id for tx in self.transactions]
        if len(ids) != len(set(ids)):
            raise ValidationError("Transaction ids must be unique within a vault")

    @staticmethod
    def validate_signer_set(signers: List[str], threshold: int) -> None:
        """Check the 1 <= threshold <= |signers| invariant"""
        for signer in signers:
            if not is_valid_address(signer):
                raise ValidationError(f"Malformed signer address: {signer!r}")

        if len(set(signers)) != len(signers):
            raise ValidationError("Duplicate signers not allowed")

        if isinstance(threshold, bool) or not isinstance(threshold, int):
            raise ValidationError("Threshold must be an integer")

        if not (1 <= threshold <= len(signers)):
            raise ValidationError(
                f"Threshold must be between 1 and {len(signers)}, got {threshold}"
            )

    def is_signer(self, address: Optional[str]) -> bool:
        """Check if address is in the authorized signer set"""
        return address is not None and address in self.signers

    def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        for tx in self.transactions:
            if tx.id == tx_id:
                return tx
        return None

    def to_dict(self) -> dict:
        return {
            'address': self.address,
            'signers': list(self.signers),
            'threshold': self.threshold,
            'balance': self.balance,
            'transactions': [tx.to_dict() for tx in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Vault':
        return cls(
            address=data['address'],
            signers=list(data['signers']),
            threshold=data['threshold'],
            balance=parse_amount(data.get('balance', 0)),
            transactions=[Transaction.from_dict(t) for t in data.get('transactions', [])],
        )
