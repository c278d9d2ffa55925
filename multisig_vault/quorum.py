"""
Quorum evaluation for vault transactions

Everything here is derived from (signers, threshold) alone, so two observers
holding the same transaction snapshot always agree on its status.
"""

from .vault import Transaction, TransactionStatus


def signature_count(tx: Transaction) -> int:
    """Number of snapshot signers that have signed"""
    return sum(1 for signer in tx.signers if signer.has_signed)


def is_ready(tx: Transaction, threshold: int) -> bool:
    """Check if enough signatures were collected to execute"""
    return signature_count(tx) >= threshold


def derive_status(tx: Transaction, threshold: int) -> TransactionStatus:
    """Status implied by the current signatures; terminal states are kept"""
    if tx.status.is_terminal:
        return tx.status

    if is_ready(tx, threshold):
        return TransactionStatus.READY_TO_EXECUTE

    if signature_count(tx) > 0:
        return TransactionStatus.SIGNED

    return TransactionStatus.PENDING


def refresh_status(tx: Transaction, threshold: int) -> TransactionStatus:
    """Store the derived status on the transaction and return it"""
    tx.status = derive_status(tx, threshold)
    return tx.status


def describe(tx: Transaction, threshold: int) -> dict:
    """Quorum progress for display and API responses"""
    count = signature_count(tx)
    return {
        'signature_count': count,
        'threshold': threshold,
        'remaining': max(threshold - count, 0),
        'ready': count >= threshold,
        'status': derive_status(tx, threshold).value,
    }
