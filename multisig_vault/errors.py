"""
Error taxonomy for vault operations
"""


class MultisigError(Exception):
    """Base class for vault domain errors"""

    code = "multisig_error"


class InvalidAddress(MultisigError):
    """Raised when an account address is empty or malformed"""

    code = "invalid_address"


class ValidationError(MultisigError):
    """Raised when proposal input or vault data is malformed"""

    code = "validation_error"


class UnknownSigner(MultisigError):
    """Raised when an address is not in the transaction's signer snapshot"""

    code = "unknown_signer"


class AlreadyTerminal(MultisigError):
    """Raised when mutating an executed or failed transaction"""

    code = "already_terminal"


class QuorumNotMet(MultisigError):
    """Raised when executing before the threshold is reached"""

    code = "quorum_not_met"


class NotFound(MultisigError):
    """Raised for an unknown vault or transaction id"""

    code = "not_found"


class BroadcastError(MultisigError):
    """Raised by a broadcaster when the ledger rejects a transaction"""

    code = "broadcast_error"
