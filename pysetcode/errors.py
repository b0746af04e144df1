"""Error taxonomy for building, signing and submitting set-code transactions.

Every error records the stage that failed and, where known, the field that
caused it. Network-level errors also carry the context a caller needs to
rebuild and resubmit (last-known nonce, signing digest, transaction hash).
"""

from enum import Enum
from typing import Optional


class Stage(str, Enum):
    """Pipeline stage in which a failure happened."""

    AUTHORIZATION = "authorization"
    BUILD = "build"
    ASSEMBLY = "assembly"
    BROADCAST = "broadcast"
    CONFIRMATION = "confirmation"


class SetCodeError(Exception):
    """Base class for all pysetcode errors."""

    default_stage: Optional[Stage] = None

    def __init__(
        self,
        message: str,
        *,
        stage: Optional[Stage] = None,
        field: Optional[str] = None,
        nonce: Optional[int] = None,
        digest: Optional[bytes] = None,
        tx_hash: Optional[bytes] = None,
    ):
        self.stage = stage if stage is not None else self.default_stage
        self.field = field
        self.nonce = nonce
        self.digest = digest
        self.tx_hash = tx_hash
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        parts = []
        if self.stage is not None:
            parts.append(f"[{self.stage.value}]")
        if self.field:
            parts.append(f"{self.field}:")
        parts.append(self.message)
        return " ".join(parts)


class EncodingError(SetCodeError, ValueError):
    """A field could not be put into canonical form."""


class InvalidAddress(SetCodeError, ValueError):
    """Zero or malformed address used as delegate or call target."""


class SigningError(SetCodeError, ValueError):
    """Bad private key material."""


class InvalidTransaction(SetCodeError, ValueError):
    """Transaction fields violate a construction-time rule."""

    default_stage = Stage.BUILD


class NodeRejection(SetCodeError):
    """The node refused the broadcast (funds, nonce, malformed authorization)."""

    default_stage = Stage.BROADCAST


class ExecutionReverted(SetCodeError):
    """The transaction was included but its call failed."""

    default_stage = Stage.CONFIRMATION

    def __init__(self, message: str, *, receipt=None, **kwargs):
        self.receipt = receipt
        super().__init__(message, **kwargs)


class ReceiptTimeout(SetCodeError, TimeoutError):
    """No receipt appeared within the polling window."""

    default_stage = Stage.CONFIRMATION
