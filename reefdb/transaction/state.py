"""Transaction lifecycle state and isolation levels."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass, field

from reefdb.schema import ReefDBError


class TransactionNotActiveError(ReefDBError):
    """Raised when an operation needs an active transaction and it is not."""

    def __init__(self, message: str = "Transaction is not active") -> None:
        super().__init__(message)


class IsolationLevel(enum.Enum):
    """How much of other transactions' work a transaction can see."""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"

    @classmethod
    def default(cls) -> "IsolationLevel":
        return cls.READ_COMMITTED


class TransactionState(enum.Enum):
    """Where a transaction is in its lifecycle."""

    ACTIVE = "ACTIVE"
    COMMITTED = "COMMITTED"
    ROLLED_BACK = "ROLLED BACK"


@dataclass
class TransactionStateHandler:
    """Tracks one transaction's id, isolation level, start time and state."""

    transaction_id: int
    isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED
    state: TransactionState = field(default=TransactionState.ACTIVE, init=False)
    start_timestamp: float = field(default_factory=time.time, init=False)

    def _finish(self, new_state: TransactionState) -> None:
        if self.state is not TransactionState.ACTIVE:
            raise TransactionNotActiveError()
        self.state = new_state

    def commit(self) -> None:
        """Mark the transaction committed; it must be active."""
        self._finish(TransactionState.COMMITTED)

    def rollback(self) -> None:
        """Mark the transaction rolled back; it must be active."""
        self._finish(TransactionState.ROLLED_BACK)