import time

import pytest

from reefdb.schema import ReefDBError
from reefdb.transaction.state import (
    IsolationLevel,
    TransactionNotActiveError,
    TransactionState,
    TransactionStateHandler,
)

FINISHES = [("commit", TransactionState.COMMITTED), ("rollback", TransactionState.ROLLED_BACK)]


def test_new_transaction():
    handler = TransactionStateHandler(1, IsolationLevel.READ_COMMITTED)
    assert handler.state is TransactionState.ACTIVE
    assert handler.transaction_id == 1
    assert handler.isolation_level is IsolationLevel.READ_COMMITTED


@pytest.mark.parametrize("finish, final_state", FINISHES)
@pytest.mark.parametrize("again", ["commit", "rollback"])
def test_finished_transaction_cannot_finish_again(finish, final_state, again):
    handler = TransactionStateHandler(1, IsolationLevel.READ_COMMITTED)
    getattr(handler, finish)()
    assert handler.state is final_state
    with pytest.raises(TransactionNotActiveError):
        getattr(handler, again)()
    assert handler.state is final_state


def test_isolation_level_default():
    assert IsolationLevel.default() is IsolationLevel.READ_COMMITTED
    assert TransactionStateHandler(5).isolation_level is IsolationLevel.READ_COMMITTED


def test_transaction_timestamps():
    handler1 = TransactionStateHandler(1, IsolationLevel.READ_COMMITTED)
    time.sleep(0.01)
    handler2 = TransactionStateHandler(2, IsolationLevel.READ_COMMITTED)
    assert handler2.start_timestamp > handler1.start_timestamp


def test_not_active_error_is_database_error():
    handler = TransactionStateHandler(9, IsolationLevel.SERIALIZABLE)
    handler.rollback()
    with pytest.raises(ReefDBError):
        handler.commit()
    assert handler.state is TransactionState.ROLLED_BACK