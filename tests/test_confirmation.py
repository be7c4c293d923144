"""
Tests for ConfirmationWaiter.
"""
import time
from unittest.mock import MagicMock

import pytest

from movetx_sdk.confirmation import ConfirmationWaiter
from movetx_sdk.exceptions import ConfirmationTimeout, NetworkError
from movetx_sdk.ledger import LedgerClient

EXECUTED = {"type": "user_transaction", "success": True, "vm_status": "Executed successfully"}
ABORTED = {
    "type": "user_transaction",
    "success": False,
    "vm_status": "Move abort in 0xab::poll: EPOLL_CLOSED(0x10003)"
}


@pytest.fixture
def ledger():
    return MagicMock(spec=LedgerClient)


def test_executed_immediately(ledger):
    ledger.get_transaction_by_hash.return_value = EXECUTED
    result = ConfirmationWaiter(ledger).wait_for_outcome("0xabc")

    assert result.success is True
    assert result.transaction_hash == "0xabc"
    assert result.abort_reason is None
    ledger.get_transaction_by_hash.assert_called_once_with("0xabc")


def test_abort_reason_from_vm_status(ledger):
    ledger.get_transaction_by_hash.return_value = ABORTED
    result = ConfirmationWaiter(ledger).wait_for_outcome("0xabc")

    assert result.success is False
    assert result.abort_reason == ABORTED["vm_status"]


def test_abort_without_vm_status(ledger):
    ledger.get_transaction_by_hash.return_value = {"type": "user_transaction", "success": False}
    result = ConfirmationWaiter(ledger).wait_for_outcome("0xabc")
    assert result.abort_reason == "unknown abort"


def test_polls_with_backoff(ledger, monkeypatch):
    sleeps = []
    monkeypatch.setattr(time, "sleep", sleeps.append)
    ledger.get_transaction_by_hash.side_effect = [None, None, {"type": "pending_transaction"}, None, None, None,
                                                  EXECUTED]

    result = ConfirmationWaiter(ledger, poll_interval=0.2, max_poll_interval=1.0).wait_for_outcome("0xabc")

    assert result.success is True
    assert ledger.get_transaction_by_hash.call_count == 7
    assert sleeps == pytest.approx([0.2, 0.4, 0.8, 1.0, 1.0, 1.0])


def test_timeout(ledger, monkeypatch):
    clock = iter(range(0, 100, 5))
    monkeypatch.setattr(time, "monotonic", lambda: next(clock))
    ledger.get_transaction_by_hash.return_value = {"type": "pending_transaction"}

    with pytest.raises(ConfirmationTimeout) as exc_info:
        ConfirmationWaiter(ledger).wait_for_outcome("0xabc", timeout=12)

    assert exc_info.value.transaction_hash == "0xabc"
    assert isinstance(exc_info.value, NetworkError)


def test_network_error_propagates(ledger):
    ledger.get_transaction_by_hash.side_effect = NetworkError("down")
    with pytest.raises(NetworkError):
        ConfirmationWaiter(ledger).wait_for_outcome("0xabc")
