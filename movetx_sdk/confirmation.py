"""
Confirmation waiter: poll the ledger until a transaction reaches a terminal status.
"""
import logging
import time
from typing import Optional

from .exceptions import ConfirmationTimeout
from .ledger import LedgerClient
from .models import ExecutionResult

logger = logging.getLogger(__name__)


class ConfirmationWaiter:
    """
    Polls transaction status with exponential backoff.

    A transaction the ledger has not seen yet (404) or still reports as
    pending is polled again. Transport failures surface as NetworkError from
    the ledger client; they are not retried here.
    """

    def __init__(
        self,
        ledger: LedgerClient,
        poll_interval: float = 0.2,
        max_poll_interval: float = 2.0,
        logger: Optional[logging.Logger] = None
    ):
        self.ledger = ledger
        self.poll_interval = poll_interval
        self.max_poll_interval = max_poll_interval
        self.logger = logger or logging.getLogger(__name__)

    def wait_for_outcome(self, transaction_hash: str, timeout: Optional[float] = None) -> ExecutionResult:
        """
        Wait until the ledger reports the transaction as executed.

        Args:
            transaction_hash: Hash returned by submission
            timeout: Optional limit in seconds; None waits until a terminal status

        Returns:
            ExecutionResult; ``success`` is False when execution aborted, with
            the ledger's vm_status in ``abort_reason``

        Raises:
            ConfirmationTimeout: If the timeout elapses first
            NetworkError: If the ledger cannot be reached
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        interval = self.poll_interval
        polls = 0

        while True:
            data = self.ledger.get_transaction_by_hash(transaction_hash)
            polls += 1
            if data is not None and data.get("type") != "pending_transaction":
                success = bool(data.get("success"))
                vm_status = data.get("vm_status")
                self.logger.debug(f"Transaction {transaction_hash} executed after {polls} polls: {vm_status}")
                return ExecutionResult(
                    transaction_hash=transaction_hash,
                    success=success,
                    vm_status=vm_status,
                    abort_reason=None if success else (vm_status or "unknown abort"),
                )

            if deadline is not None and time.monotonic() >= deadline:
                raise ConfirmationTimeout(
                    f"Transaction {transaction_hash} not confirmed within {timeout}s",
                    transaction_hash=transaction_hash
                )
            time.sleep(interval)
            interval = min(interval * 2, self.max_poll_interval)
