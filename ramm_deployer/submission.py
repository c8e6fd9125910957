"""Sign, submit and check a transaction."""

import logging

from ledger_client.client import LedgerClient
from ledger_client.models import ExecutionResult, UnsignedTransaction

from .errors import ExecutionError

logger = logging.getLogger(__name__)


def execute_checked(client: LedgerClient, transaction: UnsignedTransaction, label: str) -> ExecutionResult:
    result = client.sign_and_submit(transaction)
    if not result.succeeded:
        reason = result.error or "no reason given"
        raise ExecutionError(
            f"{label} transaction {result.digest} failed: {reason}",
            abort_reason=reason,
        )
    logger.info("%s transaction %s executed (%s)", label, result.digest, result.status)
    return result
