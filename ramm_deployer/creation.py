"""Create the RAMM with a single, non-programmable call.

The RAMM has to exist on-chain, with a known initial shared version, before
later calls can take it as a mutable shared input; that is why creation is not
part of the populate transaction.
"""

import logging

from deployment_config.models import DeploymentRequest
from ledger_client.client import LedgerClient
from ledger_client.models import ExecutionResult

from .move_api import CREATE_RAMM_GAS_BUDGET, NEW_RAMM, RAMM_MODULE
from .submission import execute_checked

logger = logging.getLogger(__name__)


def create_ramm(
    client: LedgerClient,
    sender: str,
    package_id: str,
    request: DeploymentRequest,
) -> ExecutionResult:
    transaction = client.call(
        sender,
        package_id,
        RAMM_MODULE,
        NEW_RAMM,
        (),
        (request.fee_collection_address,),
        CREATE_RAMM_GAS_BUDGET,
    )
    result = execute_checked(client, transaction, "RAMM creation")
    logger.info("RAMM creation created %d objects", len(result.created))
    return result
