"""Resolve the RAMM package id: reuse a configured one, or publish the library and read it back."""

import logging
from pathlib import Path

from deployment_config.models import PackageSource, PublishedPackage
from ledger_client.client import LedgerClient
from ledger_client.models import ExecutionResult

from .errors import ProtocolInvariantError
from .move_api import PACKAGE_PUBLICATION_GAS_BUDGET
from .submission import execute_checked

logger = logging.getLogger(__name__)


def resolve_package(client: LedgerClient, sender: str, source: PackageSource) -> str:
    if isinstance(source, PublishedPackage):
        logger.info("RAMM package ID read from config: %s", source.package_id)
        return source.package_id

    logger.info("Publishing RAMM library at %s to obtain its package ID", source.path)
    result = publish_package(client, sender, source.path)
    package_id = extract_package_id(result)
    logger.info("RAMM package ID: %s", package_id)
    return package_id


def publish_package(client: LedgerClient, sender: str, path: Path) -> ExecutionResult:
    compiled = client.compile_package(path)
    logger.info("Compiled %d modules from %s", len(compiled.modules), path)
    transaction = client.publish(
        sender,
        compiled.modules,
        compiled.dependencies,
        PACKAGE_PUBLICATION_GAS_BUDGET,
    )
    return execute_checked(client, transaction, "Package publication")


def extract_package_id(result: ExecutionResult) -> str:
    """The published package is the one immutable object a publish creates."""
    immutable = [created for created in result.created if created.owner.is_immutable]
    if len(immutable) != 1:
        raise ProtocolInvariantError(
            f"Publish transaction {result.digest} created {len(immutable)} immutable objects; "
            "expected exactly one package."
        )
    return immutable[0].object_id
