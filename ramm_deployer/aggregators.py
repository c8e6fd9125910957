"""Resolve each asset's price aggregator into a read-only shared transaction input."""

import logging
from typing import Sequence, Tuple

from deployment_config.models import AssetSpec
from ledger_client.client import LedgerClient
from ledger_client.models import ObjectArg, ObjectData

from .errors import ProtocolInvariantError

logger = logging.getLogger(__name__)


def aggregator_object_id(address: str) -> str:
    address = address.strip()
    if not address.lower().startswith("0x"):
        address = "0x" + address
    return address


def resolve_aggregators(client: LedgerClient, assets: Sequence[AssetSpec]) -> Tuple[ObjectArg, ...]:
    """One batched read for all aggregators; the result is positional, one arg per asset."""
    object_ids = [aggregator_object_id(asset.aggregator_address) for asset in assets]
    objects = client.read_objects_batch(object_ids)
    if len(objects) != len(assets):
        raise ProtocolInvariantError(
            f"Requested {len(assets)} aggregators but the ledger returned {len(objects)}."
        )
    aggregators = tuple(
        _aggregator_arg(asset, data) for asset, data in zip(assets, objects)
    )
    logger.info("Resolved %d aggregators as shared objects", len(aggregators))
    return aggregators


def _aggregator_arg(asset: AssetSpec, data: ObjectData) -> ObjectArg:
    if data.error is not None:
        raise ProtocolInvariantError(
            f"Aggregator {asset.aggregator_address} for {asset.asset_type} could not be read: {data.error}"
        )
    if data.owner is None or not data.owner.is_shared:
        owner = data.owner.kind.value if data.owner is not None else "unknown"
        raise ProtocolInvariantError(
            f"Aggregator {asset.aggregator_address} for {asset.asset_type} is {owner}, not shared; "
            "check the aggregator address in the deployment config."
        )
    return ObjectArg.shared(
        data.object_id,
        initial_shared_version=data.owner.initial_shared_version,
        mutable=False,
    )
