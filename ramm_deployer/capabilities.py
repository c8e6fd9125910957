"""Tell the RAMM's two capability objects apart.

The creation transaction's effects only carry ids and owners: one shared object
(the RAMM) and two objects owned by the sender (the capabilities), with no hint
of which capability is which. One capability's type is queried, and the other's
role follows, because `ramm::new_ramm` mints exactly one `RAMMAdminCap` and one
`RAMMNewAssetCap`. If that contract ever changes, this inference breaks, and it
breaks loudly.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from ledger_client.client import LedgerClient, LedgerClientError
from ledger_client.models import ExecutionResult, ObjectArg

from .errors import ProtocolInvariantError
from .move_api import ADMIN_CAP_TYPE, NEW_ASSET_CAP_TYPE

logger = logging.getLogger(__name__)


class CapabilityRole(Enum):
    ADMIN = ADMIN_CAP_TYPE
    NEW_ASSET = NEW_ASSET_CAP_TYPE


@dataclass(frozen=True)
class CapabilityPair:
    admin: ObjectArg
    new_asset: ObjectArg


@dataclass(frozen=True)
class RammObjects:
    ramm: ObjectArg
    caps: CapabilityPair

    def ids(self) -> Dict[str, str]:
        return {
            "ramm": self.ramm.object_id,
            "admin_cap": self.caps.admin.object_id,
            "new_asset_cap": self.caps.new_asset.object_id,
        }


def split_created_objects(
    result: ExecutionResult, sender: str
) -> Tuple[ObjectArg, Tuple[ObjectArg, ObjectArg]]:
    """Return the RAMM as a mutable shared input and the two sender-owned objects."""
    shared = [created for created in result.created if created.owner.is_shared]
    if len(shared) != 1:
        raise ProtocolInvariantError(
            f"RAMM creation {result.digest} created {len(shared)} shared objects; expected exactly one."
        )
    ramm = shared[0]
    ramm_arg = ObjectArg.shared(
        ramm.object_id,
        initial_shared_version=ramm.owner.initial_shared_version,
        mutable=True,
    )

    owned = [created for created in result.created if created.owner.is_owned_by(sender)]
    if len(owned) != 2:
        raise ProtocolInvariantError(
            f"RAMM creation {result.digest} created {len(owned)} objects owned by {sender}; "
            "expected exactly two capabilities."
        )
    first, second = (ObjectArg.imm_or_owned(created.reference) for created in owned)
    return ramm_arg, (first, second)


def simple_type_name(type_name: Optional[str]) -> Optional[str]:
    if not type_name:
        return None
    parts = type_name.split("<", 1)[0].split("::")
    if len(parts) != 3 or not all(parts):
        return None
    return parts[2]


def role_of_type(type_name: Optional[str]) -> CapabilityRole:
    name = simple_type_name(type_name)
    if name == ADMIN_CAP_TYPE:
        return CapabilityRole.ADMIN
    if name == NEW_ASSET_CAP_TYPE:
        return CapabilityRole.NEW_ASSET
    raise ProtocolInvariantError(
        f"Object of type {type_name!r} is neither {ADMIN_CAP_TYPE} nor {NEW_ASSET_CAP_TYPE}."
    )


def assign_capabilities(
    owned: Tuple[ObjectArg, ObjectArg], first_role: CapabilityRole
) -> CapabilityPair:
    first, second = owned
    if first_role == CapabilityRole.ADMIN:
        return CapabilityPair(admin=first, new_asset=second)
    if first_role == CapabilityRole.NEW_ASSET:
        return CapabilityPair(admin=second, new_asset=first)
    raise ProtocolInvariantError(f"Unknown capability role {first_role!r}.")


def query_role(client: LedgerClient, capability: ObjectArg) -> CapabilityRole:
    try:
        data = client.read_object(capability.object_id)
    except LedgerClientError as exc:
        raise ProtocolInvariantError(
            f"Could not read the type of capability {capability.object_id}: {exc}"
        ) from exc
    if data.error is not None:
        raise ProtocolInvariantError(f"Capability {capability.object_id} could not be read: {data.error}")
    return role_of_type(data.type_name)


def disambiguate_capabilities(
    client: LedgerClient, result: ExecutionResult, sender: str
) -> RammObjects:
    ramm, owned = split_created_objects(result, sender)
    role = query_role(client, owned[0])
    caps = assign_capabilities(owned, role)
    logger.info(
        "RAMM %s: admin cap %s, new asset cap %s",
        ramm.object_id,
        caps.admin.object_id,
        caps.new_asset.object_id,
    )
    return RammObjects(ramm=ramm, caps=caps)
