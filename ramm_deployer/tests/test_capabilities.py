"""Unit tests for telling the RAMM capabilities apart."""

import unittest

from ledger_client.client import RequestFailure
from ledger_client.models import CreatedObject, ExecutionResult, ObjectArgKind, ObjectRef, Owner
from ledger_client.simulator import SimulatedLedger

from ramm_deployer.capabilities import (
    CapabilityRole,
    disambiguate_capabilities,
    role_of_type,
    simple_type_name,
)
from ramm_deployer.errors import ProtocolInvariantError

SENDER = "0x5e4d"


def _created(object_id: str, owner: Owner) -> CreatedObject:
    return CreatedObject(reference=ObjectRef(object_id, 2, "d" + object_id), owner=owner)


def _creation(*owned_ids: str, shared=("0x7a",)) -> ExecutionResult:
    created = [_created(object_id, Owner.shared(initial_shared_version=5)) for object_id in shared]
    created += [_created(object_id, Owner.address_owner(SENDER)) for object_id in owned_ids]
    return ExecutionResult(digest="tx", status="success", created=tuple(created))


class UnreadableLedger(SimulatedLedger):
    def read_object(self, object_id):
        raise RequestFailure("node unavailable")


class DisambiguateCapabilitiesTests(unittest.TestCase):
    def setUp(self) -> None:
        self.ledger = SimulatedLedger(sender=SENDER)

    def _cap(self, object_id: str, name: str) -> None:
        self.ledger.add_object(object_id, Owner.address_owner(SENDER), f"0xpkg::ramm::{name}")

    def test_admin_cap_first(self) -> None:
        self._cap("0xc1", "RAMMAdminCap")
        self._cap("0xc2", "RAMMNewAssetCap")
        objects = disambiguate_capabilities(self.ledger, _creation("0xc1", "0xc2"), SENDER)
        self.assertEqual(objects.caps.admin.object_id, "0xc1")
        self.assertEqual(objects.caps.new_asset.object_id, "0xc2")
        self.assertEqual(self.ledger.reads, [("0xc1",)])

    def test_new_asset_cap_first_swaps_the_roles(self) -> None:
        self._cap("0xc1", "RAMMNewAssetCap")
        self._cap("0xc2", "RAMMAdminCap")
        objects = disambiguate_capabilities(self.ledger, _creation("0xc1", "0xc2"), SENDER)
        self.assertEqual(objects.caps.admin.object_id, "0xc2")
        self.assertEqual(objects.caps.new_asset.object_id, "0xc1")

    def test_ramm_is_a_mutable_shared_input(self) -> None:
        self._cap("0xc1", "RAMMAdminCap")
        objects = disambiguate_capabilities(self.ledger, _creation("0xc1", "0xc2"), SENDER)
        self.assertEqual(objects.ramm.kind, ObjectArgKind.SHARED)
        self.assertTrue(objects.ramm.mutable)
        self.assertEqual(objects.ramm.version, 5)
        self.assertEqual(objects.caps.admin.kind, ObjectArgKind.IMM_OR_OWNED)
        self.assertEqual(objects.caps.admin.version, 2)
        self.assertEqual(objects.ids(), {"ramm": "0x7a", "admin_cap": "0xc1", "new_asset_cap": "0xc2"})

    def test_unexpected_type_fails(self) -> None:
        self._cap("0xc1", "UpgradeCap")
        with self.assertRaises(ProtocolInvariantError):
            disambiguate_capabilities(self.ledger, _creation("0xc1", "0xc2"), SENDER)

    def test_wrong_owned_count_fails_before_any_query(self) -> None:
        for owned in ((), ("0xc1",), ("0xc1", "0xc2", "0xc3")):
            with self.assertRaises(ProtocolInvariantError, msg=str(owned)):
                disambiguate_capabilities(self.ledger, _creation(*owned), SENDER)
        self.assertEqual(self.ledger.reads, [])

    def test_wrong_shared_count_fails_before_any_query(self) -> None:
        for shared in ((), ("0x7a", "0x7b")):
            with self.assertRaises(ProtocolInvariantError):
                disambiguate_capabilities(self.ledger, _creation("0xc1", "0xc2", shared=shared), SENDER)
        self.assertEqual(self.ledger.reads, [])

    def test_objects_owned_by_someone_else_are_not_capabilities(self) -> None:
        result = ExecutionResult(
            digest="tx",
            status="success",
            created=(
                _created("0x7a", Owner.shared(5)),
                _created("0xc1", Owner.address_owner(SENDER)),
                _created("0xc2", Owner.address_owner("0xfee")),
            ),
        )
        with self.assertRaises(ProtocolInvariantError):
            disambiguate_capabilities(self.ledger, result, SENDER)

    def test_query_failure_is_a_protocol_invariant_error(self) -> None:
        with self.assertRaises(ProtocolInvariantError):
            disambiguate_capabilities(UnreadableLedger(sender=SENDER), _creation("0xc1", "0xc2"), SENDER)

    def test_missing_capability_object_fails(self) -> None:
        with self.assertRaises(ProtocolInvariantError):
            disambiguate_capabilities(self.ledger, _creation("0xc1", "0xc2"), SENDER)


class TypeNameTests(unittest.TestCase):
    def test_simple_type_name(self) -> None:
        self.assertEqual(simple_type_name("0xpkg::ramm::RAMMAdminCap"), "RAMMAdminCap")
        self.assertEqual(simple_type_name("0xpkg::ramm::Cap<0x2::sui::SUI>"), "Cap")
        self.assertIsNone(simple_type_name("RAMMAdminCap"))
        self.assertIsNone(simple_type_name(None))

    def test_role_of_type_matches_the_simple_name_only(self) -> None:
        self.assertEqual(role_of_type("0x1::other::RAMMAdminCap"), CapabilityRole.ADMIN)
        self.assertEqual(role_of_type("0xpkg::ramm::RAMMNewAssetCap"), CapabilityRole.NEW_ASSET)
        with self.assertRaises(ProtocolInvariantError):
            role_of_type("0xpkg::ramm::RAMMAdminCapV2")


if __name__ == "__main__":
    unittest.main()
