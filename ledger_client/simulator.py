"""In-memory ledger that executes RAMM deployment transactions without network calls."""

from __future__ import annotations

import base64
import hashlib
import itertools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from .client import RequestFailure, SigningFailure
from .models import (
    Coin,
    CompiledPackage,
    CreatedObject,
    ExecutionResult,
    ObjectArg,
    ObjectArgKind,
    ObjectData,
    ObjectRef,
    Owner,
    UnsignedTransaction,
    normalize_address,
    same_address,
)
from .ptb import Argument, ArgumentKind, ProgrammableTransaction, ProgrammableTransactionBuilder, PureArg

logger = logging.getLogger(__name__)

SUI_COIN_TYPE = "0x2::sui::SUI"
DEFAULT_SENDER = "0x5e4d"
DEFAULT_GAS_PRICE = 1_000
DEFAULT_COIN_BALANCE = 5_000_000_000

ADMIN_CAP = "RAMMAdminCap"
NEW_ASSET_CAP = "RAMMNewAssetCap"


@dataclass
class SimulatedObject:
    object_id: str
    version: int
    owner: Owner
    type_name: str

    @property
    def digest(self) -> str:
        return _digest(f"{self.object_id}:{self.version}")

    @property
    def reference(self) -> ObjectRef:
        return ObjectRef(object_id=self.object_id, version=self.version, digest=self.digest)


@dataclass
class SimulatedRamm:
    fee_collection_address: str
    assets: List[Tuple[str, str, int, int]] = field(default_factory=list)
    initialized: bool = False


class SimulationError(RuntimeError):
    """Raised inside a simulated execution; surfaces as a failed execution status."""


class SimulatedLedger:
    """Executes publish, `ramm::new_ramm` and the populate/initialize PTB in memory.

    `cap_order` fixes the order in which `new_ramm` reports its two owned
    capabilities, so tests can exercise both disambiguation outcomes.
    """

    def __init__(
        self,
        sender: str = DEFAULT_SENDER,
        gas_price: int = DEFAULT_GAS_PRICE,
        coin_balances: Sequence[int] = (DEFAULT_COIN_BALANCE,),
        cap_order: Tuple[str, str] = (ADMIN_CAP, NEW_ASSET_CAP),
    ) -> None:
        self._sender = sender
        self._gas_price = gas_price
        self._cap_order = cap_order
        self._objects: Dict[str, SimulatedObject] = {}
        self._balances: Dict[str, int] = {}
        self._ramms: Dict[str, SimulatedRamm] = {}
        self._pending: Dict[str, Tuple[str, object]] = {}
        self._ids = itertools.count(1)
        self._tx_counter = itertools.count(1)
        self.submitted: List[UnsignedTransaction] = []
        self.reads: List[Tuple[str, ...]] = []
        for balance in coin_balances:
            self.add_object(self._new_id(), Owner.address_owner(sender), f"0x2::coin::Coin<{SUI_COIN_TYPE}>", balance)

    # Seeding and inspection

    def add_object(self, object_id: str, owner: Owner, type_name: str, balance: int = 0) -> SimulatedObject:
        obj = SimulatedObject(object_id=object_id, version=1, owner=owner, type_name=type_name)
        self._objects[normalize_address(object_id)] = obj
        if balance:
            self._balances[normalize_address(object_id)] = balance
        return obj

    def add_shared_object(self, object_id: str, type_name: str = "0x5::aggregator::Aggregator") -> SimulatedObject:
        return self.add_object(object_id, Owner.shared(initial_shared_version=1), type_name)

    def ramm(self, object_id: str) -> SimulatedRamm:
        return self._ramms[normalize_address(object_id)]

    # LedgerClient surface

    def active_address(self) -> str:
        return self._sender

    def compile_package(self, path: Path) -> CompiledPackage:
        module = base64.b64encode(f"module:{Path(path).name}".encode("utf-8")).decode("ascii")
        return CompiledPackage(modules=(module,), dependencies=("0x1", "0x2"))

    def publish(
        self,
        sender: str,
        modules: Sequence[str],
        dependencies: Sequence[str],
        gas_budget: int,
    ) -> UnsignedTransaction:
        return self._stage(sender, "publish", (tuple(modules), tuple(dependencies), gas_budget))

    def call(
        self,
        sender: str,
        package: str,
        module: str,
        function: str,
        type_arguments: Sequence[str],
        arguments: Sequence[object],
        gas_budget: int,
    ) -> UnsignedTransaction:
        return self._stage(
            sender,
            "call",
            (package, module, function, tuple(type_arguments), tuple(arguments), gas_budget),
        )

    def programmable_tx_builder(self) -> ProgrammableTransactionBuilder:
        return ProgrammableTransactionBuilder()

    def programmable(
        self,
        sender: str,
        transaction: ProgrammableTransaction,
        gas_coin: ObjectRef,
        gas_budget: int,
        gas_price: int,
    ) -> UnsignedTransaction:
        return self._stage(sender, "programmable", (transaction, gas_coin, gas_budget, gas_price))

    def sign_and_submit(self, transaction: UnsignedTransaction) -> ExecutionResult:
        if not same_address(transaction.sender, self._sender):
            raise SigningFailure(f"No key for {transaction.sender} in the simulated keystore.")
        try:
            kind, payload = self._pending.pop(transaction.tx_bytes)
        except KeyError as exc:
            raise RequestFailure("Unknown or already submitted transaction.") from exc
        self.submitted.append(transaction)
        digest = _digest(f"tx:{next(self._tx_counter)}")

        try:
            if kind == "publish":
                created = self._execute_publish()
            elif kind == "call":
                created = self._execute_call(*payload)
            else:
                created = self._execute_programmable(*payload)
        except SimulationError as exc:
            logger.debug("Simulated %s transaction aborted: %s", kind, exc)
            return ExecutionResult(digest=digest, status="failure", error=str(exc))
        return ExecutionResult(digest=digest, status="success", created=created)

    def read_object(self, object_id: str) -> ObjectData:
        self.reads.append((object_id,))
        return self._object_data(object_id)

    def read_objects_batch(self, object_ids: Sequence[str]) -> Tuple[ObjectData, ...]:
        self.reads.append(tuple(object_ids))
        return tuple(self._object_data(object_id) for object_id in object_ids)

    def coins_for(self, address: str) -> Tuple[Coin, ...]:
        return tuple(
            Coin(
                coin_type=SUI_COIN_TYPE,
                object_id=obj.object_id,
                version=obj.version,
                digest=obj.digest,
                balance=self._balances.get(key, 0),
            )
            for key, obj in self._objects.items()
            if key in self._balances and obj.owner.is_owned_by(address)
        )

    def gas_price(self) -> int:
        return self._gas_price

    # Execution

    def _stage(self, sender: str, kind: str, payload: object) -> UnsignedTransaction:
        token = base64.b64encode(f"simulated:{kind}:{next(self._tx_counter)}".encode("utf-8")).decode("ascii")
        self._pending[token] = (kind, payload)
        return UnsignedTransaction(sender=sender, kind=kind, tx_bytes=token)

    def _execute_publish(self) -> Tuple[CreatedObject, ...]:
        package = self._create(Owner.immutable(), "package")
        upgrade_cap = self._create(Owner.address_owner(self._sender), "0x2::package::UpgradeCap")
        return (package, upgrade_cap)

    def _execute_call(self, package, module, function, type_arguments, arguments, gas_budget):
        self._require_package(package)
        if (module, function) != ("ramm", "new_ramm"):
            raise SimulationError(f"Function {module}::{function} not found in package {package}.")
        if len(arguments) != 1:
            raise SimulationError("new_ramm takes exactly one argument.")
        ramm = self._create(Owner.shared(initial_shared_version=1), f"{package}::ramm::RAMM")
        self._ramms[normalize_address(ramm.object_id)] = SimulatedRamm(fee_collection_address=str(arguments[0]))
        caps = tuple(
            self._create(Owner.address_owner(self._sender), f"{package}::ramm::{name}")
            for name in self._cap_order
        )
        return (ramm,) + caps

    def _execute_programmable(
        self,
        transaction: ProgrammableTransaction,
        gas_coin: ObjectRef,
        gas_budget: int,
        gas_price: int,
    ) -> Tuple[CreatedObject, ...]:
        coin = self._objects.get(normalize_address(gas_coin.object_id))
        if coin is None or coin.version != gas_coin.version or not coin.owner.is_owned_by(self._sender):
            raise SimulationError("Gas coin is not a current object owned by the sender.")
        if gas_price < self._gas_price:
            raise SimulationError("Gas price is below the reference gas price.")
        if self._balances.get(normalize_address(coin.object_id), 0) < gas_budget:
            raise SimulationError("Gas coin balance does not cover the budget.")
        for value in transaction.inputs:
            if isinstance(value, ObjectArg):
                self._check_input(value)

        # Work on copies so a failing command leaves no trace.
        staged = {key: SimulatedRamm(r.fee_collection_address, list(r.assets), r.initialized) for key, r in self._ramms.items()}
        for command in transaction.commands:
            self._require_package(command.package)
            args = [self._resolve(transaction, argument) for argument in command.arguments]
            if (command.module, command.function) == ("ramm", "add_asset_to_ramm"):
                self._add_asset(staged, command.type_arguments, args)
            elif (command.module, command.function) == ("ramm", "initialize_ramm"):
                self._initialize(staged, args)
            else:
                raise SimulationError(f"Function {command.module}::{command.function} not found.")

        self._ramms = staged
        coin.version += 1
        return ()

    def _add_asset(self, staged: Dict[str, SimulatedRamm], type_arguments, args) -> None:
        if len(type_arguments) != 1 or len(args) != 6:
            raise SimulationError("add_asset_to_ramm takes one type argument and six arguments.")
        ramm_arg, aggregator, min_trade, decimals, admin, new_asset = args
        if not isinstance(min_trade, PureArg) or min_trade.type_name != "u64":
            raise SimulationError("Minimum trade amount must be a u64.")
        if not isinstance(decimals, PureArg) or decimals.type_name != "u8":
            raise SimulationError("Decimal places must be a u8.")
        ramm = self._ramm_for(staged, ramm_arg, mutable=True)
        self._check_caps(admin, new_asset)
        if not isinstance(aggregator, ObjectArg) or aggregator.kind != ObjectArgKind.SHARED:
            raise SimulationError("Aggregator must be a shared object.")
        if ramm.initialized:
            raise SimulationError("Cannot add assets to an initialized RAMM.")
        if any(existing[0] == type_arguments[0] for existing in ramm.assets):
            raise SimulationError(f"Asset {type_arguments[0]} already added.")
        ramm.assets.append((type_arguments[0], aggregator.object_id, min_trade.value, decimals.value))

    def _initialize(self, staged: Dict[str, SimulatedRamm], args) -> None:
        if len(args) != 3:
            raise SimulationError("initialize_ramm takes three arguments.")
        ramm_arg, admin, new_asset = args
        ramm = self._ramm_for(staged, ramm_arg, mutable=True)
        self._check_caps(admin, new_asset)
        if not ramm.assets:
            raise SimulationError("Cannot initialize a RAMM without assets.")
        ramm.initialized = True

    def _ramm_for(self, staged: Dict[str, SimulatedRamm], value, mutable: bool) -> SimulatedRamm:
        if not isinstance(value, ObjectArg) or normalize_address(value.object_id) not in staged:
            raise SimulationError("First argument must be a RAMM object.")
        if mutable and not value.mutable:
            raise SimulationError("RAMM must be passed as a mutable shared object.")
        return staged[normalize_address(value.object_id)]

    def _check_caps(self, admin, new_asset) -> None:
        for value, name in ((admin, ADMIN_CAP), (new_asset, NEW_ASSET_CAP)):
            obj = self._objects.get(normalize_address(value.object_id)) if isinstance(value, ObjectArg) else None
            if obj is None or not obj.type_name.endswith(f"::{name}"):
                raise SimulationError(f"Expected a {name} argument.")

    def _check_input(self, value: ObjectArg) -> None:
        obj = self._objects.get(normalize_address(value.object_id))
        if obj is None:
            raise SimulationError(f"Input object {value.object_id} does not exist.")
        if value.kind == ObjectArgKind.SHARED:
            if not obj.owner.is_shared or obj.owner.initial_shared_version != value.version:
                raise SimulationError(f"Input object {value.object_id} is not shared at that version.")
        elif not obj.owner.is_owned_by(self._sender) or obj.version != value.version:
            raise SimulationError(f"Input object {value.object_id} is not a current owned object.")

    def _resolve(self, transaction: ProgrammableTransaction, argument: Argument):
        if argument.kind == ArgumentKind.RESULT:
            raise SimulationError("Command results are not supported by the simulator.")
        value = transaction.inputs[argument.index]
        if isinstance(value, (ObjectArg, PureArg)):
            return value
        raise SimulationError(f"Unsupported input {value!r}.")

    def _require_package(self, package: str) -> None:
        obj = self._objects.get(normalize_address(package))
        if obj is None or obj.type_name != "package":
            raise SimulationError(f"Package {package} does not exist.")

    def _create(self, owner: Owner, type_name: str) -> CreatedObject:
        obj = self.add_object(self._new_id(), owner, type_name)
        return CreatedObject(reference=obj.reference, owner=owner)

    def _object_data(self, object_id: str) -> ObjectData:
        obj = self._objects.get(normalize_address(object_id))
        if obj is None:
            return ObjectData(object_id=object_id, error=f"Object {object_id} does not exist.")
        return ObjectData(
            object_id=obj.object_id,
            version=obj.version,
            digest=obj.digest,
            owner=obj.owner,
            type_name=obj.type_name,
        )

    def _new_id(self) -> str:
        return "0x" + hashlib.sha256(f"object:{next(self._ids)}".encode("utf-8")).hexdigest()


def _digest(seed: str) -> str:
    return base64.b64encode(hashlib.sha256(seed.encode("utf-8")).digest()).decode("ascii")
