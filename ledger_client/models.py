"""Ledger wire models: objects, ownership, transactions and execution results."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class OwnerKind(Enum):
    ADDRESS = "AddressOwner"
    OBJECT = "ObjectOwner"
    SHARED = "Shared"
    IMMUTABLE = "Immutable"


@dataclass(frozen=True)
class Owner:
    kind: OwnerKind
    address: Optional[str] = None
    initial_shared_version: Optional[int] = None

    @staticmethod
    def address_owner(address: str) -> "Owner":
        return Owner(kind=OwnerKind.ADDRESS, address=address)

    @staticmethod
    def shared(initial_shared_version: int) -> "Owner":
        return Owner(kind=OwnerKind.SHARED, initial_shared_version=initial_shared_version)

    @staticmethod
    def immutable() -> "Owner":
        return Owner(kind=OwnerKind.IMMUTABLE)

    @property
    def is_shared(self) -> bool:
        return self.kind == OwnerKind.SHARED

    @property
    def is_immutable(self) -> bool:
        return self.kind == OwnerKind.IMMUTABLE

    def is_owned_by(self, address: str) -> bool:
        return self.kind == OwnerKind.ADDRESS and same_address(self.address, address)

    @staticmethod
    def from_json(raw: Any) -> "Owner":
        if raw == "Immutable":
            return Owner.immutable()
        if isinstance(raw, dict):
            if "AddressOwner" in raw:
                return Owner.address_owner(raw["AddressOwner"])
            if "ObjectOwner" in raw:
                return Owner(kind=OwnerKind.OBJECT, address=raw["ObjectOwner"])
            if "Shared" in raw:
                return Owner.shared(int(raw["Shared"]["initial_shared_version"]))
        raise ValueError(f"Unrecognized owner: {raw!r}")


@dataclass(frozen=True)
class ObjectRef:
    object_id: str
    version: int
    digest: str


@dataclass(frozen=True)
class CreatedObject:
    reference: ObjectRef
    owner: Owner

    @property
    def object_id(self) -> str:
        return self.reference.object_id


@dataclass(frozen=True)
class ExecutionResult:
    digest: str
    status: str
    created: Tuple[CreatedObject, ...] = ()
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True)
class ObjectData:
    """Result of reading one object; `error` is set when the read found nothing."""

    object_id: str
    version: Optional[int] = None
    digest: Optional[str] = None
    owner: Optional[Owner] = None
    type_name: Optional[str] = None
    error: Optional[str] = None

    @property
    def reference(self) -> ObjectRef:
        if self.version is None or self.digest is None:
            raise ValueError(f"Object {self.object_id} was read without version or digest.")
        return ObjectRef(object_id=self.object_id, version=self.version, digest=self.digest)


@dataclass(frozen=True)
class Coin:
    coin_type: str
    object_id: str
    version: int
    digest: str
    balance: int

    @property
    def reference(self) -> ObjectRef:
        return ObjectRef(object_id=self.object_id, version=self.version, digest=self.digest)


@dataclass(frozen=True)
class CompiledPackage:
    modules: Tuple[str, ...]
    dependencies: Tuple[str, ...]


@dataclass(frozen=True)
class UnsignedTransaction:
    sender: str
    kind: str
    tx_bytes: str


class ObjectArgKind(Enum):
    IMM_OR_OWNED = "ImmOrOwnedObject"
    SHARED = "SharedObject"


@dataclass(frozen=True)
class ObjectArg:
    """An object as a transaction input: owned by reference, or shared by initial version."""

    kind: ObjectArgKind
    object_id: str
    version: int
    digest: Optional[str] = None
    mutable: bool = False

    @staticmethod
    def imm_or_owned(reference: ObjectRef) -> "ObjectArg":
        return ObjectArg(
            kind=ObjectArgKind.IMM_OR_OWNED,
            object_id=reference.object_id,
            version=reference.version,
            digest=reference.digest,
        )

    @staticmethod
    def shared(object_id: str, initial_shared_version: int, mutable: bool) -> "ObjectArg":
        return ObjectArg(
            kind=ObjectArgKind.SHARED,
            object_id=object_id,
            version=initial_shared_version,
            mutable=mutable,
        )

    def to_dict(self) -> Dict[str, object]:
        if self.kind == ObjectArgKind.SHARED:
            return {
                "SharedObject": {
                    "id": self.object_id,
                    "initial_shared_version": self.version,
                    "mutable": self.mutable,
                }
            }
        return {"ImmOrOwnedObject": [self.object_id, self.version, self.digest]}


def normalize_address(value: str) -> str:
    value = value.strip().lower()
    body = value[2:] if value.startswith("0x") else value
    return "0x" + (body.lstrip("0") or "0")


def same_address(left: Optional[str], right: Optional[str]) -> bool:
    if left is None or right is None:
        return False
    return normalize_address(left) == normalize_address(right)
