"""The ledger client surface consumed by the deployment pipeline."""

from pathlib import Path
from typing import Protocol, Sequence, Tuple

from .models import (
    Coin,
    CompiledPackage,
    ExecutionResult,
    ObjectData,
    ObjectRef,
    UnsignedTransaction,
)
from .ptb import ProgrammableTransaction, ProgrammableTransactionBuilder


class LedgerClientError(RuntimeError):
    """Base class for failures raised by a ledger client."""


class ClientConstructionError(LedgerClientError):
    """Raised when no client can be built for the requested network."""


class TransactionBuildFailure(LedgerClientError):
    """Raised when compilation or transaction construction fails."""


class SigningFailure(LedgerClientError):
    """Raised when the keystore cannot sign a transaction."""


class RequestFailure(LedgerClientError):
    """Raised when a read or submission request to the network fails."""


class LedgerClient(Protocol):
    def active_address(self) -> str:
        ...

    def compile_package(self, path: Path) -> CompiledPackage:
        ...

    def publish(
        self,
        sender: str,
        modules: Sequence[str],
        dependencies: Sequence[str],
        gas_budget: int,
    ) -> UnsignedTransaction:
        ...

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
        ...

    def programmable_tx_builder(self) -> ProgrammableTransactionBuilder:
        ...

    def programmable(
        self,
        sender: str,
        transaction: ProgrammableTransaction,
        gas_coin: ObjectRef,
        gas_budget: int,
        gas_price: int,
    ) -> UnsignedTransaction:
        ...

    def sign_and_submit(self, transaction: UnsignedTransaction) -> ExecutionResult:
        ...

    def read_object(self, object_id: str) -> ObjectData:
        ...

    def read_objects_batch(self, object_ids: Sequence[str]) -> Tuple[ObjectData, ...]:
        ...

    def coins_for(self, address: str) -> Tuple[Coin, ...]:
        ...

    def gas_price(self) -> int:
        ...
