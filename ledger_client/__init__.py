from .client import (
    ClientConstructionError,
    LedgerClient,
    LedgerClientError,
    RequestFailure,
    SigningFailure,
    TransactionBuildFailure,
)
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
    OwnerKind,
    UnsignedTransaction,
)
from .ptb import (
    Argument,
    ArgumentKind,
    MoveCall,
    ProgrammableTransaction,
    ProgrammableTransactionBuilder,
    PtbError,
    PureArg,
)
from .simulator import SimulatedLedger
from .sui_cli import SuiCliClient

__all__ = [
    "Argument",
    "ArgumentKind",
    "ClientConstructionError",
    "Coin",
    "CompiledPackage",
    "CreatedObject",
    "ExecutionResult",
    "LedgerClient",
    "LedgerClientError",
    "MoveCall",
    "ObjectArg",
    "ObjectArgKind",
    "ObjectData",
    "ObjectRef",
    "Owner",
    "OwnerKind",
    "ProgrammableTransaction",
    "ProgrammableTransactionBuilder",
    "PtbError",
    "PureArg",
    "RequestFailure",
    "SigningFailure",
    "SimulatedLedger",
    "SuiCliClient",
    "TransactionBuildFailure",
    "UnsignedTransaction",
]
