"""Error taxonomy for RAMM deployment, and classification of collaborator failures."""

from enum import Enum

from deployment_config.validator import ConfigurationError
from ledger_client.client import (
    ClientConstructionError,
    LedgerClientError,
    RequestFailure,
    SigningFailure,
    TransactionBuildFailure,
)
from ledger_client.ptb import PtbError


class ErrorKind(Enum):
    CONFIGURATION = "configuration"
    NETWORK = "network"
    TRANSACTION_BUILD = "transaction_build"
    SIGNING = "signing"
    EXECUTION = "execution"
    PROTOCOL_INVARIANT = "protocol_invariant"


class DeploymentError(RuntimeError):
    """Base class for fatal deployment failures."""

    kind: ErrorKind = ErrorKind.EXECUTION


class NetworkError(DeploymentError):
    """Raised when the network cannot be reached or a client cannot be built."""

    kind = ErrorKind.NETWORK


class TransactionBuildError(DeploymentError):
    """Raised when compilation or transaction construction fails."""

    kind = ErrorKind.TRANSACTION_BUILD


class SigningError(DeploymentError):
    """Raised when the keystore cannot sign a transaction."""

    kind = ErrorKind.SIGNING


class ExecutionError(DeploymentError):
    """Raised when the ledger rejects or aborts a submitted transaction."""

    kind = ErrorKind.EXECUTION

    def __init__(self, message: str, abort_reason: str = "") -> None:
        super().__init__(message)
        self.abort_reason = abort_reason


class ProtocolInvariantError(DeploymentError):
    """Raised when results no longer have the shape the RAMM contract guarantees.

    This is not a business error: it means the Move contract or the ledger's
    semantics changed, and the deployment stops instead of guessing.
    """

    kind = ErrorKind.PROTOCOL_INVARIANT


_LEDGER_ERROR_KINDS = (
    (ClientConstructionError, ErrorKind.NETWORK),
    (TransactionBuildFailure, ErrorKind.TRANSACTION_BUILD),
    (SigningFailure, ErrorKind.SIGNING),
    (RequestFailure, ErrorKind.NETWORK),
)


def classify(exc: BaseException) -> ErrorKind:
    if isinstance(exc, DeploymentError):
        return exc.kind
    if isinstance(exc, ConfigurationError):
        return ErrorKind.CONFIGURATION
    if isinstance(exc, PtbError):
        return ErrorKind.TRANSACTION_BUILD
    for error_cls, kind in _LEDGER_ERROR_KINDS:
        if isinstance(exc, error_cls):
            return kind
    if isinstance(exc, LedgerClientError):
        return ErrorKind.NETWORK
    raise TypeError(f"{type(exc).__name__} is not a deployment failure.") from exc
