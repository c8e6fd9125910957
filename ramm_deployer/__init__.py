from .aggregators import aggregator_object_id, resolve_aggregators
from .capabilities import (
    CapabilityPair,
    CapabilityRole,
    RammObjects,
    disambiguate_capabilities,
    split_created_objects,
)
from .creation import create_ramm
from .errors import (
    ConfigurationError,
    DeploymentError,
    ErrorKind,
    ExecutionError,
    NetworkError,
    ProtocolInvariantError,
    SigningError,
    TransactionBuildError,
    classify,
)
from .package import extract_package_id, publish_package, resolve_package
from .pipeline import (
    DeploymentContext,
    DeploymentPipeline,
    PipelineOutcome,
    PipelineResult,
    PipelineStep,
    StepOutcome,
    build_context,
)
from .populate import GasContext, compose_populate_transaction, fetch_gas_context, populate_and_initialize

__all__ = [
    "CapabilityPair",
    "CapabilityRole",
    "ConfigurationError",
    "DeploymentContext",
    "DeploymentError",
    "DeploymentPipeline",
    "ErrorKind",
    "ExecutionError",
    "GasContext",
    "NetworkError",
    "PipelineOutcome",
    "PipelineResult",
    "PipelineStep",
    "ProtocolInvariantError",
    "RammObjects",
    "SigningError",
    "StepOutcome",
    "TransactionBuildError",
    "aggregator_object_id",
    "build_context",
    "classify",
    "compose_populate_transaction",
    "create_ramm",
    "disambiguate_capabilities",
    "extract_package_id",
    "fetch_gas_context",
    "populate_and_initialize",
    "publish_package",
    "resolve_aggregators",
    "resolve_package",
    "split_created_objects",
]
