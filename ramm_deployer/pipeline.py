"""Deployment pipeline: a fixed chain of steps, each yielding a tagged outcome.

The chain stops at the first failed step. Nothing is rolled back: a package,
RAMM or capabilities created before the failure stay on-chain.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from deployment_config.models import DeploymentRequest
from deployment_config.validator import ConfigurationError, validate_request
from ledger_client.client import LedgerClient, LedgerClientError
from ledger_client.ptb import PtbError

from .aggregators import resolve_aggregators
from .capabilities import disambiguate_capabilities
from .creation import create_ramm
from .errors import DeploymentError, ErrorKind, NetworkError, classify
from .package import resolve_package
from .populate import populate_and_initialize

logger = logging.getLogger(__name__)

T = TypeVar("T")

STEP_FAILURES = (DeploymentError, ConfigurationError, LedgerClientError, PtbError)


class PipelineStep(Enum):
    VALIDATE = "validate"
    RESOLVE_PACKAGE = "resolve_package"
    CREATE_RAMM = "create_ramm"
    DISAMBIGUATE_CAPS = "disambiguate_caps"
    RESOLVE_AGGREGATORS = "resolve_aggregators"
    POPULATE_AND_INITIALIZE = "populate_and_initialize"


@dataclass(frozen=True)
class DeploymentContext:
    """Client, signing address and network for one deployment, passed to every step."""

    client: LedgerClient
    sender: str
    network: str


@dataclass(frozen=True)
class StepOutcome:
    step: PipelineStep
    value: object = None
    error: Optional[Exception] = None
    error_kind: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class PipelineResult:
    package_id: str
    ramm_id: str
    admin_cap_id: str
    new_asset_cap_id: str
    digest: str
    status: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "package_id": self.package_id,
            "ramm_id": self.ramm_id,
            "admin_cap_id": self.admin_cap_id,
            "new_asset_cap_id": self.new_asset_cap_id,
            "digest": self.digest,
            "status": self.status,
        }


@dataclass(frozen=True)
class PipelineOutcome:
    steps: Tuple[StepOutcome, ...]
    result: Optional[PipelineResult] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None

    @property
    def failure(self) -> Optional[StepOutcome]:
        return next((outcome for outcome in self.steps if not outcome.ok), None)


def build_context(network: str, client_factory: Callable[[str], LedgerClient]) -> DeploymentContext:
    try:
        client = client_factory(network)
        sender = client.active_address()
    except LedgerClientError as exc:
        raise NetworkError(f"Could not build a ledger client for {network}: {exc}") from exc
    logger.info("Using address %s for publishing and deployment on %s", sender, network)
    return DeploymentContext(client=client, sender=sender, network=network)


def run_step(step: PipelineStep, action: Callable[[], T]) -> StepOutcome:
    try:
        value = action()
    except STEP_FAILURES as exc:
        kind = classify(exc)
        logger.error("Step %s failed (%s): %s", step.value, kind.value, exc)
        return StepOutcome(step=step, error=exc, error_kind=kind)
    logger.debug("Step %s succeeded", step.value)
    return StepOutcome(step=step, value=value)


class DeploymentPipeline:
    """Runs validate -> package -> create -> caps -> aggregators -> populate in order."""

    def __init__(self, context: DeploymentContext) -> None:
        self._context = context
        self._outcomes: List[StepOutcome] = []

    def run(self, request: DeploymentRequest) -> PipelineOutcome:
        self._outcomes = []
        client, sender = self._context.client, self._context.sender

        validated = self._record(PipelineStep.VALIDATE, lambda: validate_request(request))
        if not validated.ok:
            return self._stopped()

        package = self._record(
            PipelineStep.RESOLVE_PACKAGE,
            lambda: resolve_package(client, sender, request.package_source),
        )
        if not package.ok:
            return self._stopped()
        package_id = package.value

        creation = self._record(
            PipelineStep.CREATE_RAMM,
            lambda: create_ramm(client, sender, package_id, request),
        )
        if not creation.ok:
            return self._stopped()

        caps = self._record(
            PipelineStep.DISAMBIGUATE_CAPS,
            lambda: disambiguate_capabilities(client, creation.value, sender),
        )
        if not caps.ok:
            return self._stopped()
        ramm_objects = caps.value

        aggregators = self._record(
            PipelineStep.RESOLVE_AGGREGATORS,
            lambda: resolve_aggregators(client, request.assets),
        )
        if not aggregators.ok:
            return self._stopped()

        final = self._record(
            PipelineStep.POPULATE_AND_INITIALIZE,
            lambda: populate_and_initialize(
                client, sender, package_id, ramm_objects, aggregators.value, request.assets
            ),
        )
        if not final.ok:
            return self._stopped()

        ids = ramm_objects.ids()
        result = PipelineResult(
            package_id=package_id,
            ramm_id=ids["ramm"],
            admin_cap_id=ids["admin_cap"],
            new_asset_cap_id=ids["new_asset_cap"],
            digest=final.value.digest,
            status=final.value.status,
        )
        logger.info("RAMM %s deployed and initialized", result.ramm_id)
        return PipelineOutcome(steps=tuple(self._outcomes), result=result)

    def _record(self, step: PipelineStep, action: Callable[[], T]) -> StepOutcome:
        outcome = run_step(step, action)
        self._outcomes.append(outcome)
        return outcome

    def _stopped(self) -> PipelineOutcome:
        return PipelineOutcome(steps=tuple(self._outcomes))
