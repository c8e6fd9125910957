"""Operator CLI for deploying a RAMM."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional

from deployment_config.display import format_request
from deployment_config.loader import load_request
from deployment_config.models import DeploymentRequest, PackagePath, PublishedPackage
from deployment_config.validator import ConfigurationError, find_violations, validate_request
from ledger_client.client import LedgerClient
from ledger_client.models import Owner
from ledger_client.simulator import SimulatedLedger
from ledger_client.sui_cli import SuiCliClient
from ramm_deployer.aggregators import aggregator_object_id
from ramm_deployer.errors import DeploymentError, NetworkError
from ramm_deployer.pipeline import DeploymentPipeline, PipelineOutcome, build_context

from .logging_setup import configure_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_DECLINED = 1
EXIT_ERROR = 2


class StepFailedError(RuntimeError):
    """Raised when a pipeline step fails; the message names the step."""


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="ramm-deploy")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show_parser = subparsers.add_parser("show")
    show_parser.add_argument("--toml", required=True)
    show_parser.set_defaults(func=_show)

    deploy_parser = subparsers.add_parser("deploy")
    deploy_parser.add_argument("--toml", required=True)
    deploy_parser.add_argument("--publish", help="Publish the RAMM library at this path instead of the configured source.")
    deploy_parser.add_argument("--yes", action="store_true")
    deploy_parser.add_argument("--simulate", action="store_true")
    deploy_parser.add_argument("--sui-binary", default="sui")
    deploy_parser.add_argument("--log-level", default="INFO")
    deploy_parser.add_argument("--log-file")
    deploy_parser.set_defaults(func=_deploy)

    args = parser.parse_args(argv)

    try:
        return args.func(args)
    except ConfigurationError as exc:
        print(f"ERROR: step validate failed (configuration): {exc}", file=sys.stderr)
        return EXIT_ERROR
    except (ValueError, DeploymentError, StepFailedError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_ERROR


def _show(args: argparse.Namespace) -> int:
    request = _load(args.toml)
    print(format_request(request))
    violations = find_violations(request)
    if violations:
        print("Configuration is INVALID:")
        for violation in violations:
            print(f"\t{violation}")
        return EXIT_ERROR
    print("Configuration is valid.")
    return EXIT_OK


def _deploy(args: argparse.Namespace) -> int:
    configure_logging(args.log_level, Path(args.log_file) if args.log_file else None)

    request = _load(args.toml)
    if args.publish:
        request = replace(request, package_source=PackagePath(Path(args.publish)))
    validate_request(request)
    print(format_request(request), file=sys.stderr)

    if not args.yes:
        if not _confirm("Deploy this RAMM? [y/N]: "):
            print("Deployment cancelled.", file=sys.stderr)
            return EXIT_DECLINED

    if args.simulate:
        client_factory = _simulated_factory(request)
    else:
        client_factory = _sui_factory(args.sui_binary)
    try:
        context = build_context(request.target_env, client_factory)
    except NetworkError as exc:
        raise StepFailedError(f"step build_context failed ({exc.kind.value}): {exc}") from exc

    outcome = DeploymentPipeline(context).run(request)
    if not outcome.succeeded:
        raise StepFailedError(_failure_message(outcome))

    payload = {"network": context.network, "sender": context.sender}
    payload.update(outcome.result.to_dict())
    print(json.dumps(payload, indent=2))
    return EXIT_OK


def _load(toml_path: str) -> DeploymentRequest:
    try:
        return load_request(Path(toml_path))
    except ConfigurationError as exc:
        raise StepFailedError(f"step load failed (configuration): {exc}") from exc


def _sui_factory(sui_binary: str) -> Callable[[str], LedgerClient]:
    def factory(network: str) -> LedgerClient:
        return SuiCliClient.for_network(network, sui_binary=sui_binary)

    return factory


def _simulated_factory(request: DeploymentRequest) -> Callable[[str], LedgerClient]:
    """Seed an in-memory ledger with everything the request expects to already exist."""
    ledger = SimulatedLedger()
    for asset in request.assets:
        ledger.add_shared_object(aggregator_object_id(asset.aggregator_address))
    if isinstance(request.package_source, PublishedPackage):
        ledger.add_object(request.package_source.package_id, Owner.immutable(), "package")
    logger.warning("Simulating the deployment; nothing is sent to %s", request.target_env)

    def factory(network: str) -> LedgerClient:
        return ledger

    return factory


def _failure_message(outcome: PipelineOutcome) -> str:
    failure = outcome.failure
    if failure is None:
        return "deployment did not complete"
    kind = failure.error_kind.value if failure.error_kind is not None else "unknown"
    return f"step {failure.step.value} failed ({kind}): {failure.error}"


def _confirm(prompt: str) -> bool:
    try:
        response = input(prompt)
    except EOFError:
        return False
    return response.strip().lower() in {"y", "yes"}


if __name__ == "__main__":
    raise SystemExit(main())
