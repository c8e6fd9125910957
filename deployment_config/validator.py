"""Structural validation of deployment requests, run before any network I/O."""

from typing import List, Tuple

from .models import ASSET_MIN_DECIMAL_PLACES, RECOGNIZED_NETWORKS, DeploymentRequest


class ConfigurationError(ValueError):
    """Raised when a deployment config is unreadable or violates its invariants."""

    def __init__(self, message: str, violations: Tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.violations = violations


def validate(request: DeploymentRequest) -> bool:
    return not find_violations(request)


def validate_request(request: DeploymentRequest) -> None:
    violations = find_violations(request)
    if violations:
        raise ConfigurationError(
            "Invalid deployment config: " + "; ".join(violations),
            violations=violations,
        )


def find_violations(request: DeploymentRequest) -> Tuple[str, ...]:
    """Run every check and collect all failures; no check short-circuits another."""
    violations: List[str] = []
    violations.extend(_check_asset_count(request))
    violations.extend(_check_network(request))
    violations.extend(_check_decimal_places(request))
    return tuple(violations)


def _check_asset_count(request: DeploymentRequest) -> List[str]:
    violations = []
    if request.asset_count != len(request.assets):
        violations.append(
            f"asset_count is {request.asset_count} but {len(request.assets)} assets are listed"
        )
    if request.asset_count <= 0:
        violations.append("asset_count must be positive")
    return violations


def _check_network(request: DeploymentRequest) -> List[str]:
    if request.target_env not in RECOGNIZED_NETWORKS:
        return [
            f"target_env {request.target_env!r} is not one of "
            + ", ".join(RECOGNIZED_NETWORKS)
        ]
    return []


def _check_decimal_places(request: DeploymentRequest) -> List[str]:
    violations = []
    for index, asset in enumerate(request.assets):
        if asset.decimal_places < ASSET_MIN_DECIMAL_PLACES:
            violations.append(
                f"asset {index} ({asset.asset_type}) has {asset.decimal_places} decimal places, "
                f"minimum is {ASSET_MIN_DECIMAL_PLACES}"
            )
    return violations
