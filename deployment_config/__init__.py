from .display import format_asset, format_request
from .loader import DeploymentConfigFile, load_request, parse_package_source, request_from_dict
from .models import (
    ASSET_MIN_DECIMAL_PLACES,
    RECOGNIZED_NETWORKS,
    AssetSpec,
    DeploymentRequest,
    PackagePath,
    PackageSource,
    PublishedPackage,
)
from .validator import ConfigurationError, find_violations, validate, validate_request

__all__ = [
    "ASSET_MIN_DECIMAL_PLACES",
    "AssetSpec",
    "ConfigurationError",
    "DeploymentConfigFile",
    "DeploymentRequest",
    "PackagePath",
    "PackageSource",
    "PublishedPackage",
    "RECOGNIZED_NETWORKS",
    "find_violations",
    "format_asset",
    "format_request",
    "load_request",
    "parse_package_source",
    "request_from_dict",
    "validate",
    "validate_request",
]
