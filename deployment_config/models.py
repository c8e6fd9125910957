"""Domain models for a RAMM deployment request."""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple, Union

RECOGNIZED_NETWORKS: Tuple[str, ...] = ("active", "testnet", "mainnet")

# Heuristic floor against obviously wrong configs, not a ledger rule.
ASSET_MIN_DECIMAL_PLACES = 4


@dataclass(frozen=True)
class AssetSpec:
    """Data needed to add one asset to the RAMM."""

    asset_type: str
    aggregator_address: str
    minimum_trade_amount: int
    decimal_places: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "asset_type": self.asset_type,
            "aggregator_address": self.aggregator_address,
            "minimum_trade_amount": self.minimum_trade_amount,
            "decimal_places": self.decimal_places,
        }


@dataclass(frozen=True)
class PublishedPackage:
    """The RAMM library is already on-chain under this id."""

    package_id: str


@dataclass(frozen=True)
class PackagePath:
    """The RAMM library at this path must be published first."""

    path: Path


PackageSource = Union[PublishedPackage, PackagePath]


@dataclass(frozen=True)
class DeploymentRequest:
    target_env: str
    package_source: PackageSource
    fee_collection_address: str
    asset_count: int
    assets: Tuple[AssetSpec, ...]

    def to_dict(self) -> Dict[str, object]:
        if isinstance(self.package_source, PublishedPackage):
            source = {"package_id": self.package_source.package_id}
        else:
            source = {"path": str(self.package_source.path)}
        return {
            "target_env": self.target_env,
            "package_source": source,
            "fee_collection_address": self.fee_collection_address,
            "asset_count": self.asset_count,
            "assets": [asset.to_dict() for asset in self.assets],
        }
