"""Load deployment requests from TOML files."""

from __future__ import annotations

import logging
import re
import tomllib
from pathlib import Path
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .models import AssetSpec, DeploymentRequest, PackagePath, PackageSource, PublishedPackage
from .validator import ConfigurationError

logger = logging.getLogger(__name__)

U64_MAX = 2**64 - 1
U8_MAX = 2**8 - 1

_HEX_ADDRESS = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def _check_address(value: str) -> str:
    value = value.strip()
    if not _HEX_ADDRESS.match(value):
        raise ValueError(f"{value!r} is not a 0x-prefixed hex address")
    return value


class AssetEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    asset_type: str
    aggregator_address: str
    minimum_trade_amount: int = Field(ge=0, le=U64_MAX)
    decimal_places: int = Field(ge=0, le=U8_MAX)

    @field_validator("asset_type")
    @classmethod
    def _type_tag_shape(cls, value: str) -> str:
        value = value.strip()
        parts = value.split("::")
        if len(parts) < 3 or not all(parts):
            raise ValueError(f"{value!r} is not of the form <package>::<module>::<name>")
        _check_address(parts[0])
        return value

    @field_validator("aggregator_address")
    @classmethod
    def _aggregator_shape(cls, value: str) -> str:
        return _check_address(value)


class DeploymentConfigFile(BaseModel):
    """Schema of a RAMM deployment TOML file."""

    model_config = ConfigDict(extra="forbid")

    target_env: str
    ramm_pkg_addr_or_path: str
    asset_count: int = Field(ge=0, le=U8_MAX)
    fee_collection_address: str
    assets: List[AssetEntry] = Field(default_factory=list)

    @field_validator("fee_collection_address")
    @classmethod
    def _fee_address_shape(cls, value: str) -> str:
        return _check_address(value)


def parse_package_source(value: str) -> PackageSource:
    value = value.strip()
    if _HEX_ADDRESS.match(value):
        return PublishedPackage(package_id=value)
    return PackagePath(path=Path(value))


def load_request(path: Path) -> DeploymentRequest:
    try:
        raw = tomllib.loads(Path(path).read_text())
    except OSError as exc:
        raise ConfigurationError(f"Could not read deployment config {path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Could not parse deployment config {path}: {exc}") from exc
    logger.debug("Read deployment config from %s", path)
    return request_from_dict(raw)


def request_from_dict(data: dict) -> DeploymentRequest:
    try:
        parsed = DeploymentConfigFile.model_validate(data)
    except ValidationError as exc:
        violations = tuple(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigurationError(
            "Malformed deployment config: " + "; ".join(violations),
            violations=violations,
        ) from exc

    return DeploymentRequest(
        target_env=parsed.target_env,
        package_source=parse_package_source(parsed.ramm_pkg_addr_or_path),
        fee_collection_address=parsed.fee_collection_address,
        asset_count=parsed.asset_count,
        assets=tuple(
            AssetSpec(
                asset_type=entry.asset_type,
                aggregator_address=entry.aggregator_address,
                minimum_trade_amount=entry.minimum_trade_amount,
                decimal_places=entry.decimal_places,
            )
            for entry in parsed.assets
        ),
    )
