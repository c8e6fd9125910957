"""Human-readable rendering of a deployment request for operator confirmation."""

from typing import List

from .models import AssetSpec, DeploymentRequest, PublishedPackage


def format_asset(asset: AssetSpec, tab_count: int = 1) -> str:
    header_pad = "\t" * max(tab_count - 1, 0)
    pad = "\t" * tab_count
    lines = [
        f"{header_pad}asset data:",
        f"{pad}asset type: {asset.asset_type}",
        f"{pad}aggregator address: {asset.aggregator_address}",
        f"{pad}minimum trade amount: {asset.minimum_trade_amount}",
        f"{pad}decimal places: {asset.decimal_places}",
    ]
    return "\n".join(lines)


def format_request(request: DeploymentRequest) -> str:
    lines: List[str] = [
        "RAMM Deployment Configuration:",
        f"\tTarget environment: {request.target_env}",
        f"\tFee collection address: {request.fee_collection_address}",
        f"\tAsset count: {request.asset_count}",
        "\tList of assets:",
    ]
    for asset in request.assets:
        lines.append(format_asset(asset, tab_count=3))

    source = request.package_source
    if isinstance(source, PublishedPackage):
        lines.append(f"\tRAMM package address: {source.package_id}")
    else:
        lines.append(f"\tRAMM package ID to be obtained from publishing library at path: {source.path}")
    lines.append("End of RAMM Deployment Configuration")
    return "\n".join(lines)
