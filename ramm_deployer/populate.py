"""Build and submit the programmable transaction that adds every asset and then initializes the RAMM."""

import logging
from dataclasses import dataclass
from typing import Sequence

from deployment_config.models import AssetSpec
from ledger_client.client import LedgerClient
from ledger_client.models import ExecutionResult, ObjectArg, ObjectRef, UnsignedTransaction
from ledger_client.ptb import ProgrammableTransaction, ProgrammableTransactionBuilder

from .capabilities import RammObjects
from .errors import ProtocolInvariantError, TransactionBuildError
from .move_api import ADD_ASSET_TO_RAMM, INITIALIZE_RAMM, RAMM_MODULE, RAMM_PTB_GAS_BUDGET
from .submission import execute_checked

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GasContext:
    coin: ObjectRef
    gas_price: int


def fetch_gas_context(client: LedgerClient, sender: str, gas_budget: int = RAMM_PTB_GAS_BUDGET) -> GasContext:
    """Fetch a spendable coin and the reference gas price; call right before building."""
    coins = client.coins_for(sender)
    coin = next((coin for coin in coins if coin.balance >= gas_budget), None)
    if coin is None:
        raise TransactionBuildError(
            f"No coin owned by {sender} holds the {gas_budget} MIST needed for gas."
        )
    gas_price = client.gas_price()
    logger.info("Paying gas with coin %s at reference price %d", coin.object_id, gas_price)
    return GasContext(coin=coin.reference, gas_price=gas_price)


def compose_populate_transaction(
    builder: ProgrammableTransactionBuilder,
    package_id: str,
    ramm_objects: RammObjects,
    aggregators: Sequence[ObjectArg],
    assets: Sequence[AssetSpec],
) -> ProgrammableTransaction:
    if len(aggregators) != len(assets):
        raise ProtocolInvariantError(
            f"{len(aggregators)} aggregators resolved for {len(assets)} assets."
        )

    # Slots 0-2, shared by every call below.
    ramm = builder.obj(ramm_objects.ramm)
    admin_cap = builder.obj(ramm_objects.caps.admin)
    new_asset_cap = builder.obj(ramm_objects.caps.new_asset)

    for asset, aggregator in zip(assets, aggregators):
        builder.move_call(
            package_id,
            RAMM_MODULE,
            ADD_ASSET_TO_RAMM,
            (asset.asset_type,),
            (
                ramm,
                builder.obj(aggregator),
                builder.pure("u64", asset.minimum_trade_amount),
                builder.pure("u8", asset.decimal_places),
                admin_cap,
                new_asset_cap,
            ),
        )

    # Initialization must come after every asset is added.
    builder.move_call(
        package_id,
        RAMM_MODULE,
        INITIALIZE_RAMM,
        (),
        (ramm, admin_cap, new_asset_cap),
    )
    return builder.finish()


def build_populate_transaction(
    client: LedgerClient,
    sender: str,
    package_id: str,
    ramm_objects: RammObjects,
    aggregators: Sequence[ObjectArg],
    assets: Sequence[AssetSpec],
    gas: GasContext,
) -> UnsignedTransaction:
    program = compose_populate_transaction(
        client.programmable_tx_builder(),
        package_id,
        ramm_objects,
        aggregators,
        assets,
    )
    logger.info(
        "Populate transaction: %d add-asset calls and one initialize call",
        len(program.commands) - 1,
    )
    return client.programmable(sender, program, gas.coin, RAMM_PTB_GAS_BUDGET, gas.gas_price)


def populate_and_initialize(
    client: LedgerClient,
    sender: str,
    package_id: str,
    ramm_objects: RammObjects,
    aggregators: Sequence[ObjectArg],
    assets: Sequence[AssetSpec],
) -> ExecutionResult:
    gas = fetch_gas_context(client, sender)
    transaction = build_populate_transaction(
        client, sender, package_id, ramm_objects, aggregators, assets, gas
    )
    return execute_checked(client, transaction, "RAMM population and initialization")
