"""Ledger client backed by the `sui` binary and a Sui full node's JSON-RPC API.

Compilation, programmable transaction serialization and signing go through the
`sui` CLI, so the local keystore and client config are the ones `sui` already
uses. Publish and single-call transactions are built by the node, and reads and
execution are plain JSON-RPC calls.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple, Type

from .client import (
    ClientConstructionError,
    LedgerClientError,
    RequestFailure,
    SigningFailure,
    TransactionBuildFailure,
)
from .models import (
    Coin,
    CompiledPackage,
    CreatedObject,
    ExecutionResult,
    ObjectData,
    ObjectRef,
    Owner,
    UnsignedTransaction,
)
from .ptb import ArgumentKind, ProgrammableTransaction, ProgrammableTransactionBuilder, PureArg
from .rpc import JsonRpcTransport

logger = logging.getLogger(__name__)

FULLNODE_URLS: Dict[str, str] = {
    "testnet": "https://fullnode.testnet.sui.io:443",
    "mainnet": "https://fullnode.mainnet.sui.io:443",
}

Runner = Callable[[Sequence[str]], "subprocess.CompletedProcess[str]"]

_OBJECT_OPTIONS = {"showType": True, "showOwner": True}
_TYPE_ONLY_OPTIONS = {"showType": True}


def _run_subprocess(args: Sequence[str]) -> "subprocess.CompletedProcess[str]":
    return subprocess.run(list(args), capture_output=True, text=True, check=False)


class SuiCliClient:
    def __init__(
        self,
        rpc: JsonRpcTransport,
        sui_binary: str = "sui",
        env_alias: Optional[str] = None,
        runner: Optional[Runner] = None,
    ) -> None:
        self._rpc = rpc
        self._sui_binary = sui_binary
        self._env_alias = env_alias
        self._runner = runner or _run_subprocess

    @classmethod
    def for_network(
        cls,
        network: str,
        sui_binary: str = "sui",
        runner: Optional[Runner] = None,
        opener: Optional[Callable[..., Any]] = None,
    ) -> "SuiCliClient":
        """Build a client whose RPC endpoint and CLI environment match `network`."""
        probe = cls(JsonRpcTransport("", opener=opener), sui_binary=sui_binary, runner=runner)
        envs, active_alias = probe._client_envs()

        if network == "active":
            if active_alias is None or active_alias not in envs:
                raise ClientConstructionError("The sui client has no active environment.")
            alias, url = active_alias, envs[active_alias]
        elif network in envs:
            alias, url = network, envs[network]
        elif network in FULLNODE_URLS:
            alias = next(
                (name for name, rpc_url in envs.items() if rpc_url == FULLNODE_URLS[network]),
                None,
            )
            url = FULLNODE_URLS[network]
            if alias is None:
                logger.warning(
                    "No sui client environment points at %s; CLI-built transactions use the active one.",
                    url,
                )
        else:
            raise ClientConstructionError(f"Unknown network: {network}")

        logger.info("Using sui environment %s at %s", alias or "<active>", url)
        return cls(
            JsonRpcTransport(url, opener=opener),
            sui_binary=sui_binary,
            env_alias=alias if alias != active_alias else None,
            runner=runner,
        )

    def active_address(self) -> str:
        output = self._run(["client", "active-address"], ClientConstructionError)
        address = output.strip().splitlines()[-1].strip() if output.strip() else ""
        if not address.startswith("0x"):
            raise ClientConstructionError("The sui client has no active address.")
        return address

    def compile_package(self, path: Path) -> CompiledPackage:
        output = self._run(
            ["move", "build", "--dump-bytecode-as-base64", "--path", str(path)],
            TransactionBuildFailure,
        )
        data = _last_json(output, TransactionBuildFailure)
        try:
            return CompiledPackage(
                modules=tuple(data["modules"]),
                dependencies=tuple(data["dependencies"]),
            )
        except (KeyError, TypeError) as exc:
            raise TransactionBuildFailure("Unexpected output from sui move build.") from exc

    def publish(
        self,
        sender: str,
        modules: Sequence[str],
        dependencies: Sequence[str],
        gas_budget: int,
    ) -> UnsignedTransaction:
        result = self._build_request(
            "unsafe_publish",
            [sender, list(modules), list(dependencies), None, str(gas_budget)],
        )
        return UnsignedTransaction(sender=sender, kind="publish", tx_bytes=_tx_bytes(result))

    def call(
        self,
        sender: str,
        package: str,
        module: str,
        function: str,
        type_arguments: Sequence[str],
        arguments: Sequence[object],
        gas_budget: int,
    ) -> UnsignedTransaction:
        result = self._build_request(
            "unsafe_moveCall",
            [
                sender,
                package,
                module,
                function,
                list(type_arguments),
                [_json_argument(value) for value in arguments],
                None,
                str(gas_budget),
            ],
        )
        return UnsignedTransaction(sender=sender, kind="call", tx_bytes=_tx_bytes(result))

    def programmable_tx_builder(self) -> ProgrammableTransactionBuilder:
        return ProgrammableTransactionBuilder()

    def programmable(
        self,
        sender: str,
        transaction: ProgrammableTransaction,
        gas_coin: ObjectRef,
        gas_budget: int,
        gas_price: int,
    ) -> UnsignedTransaction:
        args = ["client", "ptb"]
        if self._env_alias:
            args += ["--client.env", self._env_alias]
        args += render_ptb_arguments(transaction)
        args += [
            "--gas-coin",
            f"@{gas_coin.object_id}",
            "--gas-budget",
            str(gas_budget),
            "--gas-price",
            str(gas_price),
            "--sender",
            f"@{sender}",
            "--serialize-unsigned-transaction",
        ]
        output = self._run(args, TransactionBuildFailure)
        lines = [line.strip() for line in output.splitlines() if line.strip()]
        if not lines:
            raise TransactionBuildFailure("sui client ptb produced no transaction bytes.")
        return UnsignedTransaction(sender=sender, kind="programmable", tx_bytes=lines[-1])

    def sign_and_submit(self, transaction: UnsignedTransaction) -> ExecutionResult:
        signature = self._sign(transaction)
        result = self._rpc.request(
            "sui_executeTransactionBlock",
            [
                transaction.tx_bytes,
                [signature],
                {"showEffects": True},
                "WaitForLocalExecution",
            ],
        )
        return parse_execution_result(result)

    def read_object(self, object_id: str) -> ObjectData:
        result = self._rpc.request("sui_getObject", [object_id, _TYPE_ONLY_OPTIONS])
        return parse_object_response(object_id, result)

    def read_objects_batch(self, object_ids: Sequence[str]) -> Tuple[ObjectData, ...]:
        result = self._rpc.request("sui_multiGetObjects", [list(object_ids), _OBJECT_OPTIONS])
        if not isinstance(result, list) or len(result) != len(object_ids):
            raise RequestFailure("sui_multiGetObjects returned a mismatched batch.")
        return tuple(
            parse_object_response(object_id, entry)
            for object_id, entry in zip(object_ids, result)
        )

    def coins_for(self, address: str) -> Tuple[Coin, ...]:
        coins: List[Coin] = []
        cursor = None
        while True:
            page = self._rpc.request("suix_getCoins", [address, None, cursor, None])
            try:
                for entry in page["data"]:
                    coins.append(
                        Coin(
                            coin_type=entry["coinType"],
                            object_id=entry["coinObjectId"],
                            version=int(entry["version"]),
                            digest=entry["digest"],
                            balance=int(entry["balance"]),
                        )
                    )
                if not page.get("hasNextPage"):
                    break
                cursor = page["nextCursor"]
            except (KeyError, TypeError, ValueError) as exc:
                raise RequestFailure("suix_getCoins returned an unexpected response.") from exc
        return tuple(coins)

    def gas_price(self) -> int:
        result = self._rpc.request("suix_getReferenceGasPrice", [])
        try:
            return int(result)
        except (TypeError, ValueError) as exc:
            raise RequestFailure(f"Unexpected reference gas price: {result!r}") from exc

    def _sign(self, transaction: UnsignedTransaction) -> str:
        output = self._run(
            [
                "keytool",
                "sign",
                "--address",
                transaction.sender,
                "--data",
                transaction.tx_bytes,
                "--json",
            ],
            SigningFailure,
        )
        data = _last_json(output, SigningFailure)
        signature = data.get("suiSignature") if isinstance(data, dict) else None
        if not signature:
            raise SigningFailure("sui keytool sign returned no signature.")
        return signature

    def _build_request(self, method: str, params: List[Any]) -> Any:
        try:
            return self._rpc.request(method, params)
        except RequestFailure as exc:
            raise TransactionBuildFailure(str(exc)) from exc

    def _client_envs(self) -> Tuple[Dict[str, str], Optional[str]]:
        output = self._run(["client", "envs", "--json"], ClientConstructionError)
        data = _last_json(output, ClientConstructionError)
        try:
            env_list, active = data
            envs = {entry["alias"]: entry["rpc"] for entry in env_list}
        except (KeyError, TypeError, ValueError) as exc:
            raise ClientConstructionError("Unexpected output from sui client envs.") from exc
        return envs, active

    def _run(self, args: Sequence[str], error_cls: Type[LedgerClientError]) -> str:
        command = [self._sui_binary, *args]
        logger.debug("Running %s", " ".join(command[:3]))
        try:
            completed = self._runner(command)
        except OSError as exc:
            raise error_cls(f"Could not run {self._sui_binary}: {exc}") from exc
        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            raise error_cls(f"{' '.join(command[:3])} exited with {completed.returncode}: {detail}")
        return completed.stdout


def render_ptb_arguments(transaction: ProgrammableTransaction) -> List[str]:
    """Render a programmable transaction as `sui client ptb` command arguments.

    Shared-object mutability is not expressible on the command line; the CLI
    infers it from the called functions' signatures.
    """
    referenced: Set[int] = {
        argument.index
        for command in transaction.commands
        for argument in command.arguments
        if argument.kind == ArgumentKind.RESULT
    }

    def render(argument) -> str:
        if argument.kind == ArgumentKind.RESULT:
            return f"result_{argument.index}"
        value = transaction.inputs[argument.index]
        if isinstance(value, PureArg):
            return _render_pure(value)
        return f"@{value.object_id}"

    args: List[str] = []
    for index, command in enumerate(transaction.commands):
        args += ["--move-call", f"{command.package}::{command.module}::{command.function}"]
        if command.type_arguments:
            args.append("<" + ",".join(command.type_arguments) + ">")
        args += [render(argument) for argument in command.arguments]
        if index in referenced:
            args += ["--assign", f"result_{index}"]
    return args


def _render_pure(value: PureArg) -> str:
    if value.type_name == "address":
        return f"@{value.value}"
    if value.type_name == "bool":
        return "true" if value.value else "false"
    return f"{value.value}{value.type_name}"


def _json_argument(value: object) -> object:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    return value


def _tx_bytes(result: Any) -> str:
    if not isinstance(result, dict) or not result.get("txBytes"):
        raise TransactionBuildFailure("Node returned no transaction bytes.")
    return result["txBytes"]


def _last_json(output: str, error_cls: Type[LedgerClientError]) -> Any:
    text = output.strip()
    start = min((i for i in (text.find("{"), text.find("[")) if i >= 0), default=-1)
    if start < 0:
        raise error_cls("Expected JSON output from sui.")
    try:
        return json.loads(text[start:])
    except json.JSONDecodeError as exc:
        raise error_cls("sui produced malformed JSON output.") from exc


def parse_execution_result(result: Any) -> ExecutionResult:
    try:
        effects = result["effects"]
        status = effects["status"]
        created = tuple(
            CreatedObject(
                reference=ObjectRef(
                    object_id=entry["reference"]["objectId"],
                    version=int(entry["reference"]["version"]),
                    digest=entry["reference"]["digest"],
                ),
                owner=Owner.from_json(entry["owner"]),
            )
            for entry in effects.get("created", [])
        )
        return ExecutionResult(
            digest=result["digest"],
            status=status["status"],
            created=created,
            error=status.get("error"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise RequestFailure("Transaction response carried no usable effects.") from exc


def parse_object_response(object_id: str, response: Any) -> ObjectData:
    if not isinstance(response, dict):
        raise RequestFailure(f"Unexpected object response for {object_id}.")
    data = response.get("data")
    if not data:
        error = response.get("error") or {"code": "notExists"}
        return ObjectData(object_id=object_id, error=json.dumps(error, sort_keys=True))
    try:
        return ObjectData(
            object_id=data["objectId"],
            version=int(data["version"]),
            digest=data["digest"],
            owner=Owner.from_json(data["owner"]) if data.get("owner") is not None else None,
            type_name=data.get("type"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise RequestFailure(f"Unexpected object data for {object_id}.") from exc
