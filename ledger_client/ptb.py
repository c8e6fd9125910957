"""Programmable transaction builder: shared input slots plus an ordered list of Move calls."""

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Sequence, Tuple, Union

from .models import ObjectArg, ObjectArgKind, normalize_address


class PtbError(ValueError):
    """Raised when a programmable transaction cannot be assembled."""


class ArgumentKind(Enum):
    INPUT = "Input"
    RESULT = "Result"


@dataclass(frozen=True)
class Argument:
    kind: ArgumentKind
    index: int

    @staticmethod
    def input(index: int) -> "Argument":
        return Argument(kind=ArgumentKind.INPUT, index=index)

    @staticmethod
    def result(index: int) -> "Argument":
        return Argument(kind=ArgumentKind.RESULT, index=index)


@dataclass(frozen=True)
class PureArg:
    type_name: str
    value: object


@dataclass(frozen=True)
class MoveCall:
    package: str
    module: str
    function: str
    type_arguments: Tuple[str, ...]
    arguments: Tuple[Argument, ...]


CallInput = Union[ObjectArg, PureArg]


@dataclass(frozen=True)
class ProgrammableTransaction:
    inputs: Tuple[CallInput, ...]
    commands: Tuple[MoveCall, ...]


_UNSIGNED_BITS: Dict[str, int] = {"u8": 8, "u16": 16, "u32": 32, "u64": 64, "u128": 128, "u256": 256}
_IDENTIFIER = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
_HEX = re.compile(r"^0x[0-9a-fA-F]+$")


class ProgrammableTransactionBuilder:
    """Collects inputs and calls; object inputs are registered once per object id."""

    def __init__(self) -> None:
        self._inputs: List[CallInput] = []
        self._object_slots: Dict[str, int] = {}
        self._pure_slots: Dict[Tuple[str, object], int] = {}
        self._commands: List[MoveCall] = []

    def obj(self, object_arg: ObjectArg) -> Argument:
        key = normalize_address(object_arg.object_id)
        if key in self._object_slots:
            index = self._object_slots[key]
            existing = self._inputs[index]
            if existing.kind != object_arg.kind or existing.version != object_arg.version:
                raise PtbError(f"Object {object_arg.object_id} registered twice with different references.")
            if object_arg.kind == ObjectArgKind.SHARED and object_arg.mutable and not existing.mutable:
                self._inputs[index] = replace(existing, mutable=True)
            return Argument.input(index)
        self._inputs.append(object_arg)
        index = len(self._inputs) - 1
        self._object_slots[key] = index
        return Argument.input(index)

    def pure(self, type_name: str, value: object) -> Argument:
        _check_pure(type_name, value)
        key = (type_name, value)
        if key in self._pure_slots:
            return Argument.input(self._pure_slots[key])
        self._inputs.append(PureArg(type_name=type_name, value=value))
        index = len(self._inputs) - 1
        self._pure_slots[key] = index
        return Argument.input(index)

    def move_call(
        self,
        package: str,
        module: str,
        function: str,
        type_arguments: Sequence[str],
        arguments: Sequence[Argument],
    ) -> Argument:
        if not _IDENTIFIER.match(module) or not _IDENTIFIER.match(function):
            raise PtbError(f"Invalid Move identifier in {module}::{function}.")
        for argument in arguments:
            if argument.kind == ArgumentKind.INPUT and not 0 <= argument.index < len(self._inputs):
                raise PtbError(f"Input {argument.index} is not registered.")
            if argument.kind == ArgumentKind.RESULT and not 0 <= argument.index < len(self._commands):
                raise PtbError(f"Result {argument.index} refers to a later command.")
        self._commands.append(
            MoveCall(
                package=package,
                module=module,
                function=function,
                type_arguments=tuple(type_arguments),
                arguments=tuple(arguments),
            )
        )
        return Argument.result(len(self._commands) - 1)

    def finish(self) -> ProgrammableTransaction:
        if not self._commands:
            raise PtbError("A programmable transaction needs at least one command.")
        return ProgrammableTransaction(inputs=tuple(self._inputs), commands=tuple(self._commands))


def _check_pure(type_name: str, value: object) -> None:
    if type_name in _UNSIGNED_BITS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise PtbError(f"{type_name} value must be an integer, got {value!r}.")
        if not 0 <= value < 2 ** _UNSIGNED_BITS[type_name]:
            raise PtbError(f"{value} does not fit in {type_name}.")
    elif type_name == "address":
        if not isinstance(value, str) or not _HEX.match(value) or len(value) > 66:
            raise PtbError(f"{value!r} is not a valid address.")
    elif type_name == "bool":
        if not isinstance(value, bool):
            raise PtbError(f"bool value expected, got {value!r}.")
    else:
        raise PtbError(f"Unsupported pure type {type_name}.")
