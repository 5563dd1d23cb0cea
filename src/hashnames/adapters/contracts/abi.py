"""Interface descriptions (JSON ABI files) and the schema-driven codec on top of ``eth-abi``."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from functools import cached_property, lru_cache
from logging import getLogger
from pathlib import Path
from typing import TYPE_CHECKING, cast

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_hash.auto import keccak

from hashnames.domain.errors import DecodeError
from hashnames.domain.model import DecodedResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

log = getLogger(__name__)

SELECTOR_SIZE = 4


@dataclass(frozen=True, slots=True)
class AbiParameter:
    name: str
    type: str
    components: tuple[AbiParameter, ...] = ()

    @classmethod
    def from_json(cls, entry: Mapping[str, object]) -> AbiParameter:
        raw_components = cast("Sequence[Mapping[str, object]]", entry.get("components") or ())
        return cls(
            name=str(entry.get("name") or ""),
            type=str(entry["type"]),
            components=tuple(cls.from_json(component) for component in raw_components),
        )

    @property
    def is_tuple(self) -> bool:
        return self.type.startswith("tuple")

    @property
    def canonical_type(self) -> str:
        """Type string as understood by the codec; tuples expand to ``(t1,t2)``."""

        if not self.is_tuple:
            return self.type
        inner = ",".join(component.canonical_type for component in self.components)
        return f"({inner}){self.type.removeprefix('tuple')}"

    def to_python(self, value: object) -> object:
        """Key tuple values by component name, recursing through arrays."""

        if not self.is_tuple:
            return value
        if self.type != "tuple":
            element = AbiParameter(self.name, "tuple", self.components)
            return [element.to_python(item) for item in cast("Sequence[object]", value)]
        items = cast("Sequence[object]", value)
        return {
            component.name or str(index): component.to_python(item)
            for index, (component, item) in enumerate(zip(self.components, items, strict=True))
        }


@dataclass(frozen=True, slots=True)
class AbiFunction:
    name: str
    inputs: tuple[AbiParameter, ...] = ()
    outputs: tuple[AbiParameter, ...] = ()
    state_mutability: str = "nonpayable"

    @classmethod
    def from_json(cls, entry: Mapping[str, object]) -> AbiFunction:
        inputs = cast("Sequence[Mapping[str, object]]", entry.get("inputs") or ())
        outputs = cast("Sequence[Mapping[str, object]]", entry.get("outputs") or ())
        return cls(
            name=str(entry["name"]),
            inputs=tuple(AbiParameter.from_json(item) for item in inputs),
            outputs=tuple(AbiParameter.from_json(item) for item in outputs),
            state_mutability=str(entry.get("stateMutability") or "nonpayable"),
        )

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(p.canonical_type for p in self.inputs)})"

    @property
    def selector(self) -> bytes:
        return keccak(self.signature.encode("ascii"))[:SELECTOR_SIZE]

    @property
    def is_read_only(self) -> bool:
        return self.state_mutability in {"view", "pure"}

    def encode_call(self, params: Sequence[object] = ()) -> bytes:
        if len(params) != len(self.inputs):
            raise ValueError(
                f"{self.signature} expects {len(self.inputs)} arguments, got {len(params)}"
            )
        types = [p.canonical_type for p in self.inputs]
        try:
            return self.selector + encode(types, list(params))
        except EncodingError as exc:
            raise ValueError(f"Cannot encode arguments for {self.signature}: {exc}") from exc

    def decode_output(self, data: bytes) -> DecodedResult:
        types = [p.canonical_type for p in self.outputs]
        try:
            raw_values = decode(types, data)
        except DecodingError as exc:
            raise DecodeError(f"Cannot decode result of {self.signature}: {exc}") from exc

        values = tuple(
            param.to_python(value) for param, value in zip(self.outputs, raw_values, strict=True)
        )
        named = {
            param.name: value
            for param, value in zip(self.outputs, values, strict=True)
            if param.name
        }
        return DecodedResult(function=self.name, values=values, named=named)


@dataclass(frozen=True)
class InterfaceDescription:
    """Function signatures of one contract role, looked up by function name."""

    name: str
    functions: tuple[AbiFunction, ...] = field(default_factory=tuple)

    @classmethod
    def from_json(cls, name: str, entries: Sequence[Mapping[str, object]]) -> InterfaceDescription:
        functions = tuple(
            AbiFunction.from_json(entry)
            for entry in entries
            if entry.get("type", "function") == "function" and entry.get("name")
        )
        return cls(name=name, functions=functions)

    @cached_property
    def _by_name(self) -> dict[str, AbiFunction]:
        index: dict[str, AbiFunction] = {}
        for function in self.functions:
            # Overloads resolve to the first declaration.
            index.setdefault(function.name, function)
        return index

    def function(self, name: str) -> AbiFunction:
        try:
            return self._by_name[name]
        except KeyError:
            raise DecodeError(f"Interface {self.name!r} declares no function {name!r}") from None

    def encode_call(self, function_name: str, params: Sequence[object] = ()) -> bytes:
        return self.function(function_name).encode_call(params)

    def decode_result(self, function_name: str, data: bytes) -> DecodedResult:
        return self.function(function_name).decode_output(data)


@lru_cache(maxsize=32)
def load_interface(path: Path) -> InterfaceDescription:
    """Load an interface description file; files are static so each path is read once."""

    log.debug("Loading interface description %s", path)
    try:
        entries = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise DecodeError(f"Cannot load interface description {path}: {exc}") from exc
    if isinstance(entries, dict) and "abi" in entries:
        entries = entries["abi"]
    if not isinstance(entries, list):
        raise DecodeError(f"Interface description {path} is not a list of entries")
    functions = cast("list[Mapping[str, object]]", entries)
    return InterfaceDescription.from_json(Path(path).stem, functions)
