"""Three-hop lookup through the naming registry.

``resolve_tld`` -> ``resolve_sld_node`` -> ``get_sld_info`` -> ``get_subdomain_info``.
Every hop is a fresh remote query and no hop is retried: a missing TLD, shard or
record is a definitive answer.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from .errors import DecodeError, RecordNotFoundError, ShardNotFoundError, UnknownTLDError
from .hashing import generate_name_hash
from .model import ContractId, NameHash, ShardRange, SLDRecord, SubdomainRecord

if TYPE_CHECKING:
    from .directory import RegistryDirectory
    from .model import ContractReference, DecodedResult
    from .ports import ContractQuerier

log = getLogger(__name__)

_EMPTY_HASH = bytes(32)


@dataclass(frozen=True, slots=True)
class Resolution:
    """Every hop of a completed resolution chain."""

    name_hash: NameHash
    tld_node: ContractReference
    sld_node: ContractReference
    sld: SLDRecord
    subdomain_node: ContractReference | None = None
    subdomain: SubdomainRecord | None = None


def _contract_id(value: object, *, function: str) -> ContractId:
    if not isinstance(value, str):
        raise DecodeError(f"{function} returned {type(value).__name__}, expected an address")
    try:
        return ContractId.from_solidity_address(value)
    except ValueError as exc:
        raise DecodeError(f"{function} returned an invalid address {value!r}") from exc


def _struct(result: DecodedResult) -> Mapping[str, object]:
    value = result.first()
    if not isinstance(value, Mapping):
        raise DecodeError(f"{result.function} returned {type(value).__name__}, expected a struct")
    return value  # pyright: ignore[reportUnknownVariableType]


def _as_int(value: object, *, field_name: str, function: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"{function}.{field_name} is not an integer: {value!r}")
    return value


class HierarchicalResolver:
    """Resolve hashed names through the TLD manager, TLD nodes, SLD and subdomain nodes."""

    def __init__(self, *, gateway: ContractQuerier, directory: RegistryDirectory) -> None:
        self._gateway = gateway
        self._directory = directory

    async def resolve_tld(self, tld_hash: bytes) -> ContractReference:
        result = await self._gateway.query(self._directory.manager(), "getTLD", (tld_hash,))
        contract_id = _contract_id(result.first(), function="getTLD")
        if contract_id.is_zero:
            raise UnknownTLDError(f"No TLD node registered for hash {tld_hash.hex()}")
        log.debug("TLD %s resolved to node %s", tld_hash.hex(), contract_id)
        return self._directory.tld_node(contract_id)

    async def get_shard_count(self, tld_node: ContractReference) -> int:
        result = await self._gateway.query(tld_node, "getNumNodes")
        return _as_int(result.first(), field_name="numNodes", function="getNumNodes")

    async def resolve_sld_node(
        self,
        sld_hash: bytes,
        tld_node: ContractReference,
        shard_range: ShardRange | None = None,
    ) -> ContractReference:
        """Return the SLD node whose shard holds ``sld_hash``.

        An explicit range is queried once. Without one (or with
        ``ShardRange.FULL_TABLE``) the shard table is bisected until a single
        shard is confirmed to hold the hash.
        """

        if shard_range is None or shard_range.is_full_table:
            index = await self.find_shard(sld_hash, tld_node)
            shard_range = ShardRange(index, index + 1)

        contract_id = await self._query_sld_node(sld_hash, tld_node, shard_range)
        if contract_id is None:
            raise ShardNotFoundError(
                f"No shard in {shard_range} of TLD node {tld_node.id} holds {sld_hash.hex()}"
            )
        return self._directory.sld_node(contract_id)

    async def find_shard(self, sld_hash: bytes, tld_node: ContractReference) -> int:
        """Bisect ``[0, shard count)`` down to the one shard index that may hold ``sld_hash``.

        Relies only on a range query answering non-zero when some shard inside
        the range holds the hash; hashes are not assumed to be ordered across
        shards. The returned index is unconfirmed when no shard holds the hash.
        """

        count = await self.get_shard_count(tld_node)
        if count <= 0:
            raise ShardNotFoundError(f"TLD node {tld_node.id} has no shards")

        search = ShardRange(0, count)
        while search.size > 1:
            lower, upper = search.split()
            if await self._query_sld_node(sld_hash, tld_node, lower) is not None:
                search = lower
            else:
                search = upper
        log.debug("Shard search for %s on %s narrowed to %s", sld_hash.hex(), tld_node.id, search)
        return search.begin

    async def _query_sld_node(
        self,
        sld_hash: bytes,
        tld_node: ContractReference,
        shard_range: ShardRange,
    ) -> ContractId | None:
        result = await self._gateway.query(
            tld_node,
            "getSLDNode",
            (sld_hash, shard_range.begin, shard_range.end),
        )
        contract_id = _contract_id(result.first(), function="getSLDNode")
        return None if contract_id.is_zero else contract_id

    async def get_serial(self, sld_node: ContractReference, sld_hash: bytes) -> int:
        result = await self._gateway.query(sld_node, "getSerial", (sld_hash,))
        serial = _as_int(result.first(), field_name="serial", function="getSerial")
        if serial == 0:
            raise RecordNotFoundError(f"SLD node {sld_node.id} has no record for {sld_hash.hex()}")
        return serial

    async def get_sld_info(self, sld_node: ContractReference, sld_hash: bytes) -> SLDRecord:
        result = await self._gateway.query(sld_node, "getSLDInfo", (sld_hash,))
        info = _struct(result)
        serial = _as_int(info.get("serial"), field_name="serial", function="getSLDInfo")
        if serial == 0:
            raise RecordNotFoundError(f"SLD node {sld_node.id} has no record for {sld_hash.hex()}")

        expiration = info.get("expiration")
        subdomain_node: ContractId | None = None
        if "subdomainNode" in info:
            subdomain_node = _contract_id(info["subdomainNode"], function="getSLDInfo")
            if subdomain_node.is_zero:
                subdomain_node = None
        return SLDRecord(
            serial=serial,
            expiration=expiration if isinstance(expiration, int) else None,
            subdomain_node=subdomain_node,
            fields=dict(info),
        )

    async def get_subdomain_info(
        self,
        subdomain_node: ContractReference,
        subdomain_hash: bytes,
    ) -> SubdomainRecord:
        result = await self._gateway.query(subdomain_node, "getSubdomainInfo", (subdomain_hash,))
        info = _struct(result)
        if info.get("subdomainHash") == _EMPTY_HASH:
            raise RecordNotFoundError(
                f"Subdomain node {subdomain_node.id} has no record for {subdomain_hash.hex()}"
            )
        return SubdomainRecord(fields=dict(info))

    async def list_subdomain_names(self, subdomain_node: ContractReference) -> list[str]:
        result = await self._gateway.query(subdomain_node, "dumpNames")
        names = result.first()
        if isinstance(names, str) or not isinstance(names, Sequence):
            raise DecodeError(f"dumpNames returned {type(names).__name__}, expected a list")
        return [str(name) for name in names]  # pyright: ignore[reportUnknownVariableType]

    async def resolve(self, name: str | NameHash) -> Resolution:
        """Run the whole chain for a dotted name; any failing hop aborts it."""

        name_hash = generate_name_hash(name) if isinstance(name, str) else name
        log.info("Resolving %s", name_hash.domain)

        tld_node = await self.resolve_tld(name_hash.tld_hash)
        sld_node = await self.resolve_sld_node(name_hash.sld_hash, tld_node)
        sld = await self.get_sld_info(sld_node, name_hash.sld_hash)
        if name_hash.subdomain_hash is None:
            return Resolution(name_hash=name_hash, tld_node=tld_node, sld_node=sld_node, sld=sld)

        if sld.subdomain_node is None:
            raise RecordNotFoundError(f"{name_hash.domain} has no subdomain node")
        subdomain_node = self._directory.subdomain_node(sld.subdomain_node)
        subdomain = await self.get_subdomain_info(subdomain_node, name_hash.subdomain_hash)
        return Resolution(
            name_hash=name_hash,
            tld_node=tld_node,
            sld_node=sld_node,
            sld=sld,
            subdomain_node=subdomain_node,
            subdomain=subdomain,
        )

    async def subdomain_names(self, domain: str | NameHash) -> list[str]:
        """List every name held by the subdomain node of a second-level domain."""

        resolution = await self.resolve(domain)
        if resolution.sld.subdomain_node is None:
            raise RecordNotFoundError(f"{resolution.name_hash.domain} has no subdomain node")
        return await self.list_subdomain_names(
            self._directory.subdomain_node(resolution.sld.subdomain_node)
        )
