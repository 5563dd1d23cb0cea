from __future__ import annotations

import asyncio

import pytest

from hashnames.adapters.contracts import ContractGateway
from hashnames.domain.errors import (
    NameNotFoundError,
    RecordNotFoundError,
    ShardNotFoundError,
    UnknownTLDError,
)
from hashnames.domain.hashing import generate_name_hash
from hashnames.domain.model import ContractId, ShardRange
from hashnames.domain.resolver import HierarchicalResolver
from tests.support.registry import FakeRegistry

OWNER = "0.0.4242"


def _resolver(registry: FakeRegistry) -> HierarchicalResolver:
    return HierarchicalResolver(
        gateway=ContractGateway(transport=registry),
        directory=registry.directory,
    )


def test_resolve_tld_returns_tld_node(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    name_hash = registry.add_domain("example.hbar")

    tld_node = asyncio.run(resolver.resolve_tld(name_hash.tld_hash))

    assert tld_node.id == registry.tld_node_for(name_hash)
    assert tld_node.interface.stem == "TLDNode"


def test_unknown_tld_aborts_chain(registry: FakeRegistry, resolver: HierarchicalResolver) -> None:
    registry.add_domain("example.hbar")

    with pytest.raises(UnknownTLDError):
        asyncio.run(resolver.resolve("example.nope"))

    assert [name for _, name, _ in registry.calls] == ["getTLD"]


def test_unknown_tld_is_a_name_lookup_failure(resolver: HierarchicalResolver) -> None:
    with pytest.raises(NameNotFoundError):
        asyncio.run(resolver.resolve_tld(generate_name_hash("a.hbar").tld_hash))


def test_query_payment_is_attached_to_every_call(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    registry.add_domain("example.hbar")

    asyncio.run(resolver.resolve("example.hbar"))

    assert registry.payments
    assert set(registry.payments) == {100_000_000}


def test_get_shard_count(registry: FakeRegistry, resolver: HierarchicalResolver) -> None:
    name_hash = registry.add_domain("example.hbar", shard_count=6)
    tld_node = registry.directory.tld_node(registry.tld_node_for(name_hash))

    assert asyncio.run(resolver.get_shard_count(tld_node)) == 6


@pytest.mark.parametrize("shard_count", range(1, 8))
def test_default_range_matches_explicit_single_shard(shard_count: int) -> None:
    # Only range ownership is assumed: a range query answers non-zero exactly
    # when some shard inside it holds the hash.
    for index in range(shard_count):
        registry = FakeRegistry()
        registry.add_domain("decoy.hbar", shard_index=shard_count - 1, shard_count=shard_count)
        name_hash = registry.add_domain(
            "example.hbar", shard_index=index, shard_count=shard_count
        )
        resolver = _resolver(registry)
        tld_node = registry.directory.tld_node(registry.tld_node_for(name_hash))

        by_default = asyncio.run(resolver.resolve_sld_node(name_hash.sld_hash, tld_node))
        explicit = asyncio.run(
            resolver.resolve_sld_node(name_hash.sld_hash, tld_node, ShardRange(index, index + 1))
        )

        assert by_default == explicit
        assert asyncio.run(resolver.find_shard(name_hash.sld_hash, tld_node)) == index


def test_full_table_sentinel_searches_every_shard(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    name_hash = registry.add_domain("example.hbar", shard_index=3, shard_count=5)
    tld_node = registry.directory.tld_node(registry.tld_node_for(name_hash))

    found = asyncio.run(
        resolver.resolve_sld_node(name_hash.sld_hash, tld_node, ShardRange.FULL_TABLE)
    )

    assert found.interface.stem == "SLDNode"
    explicit_ranges = [(begin, end) for _, begin, end in registry.calls_to("getSLDNode")]
    assert explicit_ranges[-1] == (3, 4)


def test_explicit_range_without_hash_raises_shard_not_found(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    name_hash = registry.add_domain("example.hbar", shard_index=0, shard_count=4)
    tld_node = registry.directory.tld_node(registry.tld_node_for(name_hash))

    with pytest.raises(ShardNotFoundError):
        asyncio.run(resolver.resolve_sld_node(name_hash.sld_hash, tld_node, ShardRange(1, 4)))

    assert len(registry.calls_to("getSLDNode")) == 1


def test_unregistered_sld_raises_shard_not_found(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    registry.add_domain("example.hbar", shard_count=3)

    with pytest.raises(ShardNotFoundError):
        asyncio.run(resolver.resolve("missing.hbar"))

    assert registry.calls_to("getSLDInfo") == []


def test_serial_from_info_matches_get_serial(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    name_hash = registry.add_domain("example.hbar", serial=17, expiration=1_800_000_000)

    async def run() -> tuple[int, int, int | None]:
        tld_node = await resolver.resolve_tld(name_hash.tld_hash)
        sld_node = await resolver.resolve_sld_node(name_hash.sld_hash, tld_node)
        serial = await resolver.get_serial(sld_node, name_hash.sld_hash)
        info = await resolver.get_sld_info(sld_node, name_hash.sld_hash)
        return serial, info.serial, info.expiration

    serial, info_serial, expiration = asyncio.run(run())

    assert serial == info_serial == 17
    assert expiration == 1_800_000_000


def test_missing_sld_record_raises_record_not_found(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    name_hash = registry.add_domain("example.hbar")
    other = generate_name_hash("other.hbar")

    async def run() -> None:
        tld_node = await resolver.resolve_tld(name_hash.tld_hash)
        sld_node = await resolver.resolve_sld_node(name_hash.sld_hash, tld_node)
        await resolver.get_sld_info(sld_node, other.sld_hash)

    with pytest.raises(RecordNotFoundError):
        asyncio.run(run())


def test_get_serial_zero_raises_record_not_found(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    name_hash = registry.add_domain("example.hbar")
    other = generate_name_hash("other.hbar")

    async def run() -> None:
        tld_node = await resolver.resolve_tld(name_hash.tld_hash)
        sld_node = await resolver.resolve_sld_node(name_hash.sld_hash, tld_node)
        await resolver.get_serial(sld_node, other.sld_hash)

    with pytest.raises(RecordNotFoundError):
        asyncio.run(run())


def test_resolve_second_level_domain(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    registry.add_domain("example.hbar", serial=5, shard_index=2)

    resolution = asyncio.run(resolver.resolve("Example.HBAR"))

    assert resolution.name_hash.domain == "example.hbar"
    assert resolution.sld.serial == 5
    assert resolution.sld.subdomain_node is None
    assert resolution.subdomain is None


def test_resolve_subdomain(registry: FakeRegistry, resolver: HierarchicalResolver) -> None:
    registry.add_domain("example.hbar", subdomains={"mail": OWNER, "www": "0.0.7"})

    resolution = asyncio.run(resolver.resolve("mail.example.hbar"))

    assert resolution.subdomain_node is not None
    assert resolution.subdomain_node.interface.stem == "SubdomainNode"
    assert resolution.subdomain is not None
    assert resolution.subdomain.fields["name"] == "mail"
    owner = resolution.subdomain.owner
    assert owner is not None
    assert ContractId.from_solidity_address(owner) == ContractId.from_string(OWNER)


def test_unknown_subdomain_raises_record_not_found(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    registry.add_domain("example.hbar", subdomains={"mail": OWNER})

    with pytest.raises(RecordNotFoundError):
        asyncio.run(resolver.resolve("ftp.example.hbar"))


def test_subdomain_of_domain_without_subdomain_node(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    registry.add_domain("example.hbar")

    with pytest.raises(RecordNotFoundError, match="no subdomain node"):
        asyncio.run(resolver.resolve("mail.example.hbar"))

    assert registry.calls_to("getSubdomainInfo") == []


def test_subdomain_names_lists_every_name(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    registry.add_domain("example.hbar", subdomains={"mail": OWNER, "www": OWNER})

    names = asyncio.run(resolver.subdomain_names("example.hbar"))

    assert names == ["mail", "www"]


def test_each_resolution_queries_the_registry_again(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    registry.add_domain("example.hbar")

    asyncio.run(resolver.resolve("example.hbar"))
    asyncio.run(resolver.resolve("example.hbar"))

    assert len(registry.calls_to("getTLD")) == 2


def test_explicit_range_is_queried_once_with_its_bounds(
    registry: FakeRegistry, resolver: HierarchicalResolver
) -> None:
    name_hash = registry.add_domain("example.hbar", shard_index=2, shard_count=4)
    tld_node = registry.directory.tld_node(registry.tld_node_for(name_hash))

    explicit = asyncio.run(
        resolver.resolve_sld_node(name_hash.sld_hash, tld_node, ShardRange(2, 3))
    )
    by_default = asyncio.run(resolver.resolve_sld_node(name_hash.sld_hash, tld_node))

    assert explicit == by_default
    assert registry.calls_to("getSLDNode")[0] == (name_hash.sld_hash, 2, 3)
    assert registry.calls_to("getNumNodes") == [()]
