from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from hashnames.adapters.contracts import ContractGateway
from hashnames.adapters.mirror_node import MirrorNodeReader
from hashnames.config import NetworkType, RateLimit, build_mirror_node_config
from hashnames.domain.resolver import HierarchicalResolver
from tests.support.mirror_node import MirrorNodeStub
from tests.support.registry import FakeRegistry

if TYPE_CHECKING:
    from hashnames.config import MirrorNodeConfig


@pytest.fixture
def mirror_config() -> MirrorNodeConfig:
    return build_mirror_node_config(
        NetworkType.HEDERA_TEST,
        ratelimit=RateLimit(max_calls=1000, per_seconds=1.0),
    )


@pytest.fixture
def mirror_stub() -> MirrorNodeStub:
    return MirrorNodeStub()


@pytest.fixture
def reader(mirror_config: MirrorNodeConfig, mirror_stub: MirrorNodeStub) -> MirrorNodeReader:
    return MirrorNodeReader(config=mirror_config, client_factory=mirror_stub.client_factory())


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def gateway(registry: FakeRegistry) -> ContractGateway:
    return ContractGateway(transport=registry)


@pytest.fixture
def resolver(registry: FakeRegistry, gateway: ContractGateway) -> HierarchicalResolver:
    return HierarchicalResolver(gateway=gateway, directory=registry.directory)
