"""Application orchestration entry points."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from hashnames.adapters.contracts import ContractGateway, MirrorNodeCallTransport
from hashnames.adapters.mirror_node import MirrorNodeReader
from hashnames.config import get_mirror_node_config, get_registry_config
from hashnames.domain.directory import RegistryDirectory
from hashnames.domain.reconciliation import ReconciliationEngine
from hashnames.domain.resolver import HierarchicalResolver

if TYPE_CHECKING:
    import asyncio

    from hashnames.config import MirrorNodeConfig, RegistryConfig
    from hashnames.domain.reconciliation import ReconciliationResult
    from hashnames.domain.resolver import Resolution

log = getLogger(__name__)


def build_resolver(
    *,
    registry: RegistryConfig | None = None,
    mirror_node: MirrorNodeConfig | None = None,
) -> HierarchicalResolver:
    registry_config = registry or get_registry_config()
    mirror_config = mirror_node or get_mirror_node_config()
    gateway = ContractGateway.from_config(
        registry_config,
        transport=MirrorNodeCallTransport(config=mirror_config),
    )
    return HierarchicalResolver(
        gateway=gateway,
        directory=RegistryDirectory.from_config(registry_config),
    )


async def resolve_domain(
    domain: str,
    *,
    resolver: HierarchicalResolver | None = None,
) -> Resolution:
    """Resolve a dotted name to its SLD (and subdomain) records."""

    active_resolver = resolver or build_resolver()
    resolution = await active_resolver.resolve(domain)
    log.info(
        "Resolved %s: sld_node=%s, serial=%s",
        resolution.name_hash.domain,
        resolution.sld_node.id,
        resolution.sld.serial,
    )
    return resolution


async def list_subdomains(
    domain: str,
    *,
    resolver: HierarchicalResolver | None = None,
) -> list[str]:
    active_resolver = resolver or build_resolver()
    return await active_resolver.subdomain_names(domain)


async def find_owned_names(
    account_id: str,
    *,
    reader: MirrorNodeReader | None = None,
    registry: RegistryConfig | None = None,
    cancel: asyncio.Event | None = None,
) -> ReconciliationResult:
    """Reconcile an account's NFTs with the registration log of every active TLD."""

    registry_config = registry or get_registry_config()
    active_reader = reader or MirrorNodeReader(config=get_mirror_node_config())
    engine = await ReconciliationEngine.from_tld_topic(
        active_reader,
        registry_config.tld_topic_id,
        domains=registry_config.active_domains,
    )
    return await engine.owned_names(account_id, cancel=cancel)
