"""Mirror node (ledger indexer) configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from .env import optional_env_var
from .errors import ConfigurationError, UnsupportedNetworkError
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

MIRROR_NODE_TIMEOUT_SECONDS: Final[float] = 15.0
DEFAULT_ARKHIA_AUTH_HEADER: Final[str] = "x-api-key"


class NetworkType(StrEnum):
    HEDERA_TEST = "hedera_test"
    HEDERA_MAIN = "hedera_main"
    ARKHIA_TEST = "arkhia_test"
    ARKHIA_MAIN = "arkhia_main"

    @property
    def is_arkhia(self) -> bool:
        return self in {NetworkType.ARKHIA_TEST, NetworkType.ARKHIA_MAIN}


NETWORK_BASE_URLS: Final[dict[NetworkType, str]] = {
    NetworkType.HEDERA_TEST: "https://testnet.mirrornode.hedera.com",
    NetworkType.HEDERA_MAIN: "https://mainnet-public.mirrornode.hedera.com",
    NetworkType.ARKHIA_TEST: "https://hedera.testnet.arkhia.io",
    NetworkType.ARKHIA_MAIN: "https://hashport.arkhia.io/hedera/mainnet",
}


def base_url_for(network: NetworkType) -> str:
    try:
        return NETWORK_BASE_URLS[network]
    except KeyError:
        raise ConfigurationError(f"No base URL available for network {network!r}") from None


def auth_headers_for(
    network: NetworkType,
    *,
    auth_key: str | None,
    auth_header: str | None = None,
) -> dict[str, str]:
    """Build the authentication headers a network expects.

    Arkhia gateways read the key from a named header, the public Hedera
    mirror nodes accept it as ``Authorization``. No key means no headers.
    """

    if not auth_key:
        return {}
    if network.is_arkhia:
        return {auth_header or DEFAULT_ARKHIA_AUTH_HEADER: auth_key}
    return {"Authorization": auth_key}


@dataclass(frozen=True, slots=True)
class MirrorNodeConfig:
    """Holds mirror node connection settings."""

    network: NetworkType
    resilience: ResilienceConfig

    @property
    def base_url(self) -> str:
        return self.resilience.base_url or base_url_for(self.network)


def build_mirror_node_config(
    network: NetworkType,
    *,
    auth_key: str | None = None,
    auth_header: str | None = None,
    ratelimit: RateLimit | None = None,
) -> MirrorNodeConfig:
    resilience = ResilienceConfig(
        name=f"mirror-node:{network}",
        base_url=base_url_for(network),
        timeout_seconds=MIRROR_NODE_TIMEOUT_SECONDS,
        retry=RetryPolicy(total=3),
        ratelimit=ratelimit or RateLimit(max_calls=50, per_seconds=1.0),
        default_headers=auth_headers_for(network, auth_key=auth_key, auth_header=auth_header),
    )
    return MirrorNodeConfig(network=network, resilience=resilience)


def get_mirror_node_config() -> MirrorNodeConfig:
    raw_network = optional_env_var("HASHNAMES_NETWORK", NetworkType.HEDERA_TEST.value)
    try:
        network = NetworkType(raw_network)
    except ValueError as exc:
        raise UnsupportedNetworkError(
            raw_network or "", [member.value for member in NetworkType]
        ) from exc

    return build_mirror_node_config(
        network,
        auth_key=optional_env_var("HASHNAMES_AUTH_KEY"),
        auth_header=optional_env_var("HASHNAMES_AUTH_HEADER"),
    )
