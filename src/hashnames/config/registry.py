"""Naming registry configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import optional_env_var, optional_int_env_var, require_env_vars

DEFAULT_MAX_GAS: Final[int] = 4_000_000
# One hbar, expressed in tinybars.
DEFAULT_QUERY_PAYMENT_TINYBARS: Final[int] = 100_000_000
DEFAULT_ACTIVE_DOMAINS: Final[tuple[str, ...]] = ("hbar", "boo", "cream")


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    """Well-known registry entities and contract call defaults."""

    tld_manager_id: str
    tld_topic_id: str
    max_gas: int = DEFAULT_MAX_GAS
    query_payment_tinybars: int = DEFAULT_QUERY_PAYMENT_TINYBARS
    abi_dir: Path | None = None
    active_domains: tuple[str, ...] = DEFAULT_ACTIVE_DOMAINS


def get_registry_config() -> RegistryConfig:
    values = require_env_vars(("HASHNAMES_TLD_MANAGER_ID", "HASHNAMES_TLD_TOPIC_ID"))
    abi_dir = optional_env_var("HASHNAMES_ABI_DIR")
    domains = optional_env_var("HASHNAMES_ACTIVE_DOMAINS")
    return RegistryConfig(
        tld_manager_id=values["HASHNAMES_TLD_MANAGER_ID"],
        tld_topic_id=values["HASHNAMES_TLD_TOPIC_ID"],
        max_gas=optional_int_env_var("HASHNAMES_MAX_GAS", DEFAULT_MAX_GAS),
        abi_dir=Path(abi_dir).expanduser() if abi_dir else None,
        active_domains=(
            tuple(part.strip().lower() for part in domains.split(",") if part.strip())
            if domains
            else DEFAULT_ACTIVE_DOMAINS
        ),
    )
