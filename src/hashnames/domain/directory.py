"""Static knowledge of registry roles: which contract and which interface description."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING, Final

from .model import ContractId, ContractReference

if TYPE_CHECKING:
    from hashnames.config.registry import RegistryConfig

PACKAGED_ABI_DIR: Final[Path] = Path(__file__).resolve().parent / "abi"


class RegistryRole(StrEnum):
    TLD_MANAGER = "TLDManager"
    TLD_NODE = "TLDNode"
    SLD_NODE = "SLDNode"
    SUBDOMAIN_NODE = "SubdomainNode"


@dataclass(frozen=True, slots=True)
class RegistryDirectory:
    manager_id: ContractId
    abi_dir: Path = PACKAGED_ABI_DIR

    @classmethod
    def from_config(cls, config: RegistryConfig) -> RegistryDirectory:
        return cls(
            manager_id=ContractId.from_string(config.tld_manager_id),
            abi_dir=config.abi_dir or PACKAGED_ABI_DIR,
        )

    def interface_path(self, role: RegistryRole) -> Path:
        return self.abi_dir / f"{role.value}.json"

    def manager(self) -> ContractReference:
        return ContractReference(self.manager_id, self.interface_path(RegistryRole.TLD_MANAGER))

    def tld_node(self, contract_id: ContractId) -> ContractReference:
        return ContractReference(contract_id, self.interface_path(RegistryRole.TLD_NODE))

    def sld_node(self, contract_id: ContractId) -> ContractReference:
        return ContractReference(contract_id, self.interface_path(RegistryRole.SLD_NODE))

    def subdomain_node(self, contract_id: ContractId) -> ContractReference:
        return ContractReference(contract_id, self.interface_path(RegistryRole.SUBDOMAIN_NODE))
