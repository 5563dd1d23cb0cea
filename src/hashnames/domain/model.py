"""Read-only projections of registry and ledger state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar, Final

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

type NftKey = tuple[str, int]

_SOLIDITY_ADDRESS_HEX_LENGTH: Final[int] = 40


def _strip_hex_prefix(value: str) -> str:
    return value[2:] if value[:2].lower() == "0x" else value


@dataclass(frozen=True, slots=True, order=True)
class ContractId:
    """Ledger entity id in ``shard.realm.num`` form."""

    shard: int
    realm: int
    num: int

    @classmethod
    def from_string(cls, value: str) -> ContractId:
        parts = value.strip().split(".")
        if len(parts) != 3:
            raise ValueError(f"Invalid entity id: {value!r}")
        try:
            shard, realm, num = (int(part) for part in parts)
        except ValueError as exc:
            raise ValueError(f"Invalid entity id: {value!r}") from exc
        if min(shard, realm, num) < 0:
            raise ValueError(f"Invalid entity id: {value!r}")
        return cls(shard, realm, num)

    @classmethod
    def from_solidity_address(cls, address: str) -> ContractId:
        """Parse a 20-byte long-zero address (4 byte shard, 8 byte realm, 8 byte num)."""

        raw = _strip_hex_prefix(address)
        if len(raw) != _SOLIDITY_ADDRESS_HEX_LENGTH:
            raise ValueError(f"Invalid solidity address: {address!r}")
        try:
            return cls(int(raw[:8], 16), int(raw[8:24], 16), int(raw[24:], 16))
        except ValueError as exc:
            raise ValueError(f"Invalid solidity address: {address!r}") from exc

    def to_solidity_address(self) -> str:
        return f"{self.shard:08x}{self.realm:016x}{self.num:016x}"

    def to_evm_address(self) -> str:
        return f"0x{self.to_solidity_address()}"

    @property
    def is_zero(self) -> bool:
        return self.shard == 0 and self.realm == 0 and self.num == 0

    def __str__(self) -> str:
        return f"{self.shard}.{self.realm}.{self.num}"


@dataclass(frozen=True, slots=True)
class ContractReference:
    """Where (contract id) and how (interface description path) to call a registry role."""

    id: ContractId
    interface: Path

    def __str__(self) -> str:
        return f"{self.id} ({self.interface.stem})"


@dataclass(frozen=True, slots=True)
class NameHash:
    domain: str
    tld_hash: bytes
    sld_hash: bytes
    subdomain_hash: bytes | None = None

    @property
    def has_subdomain(self) -> bool:
        return self.subdomain_hash is not None

    @property
    def tld_hex(self) -> str:
        return self.tld_hash.hex()

    @property
    def sld_hex(self) -> str:
        return self.sld_hash.hex()

    @property
    def subdomain_hex(self) -> str | None:
        return self.subdomain_hash.hex() if self.subdomain_hash is not None else None


@dataclass(frozen=True, slots=True)
class ShardRange:
    """Half-open ``[begin, end)`` slice of a TLD node's shard table.

    ``ShardRange.FULL_TABLE`` (``(0, 0)``) asks the node to search every shard.
    """

    FULL_TABLE: ClassVar[ShardRange]

    begin: int = 0
    end: int = 0

    def __post_init__(self) -> None:
        if self.begin < 0 or self.end < 0:
            raise ValueError(f"Shard range bounds must be non-negative: {self}")
        if self.begin > self.end:
            raise ValueError(f"Shard range begin must not exceed end: {self}")

    @property
    def is_full_table(self) -> bool:
        return self.begin == 0 and self.end == 0

    @property
    def size(self) -> int:
        return self.end - self.begin

    def split(self) -> tuple[ShardRange, ShardRange]:
        """Split into a lower and upper half; the lower half is never empty."""

        if self.size < 2:
            raise ValueError(f"Cannot split shard range of size {self.size}: {self}")
        middle = self.begin + self.size // 2
        return ShardRange(self.begin, middle), ShardRange(middle, self.end)

    def __str__(self) -> str:
        return f"[{self.begin}, {self.end})"


ShardRange.FULL_TABLE = ShardRange(0, 0)


@dataclass(frozen=True, slots=True)
class SLDRecord:
    serial: int
    expiration: int | None
    subdomain_node: ContractId | None
    fields: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SubdomainRecord:
    fields: Mapping[str, object] = field(default_factory=dict)

    @property
    def owner(self) -> str | None:
        owner = self.fields.get("owner")
        return owner if isinstance(owner, str) else None


@dataclass(frozen=True, slots=True)
class Holding:
    """An NFT serial of a token collection held by an account."""

    token_id: str
    serial: int
    account_id: str | None = None

    @property
    def key(self) -> NftKey:
        return (self.token_id, self.serial)


@dataclass(frozen=True, slots=True)
class EventNameHash:
    """Hex-encoded per-level hashes as published in registration messages."""

    tld_hash: str
    sld_hash: str | None = None
    subdomain_hash: str | None = None
    domain: str | None = None


@dataclass(frozen=True, slots=True)
class RegistrationEvent:
    """One registration published to a topic; binds a name hash to a minted serial."""

    name_hash: EventNameHash
    token_id: str
    serial: int
    topic_id: str | None = None
    sequence_number: int | None = None
    consensus_timestamp: str | None = None
    extra: Mapping[str, object] = field(default_factory=dict)

    @property
    def key(self) -> NftKey:
        return (self.token_id, self.serial)

    @property
    def domain(self) -> str | None:
        return self.name_hash.domain


@dataclass(frozen=True, slots=True)
class TldRegistration:
    """Main-topic announcement of an active TLD, its NFT collection and event topic."""

    domain: str
    tld_hash: str
    token_id: str
    topic_id: str
    contract_id: str | None = None


@dataclass(frozen=True, slots=True)
class OwnedName:
    holding: Holding
    event: RegistrationEvent

    @property
    def domain(self) -> str | None:
        return self.event.domain


@dataclass(frozen=True, slots=True)
class DecodedResult:
    """Values returned by a contract function, decoded with its declared outputs.

    Values are reachable by position and, for named outputs, by name. Tuple
    outputs are exposed as mappings keyed by component name.
    """

    function: str
    values: tuple[object, ...]
    named: Mapping[str, object] = field(default_factory=dict)

    def __getitem__(self, key: int | str) -> object:
        if isinstance(key, int):
            return self.values[key]
        return self.named[key]

    def __len__(self) -> int:
        return len(self.values)

    def first(self) -> object:
        if not self.values:
            raise IndexError(f"{self.function} returned no values")
        return self.values[0]
