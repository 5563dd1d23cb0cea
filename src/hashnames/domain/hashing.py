"""Per-level name hashing.

Each registry level is keyed by the keccak-256 digest of the name suffix that
ends at that level: ``hbar``, ``example.hbar`` and ``sub.example.hbar``.
"""

from __future__ import annotations

from eth_hash.auto import keccak

from .errors import InvalidDomainError
from .model import NameHash


def normalize_domain(domain: str) -> str:
    return domain.strip().lower().rstrip(".")


def split_domain(domain: str) -> list[str]:
    labels = normalize_domain(domain).split(".")
    if any(not label for label in labels):
        raise InvalidDomainError(f"Domain contains an empty label: {domain!r}")
    if not 2 <= len(labels) <= 3:  # noqa: PLR2004
        raise InvalidDomainError(
            f"Domain must have a second-level and top-level label, "
            f"optionally one subdomain label: {domain!r}"
        )
    return labels


def hash_label(value: str) -> bytes:
    return keccak(value.encode("utf-8"))


def generate_name_hash(domain: str) -> NameHash:
    labels = split_domain(domain)
    tld = labels[-1]
    sld = ".".join(labels[-2:])
    subdomain = ".".join(labels) if len(labels) == 3 else None  # noqa: PLR2004
    return NameHash(
        domain=".".join(labels),
        tld_hash=hash_label(tld),
        sld_hash=hash_label(sld),
        subdomain_hash=hash_label(subdomain) if subdomain is not None else None,
    )
