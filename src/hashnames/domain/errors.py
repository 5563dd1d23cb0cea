"""Error taxonomy for resolution and reconciliation.

Callers distinguish "the name does not exist" (:class:`NameNotFoundError`)
from "the remote service could not answer" (:class:`RemoteServiceError`).
"""

from __future__ import annotations


class HashNamesError(RuntimeError):
    """Base class for all errors raised by hashnames."""


class RemoteServiceError(HashNamesError):
    """A remote ledger or indexer call failed."""


class RemoteExecutionError(RemoteServiceError):
    """A state-changing contract call produced no receipt or a non-success status."""

    def __init__(self, message: str, *, status: str | None = None) -> None:
        super().__init__(message)
        self.status = status


class RemoteQueryError(RemoteServiceError):
    """A read-only contract call returned no result bytes."""


class TransportError(RemoteServiceError):
    """A REST request to the indexer failed."""

    def __init__(
        self,
        message: str,
        *,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class DecodeError(HashNamesError):
    """A contract result could not be decoded with the interface description."""


class NameNotFoundError(HashNamesError):
    """A hop of the resolution chain reported a definitive miss."""


class UnknownTLDError(NameNotFoundError):
    """The TLD manager has no node for the requested top-level hash."""


class ShardNotFoundError(NameNotFoundError):
    """No shard in the searched range reports ownership of the second-level hash."""


class RecordNotFoundError(NameNotFoundError):
    """A registry node has no record for the requested hash."""


class InvalidDomainError(HashNamesError, ValueError):
    """The domain name cannot be split into registry levels."""
