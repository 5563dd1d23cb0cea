"""Ports the resolver and the reconciliation engine depend on."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import asyncio
    from collections.abc import AsyncGenerator, Sequence

    from .model import (
        ContractReference,
        DecodedResult,
        Holding,
        RegistrationEvent,
        TldRegistration,
    )


@runtime_checkable
class ContractQuerier(Protocol):
    """Read-only contract calls decoded with the contract's interface description."""

    async def query(
        self,
        ref: ContractReference,
        function_name: str,
        params: Sequence[object] = (),
        *,
        gas: int | None = None,
    ) -> DecodedResult: ...


@runtime_checkable
class LedgerReader(Protocol):
    """Paginated ledger index access needed for ownership reconciliation."""

    async def list_holdings(
        self,
        token_id: str,
        account_id: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[Holding]: ...

    def iter_registration_events(
        self,
        topic_id: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> AsyncGenerator[list[RegistrationEvent]]: ...

    async def list_tld_registrations(
        self,
        topic_id: str,
        *,
        domains: Sequence[str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> list[TldRegistration]: ...


__all__ = ["ContractQuerier", "LedgerReader"]
