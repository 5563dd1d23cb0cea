"""Match an account's holdings against paginated registration events."""

from __future__ import annotations

import asyncio
from contextlib import aclosing
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from hashnames.domain.model import OwnedName

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hashnames.domain.model import Holding, NftKey, TldRegistration
    from hashnames.domain.ports import LedgerReader

log = getLogger(__name__)


@dataclass(slots=True)
class ReconciliationResult:
    """Names recovered for one account.

    ``complete`` is false when the event log was exhausted before every holding
    was matched, or when cancellation may have cut either walk short; both are
    valid outcomes.
    """

    account_id: str
    holdings: list[Holding] = field(default_factory=list["Holding"])
    matches: list[OwnedName] = field(default_factory=list["OwnedName"])
    pages_fetched: int = 0
    cancelled: bool = False

    @property
    def complete(self) -> bool:
        return not self.cancelled and len(self.matches) == len(self.holdings)

    @property
    def unmatched(self) -> list[Holding]:
        matched = {match.holding.key for match in self.matches}
        return [holding for holding in self.holdings if holding.key not in matched]

    @property
    def names(self) -> list[str]:
        return [match.domain for match in self.matches if match.domain is not None]


def _unique_holdings(batches: Sequence[Sequence[Holding]]) -> list[Holding]:
    seen: dict[NftKey, Holding] = {}
    for batch in batches:
        for holding in batch:
            seen.setdefault(holding.key, holding)
    return list(seen.values())


@dataclass(slots=True)
class ReconciliationEngine:
    """Recover ``(name, registration event)`` pairs for the holdings of an account.

    ``collections`` lists the active TLDs: each one names the NFT collection
    minted for its names and the topic its registrations are published to.
    """

    reader: LedgerReader
    collections: Sequence[TldRegistration]

    @classmethod
    async def from_tld_topic(
        cls,
        reader: LedgerReader,
        topic_id: str,
        *,
        domains: Sequence[str] | None = None,
    ) -> ReconciliationEngine:
        """Build the collection list from the TLD announcements on ``topic_id``."""

        collections = await reader.list_tld_registrations(topic_id, domains=domains)
        log.info("Loaded %s TLD collections from topic %s", len(collections), topic_id)
        return cls(reader=reader, collections=collections)

    async def owned_names(
        self,
        account_id: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> ReconciliationResult:
        holdings = await self._fetch_holdings(account_id, cancel=cancel)
        # A holdings walk stopped by cancellation may be missing later pages.
        holdings_cut = cancel is not None and cancel.is_set()
        result = ReconciliationResult(account_id=account_id, holdings=holdings)
        pending: dict[NftKey, Holding] = {holding.key: holding for holding in holdings}

        for collection in self.collections:
            if not pending:
                break
            if cancel is not None and cancel.is_set():
                break
            if not any(token_id == collection.token_id for token_id, _ in pending):
                continue
            await self._match_topic(collection.topic_id, pending, result, cancel=cancel)

        cancelled_with_pending = bool(pending) and cancel is not None and cancel.is_set()
        result.cancelled = holdings_cut or cancelled_with_pending
        log.info(
            "Reconciled %s: holdings=%s, matched=%s, pages=%s, complete=%s",
            account_id,
            len(result.holdings),
            len(result.matches),
            result.pages_fetched,
            result.complete,
        )
        return result

    async def _fetch_holdings(
        self,
        account_id: str,
        *,
        cancel: asyncio.Event | None,
    ) -> list[Holding]:
        token_ids = list(dict.fromkeys(collection.token_id for collection in self.collections))
        batches = await asyncio.gather(
            *(
                self.reader.list_holdings(token_id, account_id, cancel=cancel)
                for token_id in token_ids
            )
        )
        return _unique_holdings(batches)

    async def _match_topic(
        self,
        topic_id: str,
        pending: dict[NftKey, Holding],
        result: ReconciliationResult,
        *,
        cancel: asyncio.Event | None,
    ) -> None:
        events_by_page = self.reader.iter_registration_events(topic_id, cancel=cancel)
        async with aclosing(events_by_page) as pages:
            async for events in pages:
                result.pages_fetched += 1
                for event in events:
                    holding = pending.pop(event.key, None)
                    if holding is not None:
                        result.matches.append(OwnedName(holding=holding, event=event))
                if not pending:
                    log.debug("All holdings matched after page %s", result.pages_fetched)
                    return
