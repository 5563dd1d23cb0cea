"""Paginated reader for the mirror node REST API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Final

import httpx
from pydantic import ValidationError

from hashnames.adapters.http_resilience import ResilientClient
from hashnames.domain.errors import DecodeError, TransportError

from .schema import (
    ContractPayload,
    Links,
    MirrorNodeBaseModel,
    NftPayload,
    NftsPage,
    TopicMessagePayload,
)
from .translator import parse_holding, parse_registration_event, parse_tld_registration

if TYPE_CHECKING:
    import asyncio
    from collections.abc import AsyncGenerator, Callable, Iterable, Sequence

    from hashnames.config.http_resilience import ResilienceConfig
    from hashnames.config.mirror_node import MirrorNodeConfig
    from hashnames.domain.model import Holding, NameHash, RegistrationEvent, TldRegistration

log = getLogger(__name__)

# Largest page the mirror nodes serve.
MAX_PAGE_SIZE: Final[int] = 100

type Payload = Mapping[str, object]
type QueryParams = Mapping[str, str | int]


@dataclass(slots=True)
class PageCollection[T]:
    """Items accumulated across every page of a cursor walk, in server order."""

    items: list[T] = field(default_factory=list)
    pages_fetched: int = 0
    cancelled: bool = False


def _is_cancelled(cancel: asyncio.Event | None) -> bool:
    return cancel is not None and cancel.is_set()


def next_link(page: Payload) -> str | None:
    raw_links = page.get("links")
    if not isinstance(raw_links, Mapping):
        return None
    try:
        return Links.model_validate(raw_links).next
    except ValidationError:
        return None


def page_items(page: Payload, items_key: str) -> list[Payload]:
    items = page.get(items_key, [])
    if not isinstance(items, list):
        raise TransportError(f"Page field {items_key!r} is not a list")
    mappings: list[Payload] = [item for item in items if isinstance(item, Mapping)]  # pyright: ignore
    return mappings


class MirrorNodeReader:
    """Fetch mirror node resources, following ``links.next`` cursors page by page.

    Cursor links are resolved against the configured base URL. A page's
    continuation is only known once it has arrived, so pages of one resource
    are always fetched sequentially. Failures surface as
    :class:`~hashnames.domain.errors.TransportError`; retrying is left to the
    HTTP transport's retry policy.
    """

    def __init__(
        self,
        *,
        config: MirrorNodeConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
        page_size: int = MAX_PAGE_SIZE,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient
        self._page_size = min(page_size, MAX_PAGE_SIZE)

    # Generic pagination

    async def fetch(self, path: str, params: QueryParams | None = None) -> Payload:
        """Fetch the first page of ``path``."""

        async with self._client_factory(self._config.resilience) as client:
            return await self._get(client, path, params=params)

    async def follow_cursor(
        self,
        first_page: Payload,
        items_key: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> PageCollection[Payload]:
        """Accumulate ``items_key`` from ``first_page`` and every page linked after it.

        ``cancel`` is checked between page fetches; once set, no further page
        is requested and the items gathered so far are returned.
        """

        collection = PageCollection[Payload](
            items=page_items(first_page, items_key),
            pages_fetched=1,
        )
        link = next_link(first_page)
        if link is None:
            return collection

        async with self._client_factory(self._config.resilience) as client:
            while link is not None:
                if _is_cancelled(cancel):
                    log.info("Cursor walk cancelled after %s pages", collection.pages_fetched)
                    collection.cancelled = True
                    break
                page = await self._get(client, link)
                collection.items.extend(page_items(page, items_key))
                collection.pages_fetched += 1
                link = next_link(page)
        return collection

    async def collect(
        self,
        path: str,
        items_key: str,
        *,
        params: QueryParams | None = None,
        cancel: asyncio.Event | None = None,
    ) -> PageCollection[Payload]:
        first_page = await self.fetch(path, params)
        return await self.follow_cursor(first_page, items_key, cancel=cancel)

    async def iter_pages(
        self,
        path: str,
        items_key: str,
        *,
        params: QueryParams | None = None,
        cancel: asyncio.Event | None = None,
    ) -> AsyncGenerator[list[Payload]]:
        """Yield the items of each page as it arrives.

        Consumers that stop early should close the iterator
        (``contextlib.aclosing``) so that the HTTP client is released.
        """

        async with self._client_factory(self._config.resilience) as client:
            page = await self._get(client, path, params=params)
            yield page_items(page, items_key)
            link = next_link(page)
            while link is not None:
                if _is_cancelled(cancel):
                    log.info("Page iteration over %s cancelled", path)
                    return
                page = await self._get(client, link)
                yield page_items(page, items_key)
                link = next_link(page)

    # Resource families

    async def list_holdings(
        self,
        token_id: str,
        account_id: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[Holding]:
        """NFT serials of ``token_id`` currently held by ``account_id``."""

        collection = await self.collect(
            f"/api/v1/tokens/{token_id}/nfts",
            "nfts",
            params={"account.id": account_id, "limit": self._page_size},
            cancel=cancel,
        )
        return _holdings(collection.items)

    async def list_account_nfts(
        self,
        account_id: str,
        *,
        token_id: str | None = None,
        cancel: asyncio.Event | None = None,
    ) -> list[Holding]:
        params: dict[str, str | int] = {"limit": self._page_size}
        if token_id is not None:
            params["token.id"] = token_id
        collection = await self.collect(
            f"/api/v1/accounts/{account_id}/nfts",
            "nfts",
            params=params,
            cancel=cancel,
        )
        return _holdings(collection.items)

    async def get_nft(self, token_id: str, serial: int) -> Holding:
        payload = await self.fetch(f"/api/v1/tokens/{token_id}/nfts/{serial}")
        return parse_holding(_validate(NftPayload, payload))

    async def get_contract_evm_address(self, contract_id: str) -> str:
        payload = await self.fetch(f"/api/v1/contracts/{contract_id}")
        return _validate(ContractPayload, payload).evm_address

    async def iter_registration_events(
        self,
        topic_id: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> AsyncGenerator[list[RegistrationEvent]]:
        """Yield the registration events of each topic page, oldest first.

        Messages that are not registrations are logged and skipped.
        """

        pages = self.iter_pages(
            f"/api/v1/topics/{topic_id}/messages",
            "messages",
            params={"limit": self._page_size, "order": "asc"},
            cancel=cancel,
        )
        try:
            async for items in pages:
                events: list[RegistrationEvent] = []
                for message in _topic_messages(items):
                    try:
                        events.append(parse_registration_event(message))
                    except DecodeError as exc:
                        log.warning("Skipping topic %s message: %s", topic_id, exc)
                yield events
        finally:
            await pages.aclose()

    async def list_registration_events(
        self,
        topic_id: str,
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[RegistrationEvent]:
        events: list[RegistrationEvent] = []
        async for page in self.iter_registration_events(topic_id, cancel=cancel):
            events.extend(page)
        return events

    async def list_tld_registrations(
        self,
        topic_id: str,
        *,
        domains: Sequence[str] | None = None,
        cancel: asyncio.Event | None = None,
    ) -> list[TldRegistration]:
        """TLDs announced on the main TLD topic, optionally limited to ``domains``."""

        collection = await self.collect(
            f"/api/v1/topics/{topic_id}/messages",
            "messages",
            params={"limit": self._page_size, "order": "asc"},
            cancel=cancel,
        )
        wanted = {domain.lower() for domain in domains} if domains is not None else None
        registrations: list[TldRegistration] = []
        for message in _topic_messages(collection.items):
            try:
                registration = parse_tld_registration(message)
            except DecodeError as exc:
                log.warning("Skipping TLD topic %s message: %s", topic_id, exc)
                continue
            if wanted is None or registration.domain in wanted:
                registrations.append(registration)
        return registrations

    async def find_tld_registration(
        self,
        topic_id: str,
        name_hash: NameHash,
    ) -> TldRegistration | None:
        """First TLD announcement on ``topic_id`` whose TLD hash matches ``name_hash``."""

        pages = self.iter_pages(
            f"/api/v1/topics/{topic_id}/messages",
            "messages",
            params={"limit": self._page_size, "order": "asc"},
        )
        try:
            async for items in pages:
                for message in _topic_messages(items):
                    try:
                        registration = parse_tld_registration(message)
                    except DecodeError:
                        continue
                    if registration.tld_hash == name_hash.tld_hex:
                        return registration
        finally:
            await pages.aclose()
        return None

    async def _get(
        self,
        client: ResilientClient,
        url: str,
        *,
        params: QueryParams | None = None,
    ) -> Payload:
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            log.error("Mirror node request %s failed: %s", url, exc)
            raise TransportError(f"Mirror node request failed: {exc}", url=url) from exc

        if response.is_error:
            log.error("Mirror node request %s returned HTTP %s", url, response.status_code)
            raise TransportError(
                f"Mirror node returned HTTP {response.status_code}",
                url=str(response.request.url),
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("Mirror node returned a non-JSON payload", url=url) from exc
        if not isinstance(payload, dict):
            raise TransportError("Unexpected mirror node response payload", url=url)
        return payload  # pyright: ignore[reportUnknownVariableType]


def _validate[M: MirrorNodeBaseModel](model: type[M], payload: Payload) -> M:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise TransportError(f"Unexpected mirror node payload: {exc}") from exc


def _holdings(items: Iterable[Payload]) -> list[Holding]:
    try:
        page = NftsPage.model_validate({"nfts": list(items)})
    except ValidationError as exc:
        raise TransportError(f"Unexpected NFT listing payload: {exc}") from exc
    return [parse_holding(nft) for nft in page.nfts if not nft.deleted]


def _topic_messages(items: Iterable[Payload]) -> list[TopicMessagePayload]:
    messages: list[TopicMessagePayload] = []
    for item in items:
        try:
            messages.append(TopicMessagePayload.model_validate(item))
        except ValidationError as exc:
            log.warning("Skipping malformed topic message envelope: %s", exc)
    return messages
