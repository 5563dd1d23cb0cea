"""Mirror node (ledger indexer) adapter."""

from __future__ import annotations

from .client import MAX_PAGE_SIZE, MirrorNodeReader, PageCollection, next_link, page_items
from .schema import NftPayload, RegistrationMessage, TldMessage, TopicMessagePayload
from .translator import (
    decode_message_body,
    parse_holding,
    parse_registration_event,
    parse_tld_registration,
)

__all__ = [
    "MAX_PAGE_SIZE",
    "MirrorNodeReader",
    "NftPayload",
    "PageCollection",
    "RegistrationMessage",
    "TldMessage",
    "TopicMessagePayload",
    "decode_message_body",
    "next_link",
    "page_items",
    "parse_holding",
    "parse_registration_event",
    "parse_tld_registration",
]
