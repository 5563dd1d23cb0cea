"""Translate mirror node payloads into domain records."""

from __future__ import annotations

import base64
import binascii
import json
from typing import TYPE_CHECKING

from pydantic import ValidationError

from hashnames.domain.errors import DecodeError
from hashnames.domain.model import EventNameHash, Holding, RegistrationEvent, TldRegistration

from .schema import NameHashBody, RegistrationMessage, TldMessage

if TYPE_CHECKING:
    from .schema import NftPayload, TopicMessagePayload


def decode_message_body(payload: TopicMessagePayload) -> dict[str, object]:
    """Base64-decode a topic message and parse its UTF-8 JSON body."""

    try:
        raw = base64.b64decode(payload.message, validate=True)
        body = json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise DecodeError(
            f"Topic message {payload.sequence_number} is not base64 encoded JSON"
        ) from exc
    if not isinstance(body, dict):
        raise DecodeError(f"Topic message {payload.sequence_number} is not a JSON object")
    return body  # pyright: ignore[reportUnknownVariableType]


def parse_holding(payload: NftPayload) -> Holding:
    return Holding(
        token_id=payload.token_id,
        serial=payload.serial_number,
        account_id=payload.account_id,
    )


def _event_name_hash(body: NameHashBody) -> EventNameHash:
    return EventNameHash(
        tld_hash=body.tld_hash.lower().removeprefix("0x"),
        sld_hash=body.sld_hash.lower().removeprefix("0x") if body.sld_hash else None,
        subdomain_hash=(
            body.subdomain_hash.lower().removeprefix("0x") if body.subdomain_hash else None
        ),
        domain=body.domain,
    )


def parse_registration_event(payload: TopicMessagePayload) -> RegistrationEvent:
    body = decode_message_body(payload)
    try:
        message = RegistrationMessage.model_validate(body)
    except ValidationError as exc:
        raise DecodeError(
            f"Topic message {payload.sequence_number} is not a registration: {exc}"
        ) from exc
    return RegistrationEvent(
        name_hash=_event_name_hash(message.name_hash),
        token_id=message.token_id,
        serial=message.serial,
        topic_id=message.topic_id or payload.topic_id,
        sequence_number=payload.sequence_number,
        consensus_timestamp=payload.consensus_timestamp,
        extra=dict(message.model_extra or {}),
    )


def parse_tld_registration(payload: TopicMessagePayload) -> TldRegistration:
    body = decode_message_body(payload)
    try:
        message = TldMessage.model_validate(body)
    except ValidationError as exc:
        raise DecodeError(
            f"Topic message {payload.sequence_number} is not a TLD registration: {exc}"
        ) from exc
    name_hash = _event_name_hash(message.name_hash)
    return TldRegistration(
        domain=(name_hash.domain or "").lower(),
        tld_hash=name_hash.tld_hash,
        token_id=message.token_id,
        topic_id=message.topic_id,
        contract_id=message.contract_id,
    )
