"""Pydantic models describing mirror node REST payloads and topic message bodies."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class MirrorNodeBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Links(MirrorNodeBaseModel):
    next: str | None = None

    _normalize_next = field_validator("next", mode="before")(_blank_to_none)


class PagedResponse(MirrorNodeBaseModel):
    links: Links = Field(default_factory=Links)


class NftPayload(MirrorNodeBaseModel):
    account_id: str | None = None
    token_id: str
    serial_number: int
    deleted: bool = False
    metadata: str | None = None


class NftsPage(PagedResponse):
    nfts: list[NftPayload] = Field(default_factory=list["NftPayload"])


class TopicMessagePayload(MirrorNodeBaseModel):
    consensus_timestamp: str | None = None
    message: str
    sequence_number: int | None = None
    topic_id: str | None = None


class ContractPayload(MirrorNodeBaseModel):
    contract_id: str
    evm_address: str


class NameHashBody(MirrorNodeBaseModel):
    tld_hash: str = Field(alias="tldHash")
    sld_hash: str | None = Field(default=None, alias="sldHash")
    subdomain_hash: str | None = Field(default=None, alias="subdomainHash")
    domain: str | None = None

    _normalize_optional = field_validator("sld_hash", "subdomain_hash", "domain", mode="before")(
        _blank_to_none
    )


class RegistrationMessage(BaseModel):
    """Decoded body of a per-TLD registration topic message.

    Older messages carry the NFT as ``nftId`` (``"<tokenId>:<serial>"``) instead
    of separate ``tokenId`` and ``serial`` fields.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name_hash: NameHashBody = Field(alias="nameHash")
    token_id: str = Field(alias="tokenId")
    serial: int
    topic_id: str | None = Field(default=None, alias="topicId")

    @model_validator(mode="before")
    @classmethod
    def _split_nft_id(cls, value: object) -> object:
        if not isinstance(value, dict) or "nftId" not in value:
            return value
        data: dict[str, object] = dict(value)  # pyright: ignore[reportUnknownArgumentType]
        nft_id = data.pop("nftId")
        if isinstance(nft_id, str) and ":" in nft_id:
            token_id, _, serial = nft_id.rpartition(":")
            data.setdefault("tokenId", token_id)
            data.setdefault("serial", serial)
        return data


class TldMessage(MirrorNodeBaseModel):
    """Decoded body of a main TLD topic message announcing one TLD."""

    name_hash: NameHashBody = Field(alias="nameHash")
    token_id: str = Field(alias="tokenId")
    topic_id: str = Field(alias="topicId")
    contract_id: str | None = Field(default=None, alias="contractId")
