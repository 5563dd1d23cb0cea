"""Byte-in/byte-out contract call primitives.

The gateway encodes arguments and decodes results; transports only move bytes.
Signing, fee payment and consensus belong to whatever implements
:class:`TransactionSubmitter`.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

from hashnames.adapters.http_resilience import ResilientClient
from hashnames.domain.errors import RemoteQueryError, TransportError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hashnames.config.http_resilience import ResilienceConfig
    from hashnames.config.mirror_node import MirrorNodeConfig
    from hashnames.domain.model import ContractId

log = getLogger(__name__)

CONTRACT_CALL_PATH = "/api/v1/contracts/call"
SUCCESS_STATUS = "SUCCESS"


@dataclass(frozen=True, slots=True)
class ContractCallRequest:
    contract_id: ContractId
    function_name: str
    data: bytes
    gas: int
    payment_tinybars: int | None = None
    signers: Sequence[object] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class ExecutionReceipt:
    status: str
    result: bytes | None = None
    transaction_id: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status.upper() == SUCCESS_STATUS


@runtime_checkable
class ContractCallTransport(Protocol):
    """Runs a read-only call and returns the raw result bytes, if any."""

    async def call(self, request: ContractCallRequest) -> bytes | None: ...


@runtime_checkable
class TransactionSubmitter(Protocol):
    """Signs, submits and waits for finality of a state-changing call."""

    async def submit(self, request: ContractCallRequest) -> ExecutionReceipt | None: ...


def _revert_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text
    messages = payload.get("_status", {}).get("messages", []) if isinstance(payload, dict) else []
    details = [
        str(message.get("detail") or message.get("message"))
        for message in messages
        if isinstance(message, dict)
    ]
    return "; ".join(details) or response.text


class MirrorNodeCallTransport:
    """Simulate read-only calls through the mirror node ``contracts/call`` endpoint.

    The simulation is free, so the nominal query payment carried on the
    request is not forwarded.
    """

    def __init__(
        self,
        *,
        config: MirrorNodeConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient

    async def call(self, request: ContractCallRequest) -> bytes | None:
        body = {
            "block": "latest",
            "data": f"0x{request.data.hex()}",
            "estimate": False,
            "gas": request.gas,
            "to": request.contract_id.to_evm_address(),
        }
        async with self._client_factory(self._config.resilience) as client:
            try:
                response = await client.post(CONTRACT_CALL_PATH, json=body)
            except httpx.HTTPError as exc:
                log.error(
                    "Contract call %s::%s failed: %s",
                    request.contract_id,
                    request.function_name,
                    exc,
                )
                raise TransportError(
                    f"Contract call request failed: {exc}", url=CONTRACT_CALL_PATH
                ) from exc

        if response.status_code == httpx.codes.BAD_REQUEST:
            raise RemoteQueryError(
                f"{request.contract_id}::{request.function_name} reverted: "
                f"{_revert_message(response)}"
            )
        if response.is_error:
            raise TransportError(
                f"Contract call returned HTTP {response.status_code}",
                url=str(response.request.url),
                status_code=response.status_code,
            )

        url = str(response.request.url)
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError("Contract call returned a non-JSON payload", url=url) from exc
        result = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(result, str):
            return None
        raw = result.removeprefix("0x")
        try:
            return bytes.fromhex(raw) if raw else None
        except ValueError as exc:
            raise TransportError(
                f"Contract call result is not hex encoded: {result!r}", url=url
            ) from exc
