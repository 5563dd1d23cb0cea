from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from eth_abi import encode

from hashnames.adapters.contracts import (
    ContractCallRequest,
    ContractGateway,
    ExecutionReceipt,
)
from hashnames.config import ConfigurationError, RegistryConfig
from hashnames.domain.directory import PACKAGED_ABI_DIR
from hashnames.domain.errors import DecodeError, RemoteExecutionError, RemoteQueryError
from hashnames.domain.model import ContractId, ContractReference

NODE = ContractReference(ContractId(0, 0, 55), PACKAGED_ABI_DIR / "TLDNode.json")


@dataclass(slots=True)
class RecordingTransport:
    result: bytes | None
    requests: list[ContractCallRequest] = field(default_factory=list)

    async def call(self, request: ContractCallRequest) -> bytes | None:
        self.requests.append(request)
        return self.result


@dataclass(slots=True)
class RecordingSubmitter:
    receipt: ExecutionReceipt | None
    requests: list[ContractCallRequest] = field(default_factory=list)

    async def submit(self, request: ContractCallRequest) -> ExecutionReceipt | None:
        self.requests.append(request)
        return self.receipt


def _registrar(tmp_path: Path) -> ContractReference:
    path = tmp_path / "Registrar.json"
    path.write_text(
        json.dumps(
            [
                {
                    "type": "function",
                    "name": "register",
                    "inputs": [{"name": "nameHash", "type": "bytes32"}],
                    "outputs": [{"name": "serial", "type": "uint256"}],
                    "stateMutability": "nonpayable",
                }
            ]
        ),
        encoding="utf-8",
    )
    return ContractReference(ContractId(0, 0, 77), path)


def test_query_decodes_result_and_attaches_payment() -> None:
    transport = RecordingTransport(result=encode(["uint256"], [4]))
    gateway = ContractGateway(transport=transport, max_gas=123_456)

    result = asyncio.run(gateway.query(NODE, "getNumNodes"))

    assert result.first() == 4
    [request] = transport.requests
    assert request.contract_id == NODE.id
    assert request.function_name == "getNumNodes"
    assert request.gas == 123_456
    assert request.payment_tinybars == 100_000_000


def test_query_gas_override() -> None:
    transport = RecordingTransport(result=encode(["uint256"], [1]))
    gateway = ContractGateway(transport=transport)

    asyncio.run(gateway.query(NODE, "getNumNodes", gas=50_000))

    assert transport.requests[0].gas == 50_000


@pytest.mark.parametrize("result", [None, b""])
def test_query_without_result_bytes_raises(result: bytes | None) -> None:
    gateway = ContractGateway(transport=RecordingTransport(result=result))

    with pytest.raises(RemoteQueryError):
        asyncio.run(gateway.query(NODE, "getNumNodes"))


def test_query_unknown_function_never_reaches_transport() -> None:
    transport = RecordingTransport(result=b"\x00" * 32)
    gateway = ContractGateway(transport=transport)

    with pytest.raises(DecodeError):
        asyncio.run(gateway.query(NODE, "getTLD", (bytes(32),)))

    assert transport.requests == []


def test_from_config_applies_call_defaults() -> None:
    transport = RecordingTransport(result=encode(["uint256"], [1]))
    config = RegistryConfig(
        tld_manager_id="0.0.1",
        tld_topic_id="0.0.2",
        max_gas=999,
        query_payment_tinybars=5,
    )

    gateway = ContractGateway.from_config(config, transport=transport)
    asyncio.run(gateway.query(NODE, "getNumNodes"))

    assert transport.requests[0].gas == 999
    assert transport.requests[0].payment_tinybars == 5


def test_execute_requires_submitter(tmp_path: Path) -> None:
    gateway = ContractGateway(transport=RecordingTransport(result=None))

    with pytest.raises(ConfigurationError):
        asyncio.run(gateway.execute(_registrar(tmp_path), "register", (bytes(32),)))


def test_execute_decodes_receipt_result(tmp_path: Path) -> None:
    submitter = RecordingSubmitter(
        ExecutionReceipt(status="SUCCESS", result=encode(["uint256"], [12]), transaction_id="tx")
    )
    gateway = ContractGateway(transport=RecordingTransport(result=None), submitter=submitter)

    result = asyncio.run(
        gateway.execute(_registrar(tmp_path), "register", (b"\x01" * 32,), signers=["key"])
    )

    assert result["serial"] == 12
    [request] = submitter.requests
    assert request.signers == ("key",)
    assert request.payment_tinybars is None


def test_execute_without_receipt_raises(tmp_path: Path) -> None:
    gateway = ContractGateway(
        transport=RecordingTransport(result=None),
        submitter=RecordingSubmitter(None),
    )

    with pytest.raises(RemoteExecutionError):
        asyncio.run(gateway.execute(_registrar(tmp_path), "register", (bytes(32),)))


def test_execute_failed_status_raises_with_status(tmp_path: Path) -> None:
    gateway = ContractGateway(
        transport=RecordingTransport(result=None),
        submitter=RecordingSubmitter(ExecutionReceipt(status="CONTRACT_REVERT_EXECUTED")),
    )

    with pytest.raises(RemoteExecutionError) as exc_info:
        asyncio.run(gateway.execute(_registrar(tmp_path), "register", (bytes(32),)))

    assert exc_info.value.status == "CONTRACT_REVERT_EXECUTED"


def test_execute_success_without_result_raises(tmp_path: Path) -> None:
    gateway = ContractGateway(
        transport=RecordingTransport(result=None),
        submitter=RecordingSubmitter(ExecutionReceipt(status="SUCCESS")),
    )

    with pytest.raises(RemoteExecutionError, match="no function result"):
        asyncio.run(gateway.execute(_registrar(tmp_path), "register", (bytes(32),)))
