"""Contract call adapter: interface descriptions, transports and the call gateway."""

from __future__ import annotations

from .abi import AbiFunction, AbiParameter, InterfaceDescription, load_interface
from .gateway import ContractGateway
from .transport import (
    ContractCallRequest,
    ContractCallTransport,
    ExecutionReceipt,
    MirrorNodeCallTransport,
    TransactionSubmitter,
)

__all__ = [
    "AbiFunction",
    "AbiParameter",
    "ContractCallRequest",
    "ContractCallTransport",
    "ContractGateway",
    "ExecutionReceipt",
    "InterfaceDescription",
    "MirrorNodeCallTransport",
    "TransactionSubmitter",
    "load_interface",
]
