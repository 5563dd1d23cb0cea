"""Remote call gateway: encode, call, decode."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from hashnames.config.errors import ConfigurationError
from hashnames.config.registry import DEFAULT_MAX_GAS, DEFAULT_QUERY_PAYMENT_TINYBARS
from hashnames.domain.errors import RemoteExecutionError, RemoteQueryError

from .abi import load_interface
from .transport import ContractCallRequest

if TYPE_CHECKING:
    from collections.abc import Sequence

    from hashnames.config.registry import RegistryConfig
    from hashnames.domain.model import ContractReference, DecodedResult

    from .abi import InterfaceDescription
    from .transport import ContractCallTransport, TransactionSubmitter

log = getLogger(__name__)


class ContractGateway:
    """Execute or query a named function on a remote contract and decode its result.

    No state is kept between calls; each call loads the (static) interface
    description, encodes the arguments and hands the bytes to a transport.
    """

    def __init__(
        self,
        *,
        transport: ContractCallTransport,
        submitter: TransactionSubmitter | None = None,
        max_gas: int = DEFAULT_MAX_GAS,
        query_payment_tinybars: int = DEFAULT_QUERY_PAYMENT_TINYBARS,
    ) -> None:
        self._transport = transport
        self._submitter = submitter
        self._max_gas = max_gas
        self._query_payment = query_payment_tinybars

    @classmethod
    def from_config(
        cls,
        config: RegistryConfig,
        *,
        transport: ContractCallTransport,
        submitter: TransactionSubmitter | None = None,
    ) -> ContractGateway:
        return cls(
            transport=transport,
            submitter=submitter,
            max_gas=config.max_gas,
            query_payment_tinybars=config.query_payment_tinybars,
        )

    async def query(
        self,
        ref: ContractReference,
        function_name: str,
        params: Sequence[object] = (),
        *,
        gas: int | None = None,
    ) -> DecodedResult:
        interface = load_interface(ref.interface)
        request = self._build_request(
            interface, ref, function_name, params, gas=gas, payment_tinybars=self._query_payment
        )

        log.debug("Querying contract %s::%s", ref.id, function_name)
        result = await self._transport.call(request)
        if not result:
            raise RemoteQueryError(f"{ref.id}::{function_name} returned no result bytes")
        return interface.decode_result(function_name, result)

    async def execute(
        self,
        ref: ContractReference,
        function_name: str,
        params: Sequence[object] = (),
        *,
        gas: int | None = None,
        signers: Sequence[object] | None = None,
    ) -> DecodedResult:
        if self._submitter is None:
            raise ConfigurationError("No transaction submitter configured for contract execution")

        interface = load_interface(ref.interface)
        request = self._build_request(
            interface, ref, function_name, params, gas=gas, signers=signers
        )

        log.debug("Executing contract %s::%s", ref.id, function_name)
        receipt = await self._submitter.submit(request)
        if receipt is None:
            raise RemoteExecutionError(f"{ref.id}::{function_name} produced no receipt")
        if not receipt.succeeded:
            log.error(
                "Contract execution %s::%s finished with status %s",
                ref.id,
                function_name,
                receipt.status,
            )
            raise RemoteExecutionError(
                f"{ref.id}::{function_name} finished with status {receipt.status}",
                status=receipt.status,
            )
        if receipt.result is None:
            raise RemoteExecutionError(
                f"{ref.id}::{function_name} receipt carries no function result",
                status=receipt.status,
            )
        return interface.decode_result(function_name, receipt.result)

    def _build_request(
        self,
        interface: InterfaceDescription,
        ref: ContractReference,
        function_name: str,
        params: Sequence[object],
        *,
        gas: int | None,
        signers: Sequence[object] | None = None,
        payment_tinybars: int | None = None,
    ) -> ContractCallRequest:
        return ContractCallRequest(
            contract_id=ref.id,
            function_name=function_name,
            data=interface.encode_call(function_name, params),
            gas=gas if gas is not None else self._max_gas,
            payment_tinybars=payment_tinybars,
            signers=tuple(signers or ()),
        )
