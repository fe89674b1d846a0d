"""Gateways: translate between domain messages and transport messages.

A gateway subscribes itself on a use case for one :class:`Output` type.
When the use case requests that output, the gateway builds a
:class:`Request`, hands it to its ``transport`` and turns the resulting
response into a :class:`SuccessInput` or :class:`FailureInput`.

``transport`` is normally installed by an ``ExternalInterface`` (see
``external_interface.attach``) but can be replaced directly in tests::

    gateway.transport = fake_transport
"""

from __future__ import annotations

import abc
import logging
from collections.abc import Awaitable, Callable
from typing import Any, ClassVar, Generic, TypeVar

from clean_framework.core.errors import (
    ConfigError,
    MissingTransportError,
    UnhandledFailureError,
)
from clean_framework.core.messages import (
    FailureInput,
    FailureResponse,
    Output,
    Request,
    SuccessInput,
    SuccessResponse,
)
from clean_framework.core.result import Left, Result, Right
from clean_framework.providers.use_case import UseCase

logger = logging.getLogger(__name__)

OutputT = TypeVar("OutputT", bound=Output)
RequestT = TypeVar("RequestT", bound=Request)
ResponseT = TypeVar("ResponseT", bound=SuccessResponse)
SuccessInputT = TypeVar("SuccessInputT", bound=SuccessInput)

Transport = Callable[[Any], Awaitable[Result[FailureResponse, Any]]]


class Gateway(abc.ABC, Generic[OutputT, RequestT, ResponseT, SuccessInputT]):
    """Single-shot translator: one output, one request, one response.

    Subclasses set ``output_type`` and implement ``build_request`` and
    ``on_success``.  ``on_failure`` must be overridden whenever the
    transport can fail.
    """

    output_type: ClassVar[type[Output]]

    def __init__(
        self,
        *,
        use_case: UseCase,
        transport: Transport | None = None,
    ) -> None:
        if getattr(self, "output_type", None) is None:
            raise ConfigError(f"{self.__class__.__name__} must declare output_type")
        self._use_case = use_case
        self.transport: Transport = transport or self._unattached
        use_case.subscribe(self.output_type, self._process)

    @property
    def use_case(self) -> UseCase:
        return self._use_case

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abc.abstractmethod
    def build_request(self, output: OutputT) -> RequestT:
        """Map ``output`` to a transport request. Must be pure."""

    @abc.abstractmethod
    def on_success(self, response: ResponseT) -> SuccessInputT:
        """Map a successful response to a domain input. Must be pure."""

    def on_failure(self, failure: FailureResponse) -> FailureInput:
        raise UnhandledFailureError(
            f"{self.name} received {type(failure).__name__} "
            f"but does not override on_failure: {failure.message}"
        )

    async def _process(self, output: OutputT) -> Result[FailureInput, SuccessInputT]:
        request = self.build_request(output)
        result = await self.transport(request)

        match result:
            case Left(failure):
                logger.info(
                    "%s: %s failed (%s)",
                    self.name,
                    type(request).__name__,
                    type(failure).__name__,
                )
                return Left(self.on_failure(failure))
            case Right(response):
                return Right(self.on_success(response))
        raise TypeError(
            f"{self.name}: transport returned {type(result).__name__}, "
            "expected Left or Right"
        )

    async def _unattached(self, request: Request) -> Result[FailureResponse, Any]:
        raise MissingTransportError(
            f"{self.name} has no transport; attach it to an ExternalInterface "
            f"before requesting {self.output_type.__name__}"
        )


class WatcherGateway(Gateway[OutputT, RequestT, ResponseT, SuccessInputT]):
    """Streaming translator.

    The transport resolves once the subscription is established (first
    response or failure).  Every response emitted over the life of the
    subscription, the first included, reaches :meth:`yield_response` and
    is applied to the use case through its input filters.
    """

    def on_failure(self, failure: FailureResponse) -> FailureInput:
        return FailureInput(
            message=f"Subscription could not be established: {failure.message}"
        )

    def yield_response(self, response: ResponseT) -> None:
        self._use_case.set_input(self.on_success(response))
