"""Greeting feature: a small end-to-end wiring of every layer.

- ``GreetingUseCase`` asks for a greeting (single-shot) and subscribes to
  a ticker (streaming).
- ``GreetingGateway`` / ``TickerGateway`` translate those outputs.
- ``DemoExternalInterface`` simulates the remote side with sleeps.

Used by the ``demo`` CLI command and as a reference for wiring new
features through ``ProvidersContainer``.
"""

from __future__ import annotations

import asyncio
import logging

from clean_framework.core.config import Settings
from clean_framework.core.messages import (
    Entity,
    FailureInput,
    FailureResponse,
    Output,
    Request,
    SuccessInput,
    SuccessResponse,
    TypedFailureResponse,
)
from clean_framework.providers.container import ProvidersContainer
from clean_framework.providers.external_interface import ExternalInterface, Send
from clean_framework.providers.gateway import Gateway, WatcherGateway
from clean_framework.providers.use_case import UseCase

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------

class GreetingEntity(Entity):
    name: str = ""
    greeting: str = ""
    error: str = ""
    ticks: tuple[int, ...] = ()


class GreetingViewOutput(Output):
    greeting: str
    error: str
    tick_count: int


class GreetingGatewayOutput(Output):
    name: str


class TickerGatewayOutput(Output):
    count: int
    interval: float


class GreetingSuccessInput(SuccessInput):
    text: str


class TickInput(SuccessInput):
    tick: int


class GreetingUseCase(UseCase[GreetingEntity]):
    def __init__(self, debounce_duration: float = 0.3) -> None:
        super().__init__(
            entity=GreetingEntity(),
            output_filters={
                GreetingViewOutput: lambda entity: GreetingViewOutput(
                    greeting=entity.greeting,
                    error=entity.error,
                    tick_count=len(entity.ticks),
                ),
            },
            input_filters={
                TickInput: lambda input_, entity: entity.merge(
                    ticks=(*entity.ticks, input_.tick)
                ),
            },
            debounce_duration=debounce_duration,
        )

    async def greet(self, name: str) -> None:
        self.entity = self.entity.merge(name=name)
        await self.request(
            GreetingGatewayOutput(name=name),
            on_success=lambda success: self.entity.merge(
                greeting=success.text, error=""
            ),
            on_failure=lambda failure: self.entity.merge(
                greeting="", error=failure.message
            ),
        )

    def on_name_typed(self, name: str) -> None:
        """Greet once typing settles."""
        self.debounce(lambda: self.greet(name), tag="name", immediate=False)

    async def watch_ticks(self, count: int, interval: float) -> None:
        # Ticks accumulate through the TickInput filter; the request only
        # records whether the subscription came up.
        await self.request(
            TickerGatewayOutput(count=count, interval=interval),
            on_success=lambda _: self.entity,
            on_failure=lambda failure: self.entity.merge(error=failure.message),
        )


# ---------------------------------------------------------------------------
# Adapters
# ---------------------------------------------------------------------------

class GreetingRequest(Request):
    name: str


class TickerRequest(Request):
    count: int
    interval: float


class GreetingResponse(SuccessResponse):
    text: str


class TickResponse(SuccessResponse):
    tick: int


class GreetingGateway(
    Gateway[GreetingGatewayOutput, GreetingRequest, GreetingResponse, GreetingSuccessInput]
):
    output_type = GreetingGatewayOutput

    def build_request(self, output: GreetingGatewayOutput) -> GreetingRequest:
        return GreetingRequest(name=output.name.strip())

    def on_success(self, response: GreetingResponse) -> GreetingSuccessInput:
        return GreetingSuccessInput(text=response.text)

    def on_failure(self, failure: FailureResponse) -> FailureInput:
        return FailureInput(message=failure.message or "greeting unavailable")


class TickerGateway(WatcherGateway[TickerGatewayOutput, TickerRequest, TickResponse, TickInput]):
    output_type = TickerGatewayOutput

    def build_request(self, output: TickerGatewayOutput) -> TickerRequest:
        return TickerRequest(count=output.count, interval=output.interval)

    def on_success(self, response: TickResponse) -> TickInput:
        return TickInput(tick=response.tick)


# ---------------------------------------------------------------------------
# External interface
# ---------------------------------------------------------------------------

class DemoExternalInterface(ExternalInterface):
    """Simulated remote service."""

    def __init__(self, gateways=(), *, delay: float = 0.1, timeout: float | None = None) -> None:
        self._delay = delay
        super().__init__(gateways, timeout=timeout)

    def handle_request(self) -> None:
        self.on(GreetingRequest, self._greet)
        self.on(TickerRequest, self._tick)

    async def _greet(self, request: GreetingRequest, send: Send) -> None:
        await asyncio.sleep(self._delay)
        if not request.name:
            send(TypedFailureResponse(type="validation", message="name is required"))
            return
        send(GreetingResponse(text=f"Hello, {request.name}!"))

    async def _tick(self, request: TickerRequest, send: Send) -> None:
        for tick in range(request.count):
            await asyncio.sleep(request.interval)
            logger.debug("tick %d", tick)
            send(TickResponse(tick=tick))


def build_container(settings: Settings | None = None) -> ProvidersContainer:
    """Register the greeting feature on a fresh container."""
    container = ProvidersContainer(settings)
    cfg = container.settings

    container.register(
        GreetingUseCase,
        lambda c: GreetingUseCase(debounce_duration=cfg.debounce.duration_seconds),
    )
    container.register(
        GreetingGateway,
        lambda c: GreetingGateway(use_case=c.resolve(GreetingUseCase)),
    )
    container.register(
        TickerGateway,
        lambda c: TickerGateway(use_case=c.resolve(GreetingUseCase)),
    )
    container.register(
        DemoExternalInterface,
        lambda c: DemoExternalInterface(
            [c.connection(GreetingGateway), c.connection(TickerGateway)],
            delay=cfg.demo.greeting_delay_seconds,
            timeout=cfg.transport.handler_timeout_seconds,
        ),
    )
    return container
