"""ExternalInterface: runs requests against the outside world.

An interface owns a table of request handlers keyed by request class and
a set of attached gateways.  Each dispatched request runs its handler in
a dedicated task::

    class ProfileInterface(ExternalInterface):
        def handle_request(self) -> None:
            self.on(ProfileRequest, self._fetch_profile)

        async def _fetch_profile(self, request, send):
            send(ProfileResponse(...))

The first ``send`` resolves the awaiting gateway.  Further sends are
delivered only to watcher gateways, one input per response.  Exceptions
never leave a handler raw: ``on_error`` turns them into a
:class:`FailureResponse`.
"""

from __future__ import annotations

import abc
import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, Union

from clean_framework.core.errors import (
    ConfigError,
    DuplicateHandlerError,
    MissingHandlerError,
    NoResponseError,
    RequestCancelledError,
)
from clean_framework.core.messages import (
    FailureResponse,
    Request,
    Response,
    SuccessResponse,
    UnknownFailureResponse,
)
from clean_framework.core.result import Left, Result, Right
from clean_framework.observability.logger import new_trace_id
from clean_framework.providers.gateway import Gateway, WatcherGateway

logger = logging.getLogger(__name__)

Send = Callable[[Response], None]
RequestHandler = Callable[[Any, Send], Awaitable[None]]
GatewayConnection = Union[Gateway, Callable[[], Gateway]]


class ExternalInterface(abc.ABC):
    """Dispatches requests from attached gateways to registered handlers.

    Parameters
    ----------
    gateways:
        Gateway instances, or zero-argument callables returning one
        (e.g. ``ProvidersContainer.connection``).
    timeout:
        Seconds a handler may run before it is cancelled.  ``None`` lets
        handlers run until they return or the interface is disposed.
    """

    def __init__(
        self,
        gateways: Iterable[GatewayConnection] = (),
        *,
        timeout: float | None = None,
    ) -> None:
        self._handlers: dict[type[Request], RequestHandler] = {}
        self._tasks: set[asyncio.Task] = set()
        self._timeout = timeout
        self._gateways: list[Gateway] = []

        self.handle_request()

        for connection in gateways:
            self.attach(connection)

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @property
    def gateways(self) -> list[Gateway]:
        return list(self._gateways)

    @property
    def active_tasks(self) -> int:
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Set-up hooks
    # ------------------------------------------------------------------

    @abc.abstractmethod
    def handle_request(self) -> None:
        """Register a handler for every request type this interface serves."""

    def on_error(self, error: BaseException) -> FailureResponse:
        """Convert a handler exception into a failure response."""
        return UnknownFailureResponse(error=error)

    def on(
        self,
        request_type: type[Request],
        handler: RequestHandler | None = None,
    ) -> Any:
        """Register ``handler`` for ``request_type``. Works as a decorator."""

        def register(fn: RequestHandler) -> RequestHandler:
            if request_type in self._handlers:
                raise DuplicateHandlerError(
                    f"{self.name} already handles {request_type.__name__}"
                )
            self._handlers[request_type] = fn
            return fn

        if handler is None:
            return register
        return register(handler)

    def attach(self, connection: GatewayConnection) -> Gateway:
        """Route ``connection``'s transport through this interface."""
        gateway = connection if isinstance(connection, Gateway) else connection()
        feed = gateway.yield_response if isinstance(gateway, WatcherGateway) else None

        async def transport(request: Request) -> Result[FailureResponse, SuccessResponse]:
            return await self.dispatch(request, feed=feed)

        gateway.transport = transport
        self._gateways.append(gateway)
        logger.debug("%s: attached %s", self.name, gateway.name)
        return gateway

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def dispatch(
        self,
        request: Request,
        *,
        feed: Callable[[Any], None] | None = None,
    ) -> Result[FailureResponse, SuccessResponse]:
        """Run the handler for ``request`` and await its first response."""
        request_type = type(request)
        handler = self._handlers.get(request_type)
        if handler is None:
            raise MissingHandlerError(
                f"{self.name} has no handler for {request_type.__name__}"
            )

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        task = asyncio.create_task(
            self._run_handler(handler, request, future, feed),
            name=f"{self.name}-{request_type.__name__}",
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return await future

    async def _run_handler(
        self,
        handler: RequestHandler,
        request: Request,
        future: asyncio.Future,
        feed: Callable[[Any], None] | None,
    ) -> None:
        new_trace_id()
        request_name = type(request).__name__

        failed = False

        def resolve(result: Result[FailureResponse, SuccessResponse]) -> None:
            nonlocal failed
            if not future.done():
                failed = result.is_left
                future.set_result(result)

        def dropped(response: Response) -> None:
            logger.warning(
                "%s: %s sent %s after it was resolved; dropped",
                self.name,
                request_name,
                type(response).__name__,
            )

        def send(response: Response) -> None:
            if isinstance(response, FailureResponse):
                if future.done():
                    dropped(response)
                resolve(Left(response))
                return
            # a subscription that failed to open never streams
            if failed:
                dropped(response)
                return
            if feed is not None:
                feed(response)
            resolve(Right(response))

        try:
            if self._timeout is None:
                await handler(request, send)
            else:
                await asyncio.wait_for(handler(request, send), self._timeout)
        except asyncio.CancelledError:
            resolve(Left(self.on_error(RequestCancelledError(
                f"{request_name} was cancelled before responding"
            ))))
            raise
        except ConfigError as exc:
            # wiring mistakes surface at the request call site
            if future.done():
                logger.exception("%s: %s handler misconfigured", self.name, request_name)
            else:
                future.set_exception(exc)
        except asyncio.TimeoutError as exc:
            logger.info(
                "%s: %s handler timed out after %ss",
                self.name,
                request_name,
                self._timeout,
            )
            resolve(Left(self.on_error(exc)))
        except Exception as exc:
            if future.done():
                logger.exception(
                    "%s: %s handler failed after responding", self.name, request_name
                )
            else:
                logger.warning(
                    "%s: %s handler failed: %s", self.name, request_name, exc
                )
                resolve(Left(self.on_error(exc)))
        else:
            resolve(Left(self.on_error(NoResponseError(
                f"{request_name} handler returned without sending a response"
            ))))

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def dispose(self) -> None:
        """Cancel every running handler, ending watcher subscriptions."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._tasks.clear()
        logger.debug("%s disposed (%d handlers cancelled)", self.name, len(tasks))
