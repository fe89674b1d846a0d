"""UseCase: the state container and request/response mediator.

A use case owns one immutable :class:`Entity`.  Outputs are derived from
it through output filters, inputs transform it through input filters, and
``request`` hands an :class:`Output` to whatever subscribed for its type
(normally a Gateway) and folds the result back into a new entity.

All mutation is expected to happen on a single asyncio event loop; no
locks are taken.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Generic, TypeVar

from clean_framework.core.errors import (
    DuplicateFilterError,
    DuplicateSubscriptionError,
    MissingFilterError,
    UseCaseDisposedError,
)
from clean_framework.core.messages import (
    Entity,
    FailureInput,
    Input,
    NoSubscriptionFailureInput,
    Output,
    SuccessInput,
)
from clean_framework.core.result import Left, Result, fold

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Entity)
OutputT = TypeVar("OutputT", bound=Output)
S = TypeVar("S", bound=SuccessInput)

OutputFilter = Callable[[Any], Output]
InputFilter = Callable[[Any, Any], Any]
RequestSubscription = Callable[[Any], Awaitable[Result[FailureInput, Any]]]
EntityListener = Callable[[Any], None]

DEFAULT_DEBOUNCE_SECONDS = 0.3


class UseCase(Generic[E]):
    """Holds the current entity and mediates requests for it.

    Parameters
    ----------
    entity:
        Initial state.
    output_filters:
        Output class -> ``(entity) -> Output``.
    input_filters:
        Input class -> ``(input, entity) -> Entity``.
    debounce_duration:
        Default window, in seconds, for :meth:`debounce`.
    """

    def __init__(
        self,
        *,
        entity: E,
        output_filters: Mapping[type[Output], OutputFilter] | None = None,
        input_filters: Mapping[type[Input], InputFilter] | None = None,
        debounce_duration: float = DEFAULT_DEBOUNCE_SECONDS,
    ) -> None:
        self._entity = entity
        self._output_filters: dict[type[Output], OutputFilter] = dict(output_filters or {})
        self._input_filters: dict[type[Input], InputFilter] = dict(input_filters or {})
        self._debounce_duration = debounce_duration

        self._request_subscriptions: dict[type[Output], RequestSubscription] = {}
        self._debounce_timers: dict[str, asyncio.TimerHandle] = {}
        self._debounce_tasks: set[asyncio.Task] = set()
        self._listeners: list[EntityListener] = []
        self._disposed = False

    @property
    def name(self) -> str:
        return self.__class__.__name__

    # ------------------------------------------------------------------
    # Entity
    # ------------------------------------------------------------------

    @property
    def entity(self) -> E:
        return self._entity

    @entity.setter
    def entity(self, new_entity: E) -> None:
        if self._disposed:
            raise UseCaseDisposedError(
                f"{self.name} was disposed; cannot replace its entity"
            )
        previous = self._entity
        self._entity = new_entity
        if new_entity != previous:
            self._notify(new_entity)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def add_listener(
        self,
        listener: EntityListener,
        *,
        fire_immediately: bool = False,
    ) -> Callable[[], None]:
        """Call ``listener`` with every new entity. Returns a remover."""
        self._listeners.append(listener)
        if fire_immediately:
            listener(self._entity)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _notify(self, entity: E) -> None:
        for listener in list(self._listeners):
            try:
                listener(entity)
            except Exception:
                logger.exception("%s listener failed", self.name)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def add_output_filter(self, output_type: type[Output], output_filter: OutputFilter) -> None:
        if output_type in self._output_filters:
            raise DuplicateFilterError(
                f"Output filter already defined for {output_type.__name__}"
            )
        self._output_filters[output_type] = output_filter

    def add_input_filter(self, input_type: type[Input], input_filter: InputFilter) -> None:
        if input_type in self._input_filters:
            raise DuplicateFilterError(
                f"Input filter already defined for {input_type.__name__}"
            )
        self._input_filters[input_type] = input_filter

    def get_output(self, output_type: type[OutputT]) -> OutputT:
        output_filter = self._output_filters.get(output_type)
        if output_filter is None:
            raise MissingFilterError(
                f"Output filter not defined for {output_type.__name__}"
            )
        return output_filter(self._entity)

    def set_input(self, input_: Input) -> None:
        input_type = type(input_)
        input_filter = self._input_filters.get(input_type)
        if input_filter is None:
            raise MissingFilterError(
                f"Input filter not defined for {input_type.__name__}"
            )
        self.entity = input_filter(input_, self._entity)

    # ------------------------------------------------------------------
    # Request / response mediation
    # ------------------------------------------------------------------

    def subscribe(self, output_type: type[Output], callback: RequestSubscription) -> None:
        """Register the single handler for requests carrying ``output_type``."""
        if output_type in self._request_subscriptions:
            raise DuplicateSubscriptionError(
                f"A subscription for {output_type.__name__} already exists"
            )
        self._request_subscriptions[output_type] = callback
        logger.debug("%s: subscribed %s", self.name, output_type.__name__)

    def unsubscribe(self, output_type: type[Output]) -> None:
        self._request_subscriptions.pop(output_type, None)

    def has_subscription(self, output_type: type[Output]) -> bool:
        return output_type in self._request_subscriptions

    async def request(
        self,
        output: Output,
        *,
        on_success: Callable[[S], E],
        on_failure: Callable[[FailureInput], E],
    ) -> None:
        """Send ``output`` to its subscriber and fold the result into the entity.

        Failures never raise: they go through ``on_failure`` like any other
        transition.  Only wiring mistakes (raised by the subscriber) escape.
        """
        output_type = type(output)
        callback = self._request_subscriptions.get(output_type)

        if callback is None:
            logger.warning(
                "%s: no subscription for %s", self.name, output_type.__name__
            )
            result: Result[FailureInput, S] = Left(
                NoSubscriptionFailureInput(output_type=output_type)
            )
        else:
            result = await callback(output)

        self.entity = fold(result, on_failure, on_success)

    # ------------------------------------------------------------------
    # Debounce
    # ------------------------------------------------------------------

    def debounce(
        self,
        action: Callable[[], Any],
        *,
        tag: str,
        duration: float | None = None,
        immediate: bool = True,
    ) -> None:
        """Collapse repeated ``action`` calls sharing ``tag``.

        Every call restarts the ``duration`` window for ``tag``.  With
        ``immediate`` the action runs on a call that finds no pending
        window, and calls made inside the window are dropped.  Without it
        the action runs once, when the window of the last call expires.

        Must be called from a running event loop.
        """
        if self._disposed:
            raise UseCaseDisposedError(
                f"{self.name} was disposed; cannot debounce {tag!r}"
            )
        loop = asyncio.get_running_loop()
        window = self._debounce_duration if duration is None else duration

        pending = self._debounce_timers.pop(tag, None)
        can_execute = immediate and pending is None
        if pending is not None:
            pending.cancel()

        self._debounce_timers[tag] = loop.call_later(
            window, self._on_debounce_elapsed, tag, action, immediate
        )

        if can_execute:
            self._run_action(action)

    def _on_debounce_elapsed(
        self, tag: str, action: Callable[[], Any], immediate: bool
    ) -> None:
        self._debounce_timers.pop(tag, None)
        if not immediate:
            self._run_action(action)

    def _run_action(self, action: Callable[[], Any]) -> None:
        result = action()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._debounce_tasks.add(task)
            task.add_done_callback(self._on_debounce_task_done)

    def _on_debounce_task_done(self, task: asyncio.Task) -> None:
        self._debounce_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(
                "%s: debounced action failed",
                self.name,
                exc_info=task.exception(),
            )

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def dispose(self) -> None:
        """Cancel pending debounce timers and tasks. Idempotent."""
        if self._disposed:
            return
        for timer in self._debounce_timers.values():
            timer.cancel()
        self._debounce_timers.clear()
        for task in list(self._debounce_tasks):
            task.cancel()
        self._listeners.clear()
        self._disposed = True
        logger.debug("%s disposed", self.name)
