"""Message schemas exchanged between the framework layers.

All messages are frozen Pydantic models: equality is structural and
instances are never mutated, only replaced.

Domain side:    Entity, Output, Input (SuccessInput / FailureInput)
Transport side: Request, Response (SuccessResponse / FailureResponse)
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, model_validator

_E = TypeVar("_E", bound="Entity")


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True)


# ===========================================================================
# Domain layer
# ===========================================================================

class Entity(_Message):
    """Immutable state snapshot owned by exactly one use case."""

    def merge(self: _E, **changes: Any) -> _E:
        """Return a copy with ``changes`` applied. ``self`` is untouched."""
        return self.model_copy(update=changes)


class Output(_Message):
    """Outbound message. Routed by its concrete class."""


class Input(_Message):
    """Inbound message used to transform an entity."""


class SuccessInput(Input):
    pass


class FailureInput(Input):
    message: str = ""


class NoSubscriptionFailureInput(FailureInput):
    """Synthesized when a request finds no subscription for its output."""

    output_type: type[Output] | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_message(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("message"):
            output_type = data.get("output_type")
            name = getattr(output_type, "__name__", output_type)
            data = {
                **data,
                "message": f"No subscription exists for this request of {name}",
            }
        return data


# ===========================================================================
# Transport layer
# ===========================================================================

class Request(_Message):
    """Transport-level request, opaque to use cases."""


class Response(_Message):
    pass


class SuccessResponse(Response):
    pass


class FailureResponse(Response):
    message: str = ""


class TypedFailureResponse(FailureResponse):
    """Failure reported deliberately by a handler, tagged with a type."""

    type: str


class UnknownFailureResponse(FailureResponse):
    """Wraps an exception raised inside an external interface handler."""

    error: Any = None

    @model_validator(mode="before")
    @classmethod
    def _message_from_error(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("message"):
            error = data.get("error")
            if error is not None:
                data = {**data, "message": str(error) or type(error).__name__}
        return data
