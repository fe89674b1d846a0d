"""Clean Architecture message passing on asyncio.

Use cases own immutable entities, gateways translate domain outputs into
transport requests, and external interfaces run those requests.
"""

from clean_framework.core.messages import (
    Entity,
    FailureInput,
    FailureResponse,
    Input,
    NoSubscriptionFailureInput,
    Output,
    Request,
    Response,
    SuccessInput,
    SuccessResponse,
    TypedFailureResponse,
    UnknownFailureResponse,
)
from clean_framework.core.result import Left, Result, Right, fold
from clean_framework.providers import (
    ExternalInterface,
    Gateway,
    ProvidersContainer,
    UseCase,
    WatcherGateway,
)

__version__ = "0.4.0"

__all__ = [
    "Entity",
    "ExternalInterface",
    "FailureInput",
    "FailureResponse",
    "Gateway",
    "Input",
    "Left",
    "NoSubscriptionFailureInput",
    "Output",
    "ProvidersContainer",
    "Request",
    "Response",
    "Result",
    "Right",
    "SuccessInput",
    "SuccessResponse",
    "TypedFailureResponse",
    "UnknownFailureResponse",
    "UseCase",
    "WatcherGateway",
    "fold",
]
