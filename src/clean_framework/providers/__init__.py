"""Providers layer: use cases, gateways, external interfaces and the container."""

from clean_framework.providers.container import ProvidersContainer
from clean_framework.providers.external_interface import ExternalInterface
from clean_framework.providers.gateway import Gateway, WatcherGateway
from clean_framework.providers.use_case import UseCase

__all__ = [
    "ExternalInterface",
    "Gateway",
    "ProvidersContainer",
    "UseCase",
    "WatcherGateway",
]
