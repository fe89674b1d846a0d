"""Custom exception hierarchy for the clean framework."""


class CleanFrameworkError(Exception):
    """Base exception for all framework errors."""


# --- Configuration ---
class ConfigError(CleanFrameworkError):
    """Wiring mistake: surfaced at the call site, never retried."""


class MissingFilterError(ConfigError):
    """No output or input filter registered for the requested type."""


class DuplicateFilterError(ConfigError):
    """A filter for this type is already registered on the use case."""


class DuplicateSubscriptionError(ConfigError):
    """A subscription for this output type already exists."""


class MissingHandlerError(ConfigError):
    """No request handler registered on the external interface."""


class DuplicateHandlerError(ConfigError):
    """A handler for this request type is already registered."""


class MissingTransportError(ConfigError):
    """Gateway used before being attached to an external interface."""


class UnhandledFailureError(ConfigError):
    """Gateway received a failure response but does not override on_failure."""


class ProviderError(ConfigError):
    """Dependency container misconfiguration."""


class MissingProviderError(ProviderError):
    """No provider registered for the requested key."""


class DuplicateProviderError(ProviderError):
    """A provider for this key is already registered."""


class CircularProviderError(ProviderError):
    """A provider depends on itself, directly or indirectly."""

    def __init__(self, chain: list[str]):
        self.chain = chain
        super().__init__(f"Circular provider dependency: {' -> '.join(chain)}")


# --- Lifecycle ---
class LifecycleError(CleanFrameworkError):
    """Component used outside of its lifetime."""


class UseCaseDisposedError(LifecycleError):
    """Entity change attempted on a disposed use case."""


# --- Transport ---
class TransportError(CleanFrameworkError):
    """Raised inside an external interface; converted by on_error."""


class NoResponseError(TransportError):
    """Handler finished without sending a response."""


class RequestCancelledError(TransportError):
    """Handler was cancelled before sending a response."""
