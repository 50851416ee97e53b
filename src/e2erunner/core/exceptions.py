from __future__ import annotations

from typing import Any, Dict, Mapping


class E2ERunnerError(Exception):
    """Base exception for e2erunner."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """JSON-serializable payload: ``error`` (class name), ``message`` and ``context``."""
        return {
            "error": type(self).__name__,
            "message": str(self),
            "context": dict(self.context),
        }


class ConfigError(E2ERunnerError, ValueError):
    """Raised for invalid runner construction arguments or configuration."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        E2ERunnerError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class RetryExhaustedError(E2ERunnerError, TimeoutError):
    """Raised when a poller used up its retry budget without success."""

    def __init__(
        self,
        message: str = "",
        *,
        attempts: int = 0,
        retry_limit: int = 0,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        ctx.setdefault("attempts", attempts)
        ctx.setdefault("retry_limit", retry_limit)
        E2ERunnerError.__init__(self, message, context=ctx)
        TimeoutError.__init__(self, message)
        self.attempts = attempts
        self.retry_limit = retry_limit


class PortExhaustedError(E2ERunnerError, RuntimeError):
    """Raised when no free port exists between the start port and the upper bound."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        E2ERunnerError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class SpawnError(E2ERunnerError, RuntimeError):
    """Raised when a tracked command fails or times out before it is ready."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        E2ERunnerError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class LifecycleStoreError(E2ERunnerError, ValueError):
    """Raised for invalid writes to the lifecycle store."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        E2ERunnerError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class StoreCorruptError(LifecycleStoreError):
    """Raised when the store document cannot be parsed.

    ``LifecycleStore.load`` catches this and treats the store as empty.
    """


__all__ = [
    "E2ERunnerError",
    "ConfigError",
    "RetryExhaustedError",
    "PortExhaustedError",
    "SpawnError",
    "LifecycleStoreError",
    "StoreCorruptError",
]
