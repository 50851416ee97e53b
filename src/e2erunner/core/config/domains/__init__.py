"""Domain-specific configuration accessors."""
from .lifecycle import LifecycleConfig
from .logging import LoggingConfig
from .ports import PortKind, PortsConfig, parse_port
from .runner import RunnerConfig

__all__ = [
    "LifecycleConfig",
    "LoggingConfig",
    "PortKind",
    "PortsConfig",
    "RunnerConfig",
    "parse_port",
]
