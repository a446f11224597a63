"""Optimizer configuration."""

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

logger = logging.getLogger(__name__)


class LogLevel(Enum):
    BASIC = 'basic'
    DETAILED = 'detailed'
    VERBOSE = 'verbose'

    @classmethod
    def parse(cls, value: Union['LogLevel', str, None]) -> Optional['LogLevel']:
        """Return the matching level, or None if ``value`` names no level."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return None
        return None


# camelCase spellings accepted by from_mapping
_KEY_ALIASES: Dict[str, str] = {
    'enableTracing': 'enable_tracing',
    'maxIterations': 'max_iterations',
    'logLevel': 'log_level',
    'traceToConsole': 'trace_to_console',
}


@dataclass(frozen=True)
class OptimizerConfig:
    """
    Settings for one optimization run.

    Malformed values are replaced by the field default (with a warning)
    rather than rejected, so any config yields a valid run.
    """
    enable_tracing: bool = False
    max_iterations: int = 10
    log_level: LogLevel = LogLevel.BASIC
    trace_to_console: bool = False

    def __post_init__(self):
        defaults = OptimizerConfig.__dataclass_fields__

        for name in ('enable_tracing', 'trace_to_console'):
            value = getattr(self, name)
            if not isinstance(value, bool):
                logger.warning(f"Invalid {name}={value!r}; using {defaults[name].default}")
                object.__setattr__(self, name, defaults[name].default)

        iterations = self.max_iterations
        if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 0:
            logger.warning(
                f"Invalid max_iterations={iterations!r}; "
                f"using {defaults['max_iterations'].default}"
            )
            object.__setattr__(self, 'max_iterations', defaults['max_iterations'].default)

        level = LogLevel.parse(self.log_level)
        if level is None:
            logger.warning(f"Invalid log_level={self.log_level!r}; using basic")
            level = LogLevel.BASIC
        object.__setattr__(self, 'log_level', level)

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping[str, Any]]) -> 'OptimizerConfig':
        """
        Build a config from a plain mapping.

        Keys may be snake_case or camelCase. Missing keys take defaults;
        unknown keys are ignored.
        """
        if not mapping:
            return cls()

        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in mapping.items():
            name = _KEY_ALIASES.get(key, key)
            if name in known:
                values[name] = value
            else:
                logger.debug(f"Ignoring unknown config key {key!r}")
        return cls(**values)

    @classmethod
    def coerce(cls, config: Union['OptimizerConfig', Mapping[str, Any], None]) -> 'OptimizerConfig':
        if isinstance(config, cls):
            return config
        if config is not None and not isinstance(config, Mapping):
            logger.warning(f"Invalid config of type {type(config).__name__}; using defaults")
            return cls()
        return cls.from_mapping(config)

    def with_changes(self, **changes) -> 'OptimizerConfig':
        return replace(self, **changes)
