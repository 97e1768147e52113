"""Global configuration for surface-mapper solvers.

This module provides a package-wide configuration surface for the iterative
solver defaults (iteration cap, convergence tolerance) and the diagnostics
switch, without changing public APIs. Defaults are read from the environment
once at import time and can be overridden programmatically or temporarily
inside a context manager. It also owns the package log level.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import contextlib
import logging
import os
from typing import Any, ContextManager, Iterator


# -----------------------------------------------------------------------------
# Logging
# -----------------------------------------------------------------------------
_LOGGER = logging.getLogger("surface_mapper.config")
_PACKAGE_LOGGER = logging.getLogger("surface_mapper")


def _parse_log_level(val: str | int | None, default: int = logging.WARNING) -> int:
    """Parse a logging level string or int into a `logging` level constant.

    Args:
        val: The desired level (e.g., "DEBUG", 10). May be None.
        default: Fallback level if `val` cannot be parsed.

    Returns:
        An integer logging level (e.g., logging.DEBUG).
    """
    if val is None:
        return default
    if isinstance(val, int):
        return val
    lvl = getattr(logging, str(val).strip().upper(), None)
    if isinstance(lvl, int):
        return lvl
    return default


def set_log_level(level: str | int = "WARNING") -> None:
    """Set the package logger level programmatically.

    Args:
        level: A standard logging level name or integer.
    """
    _PACKAGE_LOGGER.setLevel(_parse_log_level(level))


# Default level can be overridden by env.
set_log_level(os.getenv("SURFACE_MAPPER_LOGLEVEL", "WARNING"))


# -----------------------------------------------------------------------------
# Env helpers
# -----------------------------------------------------------------------------
def bool_env(varname: str, default: bool) -> bool:
    """Read an environment variable and interpret it as a boolean.

    True values: 'y', 'yes', 't', 'true', 'on', '1'.
    False values: 'n', 'no', 'f', 'false', 'off', '0'.

    Args:
        varname: The name of the environment variable.
        default: The default value if the variable is unset.

    Returns:
        A boolean value parsed from the environment.
    """
    val = os.getenv(varname, str(default))
    val = val.lower()
    if val in ("y", "yes", "t", "true", "on", "1"):
        return True
    if val in ("n", "no", "f", "false", "off", "0"):
        return False
    raise ValueError(f"invalid truth value {val!r} for environment {varname!r}")


def int_env(varname: str, default: int) -> int:
    """Read an environment variable and interpret it as an integer.

    Args:
        varname: The name of the environment variable.
        default: The default value if the variable is unset.

    Returns:
        The integer value parsed from the environment.
    """
    return int(os.getenv(varname, str(default)))


def float_env(varname: str, default: float) -> float:
    """Read an environment variable and interpret it as a float.

    Args:
        varname: The name of the environment variable.
        default: The default value if the variable is unset.

    Returns:
        The float value parsed from the environment.
    """
    return float(os.getenv(varname, str(default)))


# -----------------------------------------------------------------------------
# Solver settings
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Settings:
    """Solver defaults picked up by mappers constructed without explicit settings.

    Attributes:
        max_iterations: Iteration cap of the iterative solver. Values <= 0
            select the solver library default.
        tolerance: Relative residual tolerance. Values <= 0 select the
            solver library default.
        verbose: If True, mappers log a diagnostics report after each solve.
    """

    max_iterations: int = 0
    tolerance: float = 0.0
    verbose: bool = False

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from SURFACE_MAPPER_* environment variables."""
        s = cls(
            max_iterations=int_env("SURFACE_MAPPER_MAX_ITERATIONS", 0),
            tolerance=float_env("SURFACE_MAPPER_TOLERANCE", 0.0),
            verbose=bool_env("SURFACE_MAPPER_VERBOSE", False),
        )
        _LOGGER.debug("Settings from env: %s", s)
        return s


class Config:
    """Holder of the active `Settings`.

    Provides global overrides and a context manager for temporary changes so
    code that snapshots `config.settings` always sees the current values.
    """

    def __init__(self) -> None:
        """Initialize config using environment defaults."""
        self._settings = Settings.from_env()
        _LOGGER.info("Config initialized: %s", self._settings)

    @property
    def settings(self) -> Settings:
        """Return the active settings."""
        return self._settings

    def configure(self, **overrides: Any) -> Config:
        """Replace fields of the active settings.

        Args:
            **overrides: Any of `max_iterations`, `tolerance`, `verbose`.

        Returns:
            The `Config` instance (for chaining).

        Raises:
            TypeError: If an unknown field name is passed.
        """
        self._settings = replace(self._settings, **overrides)
        _LOGGER.info("Reconfigured: %s", self._settings)
        return self

    def reset(self) -> Config:
        """Reload the settings from the environment."""
        self._settings = Settings.from_env()
        _LOGGER.info("Config reset from environment: %s", self._settings)
        return self

    @contextlib.contextmanager
    def use(self, **overrides: Any) -> Iterator[Settings]:
        """Temporarily override settings within a context manager.

        Args:
            **overrides: Any of `max_iterations`, `tolerance`, `verbose`.

        Yields:
            The temporary settings. Restores the previous settings on exit.
        """
        prev = self._settings
        try:
            self.configure(**overrides)
            yield self._settings
        finally:
            self._settings = prev
            _LOGGER.info("Restored previous settings: %s", self._settings)


# Singleton & forwards
config = Config()


def settings() -> Settings:
    """Return the active settings (module-level)."""
    return config.settings


def configure(**overrides: Any) -> Config:
    """Override fields of the active settings (module-level)."""
    return config.configure(**overrides)


def use(**overrides: Any) -> ContextManager[Settings]:
    """Temporarily override settings within a context manager (module-level)."""
    return config.use(**overrides)
