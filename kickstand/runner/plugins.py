"""
Plugin descriptors for Kickstand.

Plugins are declared on an API class and started by the runner before
it begins serving. A plugin class is constructed as
``cls(port, config, status, logger, *args)`` and must provide ``run()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol


class Plugin(Protocol):
    """Protocol for runner plugins."""

    def run(self) -> None:
        """Start the plugin. Called once, before the server starts."""
        ...


@dataclass(frozen=True)
class PluginSpec:
    """A plugin class plus the extra arguments it was declared with."""

    cls: type
    args: tuple[Any, ...] = ()

    @classmethod
    def coerce(cls, value: Any) -> PluginSpec:
        """
        Normalize a plugin declaration.

        Accepts a PluginSpec, a bare plugin class, or a ``(cls, *args)``
        tuple.
        """
        if isinstance(value, PluginSpec):
            return value
        if isinstance(value, type):
            return cls(value)
        if isinstance(value, tuple) and value and isinstance(value[0], type):
            return cls(value[0], tuple(value[1:]))
        raise TypeError(f"Invalid plugin declaration: {value!r}")

    @property
    def name(self) -> str:
        return self.cls.__name__

    def create(
        self,
        port: int,
        config: dict[str, Any],
        status: dict[str, Any],
        logger: logging.Logger,
    ) -> Plugin:
        return self.cls(port, config, status, logger, *self.args)
