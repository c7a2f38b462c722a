"""
Application class resolution for Kickstand.

Turns a class name such as ``MyApi`` or ``services.billing.BillingApi``
into a loaded class. Names are split on ``.`` (``::`` is accepted too)
and each segment is looked up inside the previous one.

Lookups are pluggable through the ClassLookup protocol:
- NamespaceLookup walks attributes from a root namespace (the
  ``__main__`` module by default) and already-loaded modules
- ClassRegistry maps names to classes registered up front
"""

from __future__ import annotations

import logging
import re
import sys
from types import ModuleType
from typing import Any, Protocol

from kickstand.exceptions import ClassNotFoundError

logger = logging.getLogger(__name__)

_SEPARATOR = re.compile(r"::|\.")


def camel_case(name: str) -> str:
    """
    Convert a snake_cased file name to a class name.

    ``my_api`` becomes ``MyApi``. A name without underscores that already
    carries an uppercase letter is returned unchanged.
    """
    if "_" not in name and re.search(r"[A-Z]+.*", name):
        return name
    return "".join(part.capitalize() for part in name.split("_"))


def class_name_of(value: Any) -> str:
    """
    String form of an app class setting.

    Classes from ``__main__`` become their qualified name, classes from
    other modules are prefixed with the module path. Anything else is
    passed through ``str()``.
    """
    if isinstance(value, type):
        if value.__module__ in ("__main__", "builtins"):
            return value.__qualname__
        return f"{value.__module__}.{value.__qualname__}"
    return str(value)


def split_name(name: str) -> list[str]:
    """Split a namespaced class name into its segments."""
    return _SEPARATOR.split(name)


class ClassLookup(Protocol):
    """Protocol for turning a class name into a class."""

    def lookup(self, name: str) -> type:
        """
        Return the class registered under ``name``.

        Raises:
            ClassNotFoundError: If ``name`` cannot be resolved
        """
        ...


class NamespaceLookup:
    """
    Resolves names by walking attributes from a root namespace.

    The first segment is looked up in the root, then in ``sys.modules``.
    While walking a module, a missing attribute falls back to the loaded
    submodule of that name. Nothing is imported.

    Args:
        root: Namespace to start from; the ``__main__`` module, read at
            lookup time, when None
    """

    def __init__(self, root: Any = None):
        self._root = root

    @property
    def root(self) -> Any:
        if self._root is not None:
            return self._root
        return sys.modules["__main__"]

    def lookup(self, name: str) -> type:
        segments = split_name(name)
        if not all(segments):
            raise ClassNotFoundError(name)

        current = self._first(segments[0], name)
        for segment in segments[1:]:
            current = self._step(current, segment, name)

        if not isinstance(current, type):
            raise ClassNotFoundError(name)
        return current

    def _first(self, segment: str, name: str) -> Any:
        try:
            return getattr(self.root, segment)
        except AttributeError:
            pass
        module = sys.modules.get(segment)
        if module is None:
            raise ClassNotFoundError(name)
        return module

    def _step(self, current: Any, segment: str, name: str) -> Any:
        try:
            return getattr(current, segment)
        except AttributeError:
            pass
        if isinstance(current, ModuleType):
            module = sys.modules.get(f"{current.__name__}.{segment}")
            if module is not None:
                return module
        raise ClassNotFoundError(name)


class ClassRegistry:
    """
    Explicit name to class mapping.

    For hosts that register their application classes up front instead
    of relying on namespace walking.

    Example:
        registry = ClassRegistry()
        registry.register(MyApi)
        registry.register(OtherApi, name="billing.Api")
        klass = registry.lookup("MyApi")
    """

    def __init__(self) -> None:
        self._classes: dict[str, type] = {}

    def register(self, klass: type, name: str | None = None) -> None:
        """
        Register a class.

        Args:
            klass: Class to register
            name: Name to register under; the class's qualified name if None
        """
        key = ".".join(split_name(name)) if name else klass.__qualname__
        if key in self._classes:
            logger.warning(f"[resolver] Replacing registered class: {key}")
        self._classes[key] = klass
        logger.debug(f"[resolver] Registered class: {key}")

    def lookup(self, name: str) -> type:
        klass = self._classes.get(".".join(split_name(name)))
        if klass is None:
            raise ClassNotFoundError(name)
        return klass

    def has(self, name: str) -> bool:
        return ".".join(split_name(name)) in self._classes

    def unregister(self, name: str) -> bool:
        """
        Unregister a class.

        Returns:
            True if the class was removed, False if not found
        """
        return self._classes.pop(".".join(split_name(name)), None) is not None

    @property
    def registered_names(self) -> list[str]:
        return list(self._classes.keys())

    def clear(self) -> None:
        """Clear all registered classes (for testing)."""
        self._classes.clear()
