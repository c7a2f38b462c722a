"""
Middleware Builder for Kickstand.

Wraps an application instance in the middleware its class declares.
Declarations are Starlette ``Middleware`` descriptors; the first one
declared ends up outermost, matching Starlette's own ordering.
"""

from __future__ import annotations

import logging
from typing import Any

from starlette.middleware import Middleware

logger = logging.getLogger(__name__)


class MiddlewareBuilder:
    """
    Builds an ASGI handler chain with a fluent API.

    Example:
        chain = (
            MiddlewareBuilder()
            .add(Middleware(GZipMiddleware, minimum_size=500))
            .wrap(api)
        )

        # or straight from the class declarations
        chain = MiddlewareBuilder().build(MyApi, api)
    """

    def __init__(self) -> None:
        self._middleware: list[Middleware] = []

    def add(self, middleware: Middleware) -> MiddlewareBuilder:
        """Add a middleware; earlier additions wrap later ones."""
        self._middleware.append(middleware)
        return self

    def add_if(self, condition: bool, middleware: Middleware) -> MiddlewareBuilder:
        """Conditionally add a middleware."""
        if condition:
            self._middleware.append(middleware)
        return self

    def wrap(self, app: Any) -> Any:
        """Wrap ``app`` in the added middleware and return the outermost layer."""
        return _wrap(app, self._middleware)

    def build(self, klass: type, api: Any) -> Any:
        """
        Build the handler chain for an application.

        Args:
            klass: Application class; its ``middlewares()`` declarations are used
            api: Application instance at the bottom of the chain

        Returns:
            The outermost ASGI app, or ``api`` when nothing is added or declared.
            Builder additions wrap the class declarations; the builder itself
            is left unchanged
        """
        declared = getattr(klass, "middlewares", None)
        chain = [*self._middleware, *(declared() if callable(declared) else declared or ())]

        logger.debug(
            f"[middleware] Built chain for {klass.__name__}: "
            f"{[m.cls.__name__ for m in chain]}"
        )
        return _wrap(api, chain)


def _wrap(app: Any, middleware: list[Middleware]) -> Any:
    for layer in reversed(middleware):
        app = layer.cls(app, *layer.args, **layer.kwargs)
    return app
