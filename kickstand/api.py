"""
API base class for Kickstand applications.

An application is one file with one API subclass named after the file:

    # my_api.py
    from kickstand import API, finalize
    from starlette.middleware.gzip import GZipMiddleware
    from starlette.responses import JSONResponse

    class MyApi(API):
        async def response(self, request):
            return JSONResponse({"hello": "world"})

    MyApi.use(GZipMiddleware, minimum_size=500)
    MyApi.plugin(HeartbeatPlugin, 30)

    finalize()

Running ``python my_api.py`` resolves ``MyApi``, builds the middleware
chain and starts the runner.
"""

from __future__ import annotations

from typing import Any, ClassVar

from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from kickstand.runner.plugins import PluginSpec


class API:
    """
    Base class for applications served by Kickstand.

    Subclasses must be constructible without arguments. Middleware and
    plugin declarations are per class: a subclass starts with a copy of
    its parent's declarations and never changes them.
    """

    _middlewares: ClassVar[list[Middleware]] = []
    _plugins: ClassVar[list[PluginSpec]] = []

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls._middlewares = list(cls._middlewares)
        cls._plugins = list(cls._plugins)

    def __init__(self) -> None:
        self.config: dict[str, Any] = {}

    @classmethod
    def use(cls, middleware_cls: type, *args: Any, **kwargs: Any) -> None:
        """Declare a middleware; the first declared is outermost."""
        cls._middlewares.append(Middleware(middleware_cls, *args, **kwargs))

    @classmethod
    def plugin(cls, plugin_cls: type, *args: Any) -> None:
        """Declare a plugin, constructed with ``args`` after the runner's arguments."""
        cls._plugins.append(PluginSpec(plugin_cls, args))

    @classmethod
    def middlewares(cls) -> list[Middleware]:
        return list(cls._middlewares)

    @classmethod
    def plugins(cls) -> list[PluginSpec]:
        return list(cls._plugins)

    async def response(self, request: Request) -> Response:
        """Produce the response for a request. Override in subclasses."""
        return PlainTextResponse("Not Found", status_code=404)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(receive, send)
            return
        if scope["type"] != "http":
            return

        request = Request(scope, receive)
        response = await self.response(request)
        await response(scope, receive, send)

    async def _lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
