"""
Hello World Example

A complete Kickstand application in one file:
1. Declare an API subclass named after the file
2. Declare middleware and plugins on it
3. Call finalize() at the bottom

Run: python examples/hello_world.py -p 9000 -c examples/hello_world.yaml
"""

import logging
import threading

from starlette.middleware.gzip import GZipMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from kickstand import API, finalize

# =============================================================================
# Plugins
# =============================================================================


class HeartbeatPlugin:
    """Logs a heartbeat every ``interval`` seconds while the server runs."""

    def __init__(self, port, config, status, logger: logging.Logger, interval: float = 10.0):
        self.port = port
        self.status = status
        self.logger = logger
        self.interval = interval

    def run(self) -> None:
        self.status["heartbeats"] = 0
        self._schedule()

    def _schedule(self) -> None:
        timer = threading.Timer(self.interval, self._beat)
        timer.daemon = True
        timer.start()

    def _beat(self) -> None:
        self.status["heartbeats"] += 1
        self.logger.info(f"heartbeat #{self.status['heartbeats']} on port {self.port}")
        self._schedule()


# =============================================================================
# Application
# =============================================================================


class HelloWorld(API):
    """Greets whoever asks, using the greeting from the config file."""

    async def response(self, request: Request) -> Response:
        name = request.query_params.get("name", "world")
        greeting = self.config.get("greeting", "Hello")
        return JSONResponse({"message": f"{greeting}, {name}!"})


HelloWorld.use(GZipMiddleware, minimum_size=500)
HelloWorld.plugin(HeartbeatPlugin, 30.0)


finalize()
