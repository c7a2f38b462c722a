"""
Kickstand - a bootstrap layer for single-file ASGI applications.

Kickstand finds the file that invoked it, resolves the application class
named after that file, wraps it in its declared middleware and plugins,
and hands it to a runner:

- **Caller discovery**: The app file is the first stack frame outside the framework
- **Class resolution**: ``my_api.py`` defines ``MyApi`` (or set ``app_class``)
- **Pipeline assembly**: Middleware chain + plugins + uvicorn runner
- **Safe launch**: ``finalize()`` only runs the app when it was started directly
  and nothing failed

Quick Start:
    >>> from kickstand import API, finalize
    >>> from starlette.responses import PlainTextResponse
    >>>
    >>> class HelloApi(API):
    ...     async def response(self, request):
    ...         return PlainTextResponse("hello")
    >>>
    >>> finalize()  # at the bottom of hello_api.py
"""

__version__ = "0.1.0"
__license__ = "MIT"

from kickstand.api import API
from kickstand.bootstrap import Application, finalize, get_application, reset_application
from kickstand.exceptions import BootstrapStateError, ClassNotFoundError, KickstandError

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Core
    "API",
    "Application",
    "finalize",
    "get_application",
    "reset_application",
    # Errors
    "KickstandError",
    "ClassNotFoundError",
    "BootstrapStateError",
]
