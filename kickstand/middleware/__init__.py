"""
Kickstand Middleware

Builds the ASGI handler chain around an application instance.
"""

from .builder import MiddlewareBuilder

__all__ = [
    "MiddlewareBuilder",
]
