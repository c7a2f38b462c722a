"""
Kickstand Runner

Serves an assembled application and starts its plugins.
"""

from .plugins import Plugin, PluginSpec
from .runner import Runner

__all__ = [
    "Plugin",
    "PluginSpec",
    "Runner",
]
