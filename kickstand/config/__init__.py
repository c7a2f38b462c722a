"""
Kickstand Configuration

Environment-driven settings.
"""

from .settings import BootstrapSettings, get_settings, is_test_environment, reset_settings

__all__ = [
    "BootstrapSettings",
    "get_settings",
    "is_test_environment",
    "reset_settings",
]
