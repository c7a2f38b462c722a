"""
Exceptions for Kickstand.

Only errors that originate in the bootstrap layer live here. Failures
raised by the application class, plugins or the runner propagate as-is.
"""

from __future__ import annotations


class KickstandError(Exception):
    """Base class for errors raised by the bootstrap layer."""

    pass


class ClassNotFoundError(KickstandError):
    """
    Raised when the application class name cannot be resolved.

    This almost always means the file name and the class name disagree
    (``my_api.py`` must define ``MyApi``) or ``app_class`` was set to a
    name that is not loaded.
    """

    def __init__(self, class_name: str):
        self.class_name = class_name
        super().__init__(f"Class {class_name} not found.")


class BootstrapStateError(KickstandError):
    """Raised when bootstrap state is changed after it has been consumed."""

    pass
