"""
Application paths for Kickstand.

Two directories are snapshotted on first use and never recomputed:

- app path: the directory holding the app file, for locating files
  that ship next to the app before anything changes directory
- root path: the working directory at first access (the app path when
  running in the test environment)

Segments are joined with ``os.path.join`` and not normalized, so ``..``
is kept as given.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)


class AppPaths:
    """
    Memoized app and root directories.

    Args:
        app_file: Returns the app file; called at most once
        is_test_environment: Consulted on every root_path call
    """

    def __init__(
        self,
        app_file: Callable[[], str],
        is_test_environment: Callable[[], bool],
    ):
        self._app_file = app_file
        self._is_test_environment = is_test_environment
        self._app_path: str | None = None
        self._root_path: str | None = None
        self._lock = threading.Lock()

    def app_path(self, *segments: str) -> str:
        """
        Directory of the app file, joined with ``segments``.

        Args:
            *segments: Path segments to append

        Returns:
            Path for the given segments
        """
        if self._app_path is None:
            with self._lock:
                if self._app_path is None:
                    self._app_path = os.path.abspath(os.path.dirname(self._app_file()))
                    logger.debug(f"[paths] app path: {self._app_path}")
        return os.path.join(self._app_path, *segments)

    def root_path(self, *segments: str) -> str:
        """
        Base directory of the app, joined with ``segments``.

        Args:
            *segments: Path segments to append

        Returns:
            Path for the given segments
        """
        if self._is_test_environment():
            return self.app_path(*segments)

        if self._root_path is None:
            with self._lock:
                if self._root_path is None:
                    self._root_path = os.path.abspath(".")
                    logger.debug(f"[paths] root path: {self._root_path}")
        return os.path.join(self._root_path, *segments)
