"""
Run-on-exit lifecycle for Kickstand.

The app is launched from an explicit finalize step at the end of the
app file, and only when all of these hold:

- run_on_exit is still set
- no unhandled error is on its way out of the process
- the process entry point is the app file itself, so importing an app
  module from somewhere else never starts a server

State machine:
    ARMED --(run_on_exit = False)--> DISARMED
    ARMED / DISARMED --finalize--> FIRED | SKIPPED

finalize only observes a pending error. It never catches, replaces or
suppresses it, and it runs at most once.
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
import threading
from collections.abc import Callable
from enum import Enum
from typing import TYPE_CHECKING, Any

from kickstand.exceptions import BootstrapStateError

if TYPE_CHECKING:
    from .application import Application

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """Run-on-exit states."""

    ARMED = "armed"
    DISARMED = "disarmed"
    FIRED = "fired"
    SKIPPED = "skipped"


def same_file(a: str, b: str) -> bool:
    """Compare two paths after making them absolute. Symlinks are not resolved."""
    if not a or not b:
        return False
    return os.path.abspath(a) == os.path.abspath(b)


class Lifecycle:
    """
    Process-wide run-on-exit gate.

    Args:
        run_on_exit: Initial flag value
    """

    def __init__(self, run_on_exit: bool = True):
        self._state = LifecycleState.ARMED if run_on_exit else LifecycleState.DISARMED
        self._lock = threading.Lock()
        self.skip_reason: str | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def finalized(self) -> bool:
        return self._state in (LifecycleState.FIRED, LifecycleState.SKIPPED)

    @property
    def run_on_exit(self) -> bool:
        return self._state is LifecycleState.ARMED

    @run_on_exit.setter
    def run_on_exit(self, value: bool) -> None:
        with self._lock:
            if self.finalized:
                raise BootstrapStateError(
                    f"run_on_exit cannot change after finalize (state={self._state.value})"
                )
            self._state = LifecycleState.ARMED if value else LifecycleState.DISARMED

    def check(
        self,
        *,
        error: BaseException | None,
        entry_point: str,
        app_file: str,
    ) -> str | None:
        """
        Evaluate the launch conditions without changing state.

        Returns:
            None if the app should launch, else the reason it should not
        """
        if not self.run_on_exit:
            return "run_on_exit is disabled"
        if error is not None:
            return f"unhandled {type(error).__name__} is pending"
        if not same_file(entry_point, app_file):
            return f"entry point {entry_point!r} is not the app file {app_file!r}"
        return None

    def finalize(
        self,
        launch: Callable[[], Any],
        *,
        error: BaseException | None,
        entry_point: str,
        app_file: str,
    ) -> bool:
        """
        Launch the app if every condition holds. Runs once.

        Errors raised by ``launch`` propagate unchanged.

        Returns:
            True if ``launch`` was called
        """
        with self._lock:
            if self.finalized:
                logger.debug(f"[lifecycle] Already finalized (state={self._state.value})")
                return False

            reason = self.check(error=error, entry_point=entry_point, app_file=app_file)
            if reason is not None:
                self._state = LifecycleState.SKIPPED
                self.skip_reason = reason
                logger.info(f"[lifecycle] Not launching app: {reason}")
                return False

            self._state = LifecycleState.FIRED

        logger.info("[lifecycle] Launching app")
        launch()
        return True


def install_exit_hook(application: Application) -> None:
    """
    Finalize ``application`` from an ``atexit`` handler.

    The app file is resolved immediately, while the installing module is
    still on the stack. Errors that end the process are seen as pending
    at exit:

    - ``sys.excepthook`` is wrapped to record unhandled errors; the
      previous hook still runs
    - ``sys.exit`` is wrapped to record the ``SystemExit`` it raises, so
      an app file that bails out with ``sys.exit(n)`` never launches

    A bare ``raise SystemExit`` bypasses both wrappers and is not seen.
    """
    # resolve now; inside atexit the app file is no longer on the stack
    app_file = application.app_file
    pending: list[BaseException] = []
    previous_hook = sys.excepthook
    previous_exit = sys.exit

    def excepthook(exc_type, exc, tb):
        pending.append(exc)
        previous_hook(exc_type, exc, tb)

    def exit(*args):
        try:
            previous_exit(*args)
        except SystemExit as exc:
            pending.append(exc)
            raise

    def on_exit() -> None:
        application.finalize(error=pending[-1] if pending else None)

    sys.excepthook = excepthook
    sys.exit = exit
    atexit.register(on_exit)
    logger.debug(f"[lifecycle] Exit hook installed for {app_file}")
