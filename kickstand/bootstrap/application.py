"""
Application bootstrap for Kickstand.

The Application object is the single bootstrap context of a process.
It finds the app file, names and resolves the app class, assembles the
pipeline around it and hands that to the runner.

Flow:
    1. app_file: first caller outside the framework (or sys.argv[0])
    2. app_class: explicit setting, or the app file's name camel-cased
    3. run(): resolve, instantiate, build middleware, load plugins, run
    4. finalize(): call run() only if the lifecycle gate allows it

Usage:
    # at the bottom of my_api.py
    from kickstand import finalize
    finalize()
"""

from __future__ import annotations

import logging
import os
import sys
import threading
from collections.abc import Callable, Iterator, Sequence
from typing import Any

from kickstand.config import BootstrapSettings, get_settings
from kickstand.exceptions import BootstrapStateError, ClassNotFoundError
from kickstand.middleware import MiddlewareBuilder
from kickstand.runner import Runner

from .callers import CallerInspector, CallFrame, FrameSource, IgnorePatternSet
from .lifecycle import Lifecycle, install_exit_hook
from .paths import AppPaths
from .resolver import ClassLookup, NamespaceLookup, camel_case, class_name_of

logger = logging.getLogger(__name__)

RunnerFactory = Callable[[Sequence[str], Any], Any]


class Application:
    """
    Bootstrap context for one process.

    Every collaborator can be injected, which keeps the whole sequence
    testable without a real stack, real modules or a real server.

    Example:
        app = Application(argv=["my_api.py", "-p", "8080"])
        app.app_class = "MyApi"
        app.run()
    """

    def __init__(
        self,
        *,
        settings: BootstrapSettings | None = None,
        frame_source: FrameSource | None = None,
        ignore: IgnorePatternSet | None = None,
        lookup: ClassLookup | None = None,
        argv: Sequence[str] | None = None,
        runner_factory: RunnerFactory | None = None,
        middleware_builder: Any = None,
        is_test_environment: Callable[[], bool] | None = None,
    ):
        """
        Initialize bootstrap context.

        Args:
            settings: Bootstrap settings (from environment if None)
            frame_source: Stack source for finding the app file
            ignore: Frames to skip; built-in patterns plus settings extras if None
            lookup: Class lookup (walks ``__main__`` and loaded modules if None)
            argv: Process arguments, program name first (``sys.argv`` if None)
            runner_factory: Called with ``(raw_args, api)`` to create the runner
            middleware_builder: Object with ``build(klass, api)``
            is_test_environment: Test environment check for root_path
        """
        self.settings = settings or get_settings()
        self.callers = CallerInspector(
            frame_source,
            ignore if ignore is not None else IgnorePatternSet.default(self.settings.ignore_callers),
        )
        self.lifecycle = Lifecycle(run_on_exit=self.settings.run_on_exit)
        self.paths = AppPaths(
            lambda: self.app_file,
            is_test_environment or (lambda: self.settings.is_test),
        )
        self.middleware_builder = middleware_builder or MiddlewareBuilder()

        self._lookup = lookup or NamespaceLookup()
        self._argv = list(argv) if argv is not None else None
        self._runner_factory = runner_factory or self._default_runner
        self._app_file: str | None = None
        self._app_class: str | None = self.settings.app_class
        self._resolved: type | None = None
        self._lock = threading.RLock()
        self.exit_hook_installed = False

    # ==================== Process ====================

    @property
    def argv(self) -> list[str]:
        return self._argv if self._argv is not None else sys.argv

    @property
    def entry_point(self) -> str:
        """Path the process was started with."""
        if self.argv and self.argv[0]:
            return self.argv[0]
        return getattr(sys.modules.get("__main__"), "__file__", None) or ""

    # ==================== Callers ====================

    def caller_files(self) -> Iterator[str]:
        return self.callers.caller_files()

    def caller_locations(self) -> Iterator[CallFrame]:
        return self.callers.caller_locations()

    @property
    def app_file(self) -> str:
        """
        The file that invoked the framework.

        Computed once. Falls back to the entry point when every frame
        belongs to the framework or the loader.
        """
        if self._app_file is None:
            with self._lock:
                if self._app_file is None:
                    app_file = next(self.callers.caller_files(), None)
                    if not app_file:
                        app_file = self.entry_point
                        logger.debug(f"[application] No caller found, using entry point: {app_file}")
                    self._app_file = app_file
        return self._app_file

    # ==================== Paths ====================

    def app_path(self, *segments: str) -> str:
        return self.paths.app_path(*segments)

    def root_path(self, *segments: str) -> str:
        return self.paths.root_path(*segments)

    # ==================== App class ====================

    @property
    def app_class(self) -> str | None:
        return self._app_class

    @app_class.setter
    def app_class(self, value: Any) -> None:
        with self._lock:
            if self._resolved is not None:
                raise BootstrapStateError(
                    f"app_class already resolved to {self._app_class}; cannot set {value!r}"
                )
            self._app_class = class_name_of(value)

    def resolve_class(self) -> type:
        """
        Resolve the app class, deriving its name from the app file if unset.

        Raises:
            ClassNotFoundError: If the class is not loaded
        """
        if self._resolved is None:
            with self._lock:
                if self._resolved is None:
                    if not self._app_class:
                        stem = os.path.splitext(os.path.basename(self.app_file))[0]
                        self._app_class = camel_case(stem)

                    try:
                        self._resolved = self._lookup.lookup(self._app_class)
                    except ClassNotFoundError as exc:
                        logger.error(f"[application] Class {self._app_class} not found")
                        raise ClassNotFoundError(self._app_class) from exc

                    logger.info(f"[application] Resolved app class: {self._app_class}")
        return self._resolved

    # ==================== Lifecycle ====================

    @property
    def run_on_exit(self) -> bool:
        return self.lifecycle.run_on_exit

    @run_on_exit.setter
    def run_on_exit(self, value: bool) -> None:
        self.lifecycle.run_on_exit = value

    def run(self) -> Any:
        """
        Assemble the pipeline and start the runner.

        Errors from instantiation, plugin loading or the runner propagate
        unchanged.
        """
        klass = self.resolve_class()
        api = klass()

        runner = self._runner_factory(self.argv[1:], api)
        runner.app = self.middleware_builder.build(klass, api)

        plugins = self._plugins_for(api)
        runner.load_plugins(plugins)

        logger.info(
            f"[application] Pipeline assembled | "
            f"class={self._app_class} | "
            f"plugins={len(plugins)}"
        )
        return runner.run()

    def finalize(self, error: BaseException | None = None) -> bool:
        """
        Launch the app if it was run directly and nothing failed.

        Args:
            error: Error ending the process; the exception currently
                being handled if None

        Returns:
            True if the app was launched
        """
        if error is None:
            error = sys.exc_info()[1]
        return self.lifecycle.finalize(
            self.run,
            error=error,
            entry_point=self.entry_point,
            app_file=self.app_file,
        )

    def install_exit_hook(self) -> bool:
        """
        Finalize from an ``atexit`` handler instead of explicitly.

        Returns:
            False if the hook was already installed
        """
        with self._lock:
            if self.exit_hook_installed:
                return False
            self.exit_hook_installed = True
        install_exit_hook(self)
        return True

    # ==================== Internals ====================

    def _default_runner(self, argv: Sequence[str], api: Any) -> Runner:
        return Runner(argv, api, settings=self.settings)

    def _plugins_for(self, api: Any) -> list[Any]:
        declared = getattr(api, "plugins", None)
        if declared is None:
            return []
        return list(declared() if callable(declared) else declared)

    def __repr__(self) -> str:
        return (
            f"Application(app_class={self._app_class!r}, "
            f"state={self.lifecycle.state.value})"
        )


# Global application instance
_application: Application | None = None
_application_lock = threading.Lock()


def get_application() -> Application:
    """
    Get the global application context.

    Creates it on first access (lazy initialization).
    """
    global _application
    if _application is None:
        with _application_lock:
            if _application is None:
                _application = Application()
    return _application


def reset_application() -> None:
    """Drop the global application context (for testing)."""
    global _application
    _application = None


def finalize(error: BaseException | None = None) -> bool:
    """
    Finalize the global application.

    Call this at the bottom of the app file.
    """
    if error is None:
        error = sys.exc_info()[1]
    return get_application().finalize(error)
