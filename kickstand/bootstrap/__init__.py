"""
Kickstand Bootstrap Layer.

Turns "python my_api.py" into a running server:
- CallerInspector finds the file that invoked the framework
- AppPaths snapshots the app and root directories
- NamespaceLookup / ClassRegistry resolve the app class
- Lifecycle decides whether finalize() launches the app
- Application ties them together and assembles the pipeline

Design Principle:
    Launching is explicit. Nothing runs unless the app file itself
    calls finalize() (or opts into the exit hook), the process was
    started from that file, and no error is on its way out.
"""

from .application import Application, finalize, get_application, reset_application
from .callers import (
    CALLERS_TO_IGNORE,
    RUNTIME_IGNORE_CALLERS,
    CallerInspector,
    CallFrame,
    FrameSource,
    IgnorePatternSet,
    TextFrameSource,
    parse_location,
    stack_frames,
)
from .lifecycle import Lifecycle, LifecycleState, install_exit_hook
from .paths import AppPaths
from .resolver import ClassLookup, ClassRegistry, NamespaceLookup, camel_case, class_name_of

__all__ = [
    # Application
    "Application",
    "finalize",
    "get_application",
    "reset_application",
    # Callers
    "CALLERS_TO_IGNORE",
    "RUNTIME_IGNORE_CALLERS",
    "CallFrame",
    "CallerInspector",
    "FrameSource",
    "IgnorePatternSet",
    "TextFrameSource",
    "parse_location",
    "stack_frames",
    # Lifecycle
    "Lifecycle",
    "LifecycleState",
    "install_exit_hook",
    # Paths
    "AppPaths",
    # Resolver
    "ClassLookup",
    "ClassRegistry",
    "NamespaceLookup",
    "camel_case",
    "class_name_of",
]
