"""
Caller inspection for Kickstand.

Finds the file that pulled the framework in by walking the call stack
and skipping frames that belong to Kickstand itself, to the import
machinery, or to interpreter internals.

The stack is read through a FrameSource, a callable returning CallFrames
innermost first. The default source walks the live interpreter stack;
TextFrameSource replays pre-rendered ``file:line[:in method]`` entries,
which keeps the filtering testable without a real stack.

Usage:
    inspector = CallerInspector()
    app_file = next(inspector.caller_files(), None)
"""

from __future__ import annotations

import logging
import os
import re
import sys
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

logger = logging.getLogger(__name__)

PACKAGE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Frames to skip when looking for the app file
CALLERS_TO_IGNORE: tuple[str, ...] = (
    "^" + re.escape(PACKAGE_DIR + os.sep),  # all kickstand code
    r"[/\\]runpy\.py$",  # python -m
    r"[/\\]importlib[/\\]",  # import machinery
    r"[/\\]pkg_resources[/\\]",  # console script shims
    r"[/\\]_virtualenv\.py$",  # virtualenv site hooks
    r"^<frozen ",  # frozen modules
    r"^<string>$",  # exec'd source
)

# Extra patterns for interpreter implementations with their own internal frames
RUNTIME_IGNORE_CALLERS: dict[str, tuple[str, ...]] = {
    "pypy": (r"[/\\]lib_pypy[/\\]", r"^<builtin>"),
}

_LOCATION_SPLIT = re.compile(r":(?=\d|in )")
_LEADING_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class CallFrame:
    """A single stack entry reduced to its file and line."""

    file: str
    line: int


FrameSource = Callable[[], Iterable[CallFrame]]


def stack_frames() -> Iterator[CallFrame]:
    """Walk the live stack of whoever consumes this generator, innermost first."""
    frame = sys._getframe(1)
    while frame is not None:
        yield CallFrame(file=frame.f_code.co_filename, line=frame.f_lineno)
        frame = frame.f_back


def parse_location(entry: str) -> CallFrame:
    """
    Parse a ``file:line[:in method]`` entry into a CallFrame.

    The entry is split at the first colon followed by a digit or by
    ``in ``, so drive letters and other colons in the path survive.
    Entries without a line number get line 0.
    """
    parts = _LOCATION_SPLIT.split(entry.strip(), maxsplit=2)
    line = 0
    if len(parts) > 1:
        match = _LEADING_DIGITS.match(parts[1])
        if match:
            line = int(match.group())
    return CallFrame(file=parts[0], line=line)


class TextFrameSource:
    """Frame source over pre-rendered stack entries."""

    def __init__(self, entries: Iterable[str]):
        self._entries = list(entries)

    def __call__(self) -> Iterator[CallFrame]:
        return (parse_location(entry) for entry in self._entries)


class IgnorePatternSet:
    """
    Ordered set of path patterns for frames that are not the app file.

    Patterns are regular expressions searched against the frame's file.
    Adding a pattern that is already present is a no-op.
    """

    def __init__(self, patterns: Iterable[str | re.Pattern[str]] = ()):
        self._patterns: list[re.Pattern[str]] = []
        self.extend(patterns)

    @classmethod
    def default(cls, extra: Iterable[str | re.Pattern[str]] = ()) -> IgnorePatternSet:
        """Built-in patterns, then the current runtime's patterns, then ``extra``."""
        patterns: list[str | re.Pattern[str]] = list(CALLERS_TO_IGNORE)
        patterns.extend(RUNTIME_IGNORE_CALLERS.get(sys.implementation.name, ()))
        patterns.extend(extra)
        return cls(patterns)

    def add(self, pattern: str | re.Pattern[str]) -> None:
        compiled = pattern if isinstance(pattern, re.Pattern) else re.compile(pattern)
        if compiled.pattern in self:
            return
        self._patterns.append(compiled)
        logger.debug(f"[callers] Ignoring frames matching: {compiled.pattern}")

    def extend(self, patterns: Iterable[str | re.Pattern[str]]) -> None:
        for pattern in patterns:
            self.add(pattern)

    def matches(self, file: str) -> bool:
        """Whether ``file`` matches any pattern."""
        return any(pattern.search(file) for pattern in self._patterns)

    @property
    def patterns(self) -> list[str]:
        return [pattern.pattern for pattern in self._patterns]

    def __contains__(self, pattern: object) -> bool:
        return pattern in self.patterns

    def __iter__(self) -> Iterator[re.Pattern[str]]:
        return iter(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __repr__(self) -> str:
        return f"IgnorePatternSet({self.patterns!r})"


class CallerInspector:
    """
    Filters a frame source down to frames outside the framework.

    Both query methods return generators: they are evaluated lazily,
    once, and keep the stack order (innermost first). An empty result
    is valid; the caller decides on a fallback.
    """

    def __init__(
        self,
        frame_source: FrameSource | None = None,
        ignore: IgnorePatternSet | None = None,
    ):
        self._frame_source = frame_source or stack_frames
        self.ignore = ignore if ignore is not None else IgnorePatternSet.default()

    def caller_locations(self) -> Iterator[CallFrame]:
        """Like ``traceback.extract_stack`` without framework frames, innermost first."""
        return (
            frame
            for frame in self._frame_source()
            if not self.ignore.matches(frame.file)
        )

    def caller_files(self) -> Iterator[str]:
        """Like caller_locations, but yielding file names only."""
        return (frame.file for frame in self.caller_locations())
