"""
Pytest configuration and fixtures for Kickstand tests.
"""

import sys
from pathlib import Path

import pytest

# Add the repository root to path for imports
# This allows `from kickstand.bootstrap import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from kickstand.bootstrap import Application, TextFrameSource, reset_application  # noqa: E402
from kickstand.config import BootstrapSettings, reset_settings  # noqa: E402


class FakeRunner:
    """Runner stand-in that records what the bootstrap layer hands it."""

    instances: list["FakeRunner"] = []

    def __init__(self, argv, api):
        self.argv = list(argv)
        self.api = api
        self.app = None
        self.plugins = None
        self.ran = False
        FakeRunner.instances.append(self)

    def load_plugins(self, plugins):
        self.plugins = list(plugins)

    def run(self):
        self.ran = True
        return "running"


@pytest.fixture(autouse=True)
def _reset_globals():
    """Give each test fresh settings and a fresh global application."""
    reset_settings()
    reset_application()
    FakeRunner.instances = []
    yield
    reset_settings()
    reset_application()


@pytest.fixture
def settings():
    """Default settings, independent of the environment."""
    return BootstrapSettings()


@pytest.fixture
def app_dir(tmp_path):
    """Directory holding a fake app file."""
    directory = tmp_path / "apps"
    directory.mkdir()
    return directory


@pytest.fixture
def app_file(app_dir):
    """Path of the fake app file ``my_sample_app.py``."""
    return str(app_dir / "my_sample_app.py")


@pytest.fixture
def make_application(settings, app_file):
    """
    Build an Application whose stack starts in ``app_file``.

    Keyword arguments override the defaults.
    """

    def _make(**kwargs):
        kwargs.setdefault("settings", settings)
        kwargs.setdefault(
            "frame_source",
            TextFrameSource([f"{app_file}:12:in <module>"]),
        )
        kwargs.setdefault("argv", [app_file, "-p", "8080"])
        kwargs.setdefault("runner_factory", FakeRunner)
        return Application(**kwargs)

    return _make
