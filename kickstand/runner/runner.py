"""
Default runner for Kickstand.

The runner owns everything after bootstrap: it parses the raw command
line, loads the optional YAML config file, starts plugins and serves
the middleware chain with uvicorn.

Options:
    -a, --address      Bind address
    -p, --port         Bind port
    -e, --environment  Environment name (exposed to plugins via status)
    -c, --config       YAML config file merged into ``api.config``
    -l, --log-level    Log level
    -v, --verbose      Shortcut for ``--log-level DEBUG``
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import uvicorn
import yaml

from kickstand.config import BootstrapSettings, get_settings

from .plugins import PluginSpec

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Runner:
    """
    Serves an assembled app.

    Example:
        runner = Runner(sys.argv[1:], api)
        runner.app = MiddlewareBuilder().build(type(api), api)
        runner.load_plugins(type(api).plugins())
        runner.run()
    """

    def __init__(
        self,
        argv: Sequence[str],
        api: Any,
        *,
        settings: BootstrapSettings | None = None,
    ):
        """
        Initialize runner.

        Args:
            argv: Raw command line arguments, without the program name
            api: Application instance
            settings: Defaults for options not given on the command line
        """
        self.argv = list(argv)
        self.api = api
        self.app: Any = api
        self.plugins: list[PluginSpec] = []
        self.status: dict[str, Any] = {}
        self._settings = settings or get_settings()
        self._options: argparse.Namespace | None = None

    @property
    def options(self) -> argparse.Namespace:
        """Parsed command line options."""
        if self._options is None:
            self._options = self._build_parser().parse_args(self.argv)
        return self._options

    def load_plugins(self, plugins: Iterable[Any]) -> None:
        """
        Set the plugins to start before serving.

        Args:
            plugins: PluginSpecs, plugin classes or ``(cls, *args)`` tuples
        """
        self.plugins = [PluginSpec.coerce(plugin) for plugin in plugins]
        logger.debug(f"[runner] Loaded plugins: {[p.name for p in self.plugins]}")

    def run(self) -> None:
        """Configure logging, start plugins and serve until stopped."""
        options = self.options
        self._configure_logging(options.log_level)

        config = self._load_config(options.config)
        if config and isinstance(getattr(self.api, "config", None), dict):
            self.api.config.update(config)

        self.status["environment"] = options.environment
        self._start_plugins(options.port, config)

        logger.info(
            f"[runner] Starting server | "
            f"address={options.address} | "
            f"port={options.port} | "
            f"env={options.environment} | "
            f"plugins={len(self.plugins)}"
        )
        uvicorn.run(
            self.app,
            host=options.address,
            port=options.port,
            log_level=options.log_level.lower(),
        )

    def _build_parser(self) -> argparse.ArgumentParser:
        settings = self._settings
        parser = argparse.ArgumentParser(description="Kickstand application server")
        parser.add_argument("-a", "--address", default=settings.address, help="Bind address")
        parser.add_argument("-p", "--port", type=int, default=settings.port, help="Bind port")
        parser.add_argument(
            "-e", "--environment", default=settings.environment, help="Environment name"
        )
        parser.add_argument("-c", "--config", default=None, help="Path to YAML config file")
        parser.add_argument(
            "-l",
            "--log-level",
            default=settings.log_level,
            type=str.upper,
            choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            help="Log level",
        )
        parser.add_argument(
            "-v",
            "--verbose",
            dest="log_level",
            action="store_const",
            const="DEBUG",
            help="Enable debug logging",
        )
        return parser

    def _configure_logging(self, level: str) -> None:
        logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)

    def _load_config(self, path: str | None) -> dict[str, Any]:
        """
        Load the YAML config file.

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file does not hold a mapping
        """
        if path is None:
            return {}

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {config_path}")

        logger.info(f"[runner] Loaded config from {config_path}")
        return data

    def _start_plugins(self, port: int, config: dict[str, Any]) -> None:
        for spec in self.plugins:
            plugin = spec.create(
                port,
                config,
                self.status,
                logging.getLogger(f"kickstand.plugins.{spec.name}"),
            )
            plugin.run()
            logger.info(f"[runner] Started plugin: {spec.name}")
