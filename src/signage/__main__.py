"""Digital signage server entry point.

Usage:
    python -m signage [options]

Options:
    --config PATH     Path to config file (default: config/signage.yaml)
    --host HOST       Override the configured bind address
    --port PORT       Override the configured port
    --player URL      Run the headless display player against a server
    --debug           Enable debug logging
"""

import argparse
import signal
import sys
import threading
from pathlib import Path

from . import __version__
from .core.config import DEFAULT_CONFIG_PATH, ConfigManager, get_config
from .core.errors import ConfigurationError
from .core.logging import get_logger, setup_logging

logger = get_logger(__name__)


class SignageServer:
    """Runs the web server until a shutdown signal arrives."""

    def __init__(self, host: str | None = None, port: int | None = None) -> None:
        self._host = host
        self._port = port
        self._server = None

    def run(self) -> None:
        import uvicorn

        from .web import get_app

        config = get_config()
        host = self._host or config.server.host
        port = self._port or config.server.port

        server_config = uvicorn.Config(
            get_app(),
            host=host,
            port=port,
            log_level="warning",
        )
        self._server = uvicorn.Server(server_config)
        # Shutdown is driven by our own signal handlers
        self._server.install_signal_handlers = lambda: None

        logger.info("Web server starting on http://%s:%d", host, port)
        self._server.run()
        logger.info("Web server stopped")

    def stop(self) -> None:
        if self._server:
            self._server.should_exit = True


def run_player(base_url: str, shutdown: threading.Event) -> None:
    """Drive the headless display player until shutdown."""
    from .display import DisplayPlayer

    display = get_config().display
    player = DisplayPlayer(
        base_url,
        poll_interval=display.poll_interval,
        error_reload_delay=display.error_reload_delay,
        fallback_duration=display.fallback_duration,
    )
    player.start()
    shutdown.wait()
    player.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signage",
        description="Digital signage server and display player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config file")
    parser.add_argument("--host", help="Bind address (overrides config)")
    parser.add_argument("--port", type=int, help="Port (overrides config)")
    parser.add_argument("--player", metavar="URL", help="Run the headless display player against URL instead")
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Console logging until the config says otherwise
    setup_logging(level="DEBUG" if args.debug else "INFO")
    logger.info("Digital Signage v%s", __version__)

    try:
        config = ConfigManager.get_instance(args.config).get()
    except ConfigurationError as e:
        logger.error("Could not load configuration: %s", e)
        return 1

    log = config.logging
    setup_logging(
        level="DEBUG" if args.debug else log.level,
        log_format=log.format,
        log_file=log.file,
        max_size_mb=log.max_size_mb,
        backup_count=log.backup_count,
    )

    shutdown = threading.Event()
    server = None if args.player else SignageServer(args.host, args.port)

    def on_signal(signum, frame):
        logger.info("Caught %s, shutting down", signal.Signals(signum).name)
        shutdown.set()
        if server:
            server.stop()

    for signum in (signal.SIGINT, signal.SIGTERM):
        signal.signal(signum, on_signal)

    try:
        if server:
            server.run()
        else:
            run_player(args.player, shutdown)
    except Exception:
        logger.exception("Fatal error")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
