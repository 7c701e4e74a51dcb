"""Bridge entrypoint. Parses flags, loads config, binds UDP, connects IRC, serves forever."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from loguru import logger

from ircbridged import __version__
from ircbridged.adapters.irc import IRCSession
from ircbridged.config import Config, load_config_with_env
from ircbridged.core.errors import BridgeConfigurationError, BridgeError
from ircbridged.gateway import Bus
from ircbridged.ingress import IngressLoop, bind_listener
from ircbridged.session import SessionManager

# Third-party libraries to intercept and route through loguru
_INTERCEPTED_LIBRARIES = ["pydle", "pydle.client", "pydle.connection"]

# Config keys settable from the command line
_FLAG_KEYS = ("server", "ssl", "ssl_insecure", "nick", "realname", "listen", "debug", "reconnect")


def _intercept_logging(level: str) -> None:
    """Route pydle's stdlib logging through loguru at the given level."""

    class InterceptHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            try:
                log_level: str | int = logger.level(record.levelname).name
            except ValueError:
                log_level = record.levelno
            logger.patch(
                lambda r: r.update(
                    name=record.name,
                    function=record.funcName,
                    line=record.lineno,
                ),
            ).opt(exception=record.exc_info).log(log_level, record.getMessage())

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for lib in _INTERCEPTED_LIBRARIES:
        lib_logger = logging.getLogger(lib)
        lib_logger.handlers = [InterceptHandler()]
        lib_logger.propagate = False
        lib_logger.setLevel(level)


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru. Replace default logging.
    Level: verbose=True or LOG_LEVEL=DEBUG enables DEBUG; otherwise INFO."""
    level = "INFO"
    if verbose:
        level = "DEBUG"
    else:
        env_level = (os.environ.get("LOG_LEVEL") or "").upper()
        if env_level in ("DEBUG", "INFO", "WARNING", "ERROR"):
            level = env_level

    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format=("<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> | {message}"),
    )
    _intercept_logging(level)


def build_parser() -> argparse.ArgumentParser:
    """Flags. Both the short and the dotted ``irc.*``/``udp.*`` spellings are accepted."""
    parser = argparse.ArgumentParser(
        prog="ircbridged",
        description="Bridge JSON commands received over UDP to an IRC server",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Optional YAML config file",
    )
    parser.add_argument("--server", "--irc.server", dest="server", help="IRC server, host:port (default: localhost:6667)")
    parser.add_argument("--ssl", "--irc.ssl", dest="ssl", action="store_true", default=None, help="Use TLS")
    parser.add_argument(
        "--ssl-insecure",
        "--irc.ssl.insecure",
        dest="ssl_insecure",
        action="store_true",
        default=None,
        help="Skip TLS certificate validation",
    )
    parser.add_argument("--nick", "--irc.nick", dest="nick", help="IRC nick (default: ircbridge)")
    parser.add_argument("--realname", "--irc.realname", dest="realname", help="IRC realname (default: IRC Bridge)")
    parser.add_argument(
        "--listen",
        "--udp.port",
        dest="listen",
        type=int,
        help="JSON-UDP listen port (default: 41234)",
    )
    parser.add_argument("--debug", "-v", dest="debug", action="store_true", default=None, help="Enable debug logging")
    parser.add_argument("--reconnect", dest="reconnect", help="Reconnect interval, e.g. 60s or 1m (default: 60s)")
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser


def load_settings(args: argparse.Namespace) -> Config:
    """Build a validated Config from the YAML file, env and flags."""
    if args.config is not None and not args.config.exists():
        raise BridgeConfigurationError(
            f"Config file not found: {args.config}",
            code="config_not_found",
            details={"path": str(args.config)},
        )
    try:
        data = load_config_with_env(args.config)
    except yaml.YAMLError as exc:
        raise BridgeConfigurationError(
            f"Config file {args.config} is not valid YAML",
            code="invalid_yaml",
            original_error=exc,
        ) from exc
    flags: dict[str, Any] = {k: getattr(args, k) for k in _FLAG_KEYS if getattr(args, k, None) is not None}
    config = Config()
    config.reload(data, flags=flags)
    return config


def main(argv: list[str] | None = None) -> None:
    """Main entrypoint."""
    args = build_parser().parse_args(argv)
    setup_logging(bool(args.debug))

    try:
        config = load_settings(args)
    except BridgeConfigurationError as exc:
        logger.error("Invalid configuration: {}", exc)
        sys.exit(1)

    if config.debug != bool(args.debug):
        setup_logging(config.debug)
    if args.config is not None:
        logger.info("Config loaded from {}", args.config)

    try:
        asyncio.run(_run(config))
    except BridgeError as exc:
        logger.critical("Fatal: {}", exc)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted")


async def _run(config: Config) -> None:
    """Bind UDP, connect IRC, then run the ingress and control loops until one fails."""
    sock = bind_listener(config.listen_port)

    bus = Bus()
    session = IRCSession(
        bus,
        config.server_address,
        config.nick,
        config.realname,
        security=config.security_mode,
    )
    manager = SessionManager(session, reconnect_interval=config.reconnect_interval)
    bus.register(manager)

    tasks: list[asyncio.Task] = []
    try:
        await manager.start()
        logger.info(
            "Bridge ready: udp port {} -> {} as {} (reconnect every {:.0f}s)",
            config.listen_port,
            config.server_address,
            config.nick,
            config.reconnect_interval,
        )
        tasks = [
            asyncio.create_task(manager.run(), name="session-control"),
            asyncio.create_task(IngressLoop(sock, manager).run(), name="udp-ingress"),
        ]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        for task in done:
            task.result()
    except asyncio.CancelledError:
        logger.info("Bridge shutting down")
        raise
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        try:
            await session.close()
        except Exception as exc:
            logger.debug("IRC close failed: {}", exc)
        sock.close()


if __name__ == "__main__":
    main()
