"""CLI entry point for request-duplicator."""

import argparse
import sys
from datetime import datetime
from pathlib import Path

from rich.console import Console

from app import create_app
from core.config import CONFIG_FILE, Config, load_config
from core.exceptions import ConfigurationError
from ui.dashboard import Dashboard, PlainLogger
from ui.log_utils import clear_logs, shutdown_log_executor, write_cli_log

console = Console()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="request-duplicator",
        description="Duplicate POST traffic to a stable and a dev backend.",
    )
    parser.add_argument("--port", type=int, help="port to listen on")
    parser.add_argument("--stable-port", type=int, help="stable backend port")
    parser.add_argument("--dev-port", type=int, help="dev backend port")
    parser.add_argument(
        "--backend-scheme",
        choices=("http", "https"),
        help="scheme used for both backends",
    )
    parser.add_argument("--cert", help="TLS certificate chain (PEM)")
    parser.add_argument("--key", help="TLS private key")
    parser.add_argument("--no-tls", action="store_true", help="serve plain HTTP")
    parser.add_argument("--no-dashboard", action="store_true", help="print plain log lines")
    parser.add_argument("--config", action="store_true", help="show config location and exit")
    return parser


def apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return a copy of ``config`` with command-line overrides applied."""
    updates: dict = {}
    proxy: dict = {}
    tls: dict = {}

    if args.port is not None:
        proxy["port"] = args.port
    if args.no_dashboard:
        proxy["dashboard"] = False
    if args.cert:
        tls["cert_path"] = args.cert
    if args.key:
        tls["key_path"] = args.key
    if args.no_tls:
        tls["enabled"] = False

    for name, port in (("stable", args.stable_port), ("dev", args.dev_port)):
        backend: dict = {}
        if port is not None:
            backend["port"] = port
        if args.backend_scheme:
            backend["scheme"] = args.backend_scheme
        if backend:
            updates[name] = getattr(config, name).model_copy(update=backend)

    if proxy:
        updates["proxy"] = config.proxy.model_copy(update=proxy)
    if tls:
        updates["tls"] = config.tls.model_copy(update=tls)

    # model_copy skips validation
    return Config.model_validate(config.model_copy(update=updates).model_dump())


def check_tls_files(config: Config) -> None:
    """Fail fast when TLS is enabled but the certificate or key is missing."""
    if not config.tls.enabled:
        return
    for label, path in (("certificate", config.tls.cert_path), ("key", config.tls.key_path)):
        if not Path(path).is_file():
            raise ConfigurationError(f"TLS {label} not found: {path}")


def main(argv: list[str] | None = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    if args.config:
        console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
        return

    try:
        config = apply_overrides(load_config(), args)
        check_tls_files(config)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {e}")
        console.print(f"[dim]Edit {CONFIG_FILE} or pass --cert/--key (or --no-tls)[/dim]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red][ERROR][/red] Invalid override: {e}")
        sys.exit(1)

    # Clear previous logs and start dashboard
    clear_logs()
    if config.proxy.dashboard:
        logger = Dashboard(config)
    else:
        logger = PlainLogger(config)

    import uvicorn

    app = create_app(config, logger)

    ssl_options = {}
    if config.tls.enabled:
        ssl_options = {
            "ssl_certfile": config.tls.cert_path,
            "ssl_keyfile": config.tls.key_path,
        }

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
        timeout_keep_alive=config.limits.keep_alive_timeout,
        **ssl_options,
    )
    server = uvicorn.Server(uvicorn_config)

    if isinstance(logger, Dashboard):
        logger.start()
    start_time = datetime.now()
    write_cli_log(
        "STARTUP",
        "Duplicator started",
        port=config.proxy.port,
        stable=config.stable.port,
        dev=config.dev.port,
    )
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Duplicator stopped", duration=str(duration))
        shutdown_log_executor()
        if isinstance(logger, Dashboard):
            logger.stop()

    # Listener never came up
    if not server.started:
        sys.exit(1)


if __name__ == "__main__":
    main()
