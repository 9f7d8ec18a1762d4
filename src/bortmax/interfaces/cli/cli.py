"""``bortmax`` console entrypoint."""

from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import structlog
import uvicorn
import yaml

from bortmax.infrastructure.config import AppConfig, load_config
from bortmax.infrastructure.logging.setup import configure_logging
from bortmax.interfaces.app import create_app

log = structlog.get_logger(__name__)

_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 8080

# argparse dest -> flat config key understood by load_config()
_OVERRIDE_FLAGS: dict[str, str] = {
    "upstream": "upstream_base_url",
    "movie_path": "upstream_movie_path",
    "series_path": "upstream_series_path",
    "timeout": "http_timeout_seconds",
    "catalog_ttl": "catalog_ttl_seconds",
    "log_level": "log_level",
    "log_format": "log_format",
}


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bortmax",
        description="Stremio addon serving direct streams from an autoindex server.",
    )

    server = parser.add_argument_group("server")
    server.add_argument("--host", help=f"Bind host (env HOST, default {_DEFAULT_HOST}).")
    server.add_argument(
        "--port", type=int, help=f"Bind port (env PORT, default {_DEFAULT_PORT})."
    )

    sources = parser.add_argument_group("configuration sources")
    sources.add_argument("--config", type=Path, help="YAML config file.")
    sources.add_argument("--dotenv", type=Path, help=".env file with BORTMAX_* vars.")

    overrides = parser.add_argument_group("overrides (win over file and env)")
    overrides.add_argument("--upstream", help="Base URL of the directory server.")
    overrides.add_argument("--movie-path", help="Movie root below the base URL.")
    overrides.add_argument("--series-path", help="Series root below the base URL.")
    overrides.add_argument(
        "--timeout", type=float, help="Upstream fetch timeout in seconds."
    )
    overrides.add_argument(
        "--catalog-ttl", type=int, help="Catalog cache lifetime in seconds."
    )
    overrides.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"]
    )
    overrides.add_argument("--log-format", choices=["json", "console"])

    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Print the effective configuration as YAML and exit.",
    )
    return parser


def _cli_overrides(args: argparse.Namespace) -> dict[str, Any]:
    return {
        key: getattr(args, dest)
        for dest, key in _OVERRIDE_FLAGS.items()
        if getattr(args, dest) is not None
    }


def _bind_address(args: argparse.Namespace) -> tuple[str, int]:
    host = args.host or os.getenv("HOST") or _DEFAULT_HOST
    port = args.port if args.port is not None else int(os.getenv("PORT", _DEFAULT_PORT))
    return host, port


def _print_config(config: AppConfig) -> None:
    yaml.safe_dump(config.to_sectioned_dict(), sys.stdout, sort_keys=False)


def start(argv: Iterable[str] | None = None) -> None:
    """Load config once, configure logging, then serve until interrupted."""
    args = _build_parser().parse_args(list(argv) if argv is not None else None)

    config = load_config(
        config_path=args.config,
        dotenv_path=args.dotenv,
        cli_overrides=_cli_overrides(args),
    )
    if args.print_config:
        _print_config(config)
        return

    host, port = _bind_address(args)
    log_config = configure_logging(config)
    log.info("server_starting", host=host, port=port, upstream=config.upstream_base_url)

    uvicorn.run(create_app(config), host=host, port=port, log_config=log_config)


if __name__ == "__main__":
    raise SystemExit(start())
