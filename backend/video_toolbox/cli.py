#!/usr/bin/env python3
"""
Video Toolbox CLI - thin entrypoint for operator commands.

Commands:
- serve: run the API server under uvicorn (default)
- sweep: run one retention sweep over the uploads root and exit

Exit Codes:
===========
- 0: Success
- 1: Configuration error
- 2: Sweep finished with failures
"""

import argparse
import sys
from typing import List, NoReturn, Optional

from .config import ConfigError, Settings
from .logging_config import configure_logging
from .retention.reaper import RetentionReaper
from .storage.layout import StorageLayout


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)


def cmd_serve(args: argparse.Namespace) -> NoReturn:
    """Run the API server until interrupted."""
    import uvicorn

    settings = _load_settings()
    host = args.host or settings.host
    port = args.port or settings.port
    log_level = (args.log_level or settings.log_level).lower()

    uvicorn.run(
        "video_toolbox.main:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level,
    )
    sys.exit(0)


def cmd_sweep(args: argparse.Namespace) -> NoReturn:
    """Delete expired files from every storage area once."""
    settings = _load_settings()
    configure_logging(settings.log_level)

    storage = StorageLayout(settings.uploads_dir)
    reaper = RetentionReaper(storage, file_retention=settings.file_retention)
    report = reaper.sweep()

    print(f"Removed {report.files_removed} file(s) from {storage.root}, {report.failures} failure(s)")
    sys.exit(2 if report.failures else 0)


def main(argv: Optional[List[str]] = None) -> NoReturn:
    """
    Main CLI entrypoint.

    Parses arguments and dispatches to subcommands.
    """
    parser = argparse.ArgumentParser(
        prog='video-toolbox',
        description='Video Toolbox - asynchronous video conversion API',
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Serve command
    parser_serve = subparsers.add_parser(
        'serve',
        help='Run the API server (default)'
    )
    parser_serve.add_argument(
        '--host',
        default=None,
        help='Bind address (default: HOST or 0.0.0.0)'
    )
    parser_serve.add_argument(
        '--port',
        type=int,
        default=None,
        help='Bind port (default: PORT or 8080)'
    )
    parser_serve.add_argument(
        '--log-level',
        default=None,
        choices=['debug', 'info', 'warning', 'error', 'critical'],
        help='Log level (default: LOG_LEVEL or info)'
    )
    parser_serve.set_defaults(func=cmd_serve)

    # Sweep command
    parser_sweep = subparsers.add_parser(
        'sweep',
        help='Delete expired files from the uploads root and exit'
    )
    parser_sweep.set_defaults(func=cmd_sweep)

    # Parse and dispatch
    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args(['serve'] + list(argv or []))
    args.func(args)


if __name__ == '__main__':
    main()
