"""
lintlsp – Language Server CLI entry point.

Usage
-----
    lintlsp                     # stdio mode (default, for use with editors)
    lintlsp --stdio             # explicit stdio mode
    lintlsp --tcp 2087          # listen on TCP port (useful for debugging)
    lintlsp -c config.yaml      # use a specific configuration file
    lintlsp --dump              # print the effective configuration and exit
"""
from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog='lintlsp',
        description='Language Server (LSP) that reports the output of command-line linters.',
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        '--stdio',
        action='store_true',
        default=False,
        help='Communicate over stdin/stdout (default when no flag given)',
    )
    mode.add_argument(
        '--tcp',
        metavar='PORT',
        type=int,
        default=None,
        help='Listen for connections on the given TCP port instead of stdio',
    )
    p.add_argument(
        '-c', '--config',
        metavar='PATH',
        default=None,
        help='Path to config.yaml (default: ~/.config/lintlsp/config.yaml)',
    )
    p.add_argument(
        '--log',
        metavar='FILE',
        default=None,
        help='Write the log to FILE instead of stderr (overrides log-file in the config)',
    )
    p.add_argument(
        '--log-level',
        metavar='LEVEL',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (default: log-level from the config, else WARNING)',
    )
    p.add_argument(
        '-d', '--dump',
        action='store_true',
        default=False,
        help='Print the effective configuration as YAML and exit',
    )
    p.add_argument(
        '-v', '--version',
        action='store_true',
        default=False,
        help='Print the lintlsp version and exit',
    )
    return p


def lintlsp(argv: list[str] | None = None) -> None:
    """Entry point for the ``lintlsp`` command."""
    import logging
    parser = _build_parser()
    args = parser.parse_args(argv)

    from lintlsp import __version__

    if args.version:
        print(f'lintlsp {__version__}')
        sys.exit(0)

    from lintlsp.config import default_config_path, dump_config, load_config
    from lintlsp.errors import ConfigError

    path = args.config or default_config_path()
    try:
        config = load_config(path)
    except ConfigError as e:
        print(f'lintlsp: {e}', file=sys.stderr)
        sys.exit(1)

    if args.dump:
        dump_config(config, sys.stdout)
        sys.exit(0)

    level = args.log_level or (config.log_level or 'WARNING').upper()
    log_file = args.log or config.log_file
    if log_file:
        destination = {'filename': log_file,
                       'format': '%(asctime)s %(levelname)s %(name)s: %(message)s'}
    else:
        destination = {'stream': sys.stderr,
                       'format': '%(levelname)s %(name)s: %(message)s'}
    logging.basicConfig(level=getattr(logging, level, logging.WARNING), **destination)
    if level != 'DEBUG':
        # pygls logs every JSON-RPC message at DEBUG/INFO.
        logging.getLogger('pygls').setLevel(logging.WARNING)

    from lintlsp.server import configure, server

    configure(config)
    logging.getLogger(__name__).info('lintlsp %s: config %s', __version__, path)

    if args.tcp is not None:
        server.start_tcp('127.0.0.1', args.tcp)
    else:
        # Default (and --stdio): communicate via stdin/stdout
        server.start_io()


if __name__ == '__main__':
    lintlsp()
