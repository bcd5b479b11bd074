#!/usr/bin/env python3
"""
Serve a directory over plain HTTP.

**Usage**:
    python actions/serve_static.py                         # :8080, current directory
    python actions/serve_static.py --listen 127.0.0.1:9000 --dir site/

Defaults come from STATIC_LISTEN / STATIC_DIR, falling back to ":8080" and ".".
Typically used to publish the page written by
`update_dashboard.py --html-dir site/`.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

# Add project root to Python path so we can import covid_snapshot without installing
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from covid_snapshot.config.settings import ServerSettings
from covid_snapshot.web.static_server import make_server, serve


def parse_args(argv: Optional[Sequence[str]] = None, defaults: Optional[ServerSettings] = None):
    """
    Parse command line arguments.

    Returns:
        Namespace with attributes: listen, dir.
    """
    defaults = defaults if defaults is not None else ServerSettings.from_env()

    parser = argparse.ArgumentParser(description="Serve static files over HTTP")
    parser.add_argument(
        "--listen",
        type=str,
        default=defaults.listen,
        help=f"listen address (default: {defaults.listen})",
    )
    parser.add_argument(
        "--dir",
        type=str,
        default=defaults.directory,
        help=f"directory to serve (default: {defaults.directory})",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None):
    """
    Main entry point for the script.

    **Exit codes**:
      - 0: Stopped with Ctrl+C
      - 1: Invalid configuration (bad address, missing directory)
      - 2: Could not bind the address
    """
    try:
        args = parse_args(argv)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        server = make_server(args.listen, args.dir)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error: Could not listen on {args.listen!r}: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        serve(args.listen, args.dir, server=server)
    except KeyboardInterrupt:
        print("\nStopped")
        sys.exit(0)


if __name__ == "__main__":
    main()
