"""
Plain HTTP static file server.

Serves the files of one directory with the standard library's
SimpleHTTPRequestHandler: no routing, no templating, directory listings and
index.html resolution exactly as the handler does them. It is a separate
deployable from the dashboard and shares no state with it.

Two options:
  - listen: "host:port", ":8080" binds every interface on port 8080
  - directory: ".", the current working directory
"""

import http.server
from functools import partial
from pathlib import Path
from typing import Optional, Tuple

from covid_snapshot.config.settings import DEFAULT_LISTEN, DEFAULT_STATIC_DIR


def parse_listen_address(listen: str) -> Tuple[str, int]:
    """
    Split a listen address into (host, port).

    Examples:
        >>> parse_listen_address(":8080")
        ('', 8080)
        >>> parse_listen_address("127.0.0.1:9000")
        ('127.0.0.1', 9000)
        >>> parse_listen_address("[::1]:8080")
        ('::1', 8080)

    Raises:
        ValueError: If there is no ":port" part or the port is not 0-65535.
    """
    host, sep, port_str = listen.rpartition(":")
    if not sep:
        raise ValueError(f"listen address must look like 'host:port' or ':port', got: {listen!r}")

    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]

    try:
        port = int(port_str)
    except ValueError:
        raise ValueError(f"Invalid port in listen address {listen!r}: {port_str!r}")

    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range in listen address {listen!r}: {port}")

    return host, port


def make_server(
    listen: str = DEFAULT_LISTEN,
    directory: str = DEFAULT_STATIC_DIR,
) -> http.server.ThreadingHTTPServer:
    """
    Build (and bind) a static file server.

    Args:
        listen: Listen address, e.g. ":8080".
        directory: Directory to serve.

    Returns:
        Bound ThreadingHTTPServer; call serve_forever() to run it.

    Raises:
        ValueError: If the listen address is invalid.
        FileNotFoundError: If directory does not exist.
        OSError: If the address cannot be bound.
    """
    host, port = parse_listen_address(listen)

    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Directory to serve does not exist: {directory}")

    handler = partial(http.server.SimpleHTTPRequestHandler, directory=str(root))
    return http.server.ThreadingHTTPServer((host, port), handler)


def serve(
    listen: str = DEFAULT_LISTEN,
    directory: str = DEFAULT_STATIC_DIR,
    server: Optional[http.server.ThreadingHTTPServer] = None,
) -> None:
    """
    Serve `directory` on `listen` until interrupted.

    Args:
        listen: Listen address, e.g. ":8080".
        directory: Directory to serve.
        server: Pre-built server (tests); built with make_server() if None.
    """
    httpd = server if server is not None else make_server(listen, directory)
    print(f'listening on "{listen}"...')
    with httpd:
        httpd.serve_forever()
