"""Autoroute CLI — autoroute routes / autoroute serve.

Entry point for the ``autoroute`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the autoroute CLI."""
    parser = argparse.ArgumentParser(
        prog="autoroute",
        description="Convention-based routes and views for chirp apps.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # autoroute routes
    routes_parser = subparsers.add_parser(
        "routes",
        help="List the routes and views derived from a directory",
    )
    routes_parser.add_argument("root", nargs="?", default=".", help="Controllers root directory")
    routes_parser.add_argument("--ext", default=None, help="Template extension (default .html)")

    # autoroute serve
    serve_parser = subparsers.add_parser(
        "serve",
        help="Serve a directory as a chirp app",
    )
    serve_parser.add_argument("root", nargs="?", default=".", help="Controllers root directory")
    serve_parser.add_argument("--host", default=None, help="Bind address (default 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=None, help="Bind port (default 3000)")
    serve_parser.add_argument("--ext", default=None, help="Template extension (default .html)")
    serve_parser.add_argument(
        "--no-standalone",
        dest="enable_standalone",
        action="store_const",
        const=False,
        default=None,
        help="Do not serve templates that have no controller",
    )
    serve_parser.add_argument(
        "--debug", action="store_const", const=True, default=None, help="Enable chirp debug mode",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from autoroute import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from autoroute.app import Autorouter
        from autoroute.banner import print_routes
        from autoroute.config_loader import load_config

        router = Autorouter(load_config(args.root, ext=args.ext))
        print_routes(router)
    elif args.command == "serve":
        from autoroute.app import serve

        serve(
            args.root,
            host=args.host,
            port=args.port,
            ext=args.ext,
            enable_standalone=args.enable_standalone,
            debug=args.debug,
        )


if __name__ == "__main__":
    main()
