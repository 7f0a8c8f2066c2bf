"""Unified entry point for telestore.

This module provides a unified entry point that can start different interfaces:
- CLI (default)
- REST API server
"""

import argparse


def main():
    """Main entry point with interface selection."""
    parser = argparse.ArgumentParser(
        description="telestore - a file store kept in a Telegram channel",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Interfaces:
  cli         Run a CLI command (default)
  api         Start the REST API server

Examples:
  python -m telestore cli ls docs         # List a directory
  python -m telestore api                 # Start API server
  python -m telestore api --port 8080     # Start API on custom port
""",
    )

    parser.add_argument(
        "interface",
        nargs="?",
        default="cli",
        choices=["cli", "api"],
        help="Which interface to start (default: cli)",
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind API server to (default: 127.0.0.1)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for API server (default: 8430)",
    )

    args, rest = parser.parse_known_args()

    from telestore.core.config import setup_logging

    setup_logging()

    if args.interface == "api":
        import uvicorn

        from telestore.core.config import TELESTORE_HOST, TELESTORE_PORT

        host = args.host or TELESTORE_HOST or "127.0.0.1"
        port = args.port or TELESTORE_PORT

        print(f"Starting telestore API server on {host}:{port}")
        uvicorn.run(
            "telestore.api.app:app",
            host=host,
            port=port,
            reload=False,
        )

    else:
        from telestore.interfaces.cli.app import app

        app(args=rest, prog_name="telestore")


if __name__ == "__main__":
    main()
