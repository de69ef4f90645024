"""Entry point for the web server.

Usage:
    python -m dubdesk.web [--port PORT] [--host HOST] [--config PATH] [--verbose]
"""

import argparse
import logging
import sys
from pathlib import Path


def main() -> int:
    """Run the web server."""
    parser = argparse.ArgumentParser(
        description="dubdesk review server",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to run the server on",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind to",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yaml",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    # Import here to avoid loading FastAPI before parsing args
    import uvicorn
    from .backend.dependencies import get_app_config, get_config

    # Update config with CLI args
    config = get_config()
    config.host = args.host
    config.port = args.port
    config.config_path = args.config

    app_config = get_app_config()
    level = logging.DEBUG if args.verbose else getattr(logging, app_config.logging.level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    print("Starting dubdesk review server...")
    print(f"  Host: {args.host}")
    print(f"  Port: {args.port}")
    print(f"  Sync API: {app_config.sync.base_url}")
    print(f"  URL: http://{args.host}:{args.port}")
    print()

    uvicorn.run(
        "dubdesk.web.backend.app:create_app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        factory=True,
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
