"""Web shell for the dubdesk review engine.

This package provides a FastAPI backend that exposes review sessions as
plain-data views for a browser front-end.

Usage:
    python -m dubdesk.web [--port 8000] [--host 127.0.0.1] [--config config.yaml]
"""

__version__ = "0.1.0"
