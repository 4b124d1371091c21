"""FastAPI web layer for Market Edge.

Re-exports the application factory so consumers can import directly:
    from Market_Edge.web import create_app
"""

from Market_Edge.web.app import create_app

__all__ = ["create_app"]
