"""FastAPI web layer for Swing Scout.

Re-exports the application factory so consumers can import directly:
    from Swing_Scout.web import create_app
"""

from Swing_Scout.web.app import create_app

__all__ = ["create_app"]
