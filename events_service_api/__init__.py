"""
Top-level package for the Events Service API.

All functionality lives in submodules under ``app``; the ASGI
application is ``events_service_api.app.main:app``.
"""

__all__ = []
