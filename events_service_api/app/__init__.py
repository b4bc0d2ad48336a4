"""
Application package initializer.

The API is organised into ``core`` (configuration, storage,
validation, security), ``services`` (per-resource business logic),
``schemas`` (response models) and ``api`` (routers).  Resource routes
are versioned under ``api/<version>/``.
"""

from .main import app  # noqa: F401
