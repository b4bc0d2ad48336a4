"""
API package containing versioned routes.

Versioned subpackages (``v1``) expose a top-level ``router`` bundling
their resource endpoints.  Login routes are not versioned and live in
``api.auth``.
"""
