"""Exceptions raised by services for outcomes that are not validation failures.

A missing document is reported with a plain ``ValueError``.
"""


class DuplicateEmailError(Exception):
    """Another user already owns the requested email address."""


class EmptyUpdateError(Exception):
    """An update payload validated but contained no fields to change."""
