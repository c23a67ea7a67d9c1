from __future__ import annotations


class NomadsError(Exception):
    pass


class ConfigurationError(NomadsError, ValueError):
    """Raised when a simulation cannot be built from the given settings."""


class UnsupportedOperation(NomadsError, NotImplementedError):
    """Raised when dispatch reaches a personality outside the closed set."""
