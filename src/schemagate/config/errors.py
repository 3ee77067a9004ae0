"""Errors raised while loading the gate's database settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A ``DB_*`` setting is present but unusable (bad dialect, port or flag)."""


class MissingConfigurationError(ConfigurationError):
    """One or more required ``DB_*`` variables are unset or blank."""
