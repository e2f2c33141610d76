"""Shared exception types for deskgit."""


class DeskgitError(Exception):
    """Base exception for all deskgit errors."""


class ConfigError(DeskgitError):
    """Configuration is invalid or missing."""


class ProgressParserError(DeskgitError, ValueError):
    """A progress parser was constructed with an unusable step list."""


class StaleStateError(DeskgitError):
    """A state commit was attempted against an outdated version."""
