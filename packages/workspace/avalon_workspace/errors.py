"""Exceptions raised by the session, storage and backup layers."""

from __future__ import annotations


class WorkspaceError(Exception):
    """Base class for workspace errors."""


class PersistenceFailure(WorkspaceError):
    """Durable storage could not be read or written."""


class SessionStateError(WorkspaceError):
    """An operation was called in a state that does not allow it."""


class ConfigError(WorkspaceError):
    """Roster or settings could not be loaded."""


class BackupError(WorkspaceError):
    """A backup payload is not usable."""
