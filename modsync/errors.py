"""
modsync - Error taxonomy

Every failure the accessors and the executor can raise derives from
ModSyncError, so the reconciler can isolate one module's failure from
its siblings with a single except clause.
"""

from __future__ import annotations

from typing import Optional


class ModSyncError(Exception):
    """Base class for all modsync failures."""


class InvalidModuleName(ModSyncError, ValueError):
    """A name that does not satisfy the module prefix invariant."""


class NetworkFailure(ModSyncError):
    """Remote listing or fetch was unreachable or answered non-2xx.

    Attributes:
        status_code: HTTP status when the server answered, else None.
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ModuleNotFound(ModSyncError):
    """The local module directory or its entry point does not exist."""


class ModuleNotDownloaded(ModuleNotFound):
    """Execution was requested for a module that is not on disk."""


class FilesystemFailure(ModSyncError):
    """Permission or I/O error while reading or writing local storage."""


class ExecutionFailure(ModSyncError):
    """Module code raised while being loaded, constructed, or run."""
