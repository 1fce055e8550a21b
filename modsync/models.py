"""
modsync - Value types shared by the reconciler, CLI and API.

None of these are persisted.  They are recomputed on every call and
handed to the presentation layer for rendering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from modsync.errors import InvalidModuleName

MODULE_PREFIX = "module_"


def is_module_name(name: str, prefix: str = MODULE_PREFIX) -> bool:
    """Return True if ``name`` identifies a module.

    Besides the prefix, a module name must be a single path component with
    no control characters, so it can never address anything outside the
    local module root.
    """
    if not isinstance(name, str) or not name.startswith(prefix):
        return False
    if name == prefix:
        return False
    if any(ord(c) < 32 or ord(c) == 127 for c in name):
        return False
    return "/" not in name and "\\" not in name and ".." not in name


def validate_module_name(name: str, prefix: str = MODULE_PREFIX) -> str:
    """Return ``name`` unchanged or raise InvalidModuleName."""
    if not is_module_name(name, prefix):
        raise InvalidModuleName(
            f"Invalid module name {name!r}: must start with {prefix!r} "
            f"and contain no path separators or control characters"
        )
    return name


class ModuleState(str, Enum):
    """Per-module state as observed at call time."""
    NOT_DOWNLOADED = "not_downloaded"
    CURRENT = "current"
    STALE = "stale"
    UNKNOWN = "unknown"
    LOCAL_ONLY = "local_only"


class ExecutionOutcome(str, Enum):
    OK = "ok"
    NOT_DOWNLOADED = "not_downloaded"
    FAILED = "failed"


@dataclass
class ModuleCheck:
    """Partition of the remote module set by local presence.

    Attributes:
        downloaded: Remote modules also present locally (remote order).
        not_downloaded: Remote modules absent locally (remote order).
    """
    downloaded: List[str] = field(default_factory=list)
    not_downloaded: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "downloaded": list(self.downloaded),
            "not_downloaded": list(self.not_downloaded),
        }


@dataclass
class UpdateCheck:
    """Result of comparing one local module against the remote copy.

    ``update_available`` is False both when the contents are identical
    and when the comparison could not be made.  ``error`` tells the two
    apart.

    Attributes:
        module: Module name.
        update_available: True iff local and remote bytes differ.
        error: Why the comparison failed, or None.
    """
    module: str = ""
    update_available: bool = False
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class OperationResult:
    """Outcome of a single download or update.

    Attributes:
        module: Module name.
        action: "download" or "update".
        success: Whether the entry point was written.
        error: Failure reason for diagnostics, or None.
    """
    module: str = ""
    action: str = ""
    success: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module,
            "action": self.action,
            "success": self.success,
            "error": self.error,
        }


@dataclass
class ExecutionResult:
    """Outcome of running a module's entry point.

    Attributes:
        module: Module name.
        outcome: OK, NOT_DOWNLOADED, or FAILED.
        error: Failure reason, or None.
        elapsed_ms: Time spent loading and running the module.
    """
    module: str = ""
    outcome: ExecutionOutcome = ExecutionOutcome.OK
    error: Optional[str] = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome == ExecutionOutcome.OK

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module,
            "outcome": self.outcome.value,
            "error": self.error,
            "elapsed_ms": round(self.elapsed_ms, 2),
        }


@dataclass
class ModuleStatus:
    """Status line for one module in the combined remote/local view.

    Attributes:
        module: Module name.
        remote: Listed in the remote repository.
        local: Present in the local module root.
        state: Derived ModuleState.
        error: Comparison failure reason when state is UNKNOWN.
    """
    module: str = ""
    remote: bool = False
    local: bool = False
    state: ModuleState = ModuleState.UNKNOWN
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "module": self.module,
            "remote": self.remote,
            "local": self.local,
            "state": self.state.value,
            "error": self.error,
        }
