"""
modsync - Test Fixtures (conftest.py)
Shared fixtures for all test modules.
"""
from typing import Dict, Iterable, List, Optional

import pytest

from modsync.errors import NetworkFailure
from modsync.executor import ModuleExecutor
from modsync.local_catalog import LocalCatalog
from modsync.models import validate_module_name
from modsync.reconciler import ModuleReconciler


# ── Module sources ────────────────────────────────────────────────────────────

HELLO_MODULE = b'''
class Module:
    def run(self):
        return "hello"
'''

COUNTER_MODULE = b'''
CALLS = []

class Module:
    def __init__(self):
        CALLS.append("init")

    def run(self):
        CALLS.append("run")
        return len(CALLS)
'''


# ── Fake remote ───────────────────────────────────────────────────────────────

class FakeRemote:
    """In-memory stand-in for RemoteCatalog.

    ``files`` maps module name -> entry-point bytes.  Names in ``failing``
    raise NetworkFailure on fetch.  ``listing_fails`` makes list_modules()
    behave like an unreachable API (empty list).
    """

    def __init__(self, files: Optional[Dict[str, bytes]] = None,
                 failing: Iterable[str] = (), extra_entries: Iterable[str] = ()):
        self.owner = "octo"
        self.repo = "modules"
        self.branch = "main"
        self.files: Dict[str, bytes] = dict(files or {})
        self.failing = set(failing)
        self.extra_entries = list(extra_entries)
        self.listing_fails = False
        self.fetches: List[str] = []
        self.closed = False

    def list_modules(self) -> List[str]:
        if self.listing_fails:
            return []
        return list(self.files)

    def fetch_module_content(self, name: str) -> bytes:
        validate_module_name(name)
        self.fetches.append(name)
        if name in self.failing:
            raise NetworkFailure(f"Failed to fetch {name}: connection reset")
        if name not in self.files:
            raise NetworkFailure(f"Failed to fetch {name}: HTTP 404", status_code=404)
        return self.files[name]

    def close(self) -> None:
        self.closed = True


# ── Directory fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def modules_root(tmp_path):
    """Module root that does not exist yet (a fresh install)."""
    return tmp_path / "modules"


@pytest.fixture
def local_catalog(modules_root):
    return LocalCatalog(modules_root)


@pytest.fixture
def write_local(local_catalog):
    """Helper that drops a module onto disk."""
    def _write(name: str, content: bytes) -> None:
        local_catalog.write_module_content(name, content)
    return _write


# ── Reconciler fixtures ───────────────────────────────────────────────────────

@pytest.fixture
def fake_remote():
    return FakeRemote({
        "module_01": b"print('one')\n",
        "module_02": b"print('two')\n",
        "module_03": b"print('three')\n",
    })


@pytest.fixture
def reconciler(fake_remote, local_catalog):
    return ModuleReconciler(fake_remote, local_catalog, ModuleExecutor(local_catalog))
