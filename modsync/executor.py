"""
modsync - Module loader/executor.

A downloaded module's index.py must expose a class (default name
``Module``) that can be built with no arguments and has a zero-argument
``run()`` method:

    class Module:
        def run(self):
            print("hello from module_01")

Module code is trusted.  It runs in-process with no sandboxing, since it
only ever comes from the single repository/branch the operator pinned in
config.yaml.
"""

from __future__ import annotations

import logging
import runpy
from pathlib import Path
from typing import Any, Dict

from modsync.errors import ExecutionFailure, ModuleNotDownloaded
from modsync.local_catalog import LocalCatalog

logger = logging.getLogger("modsync.executor")


class ModuleExecutor:
    """Loads a local module's entry point and invokes it.

    Each call runs the file again through runpy and nothing is left in
    sys.modules, so an update on disk is picked up by the next execution.
    """

    def __init__(
        self,
        local: LocalCatalog,
        export_name: str = "Module",
        entry_method: str = "run",
    ):
        self.local = local
        self.export_name = export_name
        self.entry_method = entry_method

    def execute(self, name: str) -> Any:
        """Load, construct and run module ``name``.

        Returns:
            Whatever the module's entry method returned.

        Raises:
            InvalidModuleName: If ``name`` is not a module name.
            ModuleNotDownloaded: If the entry point is not on disk.
            ExecutionFailure: If loading, construction or the run fails.
        """
        path = self.local.entry_path(name)
        if not self.local.has_module(name):
            raise ModuleNotDownloaded(
                f"Module {name} is not downloaded (missing {path})"
            )

        namespace = self._load(f"modsync_loaded.{name}", path)
        return self._run(name, namespace)

    def _load(self, run_name: str, path: Path) -> Dict[str, Any]:
        # run_path compiles from source and registers run_name in
        # sys.modules only while the file body executes.
        try:
            return runpy.run_path(str(path), run_name=run_name)
        except (Exception, SystemExit) as e:
            raise ExecutionFailure(f"Failed to load {path}: {e}") from e

    def _run(self, name: str, namespace: Dict[str, Any]) -> Any:
        factory = namespace.get(self.export_name)
        if not callable(factory):
            raise ExecutionFailure(
                f"Module {name} does not export a callable {self.export_name!r}"
            )

        try:
            instance = factory()
            entry = getattr(instance, self.entry_method, None)
        except (Exception, SystemExit) as e:
            raise ExecutionFailure(f"Failed to construct {name}.{self.export_name}: {e}") from e

        if not callable(entry):
            raise ExecutionFailure(
                f"Module {name} has no callable {self.entry_method}() entry point"
            )

        logger.info("Running %s", name)
        try:
            return entry()
        except (Exception, SystemExit) as e:
            raise ExecutionFailure(f"Module {name} raised during {self.entry_method}(): {e}") from e
