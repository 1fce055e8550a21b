"""
modsync - Reconciliation between the remote catalog and local storage.

Lists both sides, classifies modules (downloaded / not downloaded,
current / stale), and performs downloads and updates one module at a
time.  A failure on one module is logged and reported in its result; it
never stops the rest of a batch.

# ---- Changelog ----
# [2026-10-19] Initial creation.
#   What: ModuleReconciler with check_modules(), download/update (single
#         and batch), update detection, status() and execute_module().
#   How:  No cache.  Every call re-lists remote and local state, so a
#         result is always current as of that call.  The only concurrency
#         is inside inspect_module_update(): the local read and the
#         remote fetch run on two worker threads and are joined before
#         the byte comparison.
# -------------------
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Iterable, List, Optional

from modsync.errors import ModSyncError, ModuleNotDownloaded
from modsync.executor import ModuleExecutor
from modsync.local_catalog import LocalCatalog
from modsync.models import (
    ExecutionOutcome,
    ExecutionResult,
    ModuleCheck,
    ModuleState,
    ModuleStatus,
    OperationResult,
    UpdateCheck,
)
from modsync.remote_catalog import RemoteCatalog

if TYPE_CHECKING:
    from config_schema import ModSyncConfig

logger = logging.getLogger("modsync.reconciler")


class ModuleReconciler:
    """Drives every module operation the CLI and API expose.

    Usage:
        reconciler = ModuleReconciler.from_config(load_and_validate())

        check = reconciler.check_modules()
        reconciler.download_modules(check.not_downloaded)

        stale = reconciler.check_all_modules_for_updates()
        reconciler.update_modules(stale)

        reconciler.execute_module("module_01")
    """

    def __init__(
        self,
        remote: RemoteCatalog,
        local: LocalCatalog,
        executor: Optional[ModuleExecutor] = None,
    ):
        self.remote = remote
        self.local = local
        self.executor = executor or ModuleExecutor(local)

    @classmethod
    def from_config(cls, config: "ModSyncConfig") -> "ModuleReconciler":
        """Build the remote/local/executor trio from a validated config."""
        remote = RemoteCatalog(
            owner=config.remote.owner,
            repo=config.remote.repo,
            branch=config.remote.branch,
            entry_file=config.local.entry_file,
            api_base_url=config.remote.api_base_url,
            raw_base_url=config.remote.raw_base_url,
            token=config.remote.token,
            timeout=config.remote.timeout,
            prefix=config.module_prefix,
        )
        local = LocalCatalog(
            config.local.modules_dir,
            entry_file=config.local.entry_file,
            prefix=config.module_prefix,
        )
        executor = ModuleExecutor(
            local,
            export_name=config.local.export_name,
            entry_method=config.local.entry_method,
        )
        return cls(remote, local, executor)

    # -------------------------------------------------------------------
    # Presence
    # -------------------------------------------------------------------

    def check_modules(self) -> ModuleCheck:
        """Partition the remote modules by whether they exist locally.

        Both listings swallow their own failures, so this never raises;
        an unreachable remote yields an empty partition.
        """
        remote_modules = self.remote.list_modules()
        local_modules = set(self.local.list_modules())

        check = ModuleCheck()
        for name in remote_modules:
            if name in local_modules:
                check.downloaded.append(name)
            else:
                check.not_downloaded.append(name)

        logger.info("Checked %d remote modules: %d downloaded, %d not downloaded",
                    len(remote_modules), len(check.downloaded), len(check.not_downloaded))
        return check

    # -------------------------------------------------------------------
    # Download / update
    # -------------------------------------------------------------------

    def download_module(self, name: str) -> bool:
        """Fetch ``name`` from the remote and write it locally."""
        return self._transfer(name, "download").success

    def download_modules(self, names: Iterable[str]) -> List[OperationResult]:
        """Download each module in order, continuing past failures."""
        return self._transfer_all(names, "download")

    def update_module(self, name: str) -> bool:
        """Overwrite the local copy of ``name`` with the remote content.

        There is no compare before the write: an update is always a fetch
        followed by an overwrite.
        """
        return self._transfer(name, "update").success

    def update_modules(self, names: Iterable[str]) -> List[OperationResult]:
        """Update each module in order, continuing past failures."""
        return self._transfer_all(names, "update")

    # -------------------------------------------------------------------
    # Update detection
    # -------------------------------------------------------------------

    def inspect_module_update(self, name: str) -> UpdateCheck:
        """Compare local and remote bytes for ``name``.

        The local read and remote fetch are issued together and joined.
        Any failure gives ``update_available=False`` with ``error`` set.
        """
        try:
            with ThreadPoolExecutor(max_workers=2, thread_name_prefix="modsync-cmp") as pool:
                local_future = pool.submit(self.local.read_module_content, name)
                remote_future = pool.submit(self.remote.fetch_module_content, name)
                local_content = local_future.result()
                remote_content = remote_future.result()
        except ModSyncError as e:
            logger.warning("Failed to check updates for %s: %s", name, e)
            return UpdateCheck(module=name, update_available=False, error=str(e))

        return UpdateCheck(module=name, update_available=local_content != remote_content)

    def check_module_update(self, name: str) -> bool:
        """True iff the local and remote entry points differ byte-wise.

        A failed comparison reads as False ("no update available").  Use
        inspect_module_update() to see why.
        """
        return self.inspect_module_update(name).update_available

    def check_all_modules_for_updates(self) -> List[str]:
        """Names of local modules whose content differs from the remote."""
        updatable = [
            name for name in self.local.list_modules()
            if self.check_module_update(name)
        ]
        logger.info("%d modules have updates available: %s", len(updatable), updatable)
        return updatable

    def status(self) -> List[ModuleStatus]:
        """Combined view of every module known remotely or locally."""
        remote_modules = self.remote.list_modules()
        remote_set = set(remote_modules)
        local_modules = self.local.list_modules()
        local_set = set(local_modules)

        statuses: List[ModuleStatus] = []
        for name in remote_modules:
            status = ModuleStatus(module=name, remote=True, local=name in local_set)
            if not status.local:
                status.state = ModuleState.NOT_DOWNLOADED
            else:
                check = self.inspect_module_update(name)
                if check.failed:
                    status.state = ModuleState.UNKNOWN
                    status.error = check.error
                elif check.update_available:
                    status.state = ModuleState.STALE
                else:
                    status.state = ModuleState.CURRENT
            statuses.append(status)

        for name in local_modules:
            if name not in remote_set:
                statuses.append(ModuleStatus(
                    module=name, remote=False, local=True,
                    state=ModuleState.LOCAL_ONLY,
                ))

        return statuses

    # -------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------

    def execute_module(self, name: str) -> ExecutionResult:
        """Run a downloaded module.  Never raises."""
        start = time.time()
        result = ExecutionResult(module=name)

        try:
            self.executor.execute(name)
        except ModuleNotDownloaded as e:
            logger.error("Module %s is not downloaded. Download it first.", name)
            result.outcome = ExecutionOutcome.NOT_DOWNLOADED
            result.error = str(e)
        except ModSyncError as e:
            logger.error("Error executing module %s: %s", name, e)
            result.outcome = ExecutionOutcome.FAILED
            result.error = str(e)

        result.elapsed_ms = (time.time() - start) * 1000
        return result

    # -------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------

    def _transfer(self, name: str, action: str) -> OperationResult:
        """Fetch remote content for ``name`` and overwrite the local copy."""
        try:
            content = self.remote.fetch_module_content(name)
            self.local.write_module_content(name, content)
        except ModSyncError as e:
            logger.error("Failed to %s module %s: %s", action, name, e)
            return OperationResult(module=name, action=action, success=False, error=str(e))

        logger.info("Module %s: %s complete", name, action)
        return OperationResult(module=name, action=action, success=True)

    def _transfer_all(self, names: Iterable[str], action: str) -> List[OperationResult]:
        results = [self._transfer(name, action) for name in names]
        failed = [r.module for r in results if not r.success]
        logger.info("%s complete: %d succeeded, %d failed%s",
                    action.capitalize(), len(results) - len(failed), len(failed),
                    f" ({', '.join(failed)})" if failed else "")
        return results
