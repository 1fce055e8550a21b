"""
modsync - FastAPI REST API

HTTP interface over the same ModuleReconciler the CLI uses, so other
tools can list, download, update and run modules without importing
modsync.

Endpoints:
    GET  /health                   - Health check
    GET  /modules                  - Downloaded / not downloaded partition
    GET  /modules/status           - Per-module state (current, stale, ...)
    GET  /modules/updates          - Local modules with upstream changes
    POST /modules/download         - Download modules, in request order
    POST /modules/update           - Overwrite modules with remote content
    POST /modules/{name}/execute   - Run a downloaded module

Run with:  uvicorn api:app --host 127.0.0.1 --port 7440

# ---- Changelog ----
# [2026-10-19] Initial creation.
#   What: FastAPI application with module check/status/update/download
#         and execute endpoints backed by a singleton reconciler.
#   Settings: Config from config.yaml (or MODSYNC_CONFIG).  Bound to
#         localhost by default: /execute runs module code in-process.
#   How:  Handlers are plain ``def`` so FastAPI runs the blocking HTTP
#         and filesystem calls in its threadpool.
# -------------------
"""

from __future__ import annotations

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from modsync import __version__
from modsync.models import ExecutionOutcome, is_module_name

logger = logging.getLogger("modsync.api")

# ---------------------------------------------------------------------------
# Singleton reconciler (created at startup, shared across requests)
# ---------------------------------------------------------------------------

_reconciler = None
_config = None
_startup_time = 0.0


def _get_reconciler():
    """Lazy construction so importing api.py has no side effects."""
    global _reconciler, _config, _startup_time
    if _reconciler is None:
        from config_schema import load_and_validate
        from modsync.reconciler import ModuleReconciler

        _config = load_and_validate(os.environ.get("MODSYNC_CONFIG", "config.yaml"))
        _reconciler = ModuleReconciler.from_config(_config)
        _startup_time = time.time()

    return _reconciler


def _check_names(names: List[str]) -> None:
    prefix = _config.module_prefix if _config is not None else "module_"
    bad = [n for n in names if not is_module_name(n, prefix)]
    if bad:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid module names (must start with '{prefix}'): {', '.join(bad)}",
        )


# ---------------------------------------------------------------------------
# Lifespan: startup/shutdown
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("modsync API starting up...")
    reconciler = _get_reconciler()
    logger.info("Reconciler ready for %s/%s@%s",
                reconciler.remote.owner, reconciler.remote.repo, reconciler.remote.branch)
    yield
    logger.info("modsync API shutting down")
    if _reconciler is not None:
        _reconciler.remote.close()


# ---------------------------------------------------------------------------
# FastAPI App
# ---------------------------------------------------------------------------

app = FastAPI(
    title="modsync",
    description="Local mirror of a remote module catalog",
    version=__version__,
    lifespan=lifespan,
)


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class ModulesRequest(BaseModel):
    """Request body for POST /modules/download and /modules/update."""
    modules: List[str] = Field(..., description="Module names, processed in this order")


class OperationResponse(BaseModel):
    module: str
    action: str
    success: bool
    error: Optional[str] = None


class BatchResponse(BaseModel):
    """Response from POST /modules/download and /modules/update."""
    results: List[OperationResponse]
    succeeded: int
    failed: int


class CheckResponse(BaseModel):
    """Response from GET /modules."""
    downloaded: List[str]
    not_downloaded: List[str]


class HealthResponse(BaseModel):
    """Response from GET /health."""
    status: str
    version: str
    uptime_seconds: float
    remote: str
    modules_dir: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

def _batch_response(results) -> BatchResponse:
    succeeded = sum(1 for r in results if r.success)
    return BatchResponse(
        results=[OperationResponse(**r.to_dict()) for r in results],
        succeeded=succeeded,
        failed=len(results) - succeeded,
    )


@app.get("/health", response_model=HealthResponse)
def health():
    """Health check.  Does not contact the remote repository."""
    reconciler = _get_reconciler()
    remote = reconciler.remote

    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - _startup_time, 1),
        remote=f"{remote.owner}/{remote.repo}@{remote.branch}",
        modules_dir=str(reconciler.local.root),
    )


@app.get("/modules", response_model=CheckResponse)
def check_modules():
    """Partition remote modules into downloaded and not downloaded."""
    return CheckResponse(**_get_reconciler().check_modules().to_dict())


@app.get("/modules/status")
def modules_status() -> Dict[str, Any]:
    """Per-module state across the remote and local catalogs."""
    statuses = _get_reconciler().status()
    return {"modules": [s.to_dict() for s in statuses]}


@app.get("/modules/updates")
def modules_updates() -> Dict[str, Any]:
    """Local modules whose content differs from the remote copy."""
    return {"modules": _get_reconciler().check_all_modules_for_updates()}


@app.post("/modules/download", response_model=BatchResponse)
def download_modules(request: ModulesRequest):
    """Download modules sequentially.  One failure does not stop the rest."""
    reconciler = _get_reconciler()
    _check_names(request.modules)
    return _batch_response(reconciler.download_modules(request.modules))


@app.post("/modules/update", response_model=BatchResponse)
def update_modules(request: ModulesRequest):
    """Overwrite local modules with the remote content."""
    reconciler = _get_reconciler()
    _check_names(request.modules)
    return _batch_response(reconciler.update_modules(request.modules))


@app.post("/modules/{name}/execute")
def execute_module(name: str) -> Dict[str, Any]:
    """Run a downloaded module's entry point.

    404 if the module is not downloaded, 500 if its code failed.
    """
    reconciler = _get_reconciler()
    _check_names([name])

    result = reconciler.execute_module(name)
    if result.outcome == ExecutionOutcome.NOT_DOWNLOADED:
        raise HTTPException(status_code=404, detail=result.error)
    if not result.ok:
        raise HTTPException(status_code=500, detail=result.error)

    return result.to_dict()
