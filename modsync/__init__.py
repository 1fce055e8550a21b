"""
modsync - Local mirror of a remote module catalog

Keeps a local directory of "modules" in step with the module directories
published in a single GitHub repository/branch:
  - Check which remote modules are downloaded (`modsync check`)
  - Download selected modules (`modsync download module_01 module_02`)
  - Detect and apply upstream changes (`modsync update --all`)
  - Run a downloaded module's entry point (`modsync execute module_01`)

A module is a directory whose name starts with ``module_`` and which
holds exactly one entry-point file (``index.py``).  Nothing about module
state is persisted besides the files themselves: every operation lists
both sides again and compares contents byte for byte.

# ---- Changelog ----
# [2026-10-19] Initial creation.
#   What: Package with RemoteCatalog, LocalCatalog, ModuleReconciler and
#         ModuleExecutor.
#   How:  The reconciler is the only component the CLI and the REST API
#         talk to.  It never raises for per-module failures; results come
#         back as OperationResult / UpdateCheck / ExecutionResult values.
# -------------------
"""

__version__ = "0.1.0"
