"""
modsync - Pydantic Configuration Schema

Validates config.yaml against a typed schema at load time.  The result
is a ModSyncConfig value that is passed into ModuleReconciler.from_config()
and the API singleton.  Nothing reads configuration from globals.

config.yaml layout:

    modsync:
      module_prefix: module_
      remote:
        owner: vcgtz
        repo: puppeteer-modules
        branch: main
      local:
        modules_dir: modules

# ---- Changelog ----
# [2026-10-19] Initial creation.
#   What: Pydantic v2 models for the remote target, local layout, and API
#         binding, plus load_and_validate().
#   How:  Unknown keys are ignored so newer config files still load.
#         Invalid values are logged and defaults are used instead.
#         MODSYNC_MODULES_DIR / MODSYNC_BRANCH / MODSYNC_GITHUB_TOKEN
#         override the file.
# -------------------
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger("modsync.config")

ENV_MODULES_DIR = "MODSYNC_MODULES_DIR"
ENV_BRANCH = "MODSYNC_BRANCH"
ENV_TOKEN = "MODSYNC_GITHUB_TOKEN"


class RemoteConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    owner: str = Field("vcgtz", min_length=1)
    repo: str = Field("puppeteer-modules", min_length=1)
    branch: str = Field("main", min_length=1)
    api_base_url: str = "https://api.github.com"
    raw_base_url: str = "https://raw.githubusercontent.com"
    token: Optional[str] = None
    # None leaves timeouts to the HTTP transport.
    timeout: Optional[float] = Field(None, gt=0)


class LocalConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    modules_dir: str = "modules"
    entry_file: str = Field("index.py", min_length=1)
    export_name: str = Field("Module", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    entry_method: str = Field("run", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")

    @field_validator("entry_file")
    @classmethod
    def entry_file_is_plain_name(cls, v: str) -> str:
        if "/" in v or "\\" in v or v in (".", ".."):
            raise ValueError(f"entry_file ({v}) must be a plain file name")
        return v


class APIConfig(BaseModel):
    model_config = ConfigDict(extra="ignore")

    host: str = "127.0.0.1"
    port: int = Field(7440, gt=0, lt=65536)


class ModSyncConfig(BaseModel):
    """Top-level validated config schema for config.yaml -> modsync: key."""
    model_config = ConfigDict(extra="ignore")

    module_prefix: str = Field("module_", min_length=1)

    remote: RemoteConfig = RemoteConfig()
    local: LocalConfig = LocalConfig()
    api: APIConfig = APIConfig()


def validate_config(raw: Dict[str, Any]) -> ModSyncConfig:
    """Validate a raw config dict against the schema.

    Args:
        raw: The dict from yaml.safe_load(f).get("modsync", {}).

    Returns:
        Validated ModSyncConfig with defaults filled in.

    Raises:
        pydantic.ValidationError: If config values are invalid.
    """
    return ModSyncConfig(**raw)


def apply_env_overrides(config: ModSyncConfig) -> ModSyncConfig:
    """Return a copy of ``config`` with environment overrides applied."""
    remote_updates: Dict[str, Any] = {}
    local_updates: Dict[str, Any] = {}

    if os.environ.get(ENV_BRANCH):
        remote_updates["branch"] = os.environ[ENV_BRANCH]
    if os.environ.get(ENV_TOKEN):
        remote_updates["token"] = os.environ[ENV_TOKEN]
    if os.environ.get(ENV_MODULES_DIR):
        local_updates["modules_dir"] = os.environ[ENV_MODULES_DIR]

    if not remote_updates and not local_updates:
        return config

    return config.model_copy(update={
        "remote": config.remote.model_copy(update=remote_updates),
        "local": config.local.model_copy(update=local_updates),
    })


def load_and_validate(config_path: str = "config.yaml") -> ModSyncConfig:
    """Load config.yaml, validate it, and apply environment overrides.

    Args:
        config_path: Path to config.yaml.

    Returns:
        Validated config.  Defaults if the file is missing or invalid.
    """
    p = Path(config_path)
    if not p.exists():
        logger.warning("Config not found at %s, using defaults", config_path)
        return apply_env_overrides(ModSyncConfig())

    with open(p, "r") as f:
        raw = yaml.safe_load(f)

    modsync_raw = raw.get("modsync", {}) if isinstance(raw, dict) else {}

    try:
        validated = validate_config(modsync_raw or {})
        logger.info("Config validated successfully from %s", config_path)
    except ValidationError as e:
        logger.error("Config validation failed: %s - using defaults", e)
        validated = ModSyncConfig()

    return apply_env_overrides(validated)
