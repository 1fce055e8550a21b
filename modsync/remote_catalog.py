"""
modsync - Remote catalog access over HTTP.

Two endpoints are used, both pinned to one (owner, repo, branch):
  - the GitHub contents API, to list the repository root;
  - raw.githubusercontent.com, to fetch a module's entry-point bytes.

Listing is best-effort and never raises.  Fetching raises NetworkFailure
so callers can tell "fetch failed" apart from "content identical".
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import requests

from modsync.errors import NetworkFailure
from modsync.models import MODULE_PREFIX, is_module_name, validate_module_name

logger = logging.getLogger("modsync.remote")

GITHUB_API = "https://api.github.com"
GITHUB_RAW = "https://raw.githubusercontent.com"


class RemoteCatalog:
    """Read-only view of the module directories in a remote repository.

    Usage:
        remote = RemoteCatalog("vcgtz", "puppeteer-modules", branch="main")
        names = remote.list_modules()
        data = remote.fetch_module_content(names[0])
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        branch: str = "main",
        entry_file: str = "index.py",
        api_base_url: str = GITHUB_API,
        raw_base_url: str = GITHUB_RAW,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        prefix: str = MODULE_PREFIX,
        session: Optional[requests.Session] = None,
    ):
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.entry_file = entry_file
        self.api_base_url = api_base_url.rstrip("/")
        self.raw_base_url = raw_base_url.rstrip("/")
        self.timeout = timeout
        self.prefix = prefix
        self._token = token
        self._session = session or requests.Session()

    # -------------------------------------------------------------------
    # URLs
    # -------------------------------------------------------------------

    @property
    def listing_url(self) -> str:
        return f"{self.api_base_url}/repos/{self.owner}/{self.repo}/contents"

    def content_url(self, name: str) -> str:
        return (
            f"{self.raw_base_url}/{self.owner}/{self.repo}/"
            f"{self.branch}/{name}/{self.entry_file}"
        )

    # -------------------------------------------------------------------
    # Core API
    # -------------------------------------------------------------------

    def list_modules(self) -> List[str]:
        """List module directories at the repository root.

        Returns:
            Module names in the order the API returned them.  Empty on
            any transport, status, or parsing failure.
        """
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        try:
            response = self._session.get(
                self.listing_url,
                params={"ref": self.branch},
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            entries = response.json()
        except (requests.RequestException, ValueError) as e:
            logger.warning("Failed to list remote modules for %s/%s@%s: %s",
                           self.owner, self.repo, self.branch, e)
            return []

        if not isinstance(entries, list):
            logger.warning("Unexpected listing payload from %s: %s",
                           self.listing_url, type(entries).__name__)
            return []

        return [
            entry["name"]
            for entry in entries
            if self._is_module_entry(entry)
        ]

    def fetch_module_content(self, name: str) -> bytes:
        """Fetch the raw entry-point bytes of a remote module.

        Raises:
            InvalidModuleName: If ``name`` is not a module name.
            NetworkFailure: On transport errors or a non-2xx response.
        """
        validate_module_name(name, self.prefix)
        url = self.content_url(name)

        try:
            response = self._session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise NetworkFailure(f"Failed to fetch {url}: {e}") from e

        if not 200 <= response.status_code < 300:
            raise NetworkFailure(
                f"Failed to fetch {url}: HTTP {response.status_code}",
                status_code=response.status_code,
            )

        logger.debug("Fetched %d bytes for %s", len(response.content), name)
        return response.content

    def close(self) -> None:
        self._session.close()

    # -------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------

    def _is_module_entry(self, entry: Any) -> bool:
        if not isinstance(entry, dict):
            return False
        return entry.get("type") == "dir" and is_module_name(
            entry.get("name", ""), self.prefix
        )
