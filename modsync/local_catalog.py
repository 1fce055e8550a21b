"""
modsync - Local module storage.

Layout on disk:

    <root>/
        module_01/index.py
        module_02/index.py

The root is allowed not to exist yet; that simply means nothing has been
downloaded.  write_module_content() is the only method that mutates it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from modsync.errors import FilesystemFailure, ModuleNotFound
from modsync.models import MODULE_PREFIX, is_module_name, validate_module_name

logger = logging.getLogger("modsync.local")


class LocalCatalog:
    """Module directories under a local root."""

    def __init__(
        self,
        root: Union[str, Path],
        entry_file: str = "index.py",
        prefix: str = MODULE_PREFIX,
    ):
        self.root = Path(root).expanduser()
        self.entry_file = entry_file
        self.prefix = prefix

    def entry_path(self, name: str) -> Path:
        """Path of the entry-point file for ``name`` (may not exist)."""
        validate_module_name(name, self.prefix)
        return self.root / name / self.entry_file

    def has_module(self, name: str) -> bool:
        return is_module_name(name, self.prefix) and self.entry_path(name).is_file()

    def list_modules(self) -> List[str]:
        """List module entries under the root, sorted by name.

        Returns an empty list when the root is absent or unreadable.
        """
        if not self.root.exists():
            logger.debug("Module root %s does not exist yet", self.root)
            return []

        try:
            names = [p.name for p in self.root.iterdir()]
        except OSError as e:
            logger.warning("Failed to read local modules from %s: %s", self.root, e)
            return []

        return sorted(n for n in names if is_module_name(n, self.prefix))

    def read_module_content(self, name: str) -> bytes:
        """Read the entry-point bytes of a local module.

        Raises:
            ModuleNotFound: If the module directory or file is absent.
            FilesystemFailure: On any other I/O error.
        """
        path = self.entry_path(name)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ModuleNotFound(f"Module {name} not found at {path}") from e
        except IsADirectoryError as e:
            raise ModuleNotFound(f"Module {name} entry point {path} is a directory") from e
        except (OSError, ValueError) as e:
            raise FilesystemFailure(f"Failed to read {path}: {e}") from e

    def write_module_content(self, name: str, content: bytes) -> Path:
        """Create the module directory if needed and overwrite its entry point.

        Returns:
            The path written.

        Raises:
            FilesystemFailure: If the directory or file cannot be written.
        """
        path = self.entry_path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except (OSError, ValueError) as e:
            raise FilesystemFailure(f"Failed to write {path}: {e}") from e

        logger.debug("Wrote %d bytes to %s", len(content), path)
        return path
