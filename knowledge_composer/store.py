"""
Module store implementations for Knowledge Composer.

The composer only reads from a store through ``exists`` and ``read``; any
object providing those two coroutines can back it. Two stores ship here: a
directory of Markdown files and an in-memory mapping.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

import aiofiles

from .config import settings
from .logging import get_logger
from .utils import (
    ContentValidationError,
    IdentifierValidationError,
    validate_identifier,
)

logger = get_logger(__name__)


@runtime_checkable
class ModuleStore(Protocol):
    """Read-only source of knowledge module text."""

    async def exists(self, identifier: str) -> bool: ...

    async def read(self, identifier: str) -> str: ...


class FileSystemModuleStore:
    """Serves modules stored as ``<root>/<identifier><extension>`` files.

    Identifiers may contain "/" to reach modules in sub-folders. Hidden
    folders and identifiers escaping the root are never served.
    """

    def __init__(self, root: Path, extension: str = ".md", max_size: int = 1 * 1024 * 1024):
        self.root = root
        self.extension = extension
        self.max_size = max_size

    def _path_for(self, identifier: str) -> Path | None:
        """Map an identifier to its file path, or None if it is unsafe."""
        try:
            validate_identifier(identifier)
        except IdentifierValidationError as e:
            logger.debug("identifier_rejected", identifier=identifier, error=str(e))
            return None

        try:
            full_path = (self.root / f"{identifier}{self.extension}").resolve()
            full_path.relative_to(self.root.resolve())
        except (OSError, ValueError):
            logger.debug("identifier_escapes_root", identifier=identifier)
            return None
        return full_path

    async def exists(self, identifier: str) -> bool:
        path = self._path_for(identifier)
        return path is not None and path.is_file()

    async def read(self, identifier: str) -> str:
        """Read a module's text.

        Raises:
            FileNotFoundError: If no module file exists for the identifier
            ContentValidationError: If the file exceeds the size limit
        """
        path = self._path_for(identifier)
        if path is None or not path.is_file():
            raise FileNotFoundError(f"No module file for '{identifier}'")

        size = path.stat().st_size
        if size > self.max_size:
            raise ContentValidationError(
                f"Module '{identifier}' is {size} bytes, limit is {self.max_size} bytes"
            )

        async with aiofiles.open(path, encoding="utf-8") as f:
            return await f.read()

    def list_identifiers(self) -> list[str]:
        """Return the sorted identifiers of every module under the root."""
        if not self.root.is_dir():
            return []

        identifiers: list[str] = []
        for module_file in self.root.rglob(f"*{self.extension}"):
            rel_path = module_file.relative_to(self.root)
            # Skip hidden folders
            if any(part.startswith(".") for part in rel_path.parts):
                continue
            if not module_file.is_file():
                continue
            rel_str = rel_path.as_posix()
            identifiers.append(rel_str[: -len(self.extension)] if self.extension else rel_str)
        return sorted(identifiers)


class InMemoryModuleStore:
    """Serves modules from a mapping of identifier to text."""

    def __init__(self, modules: dict[str, str] | None = None):
        self._modules: dict[str, str] = dict(modules or {})

    async def exists(self, identifier: str) -> bool:
        return identifier in self._modules

    async def read(self, identifier: str) -> str:
        try:
            return self._modules[identifier]
        except KeyError:
            raise FileNotFoundError(f"No module named '{identifier}'") from None

    def list_identifiers(self) -> list[str]:
        return sorted(self._modules)


# Global store instance
module_store = FileSystemModuleStore(
    settings.modules_path,
    settings.module_extension,
    settings.max_module_size,
)
