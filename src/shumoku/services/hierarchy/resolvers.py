"""
File resolvers for hierarchical topology documents.

A resolver maps ``file:`` references found in subgraphs onto an address
space and reads document text from it. Relative references (``./x`` or a
bare ``x``) resolve against the directory of the referring document; a
leading ``/`` is absolute within the resolver's address space.
"""

import asyncio
import os
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from ...shared.exceptions import FileResolutionError
from ...shared.infrastructure.monitoring import get_logger


class FileResolver(ABC):
    """
    Abstract base class for document sources.

    Implementations must make ``resolve`` and ``normalize`` agree, so that
    the same document reached through different relative spellings maps
    to one path.
    """

    @abstractmethod
    async def read(self, path: str) -> str:
        """
        Read the document stored at ``path``.

        Args:
            path: Path previously returned by ``resolve``

        Returns:
            Document text

        Raises:
            FileResolutionError: If the document cannot be read
        """
        pass

    @abstractmethod
    def resolve(self, base_path: str, relative_path: str) -> str:
        """
        Resolve a reference found in the document at ``base_path``.

        Args:
            base_path: Path of the referring document
            relative_path: Reference as written in the document

        Returns:
            Normalized path of the referenced document
        """
        pass

    def normalize(self, path: str) -> str:
        """Canonical spelling of ``path`` for identity comparisons."""
        return path


class FileSystemResolver(FileResolver):
    """Resolves and reads documents on the local filesystem."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding
        self.logger = get_logger(__name__)

    async def read(self, path: str) -> str:
        self.logger.debug(f"Reading {path}")
        try:
            return await asyncio.to_thread(Path(path).read_text, encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise FileResolutionError(f"Cannot read {path}: {e}") from e

    def resolve(self, base_path: str, relative_path: str) -> str:
        if os.path.isabs(relative_path):
            return self.normalize(relative_path)
        base_dir = os.path.dirname(self.normalize(base_path))
        return self.normalize(os.path.join(base_dir, relative_path))

    def normalize(self, path: str) -> str:
        return os.path.normpath(os.path.abspath(path))


class MemoryFileResolver(FileResolver):
    """
    Serves documents from an in-memory mapping.

    Keys are POSIX-style paths; keys without a leading ``/`` are placed
    under the root of the address space. Useful for tests and for
    callers that already hold every document in memory.
    """

    def __init__(self, files: Optional[Dict[str, str]] = None):
        self._files: Dict[str, str] = {}
        for path, content in (files or {}).items():
            self.add_file(path, content)

    def add_file(self, path: str, content: str) -> None:
        """Register (or replace) a document."""
        self._files[self.normalize(path)] = content

    def has_file(self, path: str) -> bool:
        return self.normalize(path) in self._files

    async def read(self, path: str) -> str:
        key = self.normalize(path)
        if key not in self._files:
            raise FileResolutionError(f"File not found: {key}")
        return self._files[key]

    def resolve(self, base_path: str, relative_path: str) -> str:
        if relative_path.startswith("/"):
            return self.normalize(relative_path)
        base_dir = posixpath.dirname(self.normalize(base_path))
        return self.normalize(posixpath.join(base_dir, relative_path))

    def normalize(self, path: str) -> str:
        if not path.startswith("/"):
            path = "/" + path
        return posixpath.normpath(path)
