"""Text read/write primitives used by file contexts."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, runtime_checkable

import aiofiles


@runtime_checkable
class FileIO(Protocol):
    """Interface for the two I/O primitives a processor may use."""

    async def read_file(self, path: Path) -> str:
        """Return the full text content of a file."""
        ...

    async def write_file(self, path: Path, content: str) -> None:
        """Replace the content of a file, creating it if needed."""
        ...


class AsyncFileIO:
    """aiofiles-backed text I/O."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    async def read_file(self, path: Path) -> str:
        async with aiofiles.open(path, encoding=self.encoding) as f:
            return await f.read()

    async def write_file(self, path: Path, content: str) -> None:
        async with aiofiles.open(path, "w", encoding=self.encoding) as f:
            await f.write(content)
