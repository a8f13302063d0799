"""Per-file capability handles passed to processors."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from .errors import FileAccessError

if TYPE_CHECKING:
    from .fileio import FileIO
    from .walker import Walk


@dataclass(frozen=True)
class FileContext:
    """Handle to one resolved file, valid for a single processor call."""

    filepath: Path
    walker: Walk | None = None
    io: FileIO | None = field(default=None, repr=False, compare=False)

    async def read(self) -> str:
        """Read the file content. Every call goes back to disk.

        Raises:
            FileAccessError: If the file is gone, unreadable or not valid text.

        """
        try:
            return await self._require_io().read_file(self.filepath)
        except (OSError, UnicodeDecodeError) as e:
            raise FileAccessError(self.filepath, f"read failed: {e}") from e

    async def write(self, content: str, savepath: Path | str | None = None) -> None:
        """Write content back to the file, or to ``savepath`` when given.

        Raises:
            FileAccessError: If the target cannot be written.

        """
        target = Path(savepath) if savepath else self.filepath
        try:
            await self._require_io().write_file(target, content)
        except (OSError, UnicodeEncodeError) as e:
            raise FileAccessError(target, f"write failed: {e}") from e

    def _require_io(self) -> FileIO:
        if self.io is None:
            raise FileAccessError(self.filepath, "context has no I/O backend")
        return self.io


class FileContextFactory:
    """Builds a fresh FileContext for each task."""

    def __init__(self, io: FileIO, walker: Walk | None = None) -> None:
        """Initialize the factory.

        Args:
            io: Read/write primitives shared by all contexts.
            walker: Walk handle exposed to processors as ``ctx.walker``.

        """
        self.io = io
        self.walker = walker

    def create(self, filepath: Path) -> FileContext:
        return FileContext(filepath=filepath, walker=self.walker, io=self.io)
