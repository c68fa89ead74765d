"""Tag-count and export-stream sources: protocols plus file and in-memory implementations."""

import io
from pathlib import Path
from typing import BinaryIO, Protocol, runtime_checkable


@runtime_checkable
class TagCountSource(Protocol):
    """Reports how many tags are configured on the device (a capacity hint)."""

    def tag_count(self) -> int: ...


@runtime_checkable
class ExportSource(Protocol):
    """Opens the tag-list export as a binary stream; the stream is closed by the caller."""

    def open(self) -> BinaryIO: ...


def _count_records(stream: BinaryIO) -> int:
    """Count non-blank lines after the header line."""
    count = 0
    header = True
    for raw in stream:
        if header:
            header = False
            continue
        if raw.strip(b"\r\n"):
            count += 1
    return count


class ExportFile:
    """A tag-list export saved to disk. Serves as both export source and tag-count source."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def open(self) -> BinaryIO:
        return open(self._path, "rb")

    def tag_count(self) -> int:
        with self.open() as f:
            return _count_records(f)


class ExportBytes:
    """A tag-list export held in memory."""

    def __init__(self, data: bytes | str, encoding: str = "utf-8") -> None:
        self._data = data.encode(encoding) if isinstance(data, str) else bytes(data)

    def open(self) -> BinaryIO:
        return io.BytesIO(self._data)

    def tag_count(self) -> int:
        return _count_records(self.open())
