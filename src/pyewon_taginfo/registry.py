"""TagRegistry: lock-guarded, atomically replaced snapshot of the device tag list."""

import logging
import threading
from collections.abc import Iterable

from .builder import RegistryBuilder, RegistrySnapshot
from .errors import ExportStreamError, RegistryNotBuiltError
from .sources import ExportSource, TagCountSource
from .types import TagGroup, TagInfo

logger = logging.getLogger(__name__)

# Bytes requested from the export stream per read() call
READ_CHUNK_SIZE = 4096


class TagRegistry:
    """
    Queryable registry of device tags built from a tag-list export.

    One lock serializes every refresh and every query, so a reader never
    observes a registry mid-rebuild. A failed refresh leaves the previous
    snapshot (if any) in place.
    """

    def __init__(
        self,
        gap_warning_threshold: int | None = None,
        encoding: str = "utf-8",
    ) -> None:
        """
        gap_warning_threshold: log a warning when a refresh finds at least this
        many id gaps; None disables the warning. Gap correction always runs.
        encoding: text encoding of export records.
        """
        self._gap_warning_threshold = gap_warning_threshold
        self._encoding = encoding
        self._lock = threading.Lock()
        self._snapshot: RegistrySnapshot | None = None

    def refresh(self, source: ExportSource, counter: TagCountSource | None = None) -> RegistrySnapshot:
        """
        Rebuild the registry from the export produced by source.

        counter supplies the device tag count; when omitted, source must
        provide tag_count() itself. Raises ExportStreamError on I/O failure
        and MalformedRecordError on a bad record.
        """
        if counter is None:
            if not isinstance(source, TagCountSource):
                raise TypeError("source does not provide tag_count(); pass counter explicitly")
            counter = source

        with self._lock:
            try:
                expected = counter.tag_count()
            except OSError as e:
                raise ExportStreamError(f"Failed to read device tag count: {e}", cause=e) from e

            builder = RegistryBuilder(
                expected,
                gap_warning_threshold=self._gap_warning_threshold,
                encoding=self._encoding,
            )
            try:
                with source.open() as stream:
                    while True:
                        chunk = stream.read(READ_CHUNK_SIZE)
                        if not chunk:
                            break
                        builder.feed(chunk)
            except OSError as e:
                raise ExportStreamError(f"Failed to read tag-list export: {e}", cause=e) from e

            snapshot = builder.finish()
            self._snapshot = snapshot
            logger.debug(
                "Tag registry refreshed: %d tags, ids %s..%s, %s layout",
                snapshot.count,
                snapshot.lowest_id,
                snapshot.highest_id,
                "offset" if snapshot.offset_indexed else "compact",
            )
            return snapshot

    def _require_snapshot(self) -> RegistrySnapshot:
        if self._snapshot is None:
            raise RegistryNotBuiltError()
        return self._snapshot

    def is_built(self) -> bool:
        with self._lock:
            return self._snapshot is not None

    def reset(self) -> None:
        """Drop the current snapshot; queries fail until the next refresh."""
        with self._lock:
            self._snapshot = None

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            return self._require_snapshot()

    def entries(self) -> list[TagInfo | None]:
        """Raw snapshot slots, with None for id gaps under the offset layout."""
        with self._lock:
            return list(self._require_snapshot().entries)

    def list_all(self) -> list[TagInfo]:
        """Every tag in snapshot order."""
        with self._lock:
            return self._require_snapshot().populated()

    def list_filtered(self, groups: TagGroup | Iterable[TagGroup]) -> list[TagInfo]:
        """Tags belonging to any of the given groups, in snapshot order."""
        wanted = [groups] if isinstance(groups, TagGroup) else list(groups)
        with self._lock:
            snapshot = self._require_snapshot()
            return [
                tag for tag in snapshot.entries if tag is not None and tag.in_any_group(wanted)
            ]

    def get_by_id(self, tag_id: int) -> TagInfo | None:
        """Return the tag with the given id, or None if it is not in the registry."""
        with self._lock:
            snapshot = self._require_snapshot()
            if snapshot.offset_indexed:
                offset = tag_id - snapshot.lowest_id
                if 0 <= offset < len(snapshot.entries):
                    return snapshot.entries[offset]
                return None
            for tag in snapshot.entries:
                if tag is not None and tag.id == tag_id:
                    return tag
            return None

    def lowest_id(self) -> int:
        """Lowest tag id seen by the last successful refresh."""
        with self._lock:
            snapshot = self._require_snapshot()
            if snapshot.lowest_id is None:
                raise RegistryNotBuiltError("No tag ids were observed in the last refresh")
            return snapshot.lowest_id

    def highest_id(self) -> int:
        """Highest tag id seen by the last successful refresh."""
        with self._lock:
            snapshot = self._require_snapshot()
            if snapshot.highest_id is None:
                raise RegistryNotBuiltError("No tag ids were observed in the last refresh")
            return snapshot.highest_id

    def __len__(self) -> int:
        with self._lock:
            return self._require_snapshot().count
