"""RegistryBuilder: assemble export lines, parse records, and lay out the snapshot with gap correction."""

import logging
from dataclasses import dataclass

from .errors import MalformedRecordError
from .parser import IdBounds, parse_line
from .types import TagInfo

logger = logging.getLogger(__name__)

NEW_LINE = 0x0A
CARRIAGE_RETURN = 0x0D


@dataclass(frozen=True)
class RegistrySnapshot:
    """
    Result of one complete build.

    With offset_indexed False, entries is the records in stream order.
    With offset_indexed True, entries[i] holds the tag with id lowest_id + i,
    or None where the device numbering has a gap.
    """

    entries: tuple[TagInfo | None, ...]
    count: int
    lowest_id: int | None
    highest_id: int | None
    offset_indexed: bool = False
    gap_count: int = 0

    def populated(self) -> list[TagInfo]:
        return [entry for entry in self.entries if entry is not None]


class RegistryBuilder:
    """
    Consume a tag-list export as raw bytes and produce a RegistrySnapshot.

    Feed bytes in any chunking with feed(), then call finish(). The first
    line is the export header and is discarded. Blank lines are skipped.
    """

    def __init__(
        self,
        expected_count: int,
        *,
        gap_warning_threshold: int | None = None,
        encoding: str = "utf-8",
    ) -> None:
        self._expected_count = expected_count
        self._gap_warning_threshold = gap_warning_threshold
        self._encoding = encoding
        self._bounds = IdBounds()
        self._tags: list[TagInfo] = []
        self._seen_ids: set[int] = set()
        self._line = bytearray()
        self._line_number = 0
        self._header_received = False
        logger.debug("RegistryBuilder started: expected tag count %d", expected_count)

    def feed(self, chunk: bytes) -> None:
        for byte in chunk:
            if byte == NEW_LINE:
                self._end_line()
            elif byte != CARRIAGE_RETURN:
                self._line.append(byte)

    def _end_line(self) -> None:
        raw = bytes(self._line)
        self._line.clear()
        self._line_number += 1
        if not self._header_received:
            self._header_received = True
            return
        if not raw:
            return
        self._process_line(raw.decode(self._encoding, errors="replace"))

    def _process_line(self, line: str) -> None:
        try:
            tag = parse_line(line, self._bounds)
        except MalformedRecordError as e:
            raise MalformedRecordError(
                str(e), line=line, line_number=self._line_number
            ) from None
        if tag.id in self._seen_ids:
            raise MalformedRecordError(
                f"Duplicate tag id {tag.id}", line=line, line_number=self._line_number
            )
        self._seen_ids.add(tag.id)
        self._tags.append(tag)

    def finish(self) -> RegistrySnapshot:
        """Flush any unterminated last record and lay out the snapshot."""
        if self._line:
            self._end_line()

        if not self._bounds.is_set:
            logger.debug("Export contained no tag records")
            return RegistrySnapshot(entries=(), count=0, lowest_id=None, highest_id=None)

        id_span = self._bounds.span
        gap_count = id_span - self._expected_count
        if gap_count <= 0:
            logger.debug("Tag ids are contiguous; keeping compact layout of %d tags", len(self._tags))
            return RegistrySnapshot(
                entries=tuple(self._tags),
                count=len(self._tags),
                lowest_id=self._bounds.lowest,
                highest_id=self._bounds.highest,
                gap_count=gap_count,
            )

        threshold = self._gap_warning_threshold
        if threshold is not None and gap_count >= threshold:
            logger.warning(
                "There are %d gaps in tag ID numbers. For optimal performance, it is recommended "
                "that there be no more than %d gaps. To resolve tag ID number gaps, a reset of "
                "the device must be performed.",
                gap_count,
                threshold,
            )
        logger.debug("Tag ID gaps have been detected. Rebuilding tag list with offset indexing...")
        entries = self._rebuild_with_gaps(id_span)
        logger.debug("Finished rebuilding tag list: %d slots for %d tags", len(entries), len(self._tags))
        return RegistrySnapshot(
            entries=entries,
            count=len(self._tags),
            lowest_id=self._bounds.lowest,
            highest_id=self._bounds.highest,
            offset_indexed=True,
            gap_count=gap_count,
        )

    def _rebuild_with_gaps(self, id_span: int) -> tuple[TagInfo | None, ...]:
        lowest = self._bounds.lowest
        slots: list[TagInfo | None] = [None] * (id_span + 1)
        for tag in self._tags:
            slots[tag.id - lowest] = tag
        return tuple(slots)
