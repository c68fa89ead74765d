"""Line parser: one semicolon-delimited export record -> TagInfo, with id bound tracking."""

import re
from dataclasses import dataclass

from .errors import MalformedRecordError
from .tokenizer import iter_fields, str_to_bool, strip_quotes
from .types import UNINIT_ID, TagInfo, TagType

# Field positions in a tag-list export record
FIELD_ID = 0
FIELD_NAME = 1
FIELD_HISTORICAL_LOGGING = 8
FIELD_GROUP_A = 25
FIELD_GROUP_B = 26
FIELD_GROUP_C = 27
FIELD_GROUP_D = 28
FIELD_TYPE = 55

# Optional sign and ASCII digits only; no whitespace, "_" separators or non-ASCII digits
_INT_PATTERN = re.compile(r"-?[0-9]+")


@dataclass
class IdBounds:
    """Lowest and highest tag id seen so far; UNINIT_ID until the first id is observed."""

    lowest: int = UNINIT_ID
    highest: int = UNINIT_ID

    def observe(self, tag_id: int) -> None:
        if self.lowest == UNINIT_ID or tag_id < self.lowest:
            self.lowest = tag_id
        if self.highest == UNINIT_ID or tag_id > self.highest:
            self.highest = tag_id

    @property
    def is_set(self) -> bool:
        return self.lowest != UNINIT_ID

    @property
    def span(self) -> int:
        """highest - lowest; 0 when nothing has been observed."""
        if not self.is_set:
            return 0
        return self.highest - self.lowest


def _parse_int(value: str, what: str, line: str) -> int:
    if not _INT_PATTERN.fullmatch(value):
        raise MalformedRecordError(f"Non-numeric {what}: {value!r}", line=line)
    return int(value)


def parse_line(line: str, bounds: IdBounds) -> TagInfo:
    """
    Parse one export record into a TagInfo.

    The id bound is updated as soon as field 0 is read. Tokenizing stops
    after the type field; anything after it is never scanned.

    Raises MalformedRecordError for a non-numeric or negative id, a
    non-numeric type, an empty name, or a record that ends before the
    type field.
    """
    tag_id = UNINIT_ID
    name = ""
    logging_enabled = False
    group_flags = [False, False, False, False]

    for index, field in enumerate(iter_fields(line)):
        if index == FIELD_ID:
            tag_id = _parse_int(field, "tag id", line)
            if tag_id < 0:
                raise MalformedRecordError(f"Reserved or negative tag id: {tag_id}", line=line)
            bounds.observe(tag_id)
        elif index == FIELD_NAME:
            name = strip_quotes(field)
            if not name:
                raise MalformedRecordError("Empty tag name", line=line)
        elif index == FIELD_HISTORICAL_LOGGING:
            logging_enabled = str_to_bool(field)
        elif FIELD_GROUP_A <= index <= FIELD_GROUP_D:
            group_flags[index - FIELD_GROUP_A] = str_to_bool(field)
        elif index == FIELD_TYPE:
            tag_type = TagType.from_code(_parse_int(field, "tag type", line))
            return TagInfo.from_flags(tag_id, name, logging_enabled, *group_flags, tag_type)

    raise MalformedRecordError(
        f"Record has fewer than {FIELD_TYPE + 1} fields",
        line=line,
    )
