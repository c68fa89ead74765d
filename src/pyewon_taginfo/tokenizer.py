"""Quote-safe field splitting and field decoding for tag-list export records."""

from collections.abc import Iterator

DELIMITER = ";"
QUOTE = '"'


def iter_fields(line: str, delimiter: str = DELIMITER, quote: str = QUOTE) -> Iterator[str]:
    """
    Yield the fields of one export record, left to right.

    A delimiter inside a quoted section does not split the field. Quote
    characters toggle the quoted state and are kept in the field text.
    Fields are produced lazily, so a caller may stop as soon as it has
    what it needs without scanning the rest of the line.
    """
    in_quotes = False
    start = 0
    for i, ch in enumerate(line):
        if ch == quote:
            in_quotes = not in_quotes
        elif ch == delimiter and not in_quotes:
            yield line[start:i]
            start = i + 1
    yield line[start:]


def strip_quotes(value: str, quote: str = QUOTE) -> str:
    """Remove one pair of surrounding quotes, if present."""
    if len(value) >= 2 and value[0] == quote and value[-1] == quote:
        return value[1:-1]
    return value


def str_to_bool(value: str) -> bool:
    """Decode an export flag: exactly "1" is True, anything else is False."""
    return value == "1"
