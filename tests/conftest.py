"""Shared fixtures: synthetic tag-list export records."""

from collections.abc import Callable, Sequence

import pytest

HEADER = '"TagId";"TagName";"Description";"ServerName";"TopicName";"Address";"Coef";"Offset";"LogEnabled"'

# Real export records carry 61 fields
RECORD_FIELDS = 61


def build_record(
    tag_id: int | str,
    name: str = "Tag",
    logging: str = "0",
    groups: Sequence[str] = ("0", "0", "0", "0"),
    type_code: int | str = 1,
    quote_name: bool = True,
) -> str:
    fields = ["0"] * RECORD_FIELDS
    fields[0] = str(tag_id)
    fields[1] = f'"{name}"' if quote_name else name
    fields[2] = '"description; with semicolon"'
    fields[8] = logging
    fields[25:29] = list(groups)
    fields[55] = str(type_code)
    fields[56] = '"trailing"'
    return ";".join(fields)


def build_export(records: Sequence[str], newline: str = "\r\n") -> bytes:
    return newline.join([HEADER, *records, ""]).encode("utf-8")


@pytest.fixture
def make_record() -> Callable[..., str]:
    return build_record


@pytest.fixture
def make_export() -> Callable[..., bytes]:
    return build_export
