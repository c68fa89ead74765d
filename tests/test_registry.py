"""Tests for TagRegistry refresh, queries, filtering and failure isolation."""

import io
import threading
from unittest.mock import MagicMock

import pytest

from pyewon_taginfo import ExportBytes, ExportFile, TagGroup, TagRegistry
from pyewon_taginfo.errors import ExportStreamError, MalformedRecordError, RegistryNotBuiltError


@pytest.fixture
def grouped_export(make_record, make_export) -> ExportBytes:
    records = [
        make_record(1, name="A only", groups=("1", "0", "0", "0")),
        make_record(2, name="B only", groups=("0", "1", "0", "0")),
        make_record(3, name="A and D", groups=("1", "0", "0", "1")),
        make_record(4, name="none", groups=("0", "0", "0", "0")),
        make_record(5, name="C only", groups=("0", "0", "1", "0")),
    ]
    return ExportBytes(make_export(records))


def _counter(n: int) -> MagicMock:
    counter = MagicMock()
    counter.tag_count.return_value = n
    return counter


def test_queries_before_build_raise() -> None:
    registry = TagRegistry()
    assert registry.is_built() is False
    for query in (
        registry.list_all,
        lambda: registry.list_filtered(TagGroup.A),
        registry.lowest_id,
        registry.highest_id,
        registry.entries,
        lambda: registry.get_by_id(1),
        lambda: len(registry),
    ):
        with pytest.raises(RegistryNotBuiltError):
            query()


def test_refresh_compact(grouped_export: ExportBytes) -> None:
    registry = TagRegistry()
    snapshot = registry.refresh(grouped_export)
    assert registry.is_built()
    assert not snapshot.offset_indexed
    assert len(registry) == 5
    assert [t.id for t in registry.list_all()] == [1, 2, 3, 4, 5]
    assert registry.lowest_id() == 1
    assert registry.highest_id() == 5


def test_list_filtered_single_group(grouped_export: ExportBytes) -> None:
    registry = TagRegistry()
    registry.refresh(grouped_export)
    all_tags = registry.list_all()
    for group in TagGroup:
        expected = [t for t in all_tags if group in t.groups]
        assert registry.list_filtered({group}) == expected
        assert registry.list_filtered(group) == expected
    assert [t.name for t in registry.list_filtered(TagGroup.A)] == ["A only", "A and D"]


def test_list_filtered_is_union(grouped_export: ExportBytes) -> None:
    registry = TagRegistry()
    registry.refresh(grouped_export)
    names = [t.name for t in registry.list_filtered({TagGroup.B, TagGroup.D})]
    assert names == ["B only", "A and D"]
    names = [t.name for t in registry.list_filtered([TagGroup.A, TagGroup.C])]
    assert names == ["A only", "A and D", "C only"]
    assert registry.list_filtered([]) == []


def test_offset_layout_queries(make_record, make_export) -> None:
    data = make_export([make_record(i, groups=("1", "0", "0", "0") if i != 7 else ("0", "0", "0", "0")) for i in (5, 7, 9)])
    registry = TagRegistry()
    registry.refresh(ExportBytes(data), _counter(2))
    entries = registry.entries()
    assert len(entries) == 5
    assert entries[1] is None and entries[3] is None
    for tag in registry.list_all():
        assert entries[tag.id - registry.lowest_id()] == tag
    assert [t.id for t in registry.list_all()] == [5, 7, 9]
    assert [t.id for t in registry.list_filtered(TagGroup.A)] == [5, 9]
    assert len(registry) == 3


@pytest.mark.parametrize("count", [2, 5])
def test_get_by_id_both_layouts(make_record, make_export, count: int) -> None:
    data = make_export([make_record(i, name=f"T{i}") for i in (5, 7, 9)])
    registry = TagRegistry()
    registry.refresh(ExportBytes(data), _counter(count))
    assert registry.get_by_id(7).name == "T7"
    assert registry.get_by_id(6) is None
    assert registry.get_by_id(4) is None
    assert registry.get_by_id(100) is None


def test_tag_count_comes_from_counter(grouped_export: ExportBytes) -> None:
    counter = _counter(1)
    registry = TagRegistry()
    snapshot = registry.refresh(grouped_export, counter)
    counter.tag_count.assert_called_once()
    assert snapshot.offset_indexed  # span 4 - count 1 = 3 gaps


def test_failed_build_keeps_previous_snapshot(grouped_export: ExportBytes, make_record, make_export) -> None:
    registry = TagRegistry()
    registry.refresh(grouped_export)
    before = registry.list_all()

    bad = ExportBytes(make_export([make_record(10), make_record("bad")]))
    with pytest.raises(MalformedRecordError):
        registry.refresh(bad)

    assert registry.list_all() == before
    assert registry.lowest_id() == 1
    assert registry.highest_id() == 5


def test_failed_first_build_leaves_registry_unbuilt(make_record, make_export) -> None:
    registry = TagRegistry()
    with pytest.raises(MalformedRecordError):
        registry.refresh(ExportBytes(make_export([make_record("?")])))
    assert registry.is_built() is False


def test_stream_error_wrapped_and_snapshot_kept(grouped_export: ExportBytes) -> None:
    registry = TagRegistry()
    registry.refresh(grouped_export)

    stream = MagicMock()
    stream.__enter__.return_value = stream
    stream.read.side_effect = [b"header\n", OSError("connection lost")]
    source = MagicMock()
    source.open.return_value = stream

    with pytest.raises(ExportStreamError) as exc_info:
        registry.refresh(source, _counter(5))
    assert isinstance(exc_info.value.cause, OSError)
    assert len(registry) == 5


def test_open_error_wrapped() -> None:
    source = MagicMock()
    source.open.side_effect = FileNotFoundError("no export")
    with pytest.raises(ExportStreamError):
        TagRegistry().refresh(source, _counter(0))


def test_tag_count_error_wrapped() -> None:
    counter = MagicMock()
    counter.tag_count.side_effect = OSError("device busy")
    with pytest.raises(ExportStreamError, match="tag count"):
        TagRegistry().refresh(ExportBytes(b"header\n"), counter)


def test_source_without_tag_count_needs_counter() -> None:
    class StreamOnly:
        def open(self):
            return io.BytesIO(b"header\n")

    with pytest.raises(TypeError):
        TagRegistry().refresh(StreamOnly())
    assert TagRegistry().refresh(StreamOnly(), _counter(0)).count == 0


def test_empty_export_has_no_bounds(make_export) -> None:
    registry = TagRegistry()
    registry.refresh(ExportBytes(make_export([])))
    assert registry.is_built()
    assert registry.list_all() == []
    with pytest.raises(RegistryNotBuiltError):
        registry.lowest_id()


def test_refresh_replaces_snapshot(grouped_export: ExportBytes, make_record, make_export) -> None:
    registry = TagRegistry()
    registry.refresh(grouped_export)
    registry.refresh(ExportBytes(make_export([make_record(100), make_record(101)])))
    assert [t.id for t in registry.list_all()] == [100, 101]
    assert registry.lowest_id() == 100


def test_reset(grouped_export: ExportBytes) -> None:
    registry = TagRegistry()
    registry.refresh(grouped_export)
    registry.reset()
    assert not registry.is_built()
    with pytest.raises(RegistryNotBuiltError):
        registry.list_all()


def test_export_file(tmp_path, make_record, make_export) -> None:
    path = tmp_path / "taglist.txt"
    path.write_bytes(make_export([make_record(i) for i in (1, 2, 3)]))
    export = ExportFile(path)
    assert export.tag_count() == 3
    registry = TagRegistry()
    registry.refresh(export)
    assert len(registry) == 3


def test_readers_never_see_partial_build(make_record, make_export) -> None:
    first = ExportBytes(make_export([make_record(i) for i in range(1, 51)]))
    second = ExportBytes(make_export([make_record(i) for i in range(1000, 1050)]))
    registry = TagRegistry()
    registry.refresh(first)

    observed: list[int] = []
    stop = threading.Event()

    def reader() -> None:
        while not stop.is_set():
            observed.append(len(registry.list_all()))

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for _ in range(20):
        registry.refresh(second)
        registry.refresh(first)
    stop.set()
    for t in threads:
        t.join()

    assert observed
    assert set(observed) == {50}


def test_negative_id_is_malformed_record(grouped_export: ExportBytes, make_record, make_export) -> None:
    registry = TagRegistry()
    registry.refresh(grouped_export)
    with pytest.raises(MalformedRecordError, match="negative tag id"):
        registry.refresh(ExportBytes(make_export([make_record(3), make_record(-1)])))
    assert registry.lowest_id() == 1
    assert registry.highest_id() == 5


@pytest.mark.parametrize("raw_id", [" 6 ", "1_0", "٥"])
def test_loosely_numeric_id_is_malformed_record(make_record, make_export, raw_id: str) -> None:
    with pytest.raises(MalformedRecordError, match="Non-numeric tag id"):
        TagRegistry().refresh(ExportBytes(make_export([make_record(4), make_record(raw_id)])))
