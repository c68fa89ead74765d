"""pyewon-taginfo: parse Ewon tag-list exports into a group-filterable tag registry."""

__version__ = "0.1.0"

from .applier import DEFAULT_WRITE_DELAY_S, ConfigStore, LogRateApplier, apply_log_rate_for_tag
from .builder import RegistryBuilder, RegistrySnapshot
from .errors import (
    ConfigWriteError,
    ExportStreamError,
    MalformedRecordError,
    RegistryNotBuiltError,
    TagInfoError,
)
from .parser import IdBounds, parse_line
from .registry import TagRegistry
from .sources import ExportBytes, ExportFile, ExportSource, TagCountSource
from .types import UNINIT_ID, TagGroup, TagInfo, TagType

__all__ = [
    "__version__",
    "DEFAULT_WRITE_DELAY_S",
    "ConfigStore",
    "LogRateApplier",
    "apply_log_rate_for_tag",
    "RegistryBuilder",
    "RegistrySnapshot",
    "ConfigWriteError",
    "ExportStreamError",
    "MalformedRecordError",
    "RegistryNotBuiltError",
    "TagInfoError",
    "IdBounds",
    "parse_line",
    "TagRegistry",
    "ExportBytes",
    "ExportFile",
    "ExportSource",
    "TagCountSource",
    "UNINIT_ID",
    "TagGroup",
    "TagInfo",
    "TagType",
]
