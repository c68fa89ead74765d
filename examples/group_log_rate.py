#!/usr/bin/env python3
"""Example: build a registry from a saved export and push a log interval to group A."""

import sys

from pyewon_taginfo import ExportFile, LogRateApplier, TagGroup, TagRegistry
from pyewon_taginfo.errors import ConfigWriteError, ExportStreamError, MalformedRecordError


class PrintingStore:
    """Stand-in configuration store; replace with one that writes to your device."""

    def apply_log_settings(self, tag_name: str, log_enabled: bool, log_interval: str) -> None:
        print(f"{tag_name}: LogEnabled={int(log_enabled)} LogTimer={log_interval}")


def main() -> None:
    path = sys.argv[1] if len(sys.argv) > 1 else "taglist.txt"

    registry = TagRegistry()
    try:
        registry.refresh(ExportFile(path))
        print(f"{len(registry)} tags, ids {registry.lowest_id()}..{registry.highest_id()}")
        written = LogRateApplier(registry, PrintingStore()).apply_to_group(TagGroup.A, 30)
        print(f"Updated {len(written)} tags in group A")
    except MalformedRecordError as e:
        print(f"Malformed export: {e}", file=sys.stderr)
        sys.exit(1)
    except ExportStreamError as e:
        print(f"Export read error: {e}", file=sys.stderr)
        sys.exit(1)
    except ConfigWriteError as e:
        print(f"Write failed for {e.tag_name}: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
