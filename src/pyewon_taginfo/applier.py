"""Apply a historical log interval to one tag or to every tag in a group, with paced writes."""

import logging
import time
from typing import Protocol, runtime_checkable

from .errors import ConfigWriteError
from .registry import TagRegistry
from .types import TagGroup

logger = logging.getLogger(__name__)

# Seconds to wait after each write when updating a whole group
DEFAULT_WRITE_DELAY_S = 0.010


@runtime_checkable
class ConfigStore(Protocol):
    """Device tag-configuration store that durably applies log settings to a named tag."""

    def apply_log_settings(self, tag_name: str, log_enabled: bool, log_interval: str) -> None: ...


def apply_log_rate_for_tag(store: ConfigStore, tag_name: str, log_interval: str | int) -> None:
    """Enable historical logging on tag_name with the given interval. Raises ConfigWriteError."""
    try:
        store.apply_log_settings(tag_name, True, str(log_interval))
    except ConfigWriteError:
        raise
    except Exception as e:
        raise ConfigWriteError(
            f"Failed to apply log interval to tag {tag_name!r}: {e}",
            tag_name=tag_name,
            cause=e,
        ) from e


class LogRateApplier:
    """
    Pushes historical log intervals from a TagRegistry to a ConfigStore.

    Group updates are sequential and paced; they block the caller for
    roughly write_delay_s per tag. The first failed write stops the run,
    and tags already written keep their new interval.
    """

    def __init__(
        self,
        registry: TagRegistry,
        store: ConfigStore,
        write_delay_s: float = DEFAULT_WRITE_DELAY_S,
    ) -> None:
        if write_delay_s < 0:
            raise ValueError(f"write_delay_s must be >= 0, got {write_delay_s}")
        self._registry = registry
        self._store = store
        self._write_delay_s = write_delay_s

    def apply_to_tag(self, tag_name: str, log_interval: str | int) -> None:
        apply_log_rate_for_tag(self._store, tag_name, log_interval)

    def apply_to_group(self, group: TagGroup, log_interval: str | int) -> list[str]:
        """Apply log_interval to every tag in group, in registry order; return the names written."""
        tags = self._registry.list_filtered(group)
        logger.debug("Applying log interval %s to %d tags in group %s", log_interval, len(tags), group.value)
        written: list[str] = []
        for tag in tags:
            apply_log_rate_for_tag(self._store, tag.name, log_interval)
            written.append(tag.name)
            time.sleep(self._write_delay_s)
        return written
