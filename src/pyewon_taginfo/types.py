"""Core data model: tag groups, tag types, and the immutable TagInfo descriptor."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum, IntEnum

# Placeholder for identifiers not yet observed
UNINIT_ID = -1


class TagGroup(str, Enum):
    """The four fixed tag groups a tag may belong to."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"


class TagType(IntEnum):
    """Tag data types as encoded in the tag-list export."""

    UNKNOWN = -1
    BOOLEAN = 0
    FLOAT = 1
    INTEGER = 2
    DWORD = 3
    STRING = 6

    @classmethod
    def from_code(cls, code: int) -> "TagType":
        """Map an export type code to TagType; unrecognized codes map to UNKNOWN."""
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class TagInfo:
    """Identity, type, logging flag and group memberships of one device tag."""

    id: int
    name: str
    type: TagType
    historical_logging_enabled: bool
    groups: frozenset[TagGroup] = frozenset()

    def __post_init__(self) -> None:
        if self.id == UNINIT_ID:
            raise ValueError("id must be initialized")
        if not self.name:
            raise ValueError("name must be non-empty")
        if not isinstance(self.groups, frozenset):
            object.__setattr__(self, "groups", frozenset(self.groups))
        for group in self.groups:
            if not isinstance(group, TagGroup):
                raise ValueError(f"not a tag group: {group!r}")

    @classmethod
    def from_flags(
        cls,
        id: int,
        name: str,
        historical_logging_enabled: bool,
        in_group_a: bool,
        in_group_b: bool,
        in_group_c: bool,
        in_group_d: bool,
        type: TagType,
    ) -> "TagInfo":
        """Build a TagInfo from the four per-group membership flags."""
        flags = zip(TagGroup, (in_group_a, in_group_b, in_group_c, in_group_d))
        groups = frozenset(group for group, member in flags if member)
        return cls(
            id=id,
            name=name,
            type=type,
            historical_logging_enabled=historical_logging_enabled,
            groups=groups,
        )

    def in_group(self, group: TagGroup) -> bool:
        return group in self.groups

    def in_any_group(self, groups: Iterable[TagGroup]) -> bool:
        """True if this tag belongs to at least one of the given groups."""
        return any(group in self.groups for group in groups)
