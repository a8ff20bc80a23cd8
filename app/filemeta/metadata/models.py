"""Metadata domain models.

This module defines the value types shared by the attribute collector
and the metadata record: entry kinds, permission and link policies, and
the normalized attributes read from a stat result.
"""

import stat
from dataclasses import dataclass
from enum import Enum


class FileType(str, Enum):
    """Type of a manageable filesystem entry.

    Attributes:
        FILE: Regular file.
        DIRECTORY: Directory.
        LINK: Symbolic link (reported as-is, never followed for typing).
    """

    FILE = "file"
    DIRECTORY = "directory"
    LINK = "link"


@dataclass(frozen=True, slots=True)
class Unsupported:
    """An entry kind that cannot be managed (fifo, socket, device, ...).

    Attributes:
        kind: Name of the entry kind, e.g. "fifo" or "characterSpecial".
    """

    kind: str


# Result of classifying a stat result
EntryKind = FileType | Unsupported


class SourcePermissions(str, Enum):
    """Policy for reporting owner, group and mode of a source entry.

    Attributes:
        IGNORE: Report the running process's ids and a default mode.
        USE: Report owner, group and mode verbatim from the entry.
    """

    IGNORE = "ignore"
    USE = "use"


class LinkHandling(str, Enum):
    """How symbolic links are treated when stat'ing an entry.

    Attributes:
        MANAGE: Describe the link itself (lstat).
        FOLLOW: Describe the link's target (stat).
    """

    MANAGE = "manage"
    FOLLOW = "follow"


@dataclass(frozen=True, slots=True)
class CollectedAttributes:
    """Platform-normalized attributes of a single filesystem entry.

    Attributes:
        owner: Owner id (or platform sentinel).
        group: Group id (or platform sentinel).
        mode: Mode bits as reported, not yet masked.
        ftype: Classified entry kind.
    """

    owner: int | str
    group: int | str
    mode: int
    ftype: EntryKind


def classify_mode(mode: int) -> EntryKind:
    """Classify raw ``st_mode`` bits into an entry kind.

    Args:
        mode: The ``st_mode`` field of a stat result.

    Returns:
        FileType for manageable entries, Unsupported otherwise.
    """
    if stat.S_ISREG(mode):
        return FileType.FILE
    if stat.S_ISDIR(mode):
        return FileType.DIRECTORY
    if stat.S_ISLNK(mode):
        return FileType.LINK
    if stat.S_ISFIFO(mode):
        return Unsupported("fifo")
    if stat.S_ISSOCK(mode):
        return Unsupported("socket")
    if stat.S_ISCHR(mode):
        return Unsupported("characterSpecial")
    if stat.S_ISBLK(mode):
        return Unsupported("blockSpecial")
    return Unsupported("unknown")
