"""Comparison of desired and actual file metadata.

This module compares a desired FileMetadata record (typically received
from a server) with one collected from the live filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from filemeta.metadata.models import FileType
from filemeta.metadata.record import PARAM_ORDER, FileMetadata

# Compared after PARAM_ORDER
_EXTRA_ATTRIBUTES: tuple[str, ...] = ("checksum", "destination")

_WIRE_NAMES: dict[str, str] = {"ftype": "type"}


@dataclass(frozen=True, slots=True)
class AttributeDiff:
    """A single attribute whose desired and actual values differ.

    Attributes:
        name: Attribute name as used in the structured representation.
        desired: Desired value.
        actual: Value found on the filesystem.
    """

    name: str
    desired: object
    actual: object


@dataclass(frozen=True, slots=True)
class MetadataDiff:
    """Result of comparing desired with actual metadata.

    Attributes:
        path: Path of the compared entry.
        differences: Differing attributes, in comparison order.
    """

    path: str
    differences: tuple[AttributeDiff, ...]

    @property
    def is_in_sync(self) -> bool:
        """Check if the entry matches the desired metadata."""
        return not self.differences

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": self.path,
            "in_sync": self.is_in_sync,
            "differences": [
                {"name": d.name, "desired": d.desired, "actual": d.actual}
                for d in self.differences
            ],
        }


def _wire_value(value: object) -> object:
    return value.value if isinstance(value, Enum) else value


def _checksums_comparable(desired: FileMetadata, actual: FileMetadata) -> bool:
    if desired.ftype == FileType.DIRECTORY:
        return False
    return desired.checksum_type == actual.checksum_type


def compare_metadata(desired: FileMetadata, actual: FileMetadata) -> MetadataDiff:
    """Compare desired metadata with actual metadata.

    Attributes are compared in parameter order (mode, type, owner, group),
    then checksum and link destination. Attributes left unset in the
    desired record are unmanaged and never reported. A checksum is only
    compared when both records use the same checksum type, and never for
    directories, whose change-time checksum says nothing about content.

    Args:
        desired: Desired state of the entry.
        actual: State collected from the filesystem.

    Returns:
        MetadataDiff listing every differing attribute.
    """
    differences: list[AttributeDiff] = []

    for name in (*PARAM_ORDER, *_EXTRA_ATTRIBUTES):
        desired_value = getattr(desired, name)
        if desired_value is None:
            continue
        if name == "checksum" and not _checksums_comparable(desired, actual):
            continue

        actual_value = getattr(actual, name)
        if desired_value != actual_value:
            differences.append(
                AttributeDiff(
                    name=_WIRE_NAMES.get(name, name),
                    desired=_wire_value(desired_value),
                    actual=_wire_value(actual_value),
                )
            )

    return MetadataDiff(path=str(desired.full_path), differences=tuple(differences))
