"""File metadata collection and serialization.

This module provides the attribute collector, the file reference base
model, and the FileMetadata record built on top of them.
"""

from filemeta.metadata.base import FileReference
from filemeta.metadata.collector import AttributeCollector, UnsupportedPermissionsError
from filemeta.metadata.models import (
    CollectedAttributes,
    EntryKind,
    FileType,
    LinkHandling,
    SourcePermissions,
    Unsupported,
)
from filemeta.metadata.platform import POSIX, WINDOWS, PlatformCapabilities, detect_platform
from filemeta.metadata.record import (
    FileMetadata,
    MetadataError,
    MetadataValidationError,
    UnsupportedFileTypeError,
)

__all__ = [
    "POSIX",
    "WINDOWS",
    "AttributeCollector",
    "CollectedAttributes",
    "EntryKind",
    "FileMetadata",
    "FileReference",
    "FileType",
    "LinkHandling",
    "MetadataError",
    "MetadataValidationError",
    "PlatformCapabilities",
    "SourcePermissions",
    "Unsupported",
    "UnsupportedFileTypeError",
    "UnsupportedPermissionsError",
    "detect_platform",
]
