"""File metadata records.

A FileMetadata record describes one filesystem entry at a point in time:
owner, group, permission bits, entry type, a type-prefixed checksum and,
for links, the link destination. Records are populated either by
collecting from a live path or by deserializing a previously transmitted
mapping.
"""

import logging
import os
from collections.abc import Mapping
from typing import Annotated, Any

from pydantic import Field, ValidationError, field_validator, model_validator

from filemeta.core.checksums import CHECKSUMS, DEFAULT_DIGEST_ALGORITHM, split_checksum
from filemeta.metadata.base import FileReference
from filemeta.metadata.collector import AttributeCollector
from filemeta.metadata.models import (
    FileType,
    LinkHandling,
    SourcePermissions,
    Unsupported,
)
from filemeta.metadata.platform import PlatformCapabilities

logger = logging.getLogger(__name__)

# Low 12 bits: permission, setuid/setgid and sticky bits
MODE_MASK = 0o7777

# Directories are always fingerprinted by change time
DIRECTORY_CHECKSUM_TYPE = "ctime"

# Attribute order used when comparing or copying metadata
PARAM_ORDER: tuple[str, ...] = ("mode", "ftype", "owner", "group")

# Keys of the structured representation
_DATA_HASH_KEYS = frozenset(
    {
        "path",
        "relative_path",
        "links",
        "owner",
        "group",
        "mode",
        "checksum",
        "type",
        "destination",
    }
)


class MetadataError(Exception):
    """Base exception for metadata errors."""


class UnsupportedFileTypeError(MetadataError):
    """Raised when collecting an entry that is not a file, directory or link."""


class MetadataValidationError(MetadataError):
    """Raised when a structured representation cannot be turned into a record."""


class FileMetadata(FileReference):
    """Normalized metadata for a single filesystem entry.

    The checksum type is validated against the checksum registry on
    construction and on every assignment, so an unknown algorithm fails
    before any filesystem access happens. Only link records may carry a
    destination.

    A record is filled exactly once, either by ``collect()`` or by
    ``from_data_hash()``, and callers treat it as read-only afterwards.
    Only ``collect()`` itself rewrites the attributes, when an entry is
    collected again.

    Attributes:
        owner: Owner id, or the platform sentinel.
        group: Group id, or the platform sentinel.
        mode: Permission bits, always masked to 0o7777.
        ftype: Entry type (file, directory or link).
        checksum_type: Registered checksum algorithm name.
        checksum: Checksum prefixed with its type, e.g. ``{md5}d41d8c...``.
        destination: Link target, only set for links.
    """

    owner: Annotated[int | str | None, Field(description="Owner id or sentinel")] = None
    group: Annotated[int | str | None, Field(description="Group id or sentinel")] = None
    mode: Annotated[int | None, Field(ge=0, description="Permission bits")] = None
    ftype: Annotated[FileType | None, Field(description="Entry type")] = None
    checksum_type: Annotated[
        str,
        Field(description="Checksum algorithm name"),
    ] = DEFAULT_DIGEST_ALGORITHM
    checksum: Annotated[str | None, Field(description="Type-prefixed checksum")] = None
    destination: Annotated[str | None, Field(description="Link target")] = None

    @field_validator("checksum_type")
    @classmethod
    def validate_checksum_type(cls, v: str) -> str:
        """Reject checksum types without a registered digest function."""
        return CHECKSUMS.validate(v)

    @field_validator("mode")
    @classmethod
    def mask_mode(cls, v: int | None) -> int | None:
        """Drop file type bits above the low 12 permission bits."""
        if v is None:
            return None
        return v & MODE_MASK

    @model_validator(mode="after")
    def validate_destination(self) -> "FileMetadata":
        """Reject a destination on anything but a link."""
        if self.destination is not None and self.ftype not in (None, FileType.LINK):
            msg = f"Only links have a destination, not {self.ftype.value} entries"
            raise ValueError(msg)
        return self

    def collect(
        self,
        source_permissions: SourcePermissions | None = None,
        *,
        platform: PlatformCapabilities | None = None,
    ) -> None:
        """Populate this record from the live filesystem entry.

        Files are checksummed with the current checksum type. Directories
        always switch to ``ctime``. Links record their destination; a link
        whose checksum cannot be computed (e.g. a dangling link) keeps no
        checksum instead of failing.

        Fields are only updated once the entry has been fully described, so
        a failed collection leaves the record untouched.

        Args:
            source_permissions: Permission policy (None behaves like IGNORE).
            platform: Platform capabilities. Defaults to the running platform.

        Raises:
            UnsupportedPermissionsError: If the policy is not supported.
            FileNotFoundError: If the entry does not exist.
            PermissionError: If the entry cannot be stat'ed.
            OSError: For any other failure reading the entry.
            UnsupportedFileTypeError: If the entry is not a file, directory or link.
        """
        collector = AttributeCollector(source_permissions, platform=platform)
        real_path = self.full_path
        attrs = collector.collect(real_path, follow_links=self.links == LinkHandling.FOLLOW)

        checksum_type = self.checksum_type
        checksum: str | None
        destination: str | None = None

        match attrs.ftype:
            case FileType.FILE:
                checksum = CHECKSUMS.checksum(checksum_type, real_path)
            case FileType.DIRECTORY:
                checksum_type = DIRECTORY_CHECKSUM_TYPE
                checksum = CHECKSUMS.checksum(checksum_type, real_path)
            case FileType.LINK:
                destination = os.readlink(real_path)
                try:
                    checksum = CHECKSUMS.checksum(checksum_type, real_path)
                except OSError as e:
                    logger.debug("Cannot checksum link %s: %s", real_path, e)
                    checksum = None
            case Unsupported(kind=kind):
                msg = f"Cannot manage files of type {kind}"
                raise UnsupportedFileTypeError(msg)

        # Drop any old destination before ftype changes
        self.destination = None
        self.owner = attrs.owner
        self.group = attrs.group
        self.mode = attrs.mode & MODE_MASK
        self.ftype = attrs.ftype
        self.checksum_type = checksum_type
        self.checksum = checksum
        self.destination = destination

    def to_data_hash(self) -> dict[str, Any]:
        """Convert to a string-keyed mapping for transmission or storage."""
        data = super().to_data_hash()
        data.update(
            {
                "owner": self.owner,
                "group": self.group,
                "mode": self.mode,
                "checksum": {
                    "type": self.checksum_type,
                    "value": self.checksum,
                },
                "type": self.ftype.value if self.ftype is not None else None,
                "destination": self.destination,
            }
        )
        return data

    @classmethod
    def from_data_hash(
        cls,
        data: Mapping[str, Any],
        *,
        default_checksum_type: str | None = None,
    ) -> "FileMetadata":
        """Build a record from a string-keyed mapping.

        The input mapping is not modified. Only the keys ``to_data_hash``
        emits are accepted, and a checksum value must carry the brace prefix
        of its checksum type.

        Args:
            data: Mapping as produced by ``to_data_hash``.
            default_checksum_type: Checksum type used when the mapping has
                none. Defaults to the built-in default digest algorithm.

        Returns:
            Validated FileMetadata record.

        Raises:
            MetadataValidationError: If the mapping is invalid.
        """
        unknown = sorted(set(data) - _DATA_HASH_KEYS, key=str)
        if unknown:
            msg = f"Invalid file metadata: unknown keys {', '.join(map(str, unknown))}"
            raise MetadataValidationError(msg)

        fields: dict[str, Any] = {
            key: data[key]
            for key in ("path", "relative_path", "links", "owner", "group", "mode", "destination")
            if key in data
        }

        checksum = data.get("checksum")
        if checksum:
            if not isinstance(checksum, Mapping):
                msg = f"Invalid checksum object: {checksum!r}"
                raise MetadataValidationError(msg)
            fields["checksum_type"] = checksum.get("type")
            fields["checksum"] = checksum.get("value")
        if fields.get("checksum_type") is None:
            fields["checksum_type"] = default_checksum_type or DEFAULT_DIGEST_ALGORITHM

        value = fields.get("checksum")
        if isinstance(value, str):
            try:
                prefix, _ = split_checksum(value)
            except ValueError as e:
                raise MetadataValidationError(f"Invalid checksum {value!r}: {e}") from e
            if prefix != fields["checksum_type"]:
                msg = (
                    f"Checksum {value!r} does not match checksum type "
                    f"{fields['checksum_type']}"
                )
                raise MetadataValidationError(msg)

        if "type" in data:
            fields["ftype"] = data["type"]

        try:
            return cls(**fields)
        except ValidationError as e:
            raise MetadataValidationError(f"Invalid file metadata: {e}") from e
