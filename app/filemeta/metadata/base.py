"""Base model for references to a single filesystem entry.

A file reference names an entry by an absolute base path plus an optional
relative path below it, and says whether symbolic links are described
as-is or followed.
"""

import os
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from filemeta.metadata.models import LinkHandling


def is_absolute_path(path: str) -> bool:
    """Check if a path is fully qualified on POSIX or Windows."""
    return PurePosixPath(path).is_absolute() or PureWindowsPath(path).is_absolute()


class FileReference(BaseModel):
    """Reference to a filesystem entry.

    Attributes:
        path: Fully qualified base path. Cannot change after construction.
        relative_path: Optional path below ``path`` (must not be absolute).
        links: Whether links are managed (lstat) or followed (stat).
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    path: Annotated[str, Field(frozen=True, description="Fully qualified base path")]
    relative_path: Annotated[
        str | None,
        Field(description="Path relative to the base path"),
    ] = None
    links: Annotated[
        LinkHandling,
        Field(description="Link handling (manage or follow)"),
    ] = LinkHandling.MANAGE

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Require a fully qualified path."""
        if not is_absolute_path(v):
            msg = f"Paths must be fully qualified: {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("relative_path")
    @classmethod
    def validate_relative_path(cls, v: str | None) -> str | None:
        """Reject fully qualified relative paths."""
        if v is not None and is_absolute_path(v):
            msg = f"Relative paths must not be fully qualified: {v!r}"
            raise ValueError(msg)
        return v

    @field_validator("links", mode="before")
    @classmethod
    def normalize_links(cls, v: object) -> object:
        """Treat ``ignore`` as ``manage``."""
        if v == "ignore":
            return LinkHandling.MANAGE
        return v

    @property
    def full_path(self) -> Path:
        """Path of the referenced entry (base path joined with relative path)."""
        if not self.relative_path or self.relative_path == ".":
            return Path(self.path)
        return Path(self.path) / self.relative_path

    def stat(self) -> os.stat_result:
        """Stat the referenced entry according to the link handling.

        Raises:
            FileNotFoundError: If the entry does not exist.
            PermissionError: If the entry cannot be stat'ed.
        """
        if self.links == LinkHandling.FOLLOW:
            return os.stat(self.full_path)
        return os.lstat(self.full_path)

    def exists(self) -> bool:
        """Check if the referenced entry can be stat'ed."""
        try:
            self.stat()
        except OSError:
            return False
        return True

    def to_data_hash(self) -> dict[str, Any]:
        """Convert to a string-keyed mapping for transmission or storage."""
        return {
            "path": self.path,
            "relative_path": self.relative_path,
            "links": self.links.value,
        }
