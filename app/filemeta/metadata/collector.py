"""Attribute collection from live filesystem entries.

Translates a raw stat result into owner, group, mode and entry kind,
honoring the source permissions policy and the platform's permission
model.
"""

import logging
import os
from pathlib import Path

from filemeta.metadata.models import CollectedAttributes, SourcePermissions, classify_mode
from filemeta.metadata.platform import DEFAULT_MODE, PlatformCapabilities, detect_platform

logger = logging.getLogger(__name__)


class UnsupportedPermissionsError(ValueError):
    """Raised when a permission policy cannot be honored on this platform."""


class AttributeCollector:
    """Collects normalized attributes for filesystem entries.

    With no policy or ``IGNORE``, owner and group are the effective ids of
    the running process and mode is 0o644. With ``USE`` they come from the
    entry itself. Platforms without POSIX permissions always report their
    sentinel values and reject ``USE`` outright.

    Args:
        source_permissions: Permission policy (None behaves like IGNORE).
        platform: Platform capabilities. Defaults to the running platform.

    Raises:
        UnsupportedPermissionsError: If ``USE`` is requested on a platform
            without POSIX permissions.
    """

    def __init__(
        self,
        source_permissions: SourcePermissions | None = None,
        *,
        platform: PlatformCapabilities | None = None,
    ) -> None:
        self._platform = platform if platform is not None else detect_platform()
        self._use_source = source_permissions == SourcePermissions.USE

        if self._use_source and not self._platform.supports_posix_permissions:
            msg = (
                f"Unsupported {self._platform.name} source permissions option "
                f"{SourcePermissions.USE.value}"
            )
            raise UnsupportedPermissionsError(msg)

    @property
    def platform(self) -> PlatformCapabilities:
        """Platform capabilities this collector was built for."""
        return self._platform

    @property
    def uses_source_permissions(self) -> bool:
        """True if owner, group and mode are read from the entry."""
        return self._use_source

    def collect(self, path: Path, *, follow_links: bool = False) -> CollectedAttributes:
        """Stat a path and return its normalized attributes.

        Args:
            path: Absolute path of an existing entry.
            follow_links: If True, describe a link's target instead of the link.

        Returns:
            CollectedAttributes for the entry. The mode is not masked.

        Raises:
            FileNotFoundError: If the entry does not exist.
            PermissionError: If the entry cannot be stat'ed.
        """
        st = os.stat(path) if follow_links else os.lstat(path)
        ftype = classify_mode(st.st_mode)

        if not self._platform.supports_posix_permissions:
            logger.debug("Using %s sentinel permissions for %s", self._platform.name, path)
            return CollectedAttributes(
                owner=self._platform.sentinel_owner,  # type: ignore[arg-type]
                group=self._platform.sentinel_group,  # type: ignore[arg-type]
                mode=self._platform.sentinel_mode,
                ftype=ftype,
            )

        if self._use_source:
            return CollectedAttributes(
                owner=st.st_uid,
                group=st.st_gid,
                mode=st.st_mode,
                ftype=ftype,
            )

        logger.debug("Ignoring source permissions for %s", path)
        return CollectedAttributes(
            owner=os.geteuid(),
            group=os.getegid(),
            mode=DEFAULT_MODE,
            ftype=ftype,
        )
