"""Platform permission capabilities.

POSIX hosts expose numeric owner/group ids and permission bits on every
filesystem entry. Windows does not; metadata collected there reports fixed
sentinel values instead of anything read from the entry.
"""

import os
from dataclasses import dataclass

# Permission bits reported when source permissions are not used
DEFAULT_MODE = 0o644


@dataclass(frozen=True, slots=True)
class PlatformCapabilities:
    """Describes how a platform models file ownership and permissions.

    Attributes:
        name: Short platform identifier used in error messages.
        supports_posix_permissions: True if stat results carry meaningful
            uid/gid/mode values.
        sentinel_owner: Owner reported when permissions are unsupported.
        sentinel_group: Group reported when permissions are unsupported.
        sentinel_mode: Mode reported when permissions are unsupported.
    """

    name: str
    supports_posix_permissions: bool
    sentinel_owner: int | str | None = None
    sentinel_group: int | str | None = None
    sentinel_mode: int = DEFAULT_MODE

    def __post_init__(self) -> None:
        """Validate that permission-less platforms carry sentinels."""
        if not self.supports_posix_permissions and (
            self.sentinel_owner is None or self.sentinel_group is None
        ):
            msg = f"Platform {self.name} requires sentinel owner and group values"
            raise ValueError(msg)


POSIX = PlatformCapabilities(name="posix", supports_posix_permissions=True)

# BUILTIN\Administrators owns, the Null SID groups
WINDOWS = PlatformCapabilities(
    name="windows",
    supports_posix_permissions=False,
    sentinel_owner="S-1-5-32-544",
    sentinel_group="S-1-0-0",
)


def detect_platform() -> PlatformCapabilities:
    """Return the capabilities of the running platform."""
    if os.name == "nt":
        return WINDOWS
    return POSIX
