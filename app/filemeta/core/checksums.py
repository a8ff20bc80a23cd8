"""Checksum algorithm registry.

This module maps checksum type names (``md5``, ``sha256``, ``mtime``, ...)
to digest functions. A checksum is always rendered with its type as a
brace prefix, e.g. ``{sha256}9f86d0...``.

Timestamp-based pseudo-digests (``mtime``, ``ctime``) render the stat time
as a UTC ISO 8601 string. The ``none`` type always digests to an empty
string.
"""

import hashlib
import os
import re
from collections.abc import Callable
from datetime import UTC, datetime
from functools import partial
from pathlib import Path

# Algorithm used when no checksum type is configured explicitly
DEFAULT_DIGEST_ALGORITHM = "sha256"

# Read size for content digests; "lite" digests stop after the first chunk
CHUNK_SIZE = 512

DigestFunc = Callable[[Path], str]

_CHECKSUM_PATTERN = re.compile(r"^\{(\w+)\}(.*)$", re.DOTALL)


class UnknownChecksumTypeError(ValueError):
    """Raised when a checksum type has no registered digest function."""


class ChecksumRegistry:
    """Registration table mapping checksum type names to digest functions.

    Example:
        >>> registry = ChecksumRegistry()
        >>> registry.register("size", lambda path: str(path.stat().st_size))
        >>> registry.checksum("size", Path("/etc/hostname"))
        '{size}7'
    """

    def __init__(self) -> None:
        self._digests: dict[str, DigestFunc] = {}

    def register(self, name: str, func: DigestFunc) -> None:
        """Register a digest function under a checksum type name.

        Args:
            name: Checksum type name (word characters only).
            func: Callable taking a path and returning the digest string.

        Raises:
            ValueError: If the name is empty or contains non-word characters.
        """
        if not re.fullmatch(r"\w+", name):
            msg = f"Invalid checksum type name: {name!r}"
            raise ValueError(msg)
        self._digests[name] = func

    def is_registered(self, name: object) -> bool:
        """Check whether a checksum type has a digest function."""
        return isinstance(name, str) and name in self._digests

    def names(self) -> tuple[str, ...]:
        """Return all registered checksum type names, sorted."""
        return tuple(sorted(self._digests))

    def validate(self, name: object) -> str:
        """Return name unchanged if registered.

        Raises:
            UnknownChecksumTypeError: If no digest function is registered.
        """
        if not self.is_registered(name):
            msg = f"Unsupported checksum type {name}"
            raise UnknownChecksumTypeError(msg)
        return name  # type: ignore[return-value]

    def digest(self, name: str, path: Path) -> str:
        """Compute the raw digest of a path.

        Args:
            name: Registered checksum type name.
            path: Filesystem path to digest.

        Returns:
            Digest string without the type prefix.

        Raises:
            UnknownChecksumTypeError: If the type is not registered.
            OSError: If the path cannot be read or stat'ed.
        """
        func = self._digests[self.validate(name)]
        return func(path)

    def checksum(self, name: str, path: Path) -> str:
        """Compute the type-prefixed checksum of a path."""
        return f"{{{name}}}{self.digest(name, path)}"


def split_checksum(checksum: str) -> tuple[str, str]:
    """Split a ``{type}value`` checksum into its type and value.

    Args:
        checksum: Prefixed checksum string.

    Returns:
        Tuple of (checksum type, digest value).

    Raises:
        ValueError: If the string lacks a ``{type}`` prefix.
    """
    match = _CHECKSUM_PATTERN.match(checksum)
    if match is None:
        msg = f"Checksum has no type prefix: {checksum!r}"
        raise ValueError(msg)
    return match.group(1), match.group(2)


def _hash_file(algorithm: str, path: Path, *, lite: bool = False) -> str:
    """Hash file content in fixed-size chunks.

    With ``lite`` only the first chunk is hashed.
    """
    hasher = hashlib.new(algorithm)
    with open(path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            hasher.update(chunk)
            if lite:
                break
    return hasher.hexdigest()


def _format_timestamp(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=UTC).isoformat()


def _mtime(path: Path) -> str:
    return _format_timestamp(os.stat(path).st_mtime)


def _ctime(path: Path) -> str:
    return _format_timestamp(os.stat(path).st_ctime)


def _none(path: Path) -> str:
    return ""


def _build_default_registry() -> ChecksumRegistry:
    registry = ChecksumRegistry()
    for algorithm in ("md5", "sha1", "sha224", "sha256", "sha384", "sha512"):
        registry.register(algorithm, partial(_hash_file, algorithm))
    for algorithm in ("md5", "sha1", "sha256"):
        registry.register(f"{algorithm}lite", partial(_hash_file, algorithm, lite=True))
    registry.register("mtime", _mtime)
    registry.register("ctime", _ctime)
    registry.register("none", _none)
    return registry


# Process-wide table of known checksum types
CHECKSUMS = _build_default_registry()
