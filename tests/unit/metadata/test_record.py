"""Tests for FileMetadata collection and serialization."""

import copy
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from filemeta.core.checksums import CHECKSUMS
from filemeta.metadata.collector import UnsupportedPermissionsError
from filemeta.metadata.models import CollectedAttributes, FileType, SourcePermissions
from filemeta.metadata.platform import POSIX, WINDOWS
from filemeta.metadata.record import (
    FileMetadata,
    MetadataValidationError,
    UnsupportedFileTypeError,
)
from pydantic import ValidationError

posix_only = pytest.mark.skipif(os.name == "nt", reason="POSIX filesystem semantics")


class TestConstruction:
    """Tests for record construction and checksum type validation."""

    def test_defaults(self) -> None:
        """A new record has the default checksum type and no attributes."""
        record = FileMetadata(path="/etc/motd")

        assert record.checksum_type == "sha256"
        assert record.owner is None
        assert record.group is None
        assert record.mode is None
        assert record.ftype is None
        assert record.checksum is None
        assert record.destination is None

    def test_explicit_checksum_type(self) -> None:
        """An explicit registered checksum type is kept."""
        assert FileMetadata(path="/etc/motd", checksum_type="md5").checksum_type == "md5"

    def test_unknown_checksum_type_fails_before_filesystem_access(self) -> None:
        """An unregistered checksum type fails immediately, without any stat."""
        with (
            patch("filemeta.metadata.collector.os.lstat") as mock_lstat,
            pytest.raises(ValidationError, match="Unsupported checksum type"),
        ):
            FileMetadata(path="/etc/motd", checksum_type="not_a_real_algorithm")

        mock_lstat.assert_not_called()

    def test_unknown_checksum_type_assignment_fails(self) -> None:
        """Assigning an unregistered checksum type fails and keeps the old one."""
        record = FileMetadata(path="/etc/motd", checksum_type="md5")

        with pytest.raises(ValidationError, match="Unsupported checksum type"):
            record.checksum_type = "crc32"

        assert record.checksum_type == "md5"

    def test_mode_masked_on_construction(self) -> None:
        """File type bits above 0o7777 are dropped."""
        assert FileMetadata(path="/etc/motd", mode=0o120644).mode == 0o644

    def test_special_bits_kept(self) -> None:
        """setuid, setgid and sticky bits survive masking."""
        assert FileMetadata(path="/usr/bin/passwd", mode=0o104755).mode == 0o4755

    def test_sentinel_owner_accepted(self) -> None:
        """String sentinel owners and groups are accepted as-is."""
        record = FileMetadata(path="C:\\motd", owner="S-1-5-32-544", group="S-1-0-0")

        assert record.owner == "S-1-5-32-544"
        assert record.group == "S-1-0-0"

    def test_destination_on_file_rejected(self) -> None:
        """Only links may carry a destination."""
        with pytest.raises(ValidationError, match="Only links have a destination"):
            FileMetadata(path="/etc/motd", ftype=FileType.FILE, destination="/elsewhere")

    def test_destination_without_type_accepted(self) -> None:
        """An untyped record may still name a destination."""
        record = FileMetadata(path="/etc/motd.link", destination="/etc/motd")

        assert record.destination == "/etc/motd"


@posix_only
class TestCollectFile:
    """Tests for collecting regular files."""

    @pytest.mark.parametrize("algorithm", CHECKSUMS.names())
    def test_checksum_for_every_algorithm(self, algorithm: str, sample_file: Path) -> None:
        """Files are checksummed with the record's own checksum type."""
        record = FileMetadata(path=str(sample_file), checksum_type=algorithm)

        record.collect()

        assert record.ftype == FileType.FILE
        assert record.checksum_type == algorithm
        assert record.checksum == f"{{{algorithm}}}" + CHECKSUMS.digest(algorithm, sample_file)
        assert record.destination is None

    def test_ignore_policy_reports_process_ids(self, sample_file: Path) -> None:
        """Unset policy reports the process's ids and mode 0o644."""
        sample_file.chmod(0o600)
        record = FileMetadata(path=str(sample_file))

        record.collect()

        assert record.owner == os.geteuid()
        assert record.group == os.getegid()
        assert record.mode == 0o644

    def test_ignore_policy_with_foreign_owner(self, sample_file: Path) -> None:
        """A file owned by another user still reports the process's ids."""
        fake = os.stat_result((0o100640, 1, 1, 1, 4242, 4343, 0, 0, 0, 0))
        record = FileMetadata(path=str(sample_file))

        with patch("filemeta.metadata.collector.os.lstat", return_value=fake):
            record.collect(SourcePermissions.IGNORE)

        assert record.owner == os.geteuid()
        assert record.group == os.getegid()

    def test_use_policy_reports_entry_permissions(self, sample_file: Path) -> None:
        """USE reports the entry's owner, group and masked mode."""
        sample_file.chmod(0o640)
        st = os.lstat(sample_file)
        record = FileMetadata(path=str(sample_file))

        record.collect(SourcePermissions.USE)

        assert record.owner == st.st_uid
        assert record.group == st.st_gid
        assert record.mode == 0o640

    def test_relative_path(self, sample_file: Path) -> None:
        """The entry below the base path is collected."""
        record = FileMetadata(path=str(sample_file.parent), relative_path=sample_file.name)

        record.collect()

        assert record.ftype == FileType.FILE
        assert record.path == str(sample_file.parent)

    def test_recollect_overwrites(self, sample_file: Path) -> None:
        """Collecting again picks up changed content."""
        record = FileMetadata(path=str(sample_file), checksum_type="md5")
        record.collect()
        first = record.checksum

        sample_file.write_bytes(b"changed\n")
        record.collect()

        assert record.checksum != first
        assert record.checksum == "{md5}" + CHECKSUMS.digest("md5", sample_file)


@posix_only
class TestCollectDirectory:
    """Tests for collecting directories."""

    @pytest.mark.parametrize("algorithm", ["md5", "sha256", "mtime", "none"])
    def test_checksum_type_forced_to_ctime(self, algorithm: str, sample_dir: Path) -> None:
        """Directories always use ctime, whatever was requested."""
        record = FileMetadata(path=str(sample_dir), checksum_type=algorithm)

        record.collect()

        assert record.ftype == FileType.DIRECTORY
        assert record.checksum_type == "ctime"
        assert record.checksum == "{ctime}" + CHECKSUMS.digest("ctime", sample_dir)
        assert record.destination is None


@posix_only
class TestCollectLink:
    """Tests for collecting symbolic links."""

    def test_destination_recorded(self, sample_link: Path, sample_file: Path) -> None:
        """Links record their immediate destination."""
        record = FileMetadata(path=str(sample_link))

        record.collect()

        assert record.ftype == FileType.LINK
        assert record.destination == str(sample_file)

    def test_relative_destination_not_resolved(self, tmp_path: Path, sample_file: Path) -> None:
        """Relative link targets are recorded verbatim."""
        link = tmp_path / "relative.link"
        link.symlink_to(sample_file.name)
        record = FileMetadata(path=str(link))

        record.collect()

        assert record.destination == sample_file.name

    def test_checksum_of_target_content(self, sample_link: Path, sample_file: Path) -> None:
        """A valid link is checksummed through to its target's content."""
        record = FileMetadata(path=str(sample_link), checksum_type="md5")

        record.collect()

        assert record.checksum == "{md5}" + CHECKSUMS.digest("md5", sample_file)

    @pytest.mark.parametrize("algorithm", ["md5", "sha256", "mtime"])
    def test_dangling_link_has_no_checksum(self, algorithm: str, dangling_link: Path) -> None:
        """A broken link is collected without a checksum instead of failing."""
        record = FileMetadata(path=str(dangling_link), checksum_type=algorithm)

        record.collect()

        assert record.ftype == FileType.LINK
        assert record.destination == os.readlink(dangling_link)
        assert record.checksum is None
        assert record.checksum_type == algorithm

    def test_follow_links_describes_target(self, tmp_path: Path, sample_dir: Path) -> None:
        """With followed links, a link to a directory collects as a directory."""
        link = tmp_path / "conf.link"
        link.symlink_to(sample_dir)
        record = FileMetadata(path=str(link), links="follow")

        record.collect()

        assert record.ftype == FileType.DIRECTORY
        assert record.checksum_type == "ctime"
        assert record.destination is None

    def test_recollect_clears_destination(self, tmp_path: Path, sample_file: Path) -> None:
        """A link replaced by a file loses its destination."""
        path = tmp_path / "swap"
        path.symlink_to(sample_file)
        record = FileMetadata(path=str(path))
        record.collect()
        assert record.destination is not None

        path.unlink()
        path.write_text("now a file\n")
        record.collect()

        assert record.ftype == FileType.FILE
        assert record.destination is None

    def test_recollect_file_replaced_by_link(self, tmp_path: Path, sample_file: Path) -> None:
        """A file replaced by a link gains a destination."""
        path = tmp_path / "swap"
        path.write_text("a file first\n")
        record = FileMetadata(path=str(path))
        record.collect()
        assert record.ftype == FileType.FILE

        path.unlink()
        path.symlink_to(sample_file)
        record.collect()

        assert record.ftype == FileType.LINK
        assert record.destination == str(sample_file)

    def test_mode_masked_from_raw_link_mode(self, sample_link: Path) -> None:
        """A raw mode with file type bits is masked to its low 12 bits."""
        attrs = CollectedAttributes(owner=0, group=0, mode=0o120644, ftype=FileType.LINK)
        record = FileMetadata(path=str(sample_link))

        with patch(
            "filemeta.metadata.record.AttributeCollector.collect", return_value=attrs
        ):
            record.collect(SourcePermissions.USE)

        assert record.mode == 0o644
        assert record.ftype == FileType.LINK


class TestCollectFailures:
    """Tests for collection errors."""

    @posix_only
    def test_fifo_unsupported(self, sample_fifo: Path) -> None:
        """Named pipes fail with an unsupported type error and stay untouched."""
        record = FileMetadata(path=str(sample_fifo))

        with pytest.raises(UnsupportedFileTypeError, match="Cannot manage files of type fifo"):
            record.collect()

        assert record.checksum is None
        assert record.ftype is None
        assert record.owner is None

    def test_missing_path_propagates(self, tmp_path: Path) -> None:
        """A missing entry raises FileNotFoundError."""
        record = FileMetadata(path=str(tmp_path / "missing"))

        with pytest.raises(FileNotFoundError):
            record.collect()

    def test_use_policy_on_windows_platform_fails(self, sample_file: Path) -> None:
        """USE on a permission-less platform fails before stat'ing."""
        record = FileMetadata(path=str(sample_file))

        with (
            patch("filemeta.metadata.collector.os.lstat") as mock_lstat,
            pytest.raises(UnsupportedPermissionsError),
        ):
            record.collect(SourcePermissions.USE, platform=WINDOWS)

        mock_lstat.assert_not_called()
        assert record.ftype is None


class TestCollectPlatform:
    """Tests for platform injection."""

    def test_windows_sentinels(self, sample_file: Path) -> None:
        """On Windows-like platforms the sentinels are recorded."""
        record = FileMetadata(path=str(sample_file), checksum_type="md5")

        record.collect(platform=WINDOWS)

        assert record.owner == "S-1-5-32-544"
        assert record.group == "S-1-0-0"
        assert record.mode == 0o644
        assert record.checksum == "{md5}" + CHECKSUMS.digest("md5", sample_file)

    @posix_only
    def test_posix_platform(self, sample_file: Path) -> None:
        """The POSIX platform reports numeric ids."""
        record = FileMetadata(path=str(sample_file))

        record.collect(platform=POSIX)

        assert isinstance(record.owner, int)
        assert isinstance(record.group, int)


class TestToDataHash:
    """Tests for serialization to the structured form."""

    def test_all_keys(self) -> None:
        """Base and metadata fields are emitted with a nested checksum."""
        record = FileMetadata(
            path="/etc/motd",
            owner=0,
            group=0,
            mode=0o644,
            ftype=FileType.FILE,
            checksum_type="md5",
            checksum="{md5}d41d8cd98f00b204e9800998ecf8427e",
        )

        assert record.to_data_hash() == {
            "path": "/etc/motd",
            "relative_path": None,
            "links": "manage",
            "owner": 0,
            "group": 0,
            "mode": 0o644,
            "checksum": {"type": "md5", "value": "{md5}d41d8cd98f00b204e9800998ecf8427e"},
            "type": "file",
            "destination": None,
        }

    def test_uncollected_record(self) -> None:
        """An uncollected record still serializes its checksum type."""
        data = FileMetadata(path="/etc/motd").to_data_hash()

        assert data["checksum"] == {"type": "sha256", "value": None}
        assert data["type"] is None


class TestFromDataHash:
    """Tests for deserialization from the structured form."""

    def test_full_mapping(self) -> None:
        """Every known key is extracted."""
        record = FileMetadata.from_data_hash(
            {
                "path": "/etc/issue.link",
                "owner": 0,
                "group": 4,
                "mode": 0o777,
                "checksum": {"type": "md5", "value": None},
                "type": "link",
                "destination": "/etc/issue",
            }
        )

        assert record.path == "/etc/issue.link"
        assert record.owner == 0
        assert record.group == 4
        assert record.mode == 0o777
        assert record.checksum_type == "md5"
        assert record.checksum is None
        assert record.ftype == FileType.LINK
        assert record.destination == "/etc/issue"

    def test_missing_checksum_uses_default(self) -> None:
        """Without a checksum object the built-in default type is used."""
        record = FileMetadata.from_data_hash({"path": "/etc/motd"})

        assert record.checksum_type == "sha256"
        assert record.checksum is None

    def test_missing_checksum_uses_configured_default(self) -> None:
        """The configured default checksum type is threaded in explicitly."""
        record = FileMetadata.from_data_hash({"path": "/etc/motd"}, default_checksum_type="md5")

        assert record.checksum_type == "md5"

    def test_checksum_without_type_uses_default(self) -> None:
        """A checksum object lacking a type falls back to the default."""
        record = FileMetadata.from_data_hash(
            {"path": "/etc/motd", "checksum": {"value": "{sha1}abc"}},
            default_checksum_type="sha1",
        )

        assert record.checksum_type == "sha1"
        assert record.checksum == "{sha1}abc"

    def test_input_not_mutated(self) -> None:
        """The caller's mapping is left intact."""
        data = {"path": "/etc/motd", "owner": 0, "checksum": {"type": "md5", "value": None}}
        original = copy.deepcopy(data)

        FileMetadata.from_data_hash(data)

        assert data == original

    def test_base_fields_passed_through(self) -> None:
        """Remaining keys go to the base reference."""
        record = FileMetadata.from_data_hash(
            {"path": "/etc", "relative_path": "motd", "links": "follow"}
        )

        assert record.full_path == Path("/etc/motd")
        assert record.links == "follow"

    def test_mode_masked(self) -> None:
        """Transmitted modes with type bits are masked."""
        assert FileMetadata.from_data_hash({"path": "/etc/motd", "mode": 0o100644}).mode == 0o644

    @pytest.mark.parametrize(
        "data",
        [
            {"path": "/etc/motd", "checksum": {"type": "not_a_real_algorithm", "value": None}},
            {"path": "/etc/motd", "type": "socket"},
            {"path": "/etc/motd", "recurse": True},
            {"path": "motd"},
            {"owner": 0},
            {"path": "/etc/motd", "checksum": "{md5}abc"},
            {"path": "/etc/motd", "type": "file", "destination": "/elsewhere"},
            {"path": "/etc", "type": "directory", "destination": "/srv"},
            {"path": "/etc/motd", "checksum": {"type": "md5", "value": "{sha256}abc"}},
            {"path": "/etc/motd", "checksum": {"type": "md5", "value": "d41d8cd9"}},
            {"path": "/etc/motd", "ftype": "file"},
            {"path": "/etc/motd", "checksum_type": "md5"},
        ],
    )
    def test_invalid_mapping(self, data: dict[str, object]) -> None:
        """Invalid mappings raise MetadataValidationError."""
        with pytest.raises(MetadataValidationError):
            FileMetadata.from_data_hash(data)

    def test_unknown_keys_named(self) -> None:
        """Internal field names are not accepted as wire keys."""
        with pytest.raises(MetadataValidationError, match="unknown keys ftype"):
            FileMetadata.from_data_hash({"path": "/etc/motd", "ftype": "file"})

    def test_checksum_prefix_mismatch_named(self) -> None:
        """A checksum prefixed with another type is rejected."""
        with pytest.raises(MetadataValidationError, match="does not match checksum type md5"):
            FileMetadata.from_data_hash(
                {"path": "/etc/motd", "checksum": {"type": "md5", "value": "{sha256}abc"}}
            )

    def test_empty_none_checksum_accepted(self) -> None:
        """The none checksum type renders as a bare prefix."""
        record = FileMetadata.from_data_hash(
            {"path": "/etc/motd", "checksum": {"type": "none", "value": "{none}"}}
        )

        assert record.checksum == "{none}"


class TestRoundTrip:
    """Tests for serialize/deserialize symmetry."""

    @pytest.mark.parametrize(
        "record",
        [
            FileMetadata(path="/etc/motd"),
            FileMetadata(
                path="/etc",
                relative_path="motd",
                links="follow",
                owner=0,
                group=0,
                mode=0o4755,
                ftype=FileType.FILE,
                checksum_type="sha512",
                checksum="{sha512}00ff",
            ),
            FileMetadata(
                path="C:\\ProgramData\\app.ini",
                owner="S-1-5-32-544",
                group="S-1-0-0",
                mode=0o644,
                ftype=FileType.FILE,
                checksum_type="none",
                checksum="{none}",
            ),
            FileMetadata(
                path="/etc/issue.link",
                ftype=FileType.LINK,
                checksum_type="mtime",
                destination="/etc/issue",
            ),
        ],
    )
    def test_round_trip(self, record: FileMetadata) -> None:
        """deserialize(serialize(record)) reproduces every attribute."""
        restored = FileMetadata.from_data_hash(record.to_data_hash())

        assert restored == record
        assert restored.to_data_hash() == record.to_data_hash()

    @posix_only
    def test_round_trip_collected(
        self, sample_file: Path, sample_dir: Path, sample_link: Path, dangling_link: Path
    ) -> None:
        """Collected records survive a round trip field by field."""
        for path in (sample_file, sample_dir, sample_link, dangling_link):
            record = FileMetadata(path=str(path), checksum_type="md5")
            record.collect(SourcePermissions.USE)

            restored = FileMetadata.from_data_hash(record.to_data_hash())

            assert restored == record
