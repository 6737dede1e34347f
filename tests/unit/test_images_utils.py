"""Unit tests for image ID and archive helpers."""

import io
import tarfile

import pytest

from crtkit.utils.archive import extract_archive
from crtkit.utils.errors import ProviderError
from crtkit.utils.images import clean_image_id, short_image_id, split_repo_tag


class TestImageIds:
    """Tests for image ID helpers."""

    def test_clean_image_id(self):
        """Test algorithm prefix is stripped."""
        assert clean_image_id("sha256:abcdef") == "abcdef"
        assert clean_image_id("abcdef") == "abcdef"

    def test_short_image_id(self):
        """Test display IDs are 12 characters."""
        assert short_image_id("sha256:" + "0123456789abcdef" * 4) == "0123456789ab"

    def test_short_image_id_short_input(self):
        """Test IDs shorter than the display length are kept whole."""
        assert short_image_id("sha256:abc") == "abc"
        assert short_image_id("") == ""


class TestSplitRepoTag:
    """Tests for split_repo_tag."""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("nginx", ("nginx", "latest")),
            ("nginx:1.25", ("nginx", "1.25")),
            ("localhost:5000/app", ("localhost:5000/app", "latest")),
            ("localhost:5000/app:2", ("localhost:5000/app", "2")),
            ("app@sha256:abc", ("app", "sha256:abc")),
        ],
    )
    def test_split(self, name, expected):
        """Test repository and tag extraction."""
        assert split_repo_tag(name) == expected


class TestExtractArchive:
    """Tests for extract_archive."""

    def test_extracts_members(self, tmp_path, image_tarball):
        """Test archive members land in the destination."""
        archive = tmp_path / "image.tar"
        archive.write_bytes(image_tarball)

        extract_archive(archive, tmp_path / "out")

        assert (tmp_path / "out" / "manifest.json").exists()

    def test_rejects_path_traversal(self, tmp_path):
        """Test members escaping the destination are refused."""
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            info = tarfile.TarInfo("../escape.txt")
            info.size = 1
            tar.addfile(info, io.BytesIO(b"x"))
        archive = tmp_path / "evil.tar"
        archive.write_bytes(buffer.getvalue())

        with pytest.raises(ProviderError):
            extract_archive(archive, tmp_path / "out")
        assert not (tmp_path / "escape.txt").exists()

    def test_rejects_absolute_symlink(self, tmp_path):
        """Test links pointing outside the destination are refused."""
        buffer = io.BytesIO()
        with tarfile.open(fileobj=buffer, mode="w") as tar:
            info = tarfile.TarInfo("etc-passwd")
            info.type = tarfile.SYMTYPE
            info.linkname = "/etc/passwd"
            tar.addfile(info)
        archive = tmp_path / "links.tar"
        archive.write_bytes(buffer.getvalue())

        with pytest.raises(ProviderError):
            extract_archive(archive, tmp_path / "out")
        assert not (tmp_path / "out" / "etc-passwd").is_symlink()

    def test_interpreter_has_extraction_filters(self):
        """Test the supported interpreters ship tarfile's data filter."""
        assert callable(getattr(tarfile, "data_filter", None))

    def test_invalid_archive(self, tmp_path):
        """Test unreadable archives raise ProviderError."""
        archive = tmp_path / "broken.tar"
        archive.write_bytes(b"not a tarball")

        with pytest.raises(ProviderError) as exc_info:
            extract_archive(archive, tmp_path)
        assert exc_info.value.operation == "extract_archive"
