"""Tests for FileProperty."""

from __future__ import annotations

import base64

import pytest

from modelprops.core.properties.file import decode_data_uri, is_data_uri, sanitize_filename
from modelprops.shared.constants import CheckNames
from modelprops.shared.errors import ErrorCode, InvalidValueError, UploadDirectoryError


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


def _data_uri(content: bytes, mimetype: str = "text/plain") -> str:
    return f"data:{mimetype};base64,{base64.b64encode(content).decode('ascii')}"


@pytest.fixture
def prop(factory):
    return factory.build({"type": "file", "label": "Document"}, ident="document")


class TestFileHelpers:
    """Test cases for module-level helpers."""

    def test_sanitize_filename(self):
        """Unsafe characters are replaced and leading dots stripped."""
        assert sanitize_filename("../my:file?.png") == "_my_file_.png"
        assert sanitize_filename(".hidden") == "hidden"
        assert sanitize_filename("a|b&c!.txt") == "a_b_c_.txt"

    def test_decode_base64_data_uri(self):
        """Base64 data URIs decode to their content and mimetype."""
        assert decode_data_uri(_data_uri(b"hello", "text/plain")) == ("text/plain", b"hello")

    def test_decode_percent_encoded_data_uri(self):
        """Data URIs without base64 are percent-decoded."""
        assert decode_data_uri("data:,hello%20world") == ("", b"hello world")

    def test_malformed_data_uri(self):
        """A data URI without payload separator is rejected."""
        with pytest.raises(ValueError, match="payload"):
            decode_data_uri("data:text/plain;base64")

    def test_is_data_uri(self):
        assert is_data_uri("data:,x") is True
        assert is_data_uri("uploads/a.png") is False
        assert is_data_uri(None) is False


class TestFileOptions:
    """Test cases for file options."""

    def test_defaults_from_settings(self, prop):
        """Upload defaults come from the settings."""
        assert prop.upload_path == "uploads/"
        assert prop.max_filesize == 134220000
        assert prop.overwrite is False
        assert prop.public_access is False
        assert prop.accepted_mimetypes == []

    def test_upload_path_trailing_slash(self, prop):
        """The upload path always ends with a slash."""
        assert prop.set_upload_path("files/images").upload_path == "files/images/"

    def test_negative_max_filesize_rejected(self, prop):
        with pytest.raises(InvalidValueError):
            prop.set_max_filesize(-1)

    def test_filesize_override_must_be_positive(self, prop):
        with pytest.raises(InvalidValueError):
            prop.set_filesize(-5)

    def test_sql_type(self, prop):
        assert prop.sql_type() == "VARCHAR(255)"
        assert prop.set_multiple(True).sql_type() == "TEXT"


class TestFileValidation:
    """Test cases for mimetype and filesize checks."""

    def test_max_filesize_zero_is_unbounded(self, prop):
        """A max filesize of 0 always passes."""
        prop.set_max_filesize(0).set_filesize(10**12)
        assert prop.validate_max_filesize() is True

    def test_empty_accepted_mimetypes_passes(self, prop):
        """An empty allow-list always passes."""
        prop.set_accepted_mimetypes([]).set_mimetype("application/x-anything")
        assert prop.validate_accepted_mimetypes() is True

    def test_accepted_mimetypes(self, prop, temp_dir):
        """The mimetype sniffed from the file content must be in the allow-list."""
        (temp_dir / "photo.png").write_bytes(PNG_BYTES)
        (temp_dir / "notes.txt").write_text("plain notes")
        prop.set_accepted_mimetypes(["image/png"])

        prop.set_val("photo.png")
        assert prop.validate_accepted_mimetypes() is True

        prop.set_val("notes.txt")
        assert prop.validate_accepted_mimetypes() is False
        assert prop.errors()[-1].code == CheckNames.ACCEPTED_MIMETYPES

    def test_content_outweighs_extension(self, prop, temp_dir):
        """A file named like an image but holding something else is rejected."""
        (temp_dir / "evil.png").write_bytes(b"#!/bin/sh\necho hi\n")
        prop.set_accepted_mimetypes(["image/png"]).set_val("evil.png")

        assert prop.mimetype() == "application/octet-stream"
        assert prop.validate_accepted_mimetypes() is False

    def test_unsigned_content_keeps_extension_type(self, prop, temp_dir):
        """Text content has no signature, so the extension decides."""
        (temp_dir / "notes.txt").write_text("plain notes")
        assert prop.set_val("notes.txt").mimetype() == "text/plain"

    def test_max_filesize_uses_actual_size(self, prop, temp_dir):
        """The size of the referenced file is checked."""
        (temp_dir / "big.bin").write_bytes(b"x" * 100)
        prop.set_max_filesize(10).set_val("big.bin")

        assert prop.filesize() == 100
        assert prop.validate_max_filesize() is False

    def test_override_wins_over_detection(self, prop, temp_dir):
        """An explicit filesize override is used by the check."""
        (temp_dir / "big.bin").write_bytes(b"x" * 100)
        prop.set_max_filesize(10).set_val("big.bin").set_filesize(5)
        assert prop.validate_max_filesize() is True

    def test_set_val_resets_cache(self, prop):
        """Assigning a new value drops the cached mimetype.

        Missing files fall back to their extension.
        """
        prop.set_val("a.png")
        assert prop.mimetype() == "image/png"

        prop.set_val("a.txt")
        assert prop.mimetype() == "text/plain"

    def test_check_order(self, prop):
        assert prop.validation_methods() == [
            *CheckNames.BASE,
            CheckNames.ACCEPTED_MIMETYPES,
            CheckNames.MAX_FILESIZE,
        ]


class TestUploadTarget:
    """Test cases for upload target resolution."""

    def test_creates_upload_directory(self, prop, temp_dir):
        """The upload directory is created recursively."""
        prop.set_upload_path("nested/uploads/")
        target = prop.upload_target("a.png")

        assert target == temp_dir / "nested" / "uploads" / "a.png"
        assert target.parent.is_dir()

    def test_existing_file_gets_unique_name(self, prop, temp_dir):
        """An existing target is not overwritten by default."""
        existing = temp_dir / "uploads" / "a.png"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"x")

        target = prop.upload_target("a.png")

        assert target != existing
        assert target.parent == existing.parent
        assert target.name.startswith("a-")
        assert target.suffix == ".png"

    def test_case_insensitive_collision(self, prop, temp_dir):
        """Collisions are detected regardless of filename case."""
        existing = temp_dir / "uploads" / "A.PNG"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"x")

        assert prop.upload_target("a.png").name != "a.png"

    def test_overwrite_keeps_name(self, prop, temp_dir):
        """With overwrite on, the existing path is returned."""
        existing = temp_dir / "uploads" / "a.png"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"x")

        assert prop.set_overwrite(True).upload_target("a.png") == existing

    def test_filename_is_sanitized(self, prop, temp_dir):
        assert prop.upload_target("../evil.png").name == "_evil.png"

    def test_generated_filename(self, prop):
        """Without a filename the label and a timestamp are used."""
        target = prop.upload_target()
        assert target.name.startswith("Document ")
        assert target.suffix == ""

    def test_directory_creation_failure(self, prop, mocker):
        """A directory that can not be created raises."""
        mocker.patch("pathlib.Path.mkdir", side_effect=OSError("read-only"))

        with pytest.raises(UploadDirectoryError) as exc_info:
            prop.upload_target("a.png")

        assert exc_info.value.code == ErrorCode.DIRECTORY_CREATION_FAILED

    def test_permission_denied(self, prop, mocker):
        """A directory that is not writable raises."""
        mocker.patch("modelprops.core.properties.file.os.access", return_value=False)

        with pytest.raises(UploadDirectoryError) as exc_info:
            prop.upload_target("a.png")

        assert exc_info.value.code == ErrorCode.PERMISSION_DENIED


class TestSave:
    """Test cases for uploads on save."""

    def test_data_uri_is_stored(self, prop, temp_dir):
        """A data URI value is written under the upload path."""
        prop.set_val(_data_uri(b"hello"))

        path = prop.save()

        assert path.startswith("uploads/Document ")
        assert (temp_dir / path).read_bytes() == b"hello"
        assert prop.val() == path

    def test_saved_data_uri_validates(self, prop, temp_dir):
        """An accepted upload still passes validation after save."""
        prop.set_accepted_mimetypes(["image/png"]).set_val(_data_uri(PNG_BYTES, "image/png"))

        path = prop.save()

        assert path.endswith(".png")
        assert (temp_dir / path).read_bytes() == PNG_BYTES
        assert prop.mimetype() == "image/png"
        assert prop.filesize() == len(PNG_BYTES)
        assert prop.validate() is True

    def test_saved_text_upload_validates(self, prop):
        """Text has no signature; the declared type is kept through save."""
        prop.set_accepted_mimetypes(["text/plain"]).set_val(_data_uri(b"hello"))

        prop.save()

        assert prop.mimetype() == "text/plain"
        assert prop.validate() is True

    def test_declared_mimetype_must_match_content(self, prop):
        """Content that contradicts its declared image type is rejected."""
        prop.set_accepted_mimetypes(["image/png"])
        assert prop.data_upload(_data_uri(b"#!/bin/sh\n", "image/png")) == ""

    def test_invalid_data_uri(self, prop):
        """Undecodable data fails."""
        with pytest.raises(InvalidValueError) as exc_info:
            prop.data_upload("data:text/plain;base64")

        assert exc_info.value.code == ErrorCode.INVALID_FILE_DATA

    def test_rejected_data_uri(self, prop):
        """Content failing the mimetype policy is not stored."""
        prop.set_accepted_mimetypes(["image/png"])
        assert prop.data_upload(_data_uri(b"hello", "text/plain")) == ""

    def test_single_upload(self, prop, temp_dir):
        """An upload entry is moved under the upload path."""
        source = temp_dir / "tmp_upload"
        source.write_bytes(b"content")
        uploads = {"document": {"name": "report.pdf", "tmp_name": str(source), "error": 0, "type": "application/pdf", "size": 7}}

        path = prop.save(uploads=uploads)

        assert path == "uploads/report.pdf"
        assert (temp_dir / path).read_bytes() == b"content"
        assert not source.exists()

    def test_multiple_uploads_tolerate_failures(self, factory, temp_dir):
        """A failed upload yields '' without blocking the others."""
        prop = factory.build({"type": "file", "multiple": True}, ident="gallery")
        first = temp_dir / "tmp1"
        first.write_bytes(b"1")
        uploads = {
            "gallery": {
                "name": ["one.png", "two.png", ""],
                "tmp_name": [str(first), str(temp_dir / "tmp2"), ""],
                "error": [0, 3, 4],
                "type": ["image/png", "image/png", ""],
                "size": [1, 0, 0],
            },
        }

        paths = prop.save(uploads=uploads)

        assert paths == ["uploads/one.png", ""]
        assert (temp_dir / "uploads" / "one.png").exists()

    def test_l10n_uploads(self, factory, temp_dir):
        """Per-locale uploads are stored by locale."""
        prop = factory.build({"type": "file", "l10n": True}, ident="manual")
        source = temp_dir / "tmp_en"
        source.write_bytes(b"en")
        uploads = {
            "manual": {
                "name": {"en": "manual-en.pdf", "fr": ""},
                "tmp_name": {"en": str(source), "fr": ""},
                "error": {"en": 0, "fr": 4},
                "type": {"en": "application/pdf", "fr": ""},
                "size": {"en": 2, "fr": 0},
            },
        }

        assert prop.save(uploads=uploads) == {"en": "uploads/manual-en.pdf", "fr": None}

    def test_failed_move_is_logged(self, prop, mocker):
        """A failed move is logged and yields ''."""
        logger = mocker.patch.object(prop, "logger")
        uploads = {"document": {"name": "a.pdf", "tmp_name": "/does/not/exist", "error": 0}}

        assert prop.save(uploads=uploads) is None
        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["extra"]["error_code"] == ErrorCode.FILE_MOVE_ERROR.value

    def test_failed_write_is_logged(self, prop, mocker):
        """A failed data URI write is logged with its own error code."""
        logger = mocker.patch.object(prop, "logger")
        mocker.patch("pathlib.Path.write_bytes", side_effect=OSError("disk full"))

        assert prop.data_upload(_data_uri(b"hello")) == ""
        assert logger.error.call_args.kwargs["extra"]["error_code"] == ErrorCode.FILE_WRITE_ERROR.value

    def test_upload_without_name(self, prop):
        with pytest.raises(InvalidValueError):
            prop.file_upload({"tmp_name": "x"})

    def test_plain_value_untouched(self, prop):
        """A regular path is returned as-is."""
        assert prop.save("uploads/a.png") == "uploads/a.png"


class TestFileExists:
    """Test cases for file_exists."""

    def test_case_insensitive_by_default(self, prop, temp_dir):
        """Files are matched ignoring case unless asked otherwise."""
        (temp_dir / "File.TXT").write_bytes(b"")
        assert prop.file_exists(temp_dir / "file.txt") is True
        assert prop.file_exists(temp_dir / "File.TXT", case_insensitive=False) is True
        assert prop.file_exists(temp_dir / "other.txt") is False

    def test_missing_directory(self, prop, temp_dir):
        assert prop.file_exists(temp_dir / "missing" / "a.txt") is False
