"""File property: upload resolution and storage.

The value is a path relative to the resolver's base path (or a list of
paths when multiple). Uploads come either from an upload transport map
(``{name, tmp_name, error, type, size}`` entries keyed by property
ident) or from inline ``data:`` URIs found in the current value.
"""

from __future__ import annotations

import base64
import binascii
import mimetypes
import os
import shutil
import uuid
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any
from urllib.parse import unquote_to_bytes

import filetype
from pydantic import Field, field_validator

from modelprops.core.paths import BasePathResolver, PathResolver
from modelprops.core.properties.base import UNSET, AbstractProperty, PropertyOptions, Setter
from modelprops.core.validation import ValidationHandler
from modelprops.shared.constants import (
    FILENAME_BLACKLIST,
    FILENAME_REPLACEMENT,
    CheckMessages,
    CheckNames,
    SqlTypes,
    UploadDefaults,
    UploadErrorCodes,
)
from modelprops.shared.errors import (
    ErrorCode,
    create_directory_creation_error,
    create_invalid_value_error,
    create_permission_denied_error,
)
from modelprops.shared.logging import log_file_operation

DATA_URI_PREFIX = "data:"
UPLOAD_FIELDS = ("name", "tmp_name", "error", "type", "size")

# Mimetypes recognizable by their content signature
SIGNATURE_MIMETYPES = frozenset(kind.mime for kind in filetype.types)


def is_data_uri(val: Any) -> bool:
    return isinstance(val, str) and val.startswith(DATA_URI_PREFIX)


def decode_data_uri(data_uri: str) -> tuple[str, bytes]:
    """Decode a ``data:`` URI.

    Returns:
        Tuple of (declared mimetype, content). The mimetype is empty
        when the URI does not declare one.

    Raises:
        ValueError: If the URI is malformed
    """
    if not is_data_uri(data_uri):
        msg = "Not a data URI"
        raise ValueError(msg)
    header, sep, payload = data_uri[len(DATA_URI_PREFIX):].partition(",")
    if not sep:
        msg = "Data URI has no payload separator"
        raise ValueError(msg)

    params = header.split(";")
    mimetype = params[0].strip()
    if "base64" in (p.strip().lower() for p in params[1:]):
        try:
            content = base64.b64decode(payload, validate=False)
        except binascii.Error as e:
            msg = f"Invalid base64 payload: {e}"
            raise ValueError(msg) from e
    else:
        content = unquote_to_bytes(payload)
    return mimetype, content


def sniff_mimetype(source: bytes | Path, fallback: str = "") -> str:
    r"""Detect a mimetype from file content.

    ``fallback`` (a declared or filename-derived type) is used when the
    content has no known signature, unless it names a format that does
    have one: such content is reported as ``application/octet-stream``.

    Example:
        >>> sniff_mimetype(b"\x89PNG\r\n\x1a\n" + bytes(16))
        'image/png'
        >>> sniff_mimetype(b"#!/bin/sh", "image/png")
        'application/octet-stream'
    """
    kind = filetype.guess(source if isinstance(source, bytes) else str(source))
    if kind is not None:
        return kind.mime
    if fallback in SIGNATURE_MIMETYPES:
        return UploadDefaults.UNKNOWN_MIMETYPE
    return fallback


def sanitize_filename(filename: str) -> str:
    """Replace unsafe characters and strip leading dots.

    Example:
        >>> sanitize_filename("../my:file?.png")
        '_my_file_.png'
    """
    for char in FILENAME_BLACKLIST:
        filename = filename.replace(char, FILENAME_REPLACEMENT)
    return filename.lstrip(".")


class FileOptions(PropertyOptions):
    public_access: bool = UploadDefaults.PUBLIC_ACCESS
    upload_path: str = UploadDefaults.UPLOAD_PATH
    overwrite: bool = UploadDefaults.OVERWRITE
    accepted_mimetypes: list[str] = Field(default_factory=list)
    max_filesize: int = Field(default=UploadDefaults.MAX_FILESIZE, ge=0)

    @field_validator("upload_path")
    @classmethod
    def force_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/") + "/"


class FileProperty(AbstractProperty):
    """A file stored under the upload path."""

    type_ident = "file"
    options_class = FileOptions

    _options: FileOptions

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        super().__init__(data)
        resolver = (data or {}).get("path_resolver")
        self.path_resolver: PathResolver = resolver or BasePathResolver(self.settings.upload.base_path)
        self._mimetype: str | None = None
        self._filesize: int | None = None

    def default_options(self) -> dict[str, Any]:
        upload = self.settings.upload
        return {
            **super().default_options(),
            "upload_path": upload.upload_path,
            "max_filesize": upload.max_filesize,
            "overwrite": upload.overwrite,
        }

    def setters(self) -> dict[str, Setter]:
        return {
            **super().setters(),
            "public_access": self.set_public_access,
            "upload_path": self.set_upload_path,
            "overwrite": self.set_overwrite,
            "accepted_mimetypes": self.set_accepted_mimetypes,
            "max_filesize": self.set_max_filesize,
        }

    # ------------------------------------------------------------------
    # Options
    # ------------------------------------------------------------------

    @property
    def public_access(self) -> bool:
        return self._options.public_access

    def set_public_access(self, public: Any) -> FileProperty:
        self._set_option("public_access", bool(public))
        return self

    @property
    def upload_path(self) -> str:
        return self._options.upload_path

    def set_upload_path(self, path: str) -> FileProperty:
        self._set_option("upload_path", path)
        return self

    @property
    def overwrite(self) -> bool:
        return self._options.overwrite

    def set_overwrite(self, overwrite: Any) -> FileProperty:
        self._set_option("overwrite", bool(overwrite))
        return self

    @property
    def accepted_mimetypes(self) -> list[str]:
        return list(self._options.accepted_mimetypes)

    def set_accepted_mimetypes(self, mimetypes_: list[str]) -> FileProperty:
        self._set_option("accepted_mimetypes", mimetypes_)
        return self

    @property
    def max_filesize(self) -> int:
        return self._options.max_filesize

    def set_max_filesize(self, size: int) -> FileProperty:
        self._set_option("max_filesize", size)
        return self

    # ------------------------------------------------------------------
    # File attributes
    # ------------------------------------------------------------------

    def set_val(self, val: Any) -> FileProperty:
        super().set_val(val)
        self._mimetype = None
        self._filesize = None
        return self

    def set_mimetype(self, mimetype: str) -> FileProperty:
        """Override the detected mimetype (e.g. for a temporary upload)."""
        if not isinstance(mimetype, str):
            raise create_invalid_value_error(
                "Mimetype must be a string",
                ident=self.ident,
                code=ErrorCode.INVALID_OPTION,
                operation="set_mimetype",
            )
        self._mimetype = mimetype
        return self

    def set_filesize(self, size: int) -> FileProperty:
        """Override the detected file size, in bytes."""
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise create_invalid_value_error(
                "Filesize must be a positive integer, in bytes.",
                ident=self.ident,
                code=ErrorCode.INVALID_OPTION,
                operation="set_filesize",
            )
        self._filesize = size
        return self

    def paths(self) -> list[str]:
        """Every non-empty path held by the current value."""
        val = self.val()
        values = list(val.values()) if isinstance(val, Mapping) else [val]
        flat: list[str] = []
        for v in values:
            items = v if isinstance(v, list) else [v]
            flat.extend(str(item) for item in items if item)
        return flat

    def resolve_path(self, path: str | Path) -> Path:
        path = Path(path)
        if path.is_absolute():
            return path
        return self.path_resolver.base_path() / path

    @staticmethod
    def guess_mimetype(filename: str | Path) -> str:
        """Mimetype implied by a filename's extension."""
        mimetype, _ = mimetypes.guess_type(str(filename), strict=False)
        return mimetype or ""

    def detect_mimetype(self, path: str | Path, filename: str | None = None) -> str:
        """Mimetype of the file at ``path``, sniffed from its content.

        The extension of ``filename`` (or of ``path``) is used when the
        file can not be read or its content has no known signature.
        """
        guessed = self.guess_mimetype(filename or path)
        resolved = self.resolve_path(path)
        if not resolved.is_file() or not os.access(resolved, os.R_OK):
            return guessed
        return sniff_mimetype(resolved, guessed)

    def detect_filesize(self, path: str | Path) -> int:
        resolved = self.resolve_path(path)
        if not resolved.is_file() or not os.access(resolved, os.R_OK):
            return 0
        return resolved.stat().st_size

    def mimetype(self) -> str:
        """Mimetype of the (first) file, detected once and cached."""
        if self._mimetype is None:
            paths = self.paths()
            if not paths:
                return ""
            self._mimetype = self.detect_mimetype(paths[0])
        return self._mimetype

    def filesize(self) -> int:
        """Size of the (first) file in bytes, detected once and cached."""
        if self._filesize is None:
            paths = self.paths()
            if not paths:
                return 0
            self._filesize = self.detect_filesize(paths[0])
        return self._filesize

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validation_methods(self) -> list[str]:
        return [
            *super().validation_methods(),
            CheckNames.ACCEPTED_MIMETYPES,
            CheckNames.MAX_FILESIZE,
        ]

    def validation_handlers(self) -> dict[str, ValidationHandler]:
        return {
            **super().validation_handlers(),
            CheckNames.ACCEPTED_MIMETYPES: self.validate_accepted_mimetypes,
            CheckNames.MAX_FILESIZE: self.validate_max_filesize,
        }

    def _mimetypes_to_check(self) -> list[str]:
        if self._mimetype is not None:
            return [self._mimetype]
        return [self.detect_mimetype(path) for path in self.paths()]

    def _filesizes_to_check(self) -> list[int]:
        if self._filesize is not None:
            return [self._filesize]
        return [self.detect_filesize(path) for path in self.paths()]

    def validate_accepted_mimetypes(self) -> bool:
        accepted = self.accepted_mimetypes
        if not accepted:
            return True

        if all(mimetype in accepted for mimetype in self._mimetypes_to_check()):
            return True
        self.validator().error(CheckMessages.ACCEPTED_MIMETYPES, CheckNames.ACCEPTED_MIMETYPES)
        return False

    def validate_max_filesize(self) -> bool:
        max_filesize = self.max_filesize
        if max_filesize == 0:
            return True

        if all(size <= max_filesize for size in self._filesizes_to_check()):
            return True
        self.validator().error(CheckMessages.MAX_FILESIZE, CheckNames.MAX_FILESIZE)
        return False

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def save(self, val: Any = UNSET, *, uploads: Mapping[str, Any] | None = None) -> Any:
        """Store uploaded files and return the resulting path(s).

        Args:
            val: Optional new value, set before saving
            uploads: Upload transport map keyed by property ident

        Returns:
            The stored path, or list / per-locale mapping of paths.
            Failed uploads are represented by an empty string.
        """
        if val is not UNSET:
            self.set_val(val)

        entry = (uploads or {}).get(self.ident)
        if entry and entry.get("name") and entry.get("tmp_name"):
            names = entry["name"]
            result: Any
            if isinstance(names, (list, tuple)) and self.multiple:
                result = [
                    self.file_upload(self._upload_entry(entry, index))
                    for index, name in enumerate(names)
                    if name
                ]
            elif isinstance(names, Mapping) and self.l10n:
                result = {}
                for lang, name in names.items():
                    if not name:
                        result[lang] = ""
                        continue
                    result[lang] = self.file_upload(self._upload_entry(entry, lang))
            else:
                result = self.file_upload(entry)
            self._set_stored(result)
            return self.val()

        val = self.val()
        if self.multiple and isinstance(val, list):
            if not any(is_data_uri(v) for v in val):
                return val
            stored: Any = [self.data_upload(v) if is_data_uri(v) else v for v in val]
        elif self.l10n and isinstance(val, Mapping):
            if not any(is_data_uri(v) for v in val.values()):
                return val
            stored = {lang: self.data_upload(v) if is_data_uri(v) else v for lang, v in val.items()}
        elif is_data_uri(val):
            stored = self.data_upload(val)
        else:
            return val

        self._set_stored(stored)
        return self.val()

    def _set_stored(self, stored: Any) -> None:
        """Set the stored path(s), keeping the upload's mimetype and size.

        Only a single stored file keeps them; the caches describe one file.
        """
        uploaded = (self._mimetype, self._filesize)
        self.set_val(stored)
        if stored and isinstance(stored, str):
            self._mimetype, self._filesize = uploaded

    @staticmethod
    def _upload_entry(entry: Mapping[str, Any], key: int | str) -> dict[str, Any]:
        """Extract one file from parallel upload arrays or maps."""
        single: dict[str, Any] = {}
        for field in UPLOAD_FIELDS:
            values = entry.get(field)
            try:
                single[field] = values[key] if values is not None else None
            except (IndexError, KeyError, TypeError):
                single[field] = None
        return single

    def data_upload(self, data_uri: str) -> str:
        """Decode a data URI and write it under the upload path.

        Returns:
            The stored path, or "" if the content was rejected or could
            not be written.
        """
        try:
            mimetype, content = decode_data_uri(data_uri)
        except ValueError as e:
            raise create_invalid_value_error(
                "File content could not be decoded.",
                ident=self.ident,
                code=ErrorCode.INVALID_FILE_DATA,
                operation="data_upload",
                original_error=e,
            ) from e

        self.set_mimetype(sniff_mimetype(content, mimetype))
        self.set_filesize(len(content))
        if not self.validate_accepted_mimetypes() or not self.validate_max_filesize():
            return ""

        target = self.upload_target()
        try:
            target.write_bytes(content)
        except OSError as e:
            log_file_operation(
                self.logger,
                "data_upload",
                "data-uri",
                str(target),
                success=False,
                error_message=str(e),
                context={"property_ident": self.ident},
                error_code=ErrorCode.FILE_WRITE_ERROR.value,
            )
            return ""

        log_file_operation(self.logger, "data_upload", "data-uri", str(target))
        return self.relative_path(target)

    def file_upload(self, file_data: Mapping[str, Any]) -> str:
        """Move one uploaded file under the upload path.

        Raises:
            InvalidValueError: If the entry has no ``name``

        Returns:
            The stored path, or "" if the upload failed or was rejected.
        """
        if not file_data.get("name"):
            raise create_invalid_value_error(
                "File data is invalid",
                ident=self.ident,
                code=ErrorCode.INVALID_FILE_DATA,
                operation="file_upload",
            )

        source = str(file_data.get("tmp_name") or "")
        error_code = int(file_data.get("error") or UploadErrorCodes.OK)
        if error_code != UploadErrorCodes.OK:
            log_file_operation(
                self.logger,
                "file_upload",
                source,
                success=False,
                error_message=f"upload error code {error_code}",
                context={"property_ident": self.ident},
            )
            return ""

        target = self.upload_target(str(file_data["name"]))
        source_path = Path(source)
        if source and source_path.is_file():
            declared = file_data.get("type") or self.guess_mimetype(file_data["name"])
            self.set_mimetype(sniff_mimetype(source_path, declared))
            self.set_filesize(source_path.stat().st_size)
            if not self.validate_accepted_mimetypes() or not self.validate_max_filesize():
                return ""

        try:
            shutil.move(source, target)
        except OSError as e:
            log_file_operation(
                self.logger,
                "file_upload",
                source,
                str(target),
                success=False,
                error_message=str(e),
                context={"property_ident": self.ident},
                error_code=ErrorCode.FILE_MOVE_ERROR.value,
            )
            return ""

        log_file_operation(self.logger, "file_upload", source, str(target))
        return self.relative_path(target)

    def upload_dir(self) -> Path:
        return self.resolve_path(self.upload_path)

    def upload_target(self, filename: str | None = None) -> Path:
        """Resolve the path a new file will be written to.

        The upload directory is created if needed. When a file already
        exists at the target and ``overwrite`` is off, a unique suffix
        is appended to the file's stem.

        Raises:
            UploadDirectoryError: If the directory can not be created or
                is not writable
        """
        directory = self.upload_dir()
        name = sanitize_filename(filename) if filename else self.generate_filename()

        if not directory.exists():
            self.logger.debug("Path does not exist. Attempting to create path %s", directory)
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise create_directory_creation_error(str(directory), "upload_target", e) from e

        if not os.access(directory, os.W_OK):
            raise create_permission_denied_error(str(directory), "upload_target")

        target = directory / name
        if not self.file_exists(target) or self.overwrite:
            return target

        stem, suffix = Path(name).stem, Path(name).suffix
        while self.file_exists(target):
            unique = uuid.uuid4().hex[: UploadDefaults.UNIQUE_SUFFIX_LENGTH]
            target = directory / f"{stem}-{unique}{suffix}"
        return target

    def file_exists(self, file: str | Path, case_insensitive: bool = True) -> bool:
        """Whether ``file`` exists, optionally ignoring filename case."""
        path = Path(file)
        if path.exists():
            return True
        if not case_insensitive or not path.parent.is_dir():
            return False
        lowered = path.name.lower()
        return any(entry.name.lower() == lowered for entry in path.parent.iterdir())

    def relative_path(self, target: Path) -> str:
        """Express ``target`` relative to the base path when possible."""
        try:
            return target.relative_to(self.path_resolver.base_path()).as_posix()
        except ValueError:
            return target.as_posix()

    def generate_filename(self) -> str:
        """Default filename: the label followed by a timestamp."""
        timestamp = datetime.now().strftime(UploadDefaults.FILENAME_DATE_FORMAT)
        filename = sanitize_filename(f"{self.label} {timestamp}")
        extension = self.generate_extension()
        if extension:
            return f"{filename}.{extension}"
        return filename

    def generate_extension(self) -> str:
        """Extension for generated filenames, derived from the mimetype."""
        if not self._mimetype:
            return ""
        extension = mimetypes.guess_extension(self._mimetype, strict=False)
        return (extension or "").lstrip(".")

    def sql_type(self) -> str:
        # Multiple paths are stored as TEXT since they hold many values
        if self.multiple:
            return SqlTypes.TEXT
        return SqlTypes.varchar(SqlTypes.DEFAULT_VARCHAR_LENGTH)
