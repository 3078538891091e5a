"""Filename and upload constants for file properties."""

# Characters replaced by "_" when sanitizing uploaded filenames
FILENAME_BLACKLIST = (
    "/",
    "\\",
    "\0",
    "*",
    ":",
    "?",
    '"',
    "<",
    ">",
    "|",
    "#",
    "&",
    "!",
    "`",
)
FILENAME_REPLACEMENT = "_"


class UploadDefaults:
    """Default upload settings."""

    UPLOAD_PATH = "uploads/"
    MAX_FILESIZE = 134220000  # 128M
    OVERWRITE = False
    PUBLIC_ACCESS = False

    # Timestamp layout used by generated filenames
    FILENAME_DATE_FORMAT = "%Y-%m-%d %H-%M-%S"

    # Length of the suffix appended to avoid filename collisions
    UNIQUE_SUFFIX_LENGTH = 13

    # Reported for content that does not match its declared signature format
    UNKNOWN_MIMETYPE = "application/octet-stream"


class UploadErrorCodes:
    """Upload transport error codes (mirrors the host's upload API)."""

    OK = 0
    INI_SIZE = 1
    FORM_SIZE = 2
    PARTIAL = 3
    NO_FILE = 4
    NO_TMP_DIR = 6
    CANT_WRITE = 7
    EXTENSION = 8
