"""Validation check names and failure messages."""


class CheckNames:
    """Named validation checks.

    Base checks always run first and in this order.
    """

    REQUIRED = "required"
    UNIQUE = "unique"
    ALLOW_NULL = "allow_null"
    MULTIPLE = "multiple"

    # DateTime
    MIN = "min"
    MAX = "max"

    # String
    MIN_LENGTH = "min_length"
    MAX_LENGTH = "max_length"
    REGEXP = "regexp"

    # File
    ACCEPTED_MIMETYPES = "accepted_mimetypes"
    MAX_FILESIZE = "max_filesize"

    BASE = (REQUIRED, UNIQUE, ALLOW_NULL)


class CheckMessages:
    """Failure messages recorded by validation checks."""

    REQUIRED = "Value is required."
    ALLOW_NULL = "Value can not be null."
    MULTIPLE_MIN = "Not enough values (minimum {min})."
    MULTIPLE_MAX = "Too many values (maximum {max})."
    DATE_MIN = "The date is smaller than the minimum value"
    DATE_MAX = "The date is bigger than the maximum value"
    MIN_LENGTH = "Value is shorter than {min_length} characters."
    MAX_LENGTH = "Value is longer than {max_length} characters."
    REGEXP = "Value does not match the pattern {regexp}."
    ACCEPTED_MIMETYPES = "Accepted mimetypes error"
    MAX_FILESIZE = "Max filesize error"
