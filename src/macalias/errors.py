"""Exceptions raised by the alias record codec."""


class AliasError(Exception):
    """Base class for every error raised by macalias."""


class FormatError(AliasError):
    """Raised when data does not conform to the Alias Record format."""


class TruncatedInputError(FormatError):
    """Raised when the buffer ends before a field or the declared record size."""


class UnsupportedVersionError(FormatError):
    """Raised for any record version other than 2."""


class CapacityExceededError(AliasError, ValueError):
    """Raised when a value does not fit its fixed-size slot."""


class UnsupportedTargetError(AliasError):
    """Raised when the target is neither a regular file nor a directory."""


class FilesystemQueryError(AliasError, OSError):
    """Raised when the filesystem lookup for a target fails."""
