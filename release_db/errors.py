"""Exceptions raised while building the repository database."""


class ReleaseDbError(Exception):
    """Base class for all release-db errors."""


class ConfigError(ReleaseDbError):
    """Configuration file is missing, unreadable or inconsistent."""


class UpstreamFetchError(ReleaseDbError):
    """The release listing could not be retrieved from GitHub."""


class MalformedVersionError(ReleaseDbError):
    """An asset's version token does not look like N.N.N<suffix>."""


class ArchiveError(ReleaseDbError):
    """The tar container could not be encoded."""


class ArchiveNameTooLongError(ArchiveError):
    """A member name does not fit the 100 byte ustar name field."""


class ArchiveFieldOverflowError(ArchiveError):
    """A numeric value does not fit its fixed-width octal header field."""
