"""Exceptions raised across the passage pipeline."""


class TypingClassicError(Exception):
    """Base class for errors raised by typeclassic."""


class SourceUnavailable(TypingClassicError):
    """Raw book text could not be fetched and no cached copy exists."""


class RepositoryError(TypingClassicError):
    """The passage repository could not be read."""


class RemoteSourceError(TypingClassicError):
    """The remote passage endpoint failed or returned an unusable payload."""
