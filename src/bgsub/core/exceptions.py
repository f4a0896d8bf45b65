"""Exception hierarchy for bgsub."""


class BgsubError(Exception):
    """Base class for all errors raised by bgsub."""


class SourceOpenError(BgsubError, RuntimeError):
    """A video file or first image frame could not be opened."""


class SequencePathError(BgsubError, ValueError):
    """An image path cannot be parsed into a numbered sequence."""
