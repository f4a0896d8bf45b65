"""Core types, enums and exceptions for bgsub."""

from .enums import (
    ReadStatus,
    SequencerState,
    ExitReason,
    SubtractorAlgorithm,
)

from .exceptions import (
    BgsubError,
    SourceOpenError,
    SequencePathError,
)

from .types import (
    ReadResult,
    LoopState,
    SequencerResult,
)

__all__ = [
    # Enums
    "ReadStatus",
    "SequencerState",
    "ExitReason",
    "SubtractorAlgorithm",
    # Exceptions
    "BgsubError",
    "SourceOpenError",
    "SequencePathError",
    # Types
    "ReadResult",
    "LoopState",
    "SequencerResult",
]
