"""Core data types for bgsub."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Optional

import numpy as np

from .enums import ExitReason, ReadStatus, SequencerState

if TYPE_CHECKING:
    from bgsub.sources.frame import Frame


# ============================================================================
# Source Results
# ============================================================================

@dataclass(frozen=True)
class ReadResult:
    """Result of asking a source for its next frame.

    ``frame`` is set only when ``status`` is :attr:`ReadStatus.FRAME`.
    ``detail`` carries a human-readable reason for the other outcomes.
    """
    status: ReadStatus
    frame: Optional["Frame"] = None
    detail: str = ""

    @classmethod
    def ok(cls, frame: "Frame") -> "ReadResult":
        return cls(status=ReadStatus.FRAME, frame=frame)

    @classmethod
    def end_of_sequence(cls, detail: str = "") -> "ReadResult":
        return cls(status=ReadStatus.END_OF_SEQUENCE, detail=detail)

    @classmethod
    def io_failure(cls, detail: str = "") -> "ReadResult":
        return cls(status=ReadStatus.IO_FAILURE, detail=detail)

    @property
    def is_frame(self) -> bool:
        return self.status is ReadStatus.FRAME


# ============================================================================
# Sequencer State
# ============================================================================

@dataclass(frozen=True)
class LoopState:
    """Working state of one sequencer iteration.

    A fresh instance is returned from every step; nothing is mutated in
    place across iterations.
    """
    state: SequencerState = SequencerState.RUNNING
    frame: Optional["Frame"] = None
    mask: Optional[np.ndarray] = None
    key: int = -1
    frames_processed: int = 0
    exit_reason: Optional[ExitReason] = None
    detail: str = ""

    @property
    def running(self) -> bool:
        return self.state is SequencerState.RUNNING

    def terminate(self, reason: ExitReason, detail: str = "") -> "LoopState":
        """Return a TERMINATED copy of this state."""
        return replace(
            self,
            state=SequencerState.TERMINATED,
            exit_reason=reason,
            detail=detail,
        )


@dataclass(frozen=True)
class SequencerResult:
    """Final outcome of a sequencer run."""
    exit_reason: ExitReason
    frames_processed: int
    detail: str = ""

    @property
    def user_requested(self) -> bool:
        return self.exit_reason is ExitReason.USER_QUIT
