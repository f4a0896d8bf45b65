"""Core enumerations for bgsub."""

from enum import Enum, auto


class ReadStatus(Enum):
    """Outcome of a single frame read from a source."""
    FRAME = auto()
    END_OF_SEQUENCE = auto()
    IO_FAILURE = auto()


class SequencerState(Enum):
    """State of the frame sequencer loop."""
    RUNNING = auto()
    TERMINATED = auto()


class ExitReason(Enum):
    """Why the sequencer left the RUNNING state."""
    USER_QUIT = auto()
    END_OF_SEQUENCE = auto()
    IO_FAILURE = auto()


class SubtractorAlgorithm(str, Enum):
    """Background subtraction algorithms available in OpenCV."""
    MOG2 = "MOG2"
    KNN = "KNN"
