"""Frame dataclass for the bgsub FrameSource abstraction."""

from dataclasses import dataclass

import numpy as np


@dataclass
class Frame:
    """A single frame with metadata.

    Attributes:
        image: BGR uint8 numpy array of shape (H, W, 3).
        timestamp: Seconds into the source (video time for files, 0.0 for
            image sequences without timing).
        frame_number: Sequential counter starting from 0.
        label: Text drawn on the frame, e.g. the stream position ``"12"``
            for videos or the literal file number ``"007"`` for image
            sequences.
        source_name: Human-readable identifier, e.g. ``"file:video.avi"``
            or ``"images:/data/007.png"``.
        width: Frame width in pixels.
        height: Frame height in pixels.
    """

    image: np.ndarray
    timestamp: float
    frame_number: int
    label: str
    source_name: str
    width: int
    height: int
