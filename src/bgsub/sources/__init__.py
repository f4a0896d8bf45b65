"""Frame source abstraction for bgsub.

Provides a common interface for feeding frames from video files or
numbered image sequences into the background-subtraction loop.

Quick start::

    from bgsub.sources import ImageSequenceSource

    with ImageSequenceSource("/data/images/1.png") as src:
        for frame in src:
            mask = subtractor.apply(frame.image)
"""

from bgsub.sources.frame import Frame
from bgsub.sources.base import FrameSource
from bgsub.sources.sequence_cursor import SequenceCursor
from bgsub.sources.video_file import VideoFileSource
from bgsub.sources.image_sequence import ImageSequenceSource

__all__ = [
    "Frame",
    "FrameSource",
    "SequenceCursor",
    "VideoFileSource",
    "ImageSequenceSource",
]
