"""Abstract base class for all bgsub frame sources."""

from abc import ABC, abstractmethod
from typing import Iterator, Optional

from bgsub.core import ReadResult
from bgsub.sources.frame import Frame


class FrameSource(ABC):
    """Uniform interface for providing frames to the sequencer.

    Concrete implementations exist for video files and numbered image
    sequences.  All sources produce :class:`Frame` objects with BGR uint8
    images (the OpenCV convention used throughout bgsub).

    :meth:`fetch` reports *why* a frame is missing through
    :class:`~bgsub.core.ReadResult`, so callers can tell a finished
    sequence from a broken one.  :meth:`read` and the iterator protocol
    collapse both into ``None`` / ``StopIteration``.

    Usage::

        with VideoFileSource("video.avi") as src:
            for frame in src:
                mask = subtractor.apply(frame.image)
    """

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    def open(self) -> None:
        """Open the underlying file(s).

        Raises:
            SourceOpenError: If the source cannot be opened.
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying file(s).  Safe to call more than once."""

    @abstractmethod
    def fetch(self) -> ReadResult:
        """Read the next frame and report the outcome."""

    def read(self) -> Optional[Frame]:
        """Read the next frame, or ``None`` when no frame is available."""
        result = self.fetch()
        return result.frame if result.is_frame else None

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def fps(self) -> float:
        """Native frames per second (``0.0`` when unknown)."""

    @property
    @abstractmethod
    def resolution(self) -> tuple[int, int]:
        """``(width, height)`` of the frames produced by this source."""

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """``True`` when the source has been opened and not yet closed."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier used in log messages and :attr:`Frame.source_name`."""

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "FrameSource":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Iterator protocol
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Frame]:
        return self

    def __next__(self) -> Frame:
        frame = self.read()
        if frame is None:
            raise StopIteration
        return frame
