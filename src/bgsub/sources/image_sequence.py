"""Numbered image sequence frame source."""

import logging
from pathlib import Path
from typing import Optional

import cv2
import numpy as np

from bgsub.core import ReadResult, SourceOpenError
from bgsub.sources.base import FrameSource
from bgsub.sources.frame import Frame
from bgsub.sources.sequence_cursor import SequenceCursor

logger = logging.getLogger(__name__)


class ImageSequenceSource(FrameSource):
    """Frame source that walks ``1.png, 2.png, 3.png, ...`` on disk.

    The first path names the starting frame; each following frame is
    found by incrementing the number in the file name.  The sequence ends
    at the first number with no file behind it.  A file that exists but
    cannot be decoded is reported as an I/O failure.

    Args:
        first_path: Path of the first image, e.g. ``"/data/images/1.png"``.
        preserve_padding: Keep the zero-padded width of the number when
            building the next file name (``007 -> 008`` instead of
            ``007 -> 8``).
    """

    def __init__(self, first_path: str | Path, preserve_padding: bool = False):
        self._first_path = str(first_path)
        self._preserve_padding = preserve_padding
        # Parse eagerly so a bad name fails before anything is opened.
        self._cursor = SequenceCursor.parse(self._first_path)

        self._pending: Optional[np.ndarray] = None
        self._is_open = False
        self._width: int = 0
        self._height: int = 0
        self._delivered: int = 0
        self._last_path: str = self._first_path

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        if self._is_open:
            return
        image = cv2.imread(self._first_path)
        if image is None:
            raise SourceOpenError(
                f"Unable to open first image frame: {self._first_path}"
            )
        self._cursor = SequenceCursor.parse(self._first_path)
        self._pending = image
        self._height, self._width = image.shape[:2]
        self._delivered = 0
        self._last_path = self._first_path
        self._is_open = True
        logger.info(
            "ImageSequenceSource opened: %s  %dx%d  next=%s",
            self._first_path, self._width, self._height,
            self._cursor.advance(self._preserve_padding).path,
        )

    def close(self) -> None:
        if self._is_open:
            self._is_open = False
            self._pending = None
            logger.info(
                "ImageSequenceSource closed: %s (%d frames read)",
                self._first_path, self._delivered,
            )

    def fetch(self) -> ReadResult:
        if not self._is_open:
            return ReadResult.io_failure(
                f"Image sequence is not open: {self._first_path}"
            )

        if self._pending is not None:
            image, self._pending = self._pending, None
            return ReadResult.ok(self._make_frame(image))

        nxt = self._cursor.advance(self._preserve_padding)
        self._last_path = nxt.path
        if not Path(nxt.path).is_file():
            return ReadResult.end_of_sequence(
                f"Unable to open image frame: {nxt.path}"
            )
        image = cv2.imread(nxt.path)
        if image is None:
            return ReadResult.io_failure(f"Unable to decode image frame: {nxt.path}")

        self._cursor = nxt
        return ReadResult.ok(self._make_frame(image))

    def _make_frame(self, image: np.ndarray) -> Frame:
        h, w = image.shape[:2]
        frame = Frame(
            image=image,
            timestamp=0.0,
            frame_number=self._delivered,
            label=self._cursor.stem,
            source_name=f"images:{self._cursor.path}",
            width=w,
            height=h,
        )
        self._delivered += 1
        return frame

    # ------------------------------------------------------------------
    # Extra properties
    # ------------------------------------------------------------------

    @property
    def cursor(self) -> SequenceCursor:
        """Cursor of the most recently delivered frame."""
        return self._cursor

    @property
    def last_path(self) -> str:
        """Most recent path this source tried to load."""
        return self._last_path

    @property
    def frames_delivered(self) -> int:
        return self._delivered

    # ------------------------------------------------------------------
    # FrameSource properties
    # ------------------------------------------------------------------

    @property
    def fps(self) -> float:
        return 0.0

    @property
    def resolution(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def name(self) -> str:
        return f"images:{self._first_path}"
