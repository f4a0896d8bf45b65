"""Video file frame source."""

import logging
from pathlib import Path
from typing import Optional

import cv2

from bgsub.core import ReadResult, SourceOpenError
from bgsub.sources.base import FrameSource
from bgsub.sources.frame import Frame

logger = logging.getLogger(__name__)


class VideoFileSource(FrameSource):
    """Frame source backed by a video file on disk.

    Frames are read strictly in stream order; there is no seeking.  Each
    frame is labelled with the stream position reported by the capture
    after the read (``"1"`` for the first frame).

    A failed read is reported as end of sequence once the number of
    frames delivered has reached the container's frame count, and as an
    I/O failure otherwise (including when the count is unknown).

    Args:
        path: Anything ``cv2.VideoCapture`` opens: a video file (avi, mp4,
            mkv, etc.), an image pattern such as ``f_%03d.png``, or a
            stream URL.
    """

    def __init__(self, path: str | Path):
        self._path = str(path)

        self._cap: Optional[cv2.VideoCapture] = None
        self._native_fps: float = 0.0
        self._total_frames: int = 0
        self._width: int = 0
        self._height: int = 0

        self._delivered: int = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(self) -> None:
        if self._cap is not None:
            return
        self._cap = cv2.VideoCapture(self._path)
        if not self._cap.isOpened():
            self._cap = None
            raise SourceOpenError(f"Unable to open video file: {self._path}")

        self._native_fps = float(self._cap.get(cv2.CAP_PROP_FPS) or 0.0)
        self._total_frames = int(self._cap.get(cv2.CAP_PROP_FRAME_COUNT) or 0)
        self._width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH) or 0)
        self._height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT) or 0)
        self._delivered = 0

        duration = self._total_frames / self._native_fps if self._native_fps else 0
        logger.info(
            "VideoFileSource opened: %s  %dx%d @ %.1f fps  %d frames (%.1fs)",
            self._path, self._width, self._height, self._native_fps,
            self._total_frames, duration,
        )

    def close(self) -> None:
        if self._cap is not None:
            self._cap.release()
            self._cap = None
            logger.info(
                "VideoFileSource closed: %s (%d frames read)",
                self._path, self._delivered,
            )

    def fetch(self) -> ReadResult:
        if self._cap is None:
            return ReadResult.io_failure(f"Video source is not open: {self._path}")

        ret, image = self._cap.read()
        if not ret or image is None:
            if 0 < self._total_frames <= self._delivered:
                return ReadResult.end_of_sequence(
                    f"End of video after {self._delivered} frames: {self._path}"
                )
            return ReadResult.io_failure(
                f"Unable to read frame {self._delivered + 1} of {self._path}"
            )

        position = int(self._cap.get(cv2.CAP_PROP_POS_FRAMES) or 0)
        if position <= 0:
            position = self._delivered + 1
        ts = self._delivered / self._native_fps if self._native_fps else 0.0

        h, w = image.shape[:2]
        frame = Frame(
            image=image,
            timestamp=ts,
            frame_number=self._delivered,
            label=str(position),
            source_name=self.name,
            width=w,
            height=h,
        )
        self._delivered += 1
        return ReadResult.ok(frame)

    # ------------------------------------------------------------------
    # Extra properties
    # ------------------------------------------------------------------

    @property
    def total_frames(self) -> int:
        """Frame count reported by the container (``0`` when unknown)."""
        return self._total_frames

    @property
    def frames_delivered(self) -> int:
        """Number of frames returned so far."""
        return self._delivered

    # ------------------------------------------------------------------
    # FrameSource properties
    # ------------------------------------------------------------------

    @property
    def fps(self) -> float:
        return self._native_fps

    @property
    def resolution(self) -> tuple[int, int]:
        return (self._width, self._height)

    @property
    def is_open(self) -> bool:
        return self._cap is not None and self._cap.isOpened()

    @property
    def name(self) -> str:
        return f"file:{Path(self._path).name}"
