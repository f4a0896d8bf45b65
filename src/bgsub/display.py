"""Annotation, display sinks, keyboard polling and playback pacing."""

import logging
import time
from typing import Callable, Protocol

import cv2
import numpy as np

from bgsub.utils.config import DisplayConfig

logger = logging.getLogger(__name__)

KEY_ESC = 27
EXIT_KEYS = (KEY_ESC, ord("q"))

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GREEN = (0, 255, 0)


def is_exit_key(key: int) -> bool:
    """``True`` for ESC or ``q``; ``-1`` (no key) never exits."""
    return key >= 0 and (key & 0xFF) in EXIT_KEYS


# ---------------------------------------------------------------------------
# Drawing
# ---------------------------------------------------------------------------

def annotate_frame(image: np.ndarray, label: str, config: DisplayConfig) -> np.ndarray:
    """Draw the frame-number label on a filled white box, in place."""
    top_left, bottom_right = config.label_box
    cv2.rectangle(image, top_left, bottom_right, WHITE, -1)
    cv2.putText(
        image, label, config.label_origin,
        cv2.FONT_HERSHEY_SIMPLEX, config.label_scale, BLACK,
    )
    return image


def postprocess_mask(mask: np.ndarray, config: DisplayConfig) -> np.ndarray:
    """Optionally remove speckle noise with a morphological opening."""
    if not config.morph_open:
        return mask
    kernel = cv2.getStructuringElement(
        cv2.MORPH_ELLIPSE, (config.morph_kernel_size, config.morph_kernel_size)
    )
    return cv2.morphologyEx(mask, cv2.MORPH_OPEN, kernel)


def draw_contour_boxes(
    image: np.ndarray, mask: np.ndarray, config: DisplayConfig
) -> int:
    """Box every foreground blob whose outline is longer than the threshold.

    Returns the number of boxes drawn.
    """
    # Shadows (127) are not foreground.
    _, binary = cv2.threshold(mask, 200, 255, cv2.THRESH_BINARY)
    contours, _ = cv2.findContours(binary, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    drawn = 0
    for contour in contours:
        if cv2.arcLength(contour, True) <= config.min_contour_perimeter:
            continue
        x, y, w, h = cv2.boundingRect(contour)
        cv2.rectangle(image, (x, y), (x + w, y + h), GREEN, 2)
        drawn += 1
    return drawn


# ---------------------------------------------------------------------------
# Sinks
# ---------------------------------------------------------------------------

class DisplaySink(Protocol):
    """Where annotated frames and masks go, and where keys come from."""

    def show(self, image: np.ndarray, mask: np.ndarray) -> None:
        ...

    def poll_key(self) -> int:
        """Return the pressed key code, or ``-1`` when none is pending."""
        ...

    def close(self) -> None:
        ...


class OpenCVDisplay:
    """Two HighGUI windows: the annotated frame and the foreground mask.

    Windows are created lazily on the first :meth:`show` so that nothing
    appears on screen when the run fails before its first frame.
    """

    def __init__(self, config: DisplayConfig):
        self.config = config
        self._windows_open = False

    def _ensure_windows(self) -> None:
        if self._windows_open:
            return
        cv2.namedWindow(self.config.frame_window)
        cv2.namedWindow(self.config.mask_window)
        self._windows_open = True

    def show(self, image: np.ndarray, mask: np.ndarray) -> None:
        self._ensure_windows()
        cv2.imshow(self.config.frame_window, image)
        cv2.imshow(self.config.mask_window, mask)

    def poll_key(self) -> int:
        # waitKey also pumps the HighGUI event loop; keep it short so it
        # does not double as the frame pacing.
        key = cv2.waitKey(self.config.poll_ms)
        return -1 if key < 0 else key & 0xFF

    def close(self) -> None:
        if self._windows_open:
            cv2.destroyAllWindows()
            self._windows_open = False


class NullDisplay:
    """Headless sink: shows nothing and never reports a key."""

    def __init__(self, config: DisplayConfig | None = None):
        self.config = config or DisplayConfig()
        self.frames_shown = 0

    def show(self, image: np.ndarray, mask: np.ndarray) -> None:
        self.frames_shown += 1

    def poll_key(self) -> int:
        return -1

    def close(self) -> None:
        pass


def create_display(config: DisplayConfig) -> DisplaySink:
    """Build the on-screen display, or a headless one when disabled."""
    if config.enabled:
        return OpenCVDisplay(config)
    logger.info("Display disabled; running headless")
    return NullDisplay(config)


# ---------------------------------------------------------------------------
# Pacing
# ---------------------------------------------------------------------------

class FramePacer:
    """Holds each iteration to at least ``interval_ms`` of wall-clock time.

    Only the time not already spent on decoding, model update and drawing
    is slept, so slow frames are not slowed further.
    """

    def __init__(
        self,
        interval_ms: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval = max(0.0, interval_ms / 1000.0)
        self._clock = clock
        self._sleep = sleep
        self._last: float | None = None

    def wait(self) -> float:
        """Sleep until the interval since the previous call has elapsed.

        Returns the number of seconds slept.
        """
        now = self._clock()
        slept = 0.0
        if self._last is not None and self.interval > 0:
            remaining = self.interval - (now - self._last)
            if remaining > 0:
                self._sleep(remaining)
                slept = remaining
                now = self._clock()
        self._last = now
        return slept
