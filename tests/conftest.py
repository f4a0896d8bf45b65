"""Pytest configuration and shared fakes for bgsub tests.

Nothing here opens a window: displays are recorded, captures are scripted,
and pacing is disabled.
"""

import logging
from pathlib import Path
from typing import Callable, List, Sequence

import cv2
import numpy as np
import pytest

from bgsub.core import ReadResult
from bgsub.display import FramePacer
from bgsub.sources.base import FrameSource
from bgsub.sources.frame import Frame
from bgsub.utils.config import BgsubConfig


FRAME_SHAPE = (48, 64, 3)


def make_image(value: int = 0, shape=FRAME_SHAPE) -> np.ndarray:
    return np.full(shape, value, dtype=np.uint8)


def make_frame(n: int, label: str | None = None) -> Frame:
    h, w = FRAME_SHAPE[:2]
    return Frame(
        image=make_image(n * 10 % 256),
        timestamp=float(n),
        frame_number=n,
        label=label if label is not None else str(n + 1),
        source_name="fake",
        width=w,
        height=h,
    )


class FakeSubtractor:
    """Records every image it is asked to model."""

    def __init__(self):
        self.calls: List[np.ndarray] = []

    def apply(self, image: np.ndarray) -> np.ndarray:
        self.calls.append(image)
        return np.zeros(image.shape[:2], dtype=np.uint8)


class RecordingDisplay:
    """Captures shown frames and replays a scripted key sequence."""

    def __init__(self, keys: Sequence[int] = ()):
        self._keys = list(keys)
        self.shown: List[tuple] = []
        self.polls = 0
        self.closed = False

    def show(self, image: np.ndarray, mask: np.ndarray) -> None:
        self.shown.append((image.copy(), mask.copy()))

    def poll_key(self) -> int:
        self.polls += 1
        return self._keys.pop(0) if self._keys else -1

    def close(self) -> None:
        self.closed = True


class ScriptedSource(FrameSource):
    """FrameSource that hands out a fixed list of results."""

    def __init__(self, results: Sequence[ReadResult]):
        self._results = list(results)
        self.fetches = 0
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def fetch(self) -> ReadResult:
        self.fetches += 1
        if not self._results:
            return ReadResult.end_of_sequence("script exhausted")
        return self._results.pop(0)

    @property
    def fps(self) -> float:
        return 0.0

    @property
    def resolution(self) -> tuple[int, int]:
        return (FRAME_SHAPE[1], FRAME_SHAPE[0])

    @property
    def is_open(self) -> bool:
        return self.opened and not self.closed

    @property
    def name(self) -> str:
        return "scripted"


class ScriptedCapture:
    """Stand-in for cv2.VideoCapture yielding ``available`` frames.

    ``frame_count`` is what the container header claims; it may differ
    from ``available`` to simulate a truncated file.
    """

    instances: List["ScriptedCapture"] = []

    def __init__(self, path, available: int = 3, frame_count: int | None = None,
                 opened: bool = True):
        self.path = path
        self.available = available
        self.frame_count = available if frame_count is None else frame_count
        self.opened = opened
        self.pos = 0
        self.reads = 0
        self.releases = 0
        ScriptedCapture.instances.append(self)

    def isOpened(self) -> bool:
        return self.opened and self.releases == 0

    def read(self):
        self.reads += 1
        if self.pos >= self.available:
            return False, None
        self.pos += 1
        return True, make_image(self.pos * 20)

    def get(self, prop):
        return {
            cv2.CAP_PROP_POS_FRAMES: float(self.pos),
            cv2.CAP_PROP_FRAME_COUNT: float(self.frame_count),
            cv2.CAP_PROP_FPS: 25.0,
            cv2.CAP_PROP_FRAME_WIDTH: float(FRAME_SHAPE[1]),
            cv2.CAP_PROP_FRAME_HEIGHT: float(FRAME_SHAPE[0]),
        }.get(prop, 0.0)

    def release(self) -> None:
        self.releases += 1


@pytest.fixture
def fake_subtractor() -> FakeSubtractor:
    return FakeSubtractor()


@pytest.fixture
def no_pacing() -> FramePacer:
    return FramePacer(0)


@pytest.fixture
def headless_config() -> BgsubConfig:
    """Config with no windows and no pacing."""
    return BgsubConfig(display={"enabled": False, "frame_interval_ms": 0})


@pytest.fixture
def image_sequence(tmp_path) -> Callable[..., List[Path]]:
    """Write numbered PNGs, e.g. ``image_sequence("img", range(1, 6))``."""

    def _write(stem_prefix: str = "", numbers=range(1, 4), width: int = 0,
               suffix: str = ".png") -> List[Path]:
        paths = []
        for n in numbers:
            path = tmp_path / f"{stem_prefix}{str(n).zfill(width)}{suffix}"
            assert cv2.imwrite(str(path), make_image(n * 10 % 256))
            paths.append(path)
        return paths

    return _write


@pytest.fixture
def scripted_capture(monkeypatch, tmp_path):
    """Route cv2.VideoCapture to ScriptedCapture; returns a video path.

    Call the fixture value with capture kwargs to configure it::

        path = scripted_capture(available=3)
    """
    ScriptedCapture.instances = []

    def _install(**kwargs) -> Path:
        path = tmp_path / "clip.avi"
        path.write_bytes(b"\0")
        monkeypatch.setattr(
            cv2, "VideoCapture", lambda p: ScriptedCapture(p, **kwargs)
        )
        return path

    return _install


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo ``logging.basicConfig(force=True)`` done by the CLI."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
