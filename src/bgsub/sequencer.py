"""Frame sequencer: the per-frame background-subtraction loop.

One iteration, strictly in this order::

    read -> model update -> annotate -> display -> poll key -> pace

The loop's working state is a :class:`~bgsub.core.LoopState` that
:meth:`FrameSequencer.step` takes and returns; the sequencer itself keeps
only its collaborators.
"""

import logging
from dataclasses import replace
from typing import Optional

from bgsub.core import (
    ExitReason,
    LoopState,
    ReadStatus,
    SequencerResult,
)
from bgsub.display import (
    DisplaySink,
    FramePacer,
    annotate_frame,
    draw_contour_boxes,
    is_exit_key,
    postprocess_mask,
)
from bgsub.sources.base import FrameSource
from bgsub.subtractors import Subtractor
from bgsub.utils.config import DisplayConfig

logger = logging.getLogger(__name__)


class FrameSequencer:
    """Drives a :class:`FrameSource` through a background model.

    The source must already be open.  The sequencer never closes the
    source or the display; the caller owns both.

    Args:
        source: Where frames come from.
        model: Background model with ``apply(image) -> mask``.
        display: Sink for the annotated frame and mask; also the key source.
        config: Annotation and post-processing options.
        pacer: Enforces the playback interval.  Defaults to
            ``config.frame_interval_ms``.
    """

    def __init__(
        self,
        source: FrameSource,
        model: Subtractor,
        display: DisplaySink,
        config: Optional[DisplayConfig] = None,
        pacer: Optional[FramePacer] = None,
    ):
        self.source = source
        self.model = model
        self.display = display
        self.config = config or DisplayConfig()
        self.pacer = pacer or FramePacer(self.config.frame_interval_ms)

    def step(self, state: LoopState) -> LoopState:
        """Run one iteration and return the next state."""
        if not state.running:
            return state

        result = self.source.fetch()
        if result.status is ReadStatus.END_OF_SEQUENCE:
            logger.info("Input exhausted: %s", result.detail)
            return state.terminate(ExitReason.END_OF_SEQUENCE, result.detail)
        if result.status is ReadStatus.IO_FAILURE:
            logger.error("Read failure: %s", result.detail)
            return state.terminate(ExitReason.IO_FAILURE, result.detail)

        frame = result.frame
        mask = postprocess_mask(self.model.apply(frame.image), self.config)

        if self.config.draw_contours:
            draw_contour_boxes(frame.image, mask, self.config)
        annotate_frame(frame.image, frame.label, self.config)
        self.display.show(frame.image, mask)

        key = self.display.poll_key()
        self.pacer.wait()

        logger.debug("Frame %s (#%d) processed", frame.label, frame.frame_number)
        nxt = replace(
            state,
            frame=frame,
            mask=mask,
            key=key,
            frames_processed=state.frames_processed + 1,
        )
        if is_exit_key(key):
            logger.info("Exit requested by user at frame %s", frame.label)
            return nxt.terminate(ExitReason.USER_QUIT)
        return nxt

    def run(self, state: Optional[LoopState] = None) -> SequencerResult:
        """Step until TERMINATED and summarize the run."""
        state = state or LoopState()
        while state.running:
            state = self.step(state)
        logger.info(
            "Sequencer finished: %s after %d frames from %s",
            state.exit_reason.name, state.frames_processed, self.source.name,
        )
        return SequencerResult(
            exit_reason=state.exit_reason,
            frames_processed=state.frames_processed,
            detail=state.detail,
        )
