"""OpenCV background subtractor construction.

The Gaussian-mixture model (and the KNN alternative) live entirely in
OpenCV; this module only builds them from configuration and exposes the
single ``apply(frame) -> mask`` capability the sequencer relies on.
"""

import logging
from typing import Any, Protocol

import cv2
import numpy as np

from bgsub.core import SubtractorAlgorithm
from bgsub.utils.config import SubtractorConfig

logger = logging.getLogger(__name__)


class Subtractor(Protocol):
    """Anything with OpenCV's ``apply`` signature."""

    def apply(self, image: np.ndarray) -> np.ndarray:
        ...


def create_subtractor(config: SubtractorConfig) -> Any:
    """Create and return the configured OpenCV background subtractor."""
    if config.algorithm is SubtractorAlgorithm.MOG2:
        return cv2.createBackgroundSubtractorMOG2(
            history=config.history,
            varThreshold=config.var_threshold,
            detectShadows=config.detect_shadows,
        )
    if config.algorithm is SubtractorAlgorithm.KNN:
        return cv2.createBackgroundSubtractorKNN(
            history=config.history,
            dist2Threshold=config.dist2_threshold,
            detectShadows=config.detect_shadows,
        )
    raise ValueError(f"Unsupported algorithm: {config.algorithm}")


class BackgroundModel:
    """Adaptive background model wrapping an OpenCV subtractor.

    Every :meth:`apply` call updates the model's statistics as a side
    effect and returns a fresh foreground mask (0 background, 127 shadow,
    255 foreground when shadow detection is on).
    """

    def __init__(self, config: SubtractorConfig, impl: Any = None):
        self.config = config
        self._impl = impl if impl is not None else create_subtractor(config)
        self._updates = 0
        logger.info(
            "Background model: %s history=%d shadows=%s learning_rate=%s",
            config.algorithm.value, config.history,
            config.detect_shadows, config.learning_rate,
        )

    def apply(self, image: np.ndarray) -> np.ndarray:
        mask = self._impl.apply(image, learningRate=self.config.learning_rate)
        self._updates += 1
        return mask

    @property
    def updates(self) -> int:
        """Number of frames fed to the model so far."""
        return self._updates
