"""Configuration management for bgsub."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Dict, Any, Tuple

import yaml
from pydantic import BaseModel, Field, field_validator

from bgsub.core import SubtractorAlgorithm


logger = logging.getLogger(__name__)


class SubtractorConfig(BaseModel):
    """Parameters for the OpenCV background subtractor."""
    algorithm: SubtractorAlgorithm = SubtractorAlgorithm.MOG2
    history: int = 500
    # MOG2
    var_threshold: float = 16.0
    # KNN
    dist2_threshold: float = 400.0
    detect_shadows: bool = True
    learning_rate: float = -1.0  # -1 lets OpenCV pick the rate

    @field_validator("algorithm", mode="before")
    @classmethod
    def normalize_algorithm(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class DisplayConfig(BaseModel):
    """Windows, annotation and pacing."""
    enabled: bool = True
    frame_window: str = "Frame"
    mask_window: str = "FG Mask MOG 2"
    frame_interval_ms: int = Field(default=30, ge=0)  # playback pacing
    poll_ms: int = Field(default=1, ge=1)  # keyboard poll per iteration
    # Frame-number label
    label_box: Tuple[Tuple[int, int], Tuple[int, int]] = ((10, 2), (100, 20))
    label_origin: Tuple[int, int] = (15, 15)
    label_scale: float = 0.5
    # Optional mask post-processing and contour boxes
    morph_open: bool = False
    morph_kernel_size: int = 3
    draw_contours: bool = False
    min_contour_perimeter: float = 188.0


class SequenceConfig(BaseModel):
    """Image-sequence naming and end-of-input policy."""
    preserve_padding: bool = False
    end_of_input_is_error: bool = True


class LoggingConfig(BaseModel):
    """Configuration for logging."""
    level: str = "INFO"
    log_to_file: bool = False
    log_directory: str = "logs"
    max_log_size_mb: int = 10
    backup_count: int = 3


class BgsubConfig(BaseModel):
    """Root configuration for bgsub."""

    subtractor: SubtractorConfig = Field(default_factory=SubtractorConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    sequence: SequenceConfig = Field(default_factory=SequenceConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def setup_logging(self) -> None:
        """Configure logging based on config."""
        log_level = getattr(logging, self.logging.level.upper(), logging.INFO)

        handlers = []

        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

        if self.logging.log_to_file:
            log_dir = Path(self.logging.log_directory)
            log_dir.mkdir(exist_ok=True, parents=True)

            file_handler = RotatingFileHandler(
                log_dir / "bgsub.log",
                maxBytes=self.logging.max_log_size_mb * 1024 * 1024,
                backupCount=self.logging.backup_count
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            handlers.append(file_handler)

        logging.basicConfig(
            level=log_level,
            handlers=handlers,
            force=True
        )

        logger.debug("Logging configured: level=%s", self.logging.level)


def load_config(
    config_path: Optional[str | Path] = None,
    overrides: Optional[Dict[str, Any]] = None
) -> BgsubConfig:
    """Load configuration from a YAML file with optional overrides.

    Args:
        config_path: Path to a YAML config file. If None, defaults are used.
        overrides: Dictionary of config overrides (nested keys with dots)

    Returns:
        Validated BgsubConfig instance

    Example:
        >>> config = load_config("bgsub.yaml")
        >>> config = load_config(overrides={"subtractor.algorithm": "KNN"})
    """
    config_dict: Dict[str, Any] = {}
    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            logger.info("Loading config from %s", config_path)
            with open(config_path) as f:
                config_dict = yaml.safe_load(f) or {}
            if not isinstance(config_dict, dict):
                raise TypeError(
                    f"Config file must contain a mapping at the top level, "
                    f"got {type(config_dict).__name__}: {config_path}"
                )
        else:
            logger.warning("Config file not found: %s, using defaults", config_path)

    if overrides:
        config_dict = _apply_overrides(config_dict, overrides)

    return BgsubConfig(**config_dict)


def _apply_overrides(
    config_dict: Dict[str, Any],
    overrides: Dict[str, Any]
) -> Dict[str, Any]:
    """Apply nested overrides to config dictionary.

    Example:
        overrides = {"sequence.preserve_padding": True}
        -> config_dict["sequence"]["preserve_padding"] = True
    """
    for key, value in overrides.items():
        keys = key.split(".")
        d = config_dict
        for k in keys[:-1]:
            # "section:" with no value loads as None
            if not isinstance(d.get(k), dict):
                d[k] = {}
            d = d[k]
        d[keys[-1]] = value
    return config_dict
