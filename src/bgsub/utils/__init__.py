"""Utility helpers for bgsub."""

from bgsub.utils.config import BgsubConfig, load_config

__all__ = ["BgsubConfig", "load_config"]
