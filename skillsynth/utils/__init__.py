"""Utility modules for logging, numeric helpers and native library helpers."""

from .imports import with_suppressed_audio_warnings
from .logging import setup_logging
from .numbers import round_half_up, clamp, coerce_score

__all__ = ["with_suppressed_audio_warnings", "setup_logging", "round_half_up", "clamp", "coerce_score"]
