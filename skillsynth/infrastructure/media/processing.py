"""
Signal math for the live engagement proxies: audio spectrum levels and
frame-to-frame motion. These numbers are decorative telemetry, not
measurements.
"""
from typing import Optional

import numpy as np

from ...config import (
    FFT_SIZE, VOICE_GAIN, GAZE_FLOOR, GAZE_CEILING, GAZE_MOTION_DIVISOR,
    EXPRESSION_BASE, EXPRESSION_GAIN, EXPRESSION_CEILING
)
from ...utils.numbers import round_half_up, clamp

# Analyser decibel window mapped onto 0..255
MIN_DECIBELS = -100.0
MAX_DECIBELS = -30.0


def pcm16_to_float(pcm: bytes) -> np.ndarray:
    """Convert little-endian PCM16 bytes to float samples in [-1, 1]."""
    return np.frombuffer(pcm, dtype=np.int16).astype(np.float32) / 32768.0


def byte_frequency_data(samples: np.ndarray, fft_size: int = FFT_SIZE) -> np.ndarray:
    """
    Byte-scaled magnitude spectrum of the most recent ``fft_size`` samples.

    Returns ``fft_size // 2`` bins of uint8, where MIN_DECIBELS maps to 0 and
    MAX_DECIBELS to 255. Short input is zero-padded at the front.
    """
    window = np.zeros(fft_size, dtype=np.float32)
    tail = np.asarray(samples, dtype=np.float32)[-fft_size:]
    if tail.size:
        window[-tail.size:] = tail

    spectrum = np.abs(np.fft.rfft(window * np.blackman(fft_size)))[:fft_size // 2] / fft_size
    decibels = 20.0 * np.log10(spectrum + 1e-12)
    scaled = (decibels - MIN_DECIBELS) * (255.0 / (MAX_DECIBELS - MIN_DECIBELS))
    return np.clip(scaled, 0, 255).astype(np.uint8)


def mean_level(bins: np.ndarray) -> float:
    """Average byte level across spectrum bins."""
    if bins.size == 0:
        return 0.0
    return float(np.mean(bins))


def voice_proxy(level: float) -> int:
    return int(min(100, round_half_up(level * VOICE_GAIN)))


def frame_motion(previous: Optional[np.ndarray], current: np.ndarray, channel: int = 2) -> float:
    """
    Mean absolute per-pixel difference of one colour channel between frames.

    Frames are HxWx3 arrays as OpenCV delivers them (BGR, so channel 2 is
    red). With no previous frame the motion is zero.
    """
    if previous is None or previous.shape != current.shape:
        return 0.0
    diff = np.abs(current[..., channel].astype(np.int16) - previous[..., channel].astype(np.int16))
    height, width = current.shape[:2]
    return float(diff.sum()) / (width * height)


def gaze_proxy(motion: float) -> int:
    return round_half_up(clamp(100 - motion / GAZE_MOTION_DIVISOR, GAZE_FLOOR, GAZE_CEILING))


def expression_proxy(level: float) -> int:
    return round_half_up(min(EXPRESSION_CEILING, EXPRESSION_BASE + level * EXPRESSION_GAIN))
