"""Camera/microphone capture and engagement-proxy signal math."""

# Signal math has no native dependencies
from .processing import (
    pcm16_to_float,
    byte_frequency_data,
    mean_level,
    voice_proxy,
    frame_motion,
    gaze_proxy,
    expression_proxy,
)
from .devices import MediaDevices


# Lazy imports for capture classes (avoid importing pyaudio/cv2 unless needed)
def __getattr__(name):
    if name in ("MicrophoneStream", "AudioAnalyser", "CameraStream"):
        from . import capture
        return getattr(capture, name)
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")


__all__ = [
    "MediaDevices",
    "MicrophoneStream",
    "AudioAnalyser",
    "CameraStream",
    "pcm16_to_float",
    "byte_frequency_data",
    "mean_level",
    "voice_proxy",
    "frame_motion",
    "gaze_proxy",
    "expression_proxy",
]
