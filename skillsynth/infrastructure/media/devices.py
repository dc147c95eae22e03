"""
Factory for the capture resources an assessment session acquires.
"""
import logging
from typing import Optional

from google.auth.exceptions import DefaultCredentialsError

from ...config import SAMPLE_RATE_CAPTURE, CHANNELS, CAMERA_DEVICE, LANGUAGE_CODE

logger = logging.getLogger("media_devices")


class MediaDevices:
    """Opens microphone, camera, spectrum analyser and speech recognizer."""

    def __init__(self,
                 input_device: Optional[int] = None,
                 camera_device: int = CAMERA_DEVICE,
                 sample_rate: int = SAMPLE_RATE_CAPTURE,
                 channels: int = CHANNELS):
        self.input_device = input_device
        self.camera_device = camera_device
        self.sample_rate = sample_rate
        self.channels = channels

    def open_microphone(self):
        from .capture import MicrophoneStream
        microphone = MicrophoneStream(self.input_device, self.sample_rate, self.channels)
        microphone.open()
        return microphone

    def create_analyser(self, microphone):
        from .capture import AudioAnalyser
        return AudioAnalyser(microphone)

    def open_camera(self):
        from .capture import CameraStream
        camera = CameraStream(self.camera_device)
        camera.open()
        return camera

    def create_recognizer(self, microphone, on_result, language_code: str = LANGUAGE_CODE):
        """Streaming recognizer, or None when speech credentials are missing."""
        from ..speech import StreamingRecognizer
        try:
            return StreamingRecognizer(microphone, on_result, language_code, self.sample_rate)
        except DefaultCredentialsError as e:
            logger.warning("Speech recognition unavailable: %s", e)
            return None
