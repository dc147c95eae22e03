"""
Camera and microphone capture for assessment sessions.

The microphone is a PyAudio callback stream; every chunk is kept in a short
ring buffer for spectrum analysis and fanned out to listeners (the speech
recognizer). The camera runs a grabber thread that keeps the latest
downsampled frame so readers never block on the device.
"""
import logging
import threading
import time
from collections import deque
from typing import Callable, List, Optional

import numpy as np

from ...config import (
    SAMPLE_RATE_CAPTURE, CHANNELS, FRAME_MS, FFT_SIZE,
    CAMERA_DEVICE, FRAME_WIDTH, FRAME_HEIGHT, CAMERA_RETRY_SECONDS
)
from ...errors import HardwareUnavailableError
from ...utils import with_suppressed_audio_warnings
from .processing import pcm16_to_float, byte_frequency_data

logger = logging.getLogger("media_capture")

ChunkListener = Callable[[bytes], None]


class MicrophoneStream:
    """Live PCM16 microphone input."""

    def __init__(self,
                 input_device: Optional[int] = None,
                 sample_rate: int = SAMPLE_RATE_CAPTURE,
                 channels: int = CHANNELS,
                 frame_ms: int = FRAME_MS,
                 buffer_samples: int = FFT_SIZE * 8):
        self.input_device = input_device
        self.sample_rate = sample_rate
        self.channels = channels
        self.frame_size = int(sample_rate * frame_ms / 1000)
        self._buffer = deque(maxlen=buffer_samples)
        self._lock = threading.Lock()
        self._listeners: List[ChunkListener] = []
        self._pa = None
        self._stream = None
        self._continue_flag = None

    @with_suppressed_audio_warnings
    def open(self) -> None:
        """Open the input stream; raises HardwareUnavailableError on failure."""
        # Lazy import so the package imports on machines without PortAudio
        import pyaudio

        self._continue_flag = pyaudio.paContinue
        self._pa = pyaudio.PyAudio()
        try:
            self._stream = self._pa.open(
                format=pyaudio.paInt16,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.input_device,
                frames_per_buffer=self.frame_size,
                stream_callback=self._on_audio,
            )
            self._stream.start_stream()
        except (OSError, ValueError) as e:
            self._pa.terminate()
            self._pa = None
            raise HardwareUnavailableError(f"Microphone unavailable: {e}") from e

        logger.info("Microphone opened (device=%s, %d Hz, %d ch)",
                    self.input_device, self.sample_rate, self.channels)

    def _on_audio(self, in_data, frame_count, time_info, status):
        samples = pcm16_to_float(in_data)
        if self.channels > 1:
            samples = samples.reshape(-1, self.channels).mean(axis=1)
        with self._lock:
            self._buffer.extend(samples.tolist())
            listeners = list(self._listeners)
        for listener in listeners:
            listener(in_data)
        return (None, self._continue_flag)

    def add_listener(self, listener: ChunkListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChunkListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def latest_samples(self, count: int) -> np.ndarray:
        with self._lock:
            data = list(self._buffer)[-count:]
        return np.asarray(data, dtype=np.float32)

    def close(self) -> None:
        if self._stream is not None:
            self._stream.stop_stream()
            self._stream.close()
            self._stream = None
        if self._pa is not None:
            self._pa.terminate()
            self._pa = None
        with self._lock:
            self._listeners.clear()
        logger.info("Microphone closed")


class AudioAnalyser:
    """Spectrum reader over a microphone's recent samples."""

    def __init__(self, microphone: MicrophoneStream, fft_size: int = FFT_SIZE):
        self.microphone = microphone
        self.fft_size = fft_size
        self.frequency_bin_count = fft_size // 2
        self.closed = False

    def get_byte_frequency_data(self) -> np.ndarray:
        if self.closed:
            return np.zeros(self.frequency_bin_count, dtype=np.uint8)
        return byte_frequency_data(self.microphone.latest_samples(self.fft_size), self.fft_size)

    def close(self) -> None:
        self.closed = True


class CameraStream:
    """Webcam reader keeping the latest downsampled frame."""

    def __init__(self,
                 device: int = CAMERA_DEVICE,
                 width: int = FRAME_WIDTH,
                 height: int = FRAME_HEIGHT):
        self.device = device
        self.width = width
        self.height = height
        self._capture = None
        self._latest: Optional[np.ndarray] = None
        self._lock = threading.Lock()
        self._running = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def open(self) -> None:
        import cv2

        capture = cv2.VideoCapture(self.device)
        if not capture.isOpened():
            capture.release()
            raise HardwareUnavailableError(f"Camera {self.device} could not be opened")
        self._capture = capture
        self._running.set()
        self._thread = threading.Thread(target=self._grab_loop, name="camera-grabber", daemon=True)
        self._thread.start()
        logger.info("Camera %s opened", self.device)

    def _grab_loop(self) -> None:
        import cv2

        while self._running.is_set():
            ok, frame = self._capture.read()
            if not ok:
                # Device hiccup or not warmed up yet
                time.sleep(CAMERA_RETRY_SECONDS)
                continue
            small = cv2.resize(frame, (self.width, self.height), interpolation=cv2.INTER_AREA)
            with self._lock:
                self._latest = small

    def read_frame(self) -> Optional[np.ndarray]:
        """Latest downsampled frame, or None before the first one arrives."""
        with self._lock:
            return None if self._latest is None else self._latest.copy()

    def close(self) -> None:
        self._running.clear()
        if self._thread is not None:
            self._thread.join(timeout=1.0)
            self._thread = None
        if self._capture is not None:
            self._capture.release()
            self._capture = None
        logger.info("Camera %s released", self.device)
