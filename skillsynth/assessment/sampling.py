"""
Live engagement proxies sampled while the student is recording.
"""
import asyncio
import logging
from typing import Optional

import numpy as np

from ..config import SAMPLER_INTERVAL_SECONDS
from ..infrastructure.media import (
    mean_level, voice_proxy, frame_motion, gaze_proxy, expression_proxy
)
from .models import BiometricSample

logger = logging.getLogger("biometric_sampler")


class BiometricSampler:
    """
    Periodic asyncio task that refreshes ``latest`` from the analyser and
    camera. The numbers are cosmetic feedback for the student, derived from
    audio level and frame-to-frame motion.

    Only this task writes ``latest``; readers always see the last complete
    sample. ``stop()`` cancels the task and counts the cancellation.
    """

    def __init__(self, analyser, camera, interval: float = SAMPLER_INTERVAL_SECONDS):
        self.analyser = analyser
        self.camera = camera
        self.interval = interval
        self.latest = BiometricSample()
        self.ticks = 0
        self.cancellations = 0
        self.errors = 0
        self._previous_frame: Optional[np.ndarray] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._previous_frame = None
        self._task = asyncio.get_running_loop().create_task(self._run(), name="biometric-sampler")
        logger.debug("Sampler started")

    async def _run(self) -> None:
        while True:
            try:
                self.tick()
            except Exception as e:
                # A failed read skips one sample; the last good one stays visible
                self.errors += 1
                logger.error("Biometric sample failed: %s", e)
            await asyncio.sleep(self.interval)

    def tick(self) -> bool:
        """Take one sample; returns False when no camera frame is available."""
        frame = self.camera.read_frame()
        if frame is None:
            return False

        level = mean_level(self.analyser.get_byte_frequency_data())
        motion = frame_motion(self._previous_frame, frame)
        self._previous_frame = frame
        self.latest = BiometricSample(
            voice=voice_proxy(level),
            gaze=gaze_proxy(motion),
            expression=expression_proxy(level),
        )
        self.ticks += 1
        return True

    def stop(self) -> None:
        if self._task is None:
            return
        if not self._task.done():
            self._task.cancel()
            self.cancellations += 1
            logger.debug("Sampler cancelled after %d ticks", self.ticks)
        self._task = None
