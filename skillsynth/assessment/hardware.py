"""
Scoped ownership of the capture devices for one assessment session.
"""
import logging
import threading
from contextlib import ExitStack
from typing import Callable, Optional

from ..config import LANGUAGE_CODE

logger = logging.getLogger("session_hardware")

RecognitionCallback = Callable[[str, bool], None]


class SessionHardware:
    """
    Microphone, analyser, camera and (optionally) a speech recognizer.

    ``acquire()`` is all-or-nothing: if any device fails, whatever was
    already opened is closed before the error propagates. ``release()``
    can be called any number of times from any state; each acquired
    resource is closed exactly once. Released hardware stays released: an
    ``acquire()`` still running in a worker thread when ``release()`` is
    called closes the devices it opened instead of keeping them.
    """

    def __init__(self, devices, on_result: RecognitionCallback, language_code: str = LANGUAGE_CODE):
        self.devices = devices
        self.on_result = on_result
        self.language_code = language_code
        self.microphone = None
        self.analyser = None
        self.camera = None
        self.recognizer = None
        self._lock = threading.Lock()
        self._released = False

    @property
    def acquired(self) -> bool:
        return self.microphone is not None

    def acquire(self) -> None:
        """
        Open every device. Blocking; run it off the event loop.

        Raises:
            HardwareUnavailableError: If a device is denied, missing or busy
        """
        if self.acquired:
            return

        with ExitStack() as stack:
            microphone = self.devices.open_microphone()
            stack.callback(microphone.close)
            analyser = self.devices.create_analyser(microphone)
            stack.callback(analyser.close)
            camera = self.devices.open_camera()
            stack.callback(camera.close)
            recognizer = self.devices.create_recognizer(microphone, self.on_result, self.language_code)
            if recognizer is not None:
                stack.callback(recognizer.close)

            with self._lock:
                if self._released:
                    # Released while the devices were opening; the stack closes them
                    logger.info("Session hardware released during acquisition, closing devices")
                    return
                self.microphone = microphone
                self.analyser = analyser
                self.camera = camera
                self.recognizer = recognizer
            stack.pop_all()

        logger.info("Session hardware acquired (speech recognition %s)",
                    "on" if recognizer is not None else "off")

    def start_listening(self) -> None:
        if self.recognizer is not None:
            self.recognizer.start()

    def stop_listening(self) -> None:
        if self.recognizer is not None:
            self.recognizer.stop()

    def release(self) -> None:
        with self._lock:
            self._released = True
            resources = [
                ("recognizer", self.recognizer),
                ("camera", self.camera),
                ("analyser", self.analyser),
                ("microphone", self.microphone),
            ]
            self.recognizer = self.analyser = self.camera = self.microphone = None

        released = 0
        for name, resource in resources:
            if resource is None:
                continue
            try:
                resource.close()
                released += 1
            except Exception as e:
                # Keep going: the remaining devices must still be freed
                logger.error("Failed to release %s: %s", name, e)
        if released:
            logger.info("Session hardware released (%d resources)", released)
