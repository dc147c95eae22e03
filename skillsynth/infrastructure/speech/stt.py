"""
Streaming speech-to-text using Google Cloud Speech.
"""
import logging
import queue
import threading
from typing import Callable, Optional

from google.api_core.exceptions import GoogleAPICallError
from google.cloud import speech

from ...config import LANGUAGE_CODE, SAMPLE_RATE_CAPTURE

logger = logging.getLogger("speech_stt")

ResultCallback = Callable[[str, bool], None]


class StreamingRecognizer:
    """
    Continuous recognizer fed from a microphone's chunk listeners.

    Each ``start()`` opens a fresh streaming request that reports interim and
    final results through ``on_result(text, is_final)`` from a worker thread.
    ``stop()`` ends the request; results already in flight may still arrive.
    """

    def __init__(self,
                 microphone,
                 on_result: ResultCallback,
                 language_code: str = LANGUAGE_CODE,
                 sample_rate: int = SAMPLE_RATE_CAPTURE,
                 client: Optional[speech.SpeechClient] = None):
        self.microphone = microphone
        self.on_result = on_result
        self.language_code = language_code
        self.sample_rate = sample_rate
        self._client = client or speech.SpeechClient()
        self._chunks: "queue.Queue[Optional[bytes]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._active = False

    def _streaming_config(self) -> speech.StreamingRecognitionConfig:
        return speech.StreamingRecognitionConfig(
            config=speech.RecognitionConfig(
                encoding=speech.RecognitionConfig.AudioEncoding.LINEAR16,
                sample_rate_hertz=self.sample_rate,
                language_code=self.language_code,
                enable_automatic_punctuation=True,
            ),
            interim_results=True,
        )

    def _feed(self, chunk: bytes) -> None:
        if self._active:
            self._chunks.put(chunk)

    def _requests(self, chunks: "queue.Queue[Optional[bytes]]"):
        while True:
            chunk = chunks.get()
            if chunk is None:
                return
            yield speech.StreamingRecognizeRequest(audio_content=chunk)

    def _run(self, chunks: "queue.Queue[Optional[bytes]]") -> None:
        try:
            responses = self._client.streaming_recognize(
                config=self._streaming_config(),
                requests=self._requests(chunks),
            )
            for response in responses:
                for result in response.results:
                    if result.alternatives:
                        self.on_result(result.alternatives[0].transcript, result.is_final)
        except GoogleAPICallError as e:
            logger.error("Streaming recognition failed: %s", e)

    def start(self) -> None:
        if self._active:
            return
        self._chunks = queue.Queue()
        self._active = True
        self.microphone.add_listener(self._feed)
        self._thread = threading.Thread(target=self._run, args=(self._chunks,),
                                        name="speech-recognizer", daemon=True)
        self._thread.start()
        logger.debug("Recognizer started (%s)", self.language_code)

    def stop(self) -> None:
        if not self._active:
            return
        self._active = False
        self.microphone.remove_listener(self._feed)
        self._chunks.put(None)
        logger.debug("Recognizer stopped")

    def close(self) -> None:
        self.stop()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
