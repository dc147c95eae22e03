"""Speech-to-text services."""

from .stt import StreamingRecognizer

__all__ = ["StreamingRecognizer"]
