"""Infrastructure components for SkillSynth.

This module contains low-level technical components: the Gemini client,
camera/microphone capture, speech recognition and local persistence.
"""

# LLM infrastructure
from .llm import VertexRestClient

# Persistence
from .data import KeyValueStore, InMemoryStore, JsonFileStore

# Capture (native libraries load lazily)
from .media import MediaDevices

__all__ = [
    "VertexRestClient",
    "KeyValueStore", "InMemoryStore", "JsonFileStore",
    "MediaDevices",
]
