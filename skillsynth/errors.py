"""
Exception types shared across SkillSynth components.
"""


class HardwareUnavailableError(RuntimeError):
    """Camera or microphone could not be acquired (denied, missing or busy)."""


class SessionStateError(RuntimeError):
    """An assessment operation was invoked in a state that does not allow it."""


class SyncCodeError(ValueError):
    """A DNA sync code could not be decoded or failed validation."""
