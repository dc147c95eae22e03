"""
SkillSynth Configuration System
===============================

This file contains ALL configuration for the SkillSynth coaching tool.
- User settings at the top (things users might want to change)
- Internal constants at the bottom (technical defaults)
"""
import os
from dataclasses import dataclass
from typing import Optional


# =============================================================================
# USER SETTINGS - Edit these to customize SkillSynth's behavior
# =============================================================================

# REQUIRED: Set your Google Cloud project
GOOGLE_CLOUD_PROJECT = "your-project-id"  # Change this!
GOOGLE_APPLICATION_CREDENTIALS = None  # Optional: path to credentials JSON

# Assessment settings
FULL_AUDIT_STEPS = 5
DAILY_TASK_STEPS = 1
SETTLE_DELAY_SECONDS = 0.8
LANGUAGE_CODE = "en-US"
DEFAULT_GRADE = 8

# Storage
STORAGE_DIR = "./_skillsynth"

# Logging
LOG_FILE = "./_skillsynth/skillsynth.log"
LOG_LEVEL = "INFO"


# =============================================================================
# INTERNAL CONSTANTS - Don't change these unless you know what you're doing
# =============================================================================

# Persistence keys
USER_STORAGE_KEY = "skillSynth_user"
CURRICULUM_STORAGE_KEY = "skillSynth_curriculum"

# Profile
SKILL_DIMENSIONS = ("communication", "confidence", "teamwork", "problem_solving")
WIRE_SKILL_KEYS = {
    "communication": "communication",
    "confidence": "confidence",
    "teamwork": "teamwork",
    "problem_solving": "problemSolving",
}
SCORE_HISTORY_LIMIT = 10
DASHBOARD_SCORE_FLOOR = 10
INITIAL_STREAK = 1

# Sync code
SYNC_CODE_VERSION = 2

# Audio capture
SAMPLE_RATE_CAPTURE = 16000
CHANNELS = 1
FRAME_MS = 100
FFT_SIZE = 256

# Camera capture
CAMERA_DEVICE = 0
FRAME_WIDTH = 160
FRAME_HEIGHT = 120
CAMERA_RETRY_SECONDS = 0.05

# Biometric proxies
SAMPLER_INTERVAL_SECONDS = 1 / 60
VOICE_GAIN = 8
GAZE_FLOOR = 75
GAZE_CEILING = 99
GAZE_MOTION_DIVISOR = 5
EXPRESSION_BASE = 85
EXPRESSION_GAIN = 2
EXPRESSION_CEILING = 98

# Quiz
QUIZ_LIVES = 3
QUESTION_TIME_LIMIT = 20
QUIZ_CORRECT_POINTS = 100
QUIZ_TIME_BONUS = 50

# LLM
VERTEX_LOCATION = "us-central1"
MODEL_NAME = "gemini-2.5-flash"
SCORING_MODEL_NAME = "gemini-2.5-pro"
LLM_TIMEOUT = 60
MAX_OUTPUT_TOKENS = 2048
QUESTION_TEMPERATURE = 0.8
PAST_QUESTION_WINDOW = 20


# =============================================================================
# MAIN CONFIG OBJECT
# =============================================================================

@dataclass
class Config:
    """Main configuration object."""
    google_cloud_project: str
    google_application_credentials: Optional[str] = None
    vertex_location: str = VERTEX_LOCATION
    model_name: str = MODEL_NAME
    scoring_model_name: str = SCORING_MODEL_NAME
    full_audit_steps: int = FULL_AUDIT_STEPS
    daily_task_steps: int = DAILY_TASK_STEPS
    settle_delay_seconds: float = SETTLE_DELAY_SECONDS
    language_code: str = LANGUAGE_CODE
    storage_dir: str = STORAGE_DIR
    log_file: str = LOG_FILE
    log_level: str = LOG_LEVEL


def get_config() -> Config:
    """Load configuration."""
    project = os.getenv("GOOGLE_CLOUD_PROJECT") or GOOGLE_CLOUD_PROJECT
    credentials = os.getenv("GOOGLE_APPLICATION_CREDENTIALS") or GOOGLE_APPLICATION_CREDENTIALS

    if project == "your-project-id":
        raise ValueError("Please set GOOGLE_CLOUD_PROJECT in config.py or as environment variable")

    return Config(
        google_cloud_project=project,
        google_application_credentials=credentials,
        model_name=os.getenv("SKILLSYNTH_MODEL") or MODEL_NAME,
        scoring_model_name=os.getenv("SKILLSYNTH_SCORING_MODEL") or SCORING_MODEL_NAME,
        language_code=os.getenv("SKILLSYNTH_LANGUAGE") or LANGUAGE_CODE,
        storage_dir=os.getenv("SKILLSYNTH_STORAGE_DIR") or STORAGE_DIR,
        log_file=os.getenv("SKILLSYNTH_LOG_FILE") or LOG_FILE,
        log_level=os.getenv("SKILLSYNTH_LOG_LEVEL") or LOG_LEVEL,
    )
