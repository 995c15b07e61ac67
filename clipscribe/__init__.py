"""clipscribe - video upload, transcription and interactive transcript API."""

__version__ = "1.0.0"
