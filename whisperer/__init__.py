"""Whisperer - voice dictation keyboard backed by the OpenAI transcription API."""

__version__ = "0.1.0"
