"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("LOG_DESTINATION", "stdout")
