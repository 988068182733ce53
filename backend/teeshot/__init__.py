"""Teeshot: golf social media content generation and parsing."""

__version__ = "1.0.0"
