"""AI-assisted flight search and itinerary generation backed by Gemini."""

__version__ = "1.0.0"
