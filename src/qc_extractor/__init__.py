"""Quality-control defect extraction with Gemini and Excel export."""

__version__ = "0.1.0"
