"""Security configuration constants for the QC extractor.

This module centralizes the keys that must never reach the logs in clear
text. The structured logger redacts any extra field whose name matches.
"""

# Keys redacted from structured log extras
SENSITIVE_KEYS: set[str] = {
    # Credentials
    "password",
    "secret",
    "token",
    "access_token",
    "authorization",
    "api_key",
    "gemini_api_key",
    "key",
    "bearer",
    "x-api-key",
    "x-goog-api-key",
    # Raw user input; fragment text may carry supplier or personal data
    "text",
    "fragment_text",
    "prompt",
}

# Substrings that mark a key as sensitive even when not listed verbatim
SENSITIVE_SUBSTRINGS: tuple[str, ...] = ("api_key", "apikey", "secret", "token")


def is_sensitive_key(key: str) -> bool:
    """Return True if *key* names a value that must be redacted."""
    lowered = key.strip().lower()
    if lowered in SENSITIVE_KEYS:
        return True
    return any(part in lowered for part in SENSITIVE_SUBSTRINGS)
