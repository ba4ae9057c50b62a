"""VidTube - user accounts and session service for a video platform.

Issues and validates user sessions: credential checks, short-lived access
tokens, and rotating single-use refresh tokens.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
