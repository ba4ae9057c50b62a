"""Domain entities for VidTube.

Plain dataclasses exchanged between the services and the API layer.
"""

from vidtube.domain.entities.session import (
    ChannelProfile,
    RegistrationInput,
    SessionResult,
    TokenPair,
)

__all__ = [
    "ChannelProfile",
    "RegistrationInput",
    "SessionResult",
    "TokenPair",
]
