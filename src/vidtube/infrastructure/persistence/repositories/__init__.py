"""Persistence repositories for database operations."""

from vidtube.infrastructure.persistence.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from vidtube.infrastructure.persistence.repositories.subscription_repository import (
    SubscriptionRepository,
)
from vidtube.infrastructure.persistence.repositories.user_repository import (
    UserRepository,
)
from vidtube.infrastructure.persistence.repositories.watch_history_repository import (
    WatchHistoryRepository,
)

__all__ = [
    "RefreshTokenRepository",
    "SubscriptionRepository",
    "UserRepository",
    "WatchHistoryRepository",
]
