"""Repository for a user's watch history."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from vidtube.infrastructure.persistence.models import VideoModel, WatchHistoryModel


class WatchHistoryRepository:
    """Repository for watch history database operations."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def list_for_user(self, user_id: str, limit: int = 100) -> list[WatchHistoryModel]:
        """Get the user's watch history, most recent first.

        Each entry has its video and the video's owner eagerly loaded.

        Args:
            user_id: The viewer's ID.
            limit: Maximum number of entries to return.
        """
        result = await self.session.execute(
            select(WatchHistoryModel)
            .where(WatchHistoryModel.user_id == user_id)
            .options(selectinload(WatchHistoryModel.video).selectinload(VideoModel.owner))
            .order_by(WatchHistoryModel.watched_at.desc(), WatchHistoryModel.id)
            .limit(limit)
        )
        return list(result.scalars().all())
