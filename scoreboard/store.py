import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import desc, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from .errors import StoreFailure
from .models import Block, GameScore, User
from .ranking import ScoreRecord

logger = logging.getLogger("uvicorn")


@dataclass(frozen=True)
class PlayerProfile:
    id: int
    username: str
    profile_image_url: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_row(cls, user):
        return cls(
            id=user.id,
            username=user.username,
            profile_image_url=user.profile_image_url,
            first_name=user.first_name,
            last_name=user.last_name,
        )


def to_record(row):
    return ScoreRecord(
        id=row.id,
        user_id=row.user_id,
        game_id=row.game_id,
        stage_id=row.stage_id,
        score=row.score,
        game_time=row.game_time,
        created_at=row.created_at,
        items_collected=row.items_collected if row.items_collected is not None else 0,
        difficulty=row.difficulty or "normal",
        is_deleted=row.is_deleted,
    )


class ScoreRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert(self, user_id, submission) -> ScoreRecord:
        row = GameScore(
            user_id=user_id,
            game_id=submission.game_id,
            stage_id=submission.stage_id,
            score=submission.score,
            game_time=submission.game_time,
            items_collected=submission.items_collected,
            difficulty=submission.difficulty,
        )
        try:
            self.db.add(row)
            await self.db.commit()
            await self.db.refresh(row)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StoreFailure("failed to save score") from exc
        return to_record(row)

    async def scan(self, game_id: str, stage_id: Optional[str] = None) -> List[ScoreRecord]:
        """Each visible user's best live record in the partition.

        Banned and deleted accounts are joined out here; viewer-specific
        blocks are left to the caller.
        """
        conditions = [
            GameScore.game_id == game_id,
            GameScore.is_deleted.is_(False),
            User.is_deleted.is_(False),
            User.is_banned.is_(False),
        ]
        if stage_id is not None:
            conditions.append(GameScore.stage_id == stage_id)

        # Best run per user: highest score, earliest achievement
        ranked = select(
            GameScore,
            func.row_number().over(
                partition_by=GameScore.user_id,
                order_by=(desc(GameScore.score), GameScore.created_at.asc(), GameScore.id.asc()),
            ).label("rn"),
        ).join(
            User, GameScore.user_id == User.id
        ).where(*conditions).subquery()

        best = aliased(GameScore, ranked)
        query = select(best).where(ranked.c.rn == 1)

        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise StoreFailure("failed to fetch ranking") from exc
        return [to_record(row) for row in result.scalars().all()]

    async def get(self, record_id: int) -> Optional[ScoreRecord]:
        try:
            row = await self.db.get(GameScore, record_id)
        except SQLAlchemyError as exc:
            raise StoreFailure("failed to fetch ranking") from exc
        return to_record(row) if row is not None else None

    async def load_profiles(self, user_ids):
        user_ids = set(user_ids)
        if not user_ids:
            return {}
        try:
            result = await self.db.execute(select(User).where(User.id.in_(user_ids)))
        except SQLAlchemyError as exc:
            raise StoreFailure("failed to fetch ranking") from exc
        return {user.id: PlayerProfile.from_row(user) for user in result.scalars().all()}


class RelationshipRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def resolve_viewer(self, auth_id: str) -> Optional[PlayerProfile]:
        query = select(User).where(
            User.auth_id == auth_id,
            User.is_deleted.is_(False),
        ).limit(1)
        try:
            result = await self.db.execute(query)
        except SQLAlchemyError as exc:
            raise StoreFailure() from exc
        user = result.scalars().first()
        return PlayerProfile.from_row(user) if user is not None else None

    async def blocked_user_ids(self, viewer_id: int) -> frozenset:
        """Users on either side of an active block with the viewer."""
        query = select(Block.blocker_id, Block.blocked_id).where(
            or_(Block.blocker_id == viewer_id, Block.blocked_id == viewer_id),
            Block.is_deleted.is_(False),
        )
        try:
            blocks = (await self.db.execute(query)).all()
        except SQLAlchemyError as exc:
            raise StoreFailure() from exc

        return frozenset(
            blocked_id if blocker_id == viewer_id else blocker_id
            for blocker_id, blocked_id in blocks
        )
