from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    auth_id = Column(String(255), nullable=False, unique=True)  # Principal id from the identity provider
    username = Column(String(50), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    first_name = Column(String(100))
    last_name = Column(String(100))
    profile_image_url = Column(Text)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    is_banned = Column(Boolean, default=False, nullable=False)


class Block(Base):
    __tablename__ = "blocks"

    id = Column(Integer, primary_key=True, index=True)
    blocker_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    blocked_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True))
    is_deleted = Column(Boolean, default=False, nullable=False)


class GameScore(Base):
    __tablename__ = "game_scores"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    game_id = Column(Text, nullable=False)  # e.g. "nag-won"
    stage_id = Column(Text, nullable=False)  # e.g. "cyber-city"
    score = Column(Integer, nullable=False)
    game_time = Column(Integer, nullable=False)  # Seconds
    items_collected = Column(Integer, default=0, nullable=False)
    difficulty = Column(String(10), default="normal", nullable=False)
    # Set in Python so ties on score are broken at microsecond precision
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    deleted_at = Column(DateTime(timezone=True))
    is_deleted = Column(Boolean, default=False, nullable=False)

    # Composite index for partition scans
    __table_args__ = (
        Index("idx_game_scores_partition", "game_id", "stage_id", "user_id"),
    )
