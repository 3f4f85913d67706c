from datetime import datetime, timezone

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)

from config.database.session import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VideoORM(Base):
    __tablename__ = "video"

    video_id = Column(String(100), primary_key=True)
    title = Column(String(500))
    description = Column(Text)
    published_at = Column(DateTime(timezone=True))
    thumbnail_url = Column(String(500))
    duration_seconds = Column(Integer, default=0)
    is_short = Column(Boolean, default=False)
    view_count = Column(BigInteger, default=0)
    like_count = Column(BigInteger, default=0)
    comment_count = Column(BigInteger, default=0)
    estimated_minutes_watched = Column(Float, default=0.0)
    average_view_duration = Column(Float, default=0.0)
    topic = Column(String(100))
    brand = Column(String(100))
    topic_auto = Column(Boolean, default=True, nullable=False)
    brand_auto = Column(Boolean, default=True, nullable=False)
    evergreen_score = Column(Integer, default=0)
    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow)


class ViewSnapshotORM(Base):
    __tablename__ = "view_snapshot"

    video_id = Column(String(100), ForeignKey("video.video_id", ondelete="CASCADE"), primary_key=True)
    snapshot_date = Column(Date, primary_key=True)
    view_count = Column(BigInteger, nullable=False)


class SyncLogORM(Base):
    __tablename__ = "sync_log"

    # SQLite 는 INTEGER PRIMARY KEY 만 자동 증가하므로 variant 를 둔다.
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    started_at = Column(DateTime(timezone=True), default=utcnow)
    finished_at = Column(DateTime(timezone=True))
    status = Column(String(20), nullable=False, default="running")
    videos_synced = Column(Integer, default=0)
    error_message = Column(Text)


class OAuthTokenORM(Base):
    __tablename__ = "oauth_token"

    id = Column(Integer, primary_key=True)
    access_token = Column(Text)
    refresh_token = Column(Text)
    expiry = Column(DateTime(timezone=True))
    updated_at = Column(DateTime(timezone=True), default=utcnow)
