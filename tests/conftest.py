import os

# 기본 엔진이 PostgreSQL 드라이버에 접속하지 않도록 테스트에서는 SQLite 를 사용한다.
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import catalog.infrastructure.orm.models  # noqa: F401
from catalog.application.port.credential_port import CredentialProviderPort
from catalog.application.port.platform_client_port import PlatformClientPort
from catalog.domain.fetched_video import FetchedVideo
from catalog.infrastructure.repository.catalog_repository_impl import CatalogRepositoryImpl
from config.database.session import Base

NOW = datetime(2026, 6, 1, 12, 0, tzinfo=timezone.utc)


class StaticCredentials(CredentialProviderPort):
    def __init__(self, valid: bool = True):
        self.valid = valid

    def has_valid_credential(self) -> bool:
        return self.valid


class FakePlatformClient(PlatformClientPort):
    platform = "fake"

    def __init__(self, videos=None, analytics=None, videos_error=None, analytics_error=None):
        self.videos = list(videos or [])
        self.analytics = dict(analytics or {})
        self.videos_error = videos_error
        self.analytics_error = analytics_error
        self.fetch_calls = 0

    def fetch_videos(self):
        self.fetch_calls += 1
        if self.videos_error:
            raise self.videos_error
        return list(self.videos)

    def fetch_analytics(self, video_ids):
        if self.analytics_error:
            raise self.analytics_error
        return {vid: a for vid, a in self.analytics.items() if vid in video_ids}


def make_fetched(video_id="vid-1", title="Untitled", days_old=200, views=1000, duration=600, **kwargs):
    return FetchedVideo(
        video_id=video_id,
        title=title,
        description=kwargs.pop("description", ""),
        published_at=NOW - timedelta(days=days_old),
        thumbnail_url=f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg",
        duration_seconds=duration,
        view_count=views,
        like_count=kwargs.pop("likes", 10),
        comment_count=kwargs.pop("comments", 2),
    )


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory):
    repo = CatalogRepositoryImpl(session_factory)
    yield repo
    repo.close()
