import logging
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from config.database.session import SessionLocal
from catalog.application.port.catalog_repository_port import CatalogRepositoryPort
from catalog.domain.evergreen import to_utc
from catalog.domain.sync_log import SyncLog, SyncStatus
from catalog.domain.video import Video
from catalog.domain.video_query import EVERGREEN_MIN_AGE_DAYS, VideoQuery
from catalog.domain.view_snapshot import ViewSnapshot
from catalog.infrastructure.orm.models import SyncLogORM, VideoORM, ViewSnapshotORM, utcnow

logger = logging.getLogger(__name__)

# 동기화 시 항상 원천 값으로 덮어쓰는 필드 (created_at 제외)
VIDEO_FIELDS = (
    "title",
    "description",
    "published_at",
    "thumbnail_url",
    "duration_seconds",
    "is_short",
    "view_count",
    "like_count",
    "comment_count",
    "estimated_minutes_watched",
    "average_view_duration",
    "topic",
    "brand",
    "topic_auto",
    "brand_auto",
    "evergreen_score",
)

LABEL_COLUMNS = {"topic": VideoORM.topic, "brand": VideoORM.brand}


class CatalogRepositoryImpl(CatalogRepositoryPort):
    def __init__(self, session_factory=SessionLocal):
        self.db = session_factory()

    def close(self) -> None:
        self.db.close()

    def get_catalog(self) -> dict[str, Video]:
        return {orm.video_id: self._to_video(orm) for orm in self.db.query(VideoORM).all()}

    def upsert_video(self, video: Video) -> Video:
        now = utcnow()
        orm = self.db.get(VideoORM, video.video_id)
        if orm is None:
            orm = VideoORM(video_id=video.video_id, created_at=video.created_at or now)
            self.db.add(orm)
        # 기존 레코드는 created_at 을 유지한 채 나머지 필드만 갱신합니다.
        for field in VIDEO_FIELDS:
            setattr(orm, field, getattr(video, field))
        orm.updated_at = now
        self._commit()
        return self._to_video(orm)

    def append_snapshot(self, video_id: str, snapshot_date: date, view_count: int) -> ViewSnapshot:
        snapshot = ViewSnapshot(video_id=video_id, snapshot_date=snapshot_date, view_count=view_count)
        self.append_snapshots([snapshot])
        return snapshot

    def append_snapshots(self, snapshots: Iterable[ViewSnapshot]) -> int:
        # autoflush 가 꺼져 있으므로 같은 배치 안의 중복 키는 직접 추적한다.
        pending: dict[tuple[str, date], ViewSnapshotORM] = {}
        for snapshot in snapshots:
            key = (snapshot.video_id, snapshot.snapshot_date)
            orm = pending.get(key) or self.db.get(ViewSnapshotORM, key)
            if orm is None:
                orm = ViewSnapshotORM(video_id=snapshot.video_id, snapshot_date=snapshot.snapshot_date)
                self.db.add(orm)
            orm.view_count = snapshot.view_count
            pending[key] = orm
        self._commit()
        return len(pending)

    def query_snapshots(self, video_ids: Iterable[str], since_date: date) -> list[ViewSnapshot]:
        ids = list(video_ids)
        if not ids:
            return []
        rows = (
            self.db.query(ViewSnapshotORM)
            .filter(
                ViewSnapshotORM.video_id.in_(ids),
                ViewSnapshotORM.snapshot_date >= since_date,
            )
            .order_by(ViewSnapshotORM.video_id, ViewSnapshotORM.snapshot_date)
            .all()
        )
        return [
            ViewSnapshot(video_id=r.video_id, snapshot_date=r.snapshot_date, view_count=int(r.view_count))
            for r in rows
        ]

    def create_run_log(self, started_at: Optional[datetime] = None) -> SyncLog:
        orm = SyncLogORM(started_at=started_at or utcnow(), status=SyncStatus.RUNNING.value, videos_synced=0)
        self.db.add(orm)
        self._commit()
        return self._to_sync_log(orm)

    def finish_run_log(
        self,
        run_id: int,
        status: SyncStatus,
        videos_synced: int = 0,
        error_message: Optional[str] = None,
    ) -> bool:
        orm = self.db.get(SyncLogORM, run_id)
        if orm is None or orm.status != SyncStatus.RUNNING.value:
            # 종료된 실행 로그는 다시 전이하지 않는다.
            logger.warning("sync log %s is not running; ignoring transition to %s", run_id, status.value)
            return False
        orm.status = status.value
        orm.finished_at = utcnow()
        orm.videos_synced = videos_synced
        orm.error_message = error_message
        self._commit()
        return True

    def fail_running_logs(self, error_message: str) -> int:
        rows = self.db.query(SyncLogORM).filter(SyncLogORM.status == SyncStatus.RUNNING.value).all()
        for orm in rows:
            orm.status = SyncStatus.ERROR.value
            orm.finished_at = utcnow()
            orm.error_message = error_message
        self._commit()
        return len(rows)

    def update_video_labels(self, video_id: str, changes: dict) -> bool:
        orm = self.db.get(VideoORM, video_id)
        if orm is None:
            return False
        for field, value in changes.items():
            setattr(orm, field, value)
        if changes:
            orm.updated_at = utcnow()
            self._commit()
        return True

    def fetch_overview(self) -> dict:
        row = self.db.query(
            func.count(VideoORM.video_id),
            func.coalesce(func.sum(case((VideoORM.is_short.is_(False), 1), else_=0)), 0),
            func.coalesce(func.sum(case((VideoORM.is_short.is_(True), 1), else_=0)), 0),
            func.coalesce(func.sum(VideoORM.view_count), 0),
            func.coalesce(func.sum(VideoORM.like_count), 0),
            func.coalesce(func.sum(VideoORM.comment_count), 0),
            func.coalesce(func.sum(VideoORM.estimated_minutes_watched), 0.0),
        ).one()
        return {
            "total_videos": int(row[0]),
            "longform_count": int(row[1]),
            "shorts_count": int(row[2]),
            "total_views": int(row[3]),
            "total_likes": int(row[4]),
            "total_comments": int(row[5]),
            "total_watch_time_minutes": float(row[6]),
        }

    def fetch_label_breakdown(self, label: str) -> list[dict]:
        """
        topic 또는 brand 별 영상 수/조회수/시청시간/평균 에버그린 점수를 조회수 내림차순으로 집계한다.
        """
        column = LABEL_COLUMNS[label]
        total_views = func.coalesce(func.sum(VideoORM.view_count), 0)
        rows = (
            self.db.query(
                column,
                func.count(VideoORM.video_id),
                total_views,
                func.coalesce(func.sum(VideoORM.estimated_minutes_watched), 0.0),
                func.coalesce(func.avg(VideoORM.view_count), 0),
                func.coalesce(func.avg(VideoORM.evergreen_score), 0),
            )
            .filter(column.isnot(None))
            .group_by(column)
            .order_by(total_views.desc())
            .all()
        )
        return [
            {
                label: r[0],
                "video_count": int(r[1]),
                "total_views": int(r[2]),
                "total_watch_time": float(r[3]),
                "avg_views": int(r[4]),
                "avg_evergreen": float(r[5]),
            }
            for r in rows
        ]

    def fetch_last_sync(self) -> Optional[SyncLog]:
        orm = (
            self.db.query(SyncLogORM)
            .order_by(SyncLogORM.started_at.desc(), SyncLogORM.id.desc())
            .first()
        )
        return self._to_sync_log(orm) if orm else None

    def fetch_videos(self, query: VideoQuery) -> tuple[list[Video], int]:
        q = self.db.query(VideoORM)
        if query.evergreen:
            cutoff = utcnow() - timedelta(days=EVERGREEN_MIN_AGE_DAYS)
            q = q.filter(VideoORM.published_at < cutoff)
        if query.video_type == "short":
            q = q.filter(VideoORM.is_short.is_(True))
        elif query.video_type == "longform":
            q = q.filter(VideoORM.is_short.is_(False))
        if query.topic:
            q = q.filter(VideoORM.topic == query.topic)
        if query.brand:
            q = q.filter(VideoORM.brand == query.brand)
        if query.search:
            q = q.filter(VideoORM.title.ilike(f"%{query.search}%"))

        total = q.count()

        if query.evergreen:
            order = [VideoORM.evergreen_score.desc(), VideoORM.view_count.desc()]
        else:
            column = getattr(VideoORM, query.resolved_sort_by)
            primary = column.asc() if query.sort_order == "asc" else column.desc()
            order = [primary.nulls_last(), VideoORM.view_count.desc()]

        rows = q.order_by(*order).offset(query.offset).limit(query.limit).all()
        return [self._to_video(orm) for orm in rows], total

    def _commit(self) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError:
            # 세션을 정리해 두어야 실패 후 실행 로그를 error 로 닫을 수 있다.
            self.db.rollback()
            raise

    @staticmethod
    def _to_video(orm: VideoORM) -> Video:
        return Video(
            video_id=orm.video_id,
            title=orm.title or "",
            description=orm.description or "",
            published_at=to_utc(orm.published_at),
            thumbnail_url=orm.thumbnail_url,
            duration_seconds=int(orm.duration_seconds or 0),
            is_short=bool(orm.is_short),
            view_count=int(orm.view_count or 0),
            like_count=int(orm.like_count or 0),
            comment_count=int(orm.comment_count or 0),
            estimated_minutes_watched=float(orm.estimated_minutes_watched or 0),
            average_view_duration=float(orm.average_view_duration or 0),
            topic=orm.topic,
            brand=orm.brand,
            topic_auto=orm.topic_auto is not False,
            brand_auto=orm.brand_auto is not False,
            evergreen_score=int(orm.evergreen_score or 0),
            created_at=to_utc(orm.created_at),
            updated_at=to_utc(orm.updated_at),
        )

    @staticmethod
    def _to_sync_log(orm: SyncLogORM) -> SyncLog:
        return SyncLog(
            id=orm.id,
            status=SyncStatus(orm.status),
            started_at=to_utc(orm.started_at),
            finished_at=to_utc(orm.finished_at),
            videos_synced=int(orm.videos_synced or 0),
            error_message=orm.error_message,
        )
