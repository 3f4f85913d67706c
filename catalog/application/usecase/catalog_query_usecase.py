import math
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Optional

from catalog.application.port.catalog_repository_port import CatalogRepositoryPort
from catalog.application.port.credential_port import CredentialProviderPort
from catalog.application.usecase.snapshot_store import SnapshotStore
from catalog.domain.evergreen import DEFAULT_PARAMS, age_in_days, snapshot_velocity, to_utc, window_start
from catalog.domain.video_query import VideoQuery


class CatalogQueryUseCase:
    def __init__(
        self,
        repository: CatalogRepositoryPort,
        credentials: CredentialProviderPort,
        snapshot_store: Optional[SnapshotStore] = None,
    ):
        # 리포트 화면용 읽기 전용 조회를 담당하는 유스케이스
        self.repository = repository
        self.credentials = credentials
        self.snapshot_store = snapshot_store or SnapshotStore(repository)

    def stats(self) -> dict:
        last_sync = self.repository.fetch_last_sync()
        return {
            "overview": self.repository.fetch_overview(),
            "topics": self.repository.fetch_label_breakdown("topic"),
            "brands": self.repository.fetch_label_breakdown("brand"),
            "last_sync": asdict(last_sync) if last_sync else None,
            "is_connected": self.credentials.has_valid_credential(),
        }

    def list_videos(self, query: VideoQuery, now: Optional[datetime] = None) -> dict:
        videos, total = self.repository.fetch_videos(query)
        items = [asdict(v) for v in videos]
        if query.evergreen and items:
            self._attach_recent_velocity(items, now or datetime.now(timezone.utc))
        return {
            "videos": items,
            "total": total,
            "page": query.page,
            "limit": query.limit,
            "total_pages": math.ceil(total / query.limit) if query.limit else 0,
        }

    def _attach_recent_velocity(self, items: list[dict], now: datetime) -> None:
        """
        에버그린 목록에는 최근 30일 스냅샷 기반 일평균 조회수를 함께 내려준다.
        스냅샷이 부족하면 평생 평균으로 대체한다.
        """
        today = to_utc(now).date()
        histories = self.snapshot_store.histories(
            [item["video_id"] for item in items], window_start(today, DEFAULT_PARAMS)
        )
        for item in items:
            recent = snapshot_velocity(histories.get(item["video_id"], []), today)
            if recent is None:
                recent = (item["view_count"] or 0) / age_in_days(item["published_at"], now)
            item["recent_views_per_day"] = recent
