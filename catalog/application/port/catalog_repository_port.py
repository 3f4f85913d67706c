from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Iterable, Optional

from catalog.domain.sync_log import SyncLog, SyncStatus
from catalog.domain.video import Video
from catalog.domain.view_snapshot import ViewSnapshot


class CatalogRepositoryPort(ABC):
    @abstractmethod
    def get_catalog(self) -> dict[str, Video]:
        raise NotImplementedError

    @abstractmethod
    def upsert_video(self, video: Video) -> Video:
        raise NotImplementedError

    @abstractmethod
    def append_snapshot(self, video_id: str, snapshot_date: date, view_count: int) -> ViewSnapshot:
        raise NotImplementedError

    @abstractmethod
    def append_snapshots(self, snapshots: Iterable[ViewSnapshot]) -> int:
        raise NotImplementedError

    @abstractmethod
    def query_snapshots(self, video_ids: Iterable[str], since_date: date) -> list[ViewSnapshot]:
        raise NotImplementedError

    @abstractmethod
    def create_run_log(self, started_at: Optional[datetime] = None) -> SyncLog:
        raise NotImplementedError

    @abstractmethod
    def finish_run_log(
        self,
        run_id: int,
        status: SyncStatus,
        videos_synced: int = 0,
        error_message: Optional[str] = None,
    ) -> bool:
        raise NotImplementedError

    @abstractmethod
    def fail_running_logs(self, error_message: str) -> int:
        raise NotImplementedError

    # 수동 편집
    @abstractmethod
    def update_video_labels(self, video_id: str, changes: dict) -> bool:
        raise NotImplementedError

    # 조회 전용 메서드들
    @abstractmethod
    def fetch_overview(self) -> dict:
        raise NotImplementedError

    @abstractmethod
    def fetch_label_breakdown(self, label: str) -> list[dict]:
        raise NotImplementedError

    @abstractmethod
    def fetch_last_sync(self) -> Optional[SyncLog]:
        raise NotImplementedError

    @abstractmethod
    def fetch_videos(self, query) -> tuple[list[Video], int]:
        raise NotImplementedError
