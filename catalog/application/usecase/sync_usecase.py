import logging
from datetime import datetime, timezone
from typing import Optional

from catalog.application.port.catalog_repository_port import CatalogRepositoryPort
from catalog.application.port.credential_port import CredentialProviderPort
from catalog.application.port.platform_client_port import PlatformClientPort
from catalog.application.usecase.evergreen_scoring_usecase import EvergreenScoringUseCase
from catalog.application.usecase.reconciliation_usecase import ReconciliationUseCase
from catalog.application.usecase.snapshot_store import SnapshotStore
from catalog.domain.errors import AnalyticsFetchError, CredentialError
from catalog.domain.evergreen import to_utc
from catalog.domain.fetched_video import VideoAnalytics
from catalog.domain.sync_log import SyncResult, SyncStatus

logger = logging.getLogger(__name__)


class SyncUseCase:
    """
    한 번의 동기화 실행: 수집 -> 점수 계산 -> 병합 -> 저장 -> 스냅샷 -> 실행 로그 종료.
    실행 로그는 running 으로 시작해 success/error 중 하나로 정확히 한 번 전이한다.
    """

    def __init__(
        self,
        repository: CatalogRepositoryPort,
        client: PlatformClientPort,
        credentials: CredentialProviderPort,
        snapshot_store: Optional[SnapshotStore] = None,
        scoring: Optional[EvergreenScoringUseCase] = None,
        reconciliation: Optional[ReconciliationUseCase] = None,
    ):
        self.repository = repository
        self.client = client
        self.credentials = credentials
        self.snapshot_store = snapshot_store or SnapshotStore(repository)
        self.scoring = scoring or EvergreenScoringUseCase(self.snapshot_store)
        self.reconciliation = reconciliation or ReconciliationUseCase()

    def run(self, now: Optional[datetime] = None) -> SyncResult:
        now = now or datetime.now(timezone.utc)
        run_log = self.repository.create_run_log(started_at=now)
        logger.info("sync run %s started", run_log.id)

        try:
            synced = self._sync(now)
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            logger.exception("sync run %s failed: %s", run_log.id, message)
            self.repository.finish_run_log(run_log.id, SyncStatus.ERROR, error_message=message)
            return SyncResult(success=False, run_id=run_log.id, message=message)

        self.repository.finish_run_log(run_log.id, SyncStatus.SUCCESS, videos_synced=synced)
        logger.info("sync run %s finished: %d videos synced", run_log.id, synced)
        return SyncResult(success=True, run_id=run_log.id, videos_synced=synced)

    def _sync(self, now: datetime) -> int:
        if not self.credentials.has_valid_credential():
            raise CredentialError("No OAuth tokens found. Please connect your YouTube account first.")

        fetched = list(self.client.fetch_videos())
        analytics = self._fetch_analytics([v.video_id for v in fetched])

        scores = self.scoring.score(fetched, now)
        write_set = self.reconciliation.build_write_set(
            self.repository.get_catalog(), fetched, analytics, scores
        )
        for video in write_set:
            self.repository.upsert_video(video)

        # 스냅샷은 영상 행이 모두 존재한 뒤에 기록한다 (FK).
        self.snapshot_store.record_many(
            {v.video_id: v.view_count for v in fetched}, snapshot_date=to_utc(now).date()
        )
        return len(write_set)

    def _fetch_analytics(self, video_ids: list[str]) -> dict[str, VideoAnalytics]:
        if not video_ids:
            return {}
        try:
            return self.client.fetch_analytics(video_ids)
        except AnalyticsFetchError as exc:
            logger.warning("analytics fetch failed, continuing with basic data: %s", exc)
            return {}
