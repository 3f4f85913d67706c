import asyncio
import logging
import threading

from config.settings import SyncSettings, YouTubeSettings
from catalog.application.usecase.snapshot_store import SnapshotStore
from catalog.application.usecase.sync_usecase import SyncUseCase
from catalog.domain.sync_log import SyncResult
from catalog.infrastructure.client.youtube_client import YouTubeClient
from catalog.infrastructure.repository.catalog_repository_impl import CatalogRepositoryImpl
from catalog.infrastructure.repository.oauth_token_repository_impl import OAuthTokenRepositoryImpl

logger = logging.getLogger(__name__)

# 시간 예산을 넘긴 워커 스레드는 취소할 수 없으므로, 끝날 때까지 다음 실행을 시작하지 않는다.
_run_lock = threading.Lock()


def run_sync_blocking(settings: SyncSettings | None = None) -> SyncResult:
    """
    저장소/클라이언트를 새로 구성해 동기화를 한 번 실행한다. (워커 스레드에서 호출)
    이전 실행의 워커가 아직 돌고 있으면 새 실행 로그를 만들지 않고 건너뛴다.
    """
    settings = settings or SyncSettings()
    if not _run_lock.acquire(blocking=False):
        message = "Previous sync is still running"
        logger.warning(message)
        return SyncResult(success=False, run_id=None, message=message)

    repository = None
    token_store = None
    try:
        repository = CatalogRepositoryImpl()
        token_store = OAuthTokenRepositoryImpl()
        usecase = SyncUseCase(
            repository=repository,
            client=YouTubeClient(YouTubeSettings(), token_store),
            credentials=token_store,
            snapshot_store=SnapshotStore(repository, batch_size=settings.snapshot_batch_size),
        )
        return usecase.run()
    finally:
        if repository is not None:
            repository.close()
        if token_store is not None:
            token_store.close()
        _run_lock.release()


async def run_sync_once(settings: SyncSettings | None = None) -> SyncResult:
    """
    시간 예산(SYNC_TIMEOUT_SECONDS) 안에서 동기화를 실행한다.
    초과하면 진행 중인 실행 로그를 error 로 닫고, 늦게 끝난 워커의 종료 전이는 저장소가 거부한다.
    워커 스레드는 중단되지 않고 남은 저장을 마저 수행하며, 그동안 시작된 실행은 건너뛴다.
    """
    settings = settings or SyncSettings()
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(run_sync_blocking, settings), timeout=settings.timeout_seconds
        )
    except asyncio.TimeoutError:
        message = f"Sync exceeded time budget of {settings.timeout_seconds}s"
        logger.error(message)
        repository = CatalogRepositoryImpl()
        try:
            repository.fail_running_logs(message)
        finally:
            repository.close()
        return SyncResult(success=False, run_id=None, message=message)


async def start_sync_scheduler(settings: SyncSettings | None = None):
    """
    - ENABLE_SYNC_BATCH 가 true 일 때만 동작.
    - SYNC_INTERVAL_MINUTES (기본 1440) 간격으로 동기화를 반복 실행.
    """
    settings = settings or SyncSettings()
    if not settings.batch_enabled:
        return

    try:
        while True:
            try:
                logger.info("[SYNC-BATCH] run started")
                result = await run_sync_once(settings)
                if result.success:
                    logger.info("[SYNC-BATCH] %d videos synced", result.videos_synced)
                else:
                    logger.error("[SYNC-BATCH] failed: %s", result.message)
            except Exception as exc:
                logger.exception("[SYNC-BATCH] failed: %s", exc)
            await asyncio.sleep(settings.interval_minutes * 60)
    except asyncio.CancelledError:
        logger.info("[SYNC-BATCH] scheduler stopped")
        raise


if __name__ == "__main__":
    from config.logging_config import configure_logging

    configure_logging()
    print(asyncio.run(run_sync_once()))
