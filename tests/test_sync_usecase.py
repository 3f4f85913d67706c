from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from catalog.application.usecase.snapshot_store import SnapshotStore
from catalog.application.usecase.sync_usecase import SyncUseCase
from catalog.domain.errors import AnalyticsFetchError, CatalogFetchError
from catalog.domain.fetched_video import VideoAnalytics
from catalog.domain.sync_log import SyncStatus
from catalog.infrastructure.orm.models import ViewSnapshotORM
from catalog.infrastructure.repository.catalog_repository_impl import CatalogRepositoryImpl

from conftest import NOW, FakePlatformClient, StaticCredentials, make_fetched


def catalog_videos():
    return [
        make_fetched("a", title="iPhone 15 review after one year", days_old=200, views=1000),
        make_fetched("b", title="Galaxy S25 unboxing", days_old=30, views=500, duration=45),
    ]


def build_usecase(repository, client, valid=True):
    return SyncUseCase(
        repository,
        client,
        StaticCredentials(valid),
        snapshot_store=SnapshotStore(repository, batch_size=1),
    )


def snapshot_rows(repository):
    return repository.db.query(ViewSnapshotORM).order_by(ViewSnapshotORM.video_id).all()


def test_successful_run_writes_catalog_snapshots_and_log(repository):
    client = FakePlatformClient(
        catalog_videos(),
        analytics={"a": VideoAnalytics(estimated_minutes_watched=120.5, average_view_duration=240.0)},
    )

    result = build_usecase(repository, client).run(now=NOW)

    assert result.success is True
    assert result.videos_synced == 2
    catalog = repository.get_catalog()
    assert catalog["a"].topic == "Review"
    assert catalog["a"].brand == "Apple"
    assert catalog["a"].estimated_minutes_watched == 120.5
    assert catalog["b"].topic == "Unboxing"
    assert catalog["b"].brand == "Samsung"
    assert catalog["b"].is_short is True
    assert catalog["a"].evergreen_score == 100
    assert 0 <= catalog["b"].evergreen_score < 100

    rows = snapshot_rows(repository)
    assert [(r.video_id, r.snapshot_date, r.view_count) for r in rows] == [
        ("a", NOW.date(), 1000),
        ("b", NOW.date(), 500),
    ]

    log = repository.fetch_last_sync()
    assert log.id == result.run_id
    assert log.status == SyncStatus.SUCCESS
    assert log.videos_synced == 2


def test_missing_credentials_fail_without_writes(repository):
    client = FakePlatformClient(catalog_videos())

    result = build_usecase(repository, client, valid=False).run(now=NOW)

    assert result.success is False
    assert "No OAuth tokens found" in result.message
    assert client.fetch_calls == 0
    assert repository.get_catalog() == {}
    assert snapshot_rows(repository) == []
    log = repository.fetch_last_sync()
    assert log.status == SyncStatus.ERROR
    assert log.error_message == result.message


def test_catalog_fetch_failure_is_fatal(repository):
    client = FakePlatformClient(videos_error=CatalogFetchError("quota exceeded"))

    result = build_usecase(repository, client).run(now=NOW)

    assert result.success is False
    assert result.message == "quota exceeded"
    assert repository.fetch_last_sync().status == SyncStatus.ERROR
    assert repository.get_catalog() == {}


def test_analytics_failure_continues_with_basic_data(repository):
    client = FakePlatformClient(catalog_videos(), analytics_error=AnalyticsFetchError("analytics down"))

    result = build_usecase(repository, client).run(now=NOW)

    assert result.success is True
    catalog = repository.get_catalog()
    assert catalog["a"].estimated_minutes_watched == 0
    assert catalog["b"].is_short is True
    assert repository.fetch_last_sync().status == SyncStatus.SUCCESS


def test_analytics_short_marker_overrides_duration(repository):
    client = FakePlatformClient(
        [make_fetched("a", title="Vertical clip", duration=600)],
        analytics={"a": VideoAnalytics(is_short=True)},
    )
    build_usecase(repository, client).run(now=NOW)
    assert repository.get_catalog()["a"].is_short is True


def test_same_day_rerun_is_idempotent(repository):
    client = FakePlatformClient(catalog_videos())
    usecase = build_usecase(repository, client)

    usecase.run(now=NOW)
    first = repository.get_catalog()
    usecase.run(now=NOW + timedelta(hours=3))
    second = repository.get_catalog()

    for video_id in ("a", "b"):
        assert second[video_id].evergreen_score == first[video_id].evergreen_score
        assert second[video_id].topic == first[video_id].topic
        assert second[video_id].brand == first[video_id].brand
        assert second[video_id].created_at == first[video_id].created_at
    assert len(snapshot_rows(repository)) == 2


def test_next_day_run_uses_snapshot_history(repository):
    usecase = build_usecase(repository, FakePlatformClient(catalog_videos()))
    usecase.run(now=NOW)

    grown = [
        make_fetched("a", title="iPhone 15 review after one year", days_old=201, views=1300),
        make_fetched("b", title="Galaxy S25 unboxing", days_old=31, views=510, duration=45),
    ]
    build_usecase(repository, FakePlatformClient(grown)).run(now=NOW + timedelta(days=1))

    catalog = repository.get_catalog()
    assert catalog["a"].evergreen_score == 100
    assert catalog["b"].evergreen_score < 5
    assert len(snapshot_rows(repository)) == 4


def test_manual_labels_survive_resync(repository):
    usecase = build_usecase(repository, FakePlatformClient(catalog_videos()))
    usecase.run(now=NOW)
    repository.update_video_labels("a", {"topic": "Long-term", "topic_auto": False})

    retitled = [make_fetched("a", title="Pixel 9 tutorial", days_old=200, views=1100)]
    build_usecase(repository, FakePlatformClient(retitled)).run(now=NOW + timedelta(days=1))

    stored = repository.get_catalog()["a"]
    assert stored.title == "Pixel 9 tutorial"
    assert stored.topic == "Long-term"
    assert stored.topic_auto is False
    assert stored.brand == "Google"


def test_videos_missing_from_platform_are_left_untouched(repository):
    build_usecase(repository, FakePlatformClient(catalog_videos())).run(now=NOW)
    only_b = [make_fetched("b", title="Galaxy S25 unboxing", days_old=30, views=800, duration=45)]

    result = build_usecase(repository, FakePlatformClient(only_b)).run(now=NOW + timedelta(days=1))

    assert result.videos_synced == 1
    catalog = repository.get_catalog()
    assert catalog["a"].view_count == 1000
    assert catalog["b"].view_count == 800


def test_empty_channel_succeeds_with_zero_videos(repository):
    result = build_usecase(repository, FakePlatformClient([])).run(now=NOW)
    assert result.success is True
    assert result.videos_synced == 0
    assert repository.fetch_last_sync().status == SyncStatus.SUCCESS


class FailingUpsertRepository(CatalogRepositoryImpl):
    def upsert_video(self, video):
        raise OperationalError("UPDATE video", {}, Exception("database is locked"))


def test_persistence_failure_marks_run_as_error(session_factory):
    repository = FailingUpsertRepository(session_factory)
    try:
        result = build_usecase(repository, FakePlatformClient(catalog_videos())).run(now=NOW)
        assert result.success is False
        assert "database is locked" in result.message
        log = repository.fetch_last_sync()
        assert log.status == SyncStatus.ERROR
        assert snapshot_rows(repository) == []
    finally:
        repository.close()


class RecordingRepository(CatalogRepositoryImpl):
    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.calls = []

    def upsert_video(self, video):
        self.calls.append("upsert")
        return super().upsert_video(video)

    def append_snapshots(self, snapshots):
        self.calls.append("snapshot")
        return super().append_snapshots(snapshots)


def test_all_upserts_happen_before_any_snapshot(session_factory):
    repository = RecordingRepository(session_factory)
    try:
        build_usecase(repository, FakePlatformClient(catalog_videos())).run(now=NOW)
        assert repository.calls == ["upsert", "upsert", "snapshot", "snapshot"]
    finally:
        repository.close()


@pytest.mark.parametrize("error", [ValueError("bad payload"), RuntimeError()])
def test_unexpected_errors_are_recorded(repository, error):
    result = build_usecase(repository, FakePlatformClient(videos_error=error)).run(now=NOW)
    assert result.success is False
    assert result.message == (str(error) or "RuntimeError")
    assert repository.fetch_last_sync().error_message == result.message
