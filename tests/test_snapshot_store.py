from datetime import date, timedelta

import pytest

from catalog.application.usecase.snapshot_store import SnapshotStore, chunked
from catalog.domain.video import Video
from catalog.infrastructure.orm.models import ViewSnapshotORM

DAY = date(2026, 6, 1)


@pytest.fixture
def store(repository):
    for vid in ("a", "b", "c", "d", "e"):
        repository.upsert_video(Video(video_id=vid, title=vid))
    return SnapshotStore(repository, batch_size=2)


def stored_rows(repository, video_id):
    return repository.db.query(ViewSnapshotORM).filter(ViewSnapshotORM.video_id == video_id).all()


def test_same_day_record_overwrites(store, repository):
    store.record("a", 100, DAY)
    store.record("a", 150, DAY)

    rows = stored_rows(repository, "a")
    assert len(rows) == 1
    assert rows[0].view_count == 150
    assert store.history("a", DAY) == [(DAY, 150)]


def test_record_many_writes_every_video_across_batches(store):
    counts = {vid: i * 10 for i, vid in enumerate("abcde")}
    assert store.record_many(counts, DAY) == 5
    histories = store.histories(list("abcde"), DAY)
    assert histories == {
        vid: [(DAY, count)] for vid, count in counts.items()
    }


def test_record_many_is_safe_to_repeat(store, repository):
    store.record_many({"a": 1, "b": 2}, DAY)
    store.record_many({"a": 5, "b": 6}, DAY)
    assert len(stored_rows(repository, "a")) == 1
    assert store.history("b", DAY) == [(DAY, 6)]


def test_duplicate_keys_in_one_batch_do_not_conflict(repository):
    from catalog.domain.view_snapshot import ViewSnapshot

    repository.upsert_video(Video(video_id="x", title="x"))
    written = repository.append_snapshots(
        [ViewSnapshot("x", DAY, 1), ViewSnapshot("x", DAY, 2)]
    )
    assert written == 1
    assert [r.view_count for r in stored_rows(repository, "x")] == [2]


def test_history_is_ascending_with_gaps_preserved(store):
    for offset, count in ((5, 500), (0, 1000), (3, 700)):
        store.record("b", count, DAY - timedelta(days=offset))

    assert store.history("b", DAY - timedelta(days=10)) == [
        (DAY - timedelta(days=5), 500),
        (DAY - timedelta(days=3), 700),
        (DAY, 1000),
    ]
    assert store.history("b", DAY - timedelta(days=3)) == [
        (DAY - timedelta(days=3), 700),
        (DAY, 1000),
    ]
    assert store.history("c", DAY - timedelta(days=10)) == []


def test_chunked_and_batch_size_validation(repository):
    assert [list(c) for c in chunked([1, 2, 3, 4, 5], 2)] == [[1, 2], [3, 4], [5]]
    with pytest.raises(ValueError):
        SnapshotStore(repository, batch_size=0)
