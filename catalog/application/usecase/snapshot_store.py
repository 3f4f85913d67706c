import logging
from collections import defaultdict
from datetime import date, datetime, timezone
from typing import Iterable, Iterator, Mapping, Optional, Sequence, TypeVar

from catalog.application.port.catalog_repository_port import CatalogRepositoryPort
from catalog.domain.evergreen import HistoryPoint
from catalog.domain.view_snapshot import ViewSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BATCH_SIZE = 500


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    for start in range(0, len(items), size):
        yield items[start:start + size]


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class SnapshotStore:
    """
    (video_id, 날짜) 단위 조회수 시계열 저장소.
    같은 날 다시 기록하면 덮어쓰며, 배치 크기는 I/O 효율을 위한 것일 뿐 결과에 영향을 주지 않는다.
    """

    def __init__(self, repository: CatalogRepositoryPort, batch_size: int = DEFAULT_BATCH_SIZE):
        if batch_size < 1:
            raise ValueError("batch_size must be positive")
        self.repository = repository
        self.batch_size = batch_size

    def record(self, video_id: str, view_count: int, snapshot_date: Optional[date] = None) -> ViewSnapshot:
        return self.repository.append_snapshot(video_id, snapshot_date or utc_today(), view_count)

    def record_many(self, view_counts: Mapping[str, int], snapshot_date: Optional[date] = None) -> int:
        snapshot_date = snapshot_date or utc_today()
        # dict 이므로 동일 video_id 는 이미 마지막 값 하나로 합쳐져 있다.
        snapshots = [
            ViewSnapshot(video_id=video_id, snapshot_date=snapshot_date, view_count=count)
            for video_id, count in view_counts.items()
        ]
        written = 0
        for batch in chunked(snapshots, self.batch_size):
            written += self.repository.append_snapshots(batch)
        logger.info("recorded %d view snapshots for %s", written, snapshot_date)
        return written

    def history(self, video_id: str, since_date: date) -> list[HistoryPoint]:
        return self.histories([video_id], since_date).get(video_id, [])

    def histories(self, video_ids: Iterable[str], since_date: date) -> dict[str, list[HistoryPoint]]:
        ids = list(dict.fromkeys(video_ids))
        result: dict[str, list[HistoryPoint]] = defaultdict(list)
        for batch in chunked(ids, self.batch_size):
            for snapshot in self.repository.query_snapshots(batch, since_date):
                result[snapshot.video_id].append((snapshot.snapshot_date, snapshot.view_count))
        for points in result.values():
            points.sort()
        return dict(result)
