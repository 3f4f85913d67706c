import logging
from datetime import datetime
from typing import Iterable

from catalog.application.usecase.snapshot_store import SnapshotStore
from catalog.domain.evergreen import (
    DEFAULT_PARAMS,
    EvergreenParams,
    HistoryPoint,
    normalize_scores,
    raw_evergreen_score,
    to_utc,
    window_start,
)
from catalog.domain.fetched_video import FetchedVideo

logger = logging.getLogger(__name__)


class EvergreenScoringUseCase:
    def __init__(self, snapshot_store: SnapshotStore, params: EvergreenParams = DEFAULT_PARAMS):
        self.snapshot_store = snapshot_store
        self.params = params

    def score(self, videos: Iterable[FetchedVideo], now: datetime) -> dict[str, int]:
        """
        이번 실행의 전체 코호트에 대해 0~100 점수를 계산한다.
        저장된 스냅샷 이력에 현재 조회수를 오늘 날짜 관측치로 덧씌워 사용하므로,
        같은 날 재실행해도 첫 실행과 동일한 이력을 보게 된다.
        """
        videos = list(videos)
        if not videos:
            return {}
        today = to_utc(now).date()
        histories = self.snapshot_store.histories(
            [v.video_id for v in videos], window_start(today, self.params)
        )

        raw_scores: dict[str, float] = {}
        for video in videos:
            history = with_observation(histories.get(video.video_id, []), today, video.view_count)
            raw_scores[video.video_id] = raw_evergreen_score(
                video.view_count, video.published_at, history, now, self.params
            )

        scores = normalize_scores(raw_scores, self.params)
        logger.info(
            "scored %d videos (max raw score %.3f)", len(scores), max(raw_scores.values(), default=0.0)
        )
        return scores


def with_observation(history: list[HistoryPoint], day, view_count: int) -> list[HistoryPoint]:
    points = [point for point in history if point[0] != day]
    points.append((day, view_count))
    points.sort()
    return points
