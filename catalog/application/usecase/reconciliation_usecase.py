from typing import Iterable, Mapping, Optional

from catalog.domain.fetched_video import FetchedVideo, VideoAnalytics
from catalog.domain.title_classifier import TitleClassifier
from catalog.domain.video import Video

SHORT_MAX_SECONDS = 60


def merge_video(
    existing: Optional[Video],
    fetched: FetchedVideo,
    analytics: Optional[VideoAnalytics],
    evergreen_score: int,
    classifier: TitleClassifier,
) -> Video:
    """
    기존 카탈로그 항목과 새로 수집한 레코드를 합쳐 저장할 최종 필드를 결정한다.
    사람이 직접 수정한(*_auto=False) topic/brand 는 그대로 두고, 나머지는 원천 값을 따른다.
    """
    # Analytics 의 SHORTS 신호나 60초 이하 길이 중 하나만 만족해도 쇼츠로 본다.
    is_short = bool(analytics and analytics.is_short) or fetched.duration_seconds <= SHORT_MAX_SECONDS

    if existing is not None and existing.topic_auto is False:
        topic, topic_auto = existing.topic, False
    else:
        topic, topic_auto = classifier.classify_topic(fetched.title), True

    if existing is not None and existing.brand_auto is False:
        brand, brand_auto = existing.brand, False
    else:
        brand, brand_auto = classifier.classify_brand(fetched.title), True

    return Video(
        video_id=fetched.video_id,
        title=fetched.title,
        description=fetched.description or "",
        published_at=fetched.published_at,
        thumbnail_url=fetched.thumbnail_url,
        duration_seconds=fetched.duration_seconds,
        is_short=is_short,
        view_count=fetched.view_count,
        like_count=fetched.like_count,
        comment_count=fetched.comment_count,
        estimated_minutes_watched=analytics.estimated_minutes_watched if analytics else 0.0,
        average_view_duration=analytics.average_view_duration if analytics else 0.0,
        topic=topic,
        brand=brand,
        topic_auto=topic_auto,
        brand_auto=brand_auto,
        evergreen_score=evergreen_score,
        created_at=existing.created_at if existing else None,
    )


class ReconciliationUseCase:
    def __init__(self, classifier: Optional[TitleClassifier] = None):
        self.classifier = classifier or TitleClassifier()

    def build_write_set(
        self,
        catalog: Mapping[str, Video],
        fetched_videos: Iterable[FetchedVideo],
        analytics: Mapping[str, VideoAnalytics],
        scores: Mapping[str, int],
    ) -> list[Video]:
        """
        이번 수집분 전체의 저장 대상을 먼저 계산한다. 수집 결과에 없는 영상은 건드리지 않는다.
        """
        latest: dict[str, FetchedVideo] = {}
        for fetched in fetched_videos:
            latest[fetched.video_id] = fetched

        return [
            merge_video(
                catalog.get(video_id),
                fetched,
                analytics.get(video_id),
                scores.get(video_id, 0),
                self.classifier,
            )
            for video_id, fetched in latest.items()
        ]
