from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class FetchedVideo:
    """
    플랫폼에서 방금 수집한 원본 영상 메타데이터/기본 지표입니다.
    """
    video_id: str
    title: str
    description: str = ""
    published_at: Optional[datetime] = None
    thumbnail_url: Optional[str] = None
    duration_seconds: int = 0
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0


@dataclass
class VideoAnalytics:
    """Analytics API 가 보고한 시청 시간 지표 및 쇼츠 여부."""
    estimated_minutes_watched: float = 0.0
    average_view_duration: float = 0.0
    is_short: bool = False
