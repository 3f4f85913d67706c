from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Video:
    """
    카탈로그에 저장되는 영상 레코드입니다.
    topic_auto / brand_auto 가 False 면 사람이 직접 수정한 값이므로 동기화가 덮어쓰지 않습니다.
    """
    video_id: str
    title: str
    description: str = ""
    published_at: Optional[datetime] = None
    thumbnail_url: Optional[str] = None
    duration_seconds: int = 0
    is_short: bool = False
    view_count: int = 0
    like_count: int = 0
    comment_count: int = 0
    estimated_minutes_watched: float = 0.0
    average_view_duration: float = 0.0
    topic: Optional[str] = None
    brand: Optional[str] = None
    topic_auto: bool = True
    brand_auto: bool = True
    evergreen_score: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
