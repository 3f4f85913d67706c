from dataclasses import dataclass
from typing import Optional

SORTABLE_COLUMNS = ("view_count", "published_at", "evergreen_score", "like_count", "estimated_minutes_watched")
EVERGREEN_MIN_AGE_DAYS = 90


@dataclass
class VideoQuery:
    video_type: Optional[str] = None  # "longform" | "short" | None
    topic: Optional[str] = None
    brand: Optional[str] = None
    search: Optional[str] = None
    sort_by: str = "view_count"
    sort_order: str = "desc"
    page: int = 1
    limit: int = 50
    evergreen: bool = False

    @property
    def offset(self) -> int:
        return (max(self.page, 1) - 1) * self.limit

    @property
    def resolved_sort_by(self) -> str:
        return self.sort_by if self.sort_by in SORTABLE_COLUMNS else "view_count"
