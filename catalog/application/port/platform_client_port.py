from abc import ABC, abstractmethod
from typing import Iterable

from catalog.domain.fetched_video import FetchedVideo, VideoAnalytics


class PlatformClientPort(ABC):
    platform: str

    @abstractmethod
    def fetch_videos(self) -> Iterable[FetchedVideo]:
        raise NotImplementedError

    @abstractmethod
    def fetch_analytics(self, video_ids: list[str]) -> dict[str, VideoAnalytics]:
        raise NotImplementedError
