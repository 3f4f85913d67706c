import logging
import re
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from sqlalchemy.exc import SQLAlchemyError

from config.settings import YouTubeSettings
from catalog.application.port.platform_client_port import PlatformClientPort
from catalog.domain.errors import AnalyticsFetchError, CatalogFetchError, CredentialError
from catalog.domain.fetched_video import FetchedVideo, VideoAnalytics
from catalog.infrastructure.repository.oauth_token_repository_impl import OAuthTokenRepositoryImpl

logger = logging.getLogger(__name__)

VIDEO_BATCH_SIZE = 50
ANALYTICS_BATCH_SIZE = 200
ANALYTICS_START_DATE = "2005-01-01"
SCOPES = [
    "https://www.googleapis.com/auth/youtube.readonly",
    "https://www.googleapis.com/auth/yt-analytics.readonly",
]

_DURATION_RE = re.compile(r"P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+)S)?)?")


def parse_duration(iso8601: Optional[str]) -> int:
    """ISO-8601 길이(PT1H2M3S)를 초 단위로 변환한다. 해석할 수 없으면 0."""
    match = _DURATION_RE.fullmatch(iso8601 or "")
    if not match:
        return 0
    days, hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return days * 86400 + hours * 3600 + minutes * 60 + seconds


def merge_analytics_rows(rows: Iterable[list], analytics: dict[str, VideoAnalytics]) -> None:
    """
    reports.query 결과 행([video, creatorContentType, views, minutes, avgDuration])을 영상별로 합산한다.
    콘텐츠 유형별로 행이 나뉘므로 시청 시간은 더하고, SHORTS 행이 하나라도 있으면 쇼츠로 표시한다.
    """
    for row in rows:
        video_id, content_type = row[0], row[1]
        entry = analytics.setdefault(video_id, VideoAnalytics())
        entry.estimated_minutes_watched += float(row[3] or 0)
        entry.average_view_duration = float(row[4] or 0)
        if content_type == "SHORTS":
            entry.is_short = True


class YouTubeClient(PlatformClientPort):
    platform = "youtube"

    def __init__(self, settings: YouTubeSettings, token_store: OAuthTokenRepositoryImpl):
        # 채널 소유자 OAuth 토큰으로 Data API v3 / Analytics API v2 를 호출한다.
        self.settings = settings
        self.token_store = token_store
        self._credentials: Optional[Credentials] = None
        self._youtube = None
        self._analytics = None

    def fetch_videos(self) -> List[FetchedVideo]:
        try:
            video_ids = self._list_upload_ids()
            videos: List[FetchedVideo] = []
            for start in range(0, len(video_ids), VIDEO_BATCH_SIZE):
                batch = video_ids[start:start + VIDEO_BATCH_SIZE]
                response = (
                    self._youtube_service()
                    .videos()
                    .list(part="snippet,contentDetails,statistics", id=",".join(batch))
                    .execute()
                )
                videos.extend(self._to_fetched_video(item) for item in response.get("items", []))
        except (HttpError, GoogleAuthError) as exc:
            raise CatalogFetchError(f"YouTube videos fetch failed: {exc}") from exc
        finally:
            self._persist_refreshed_token()

        logger.info("fetched %d videos for channel %s", len(videos), self.settings.channel_id)
        return videos

    def fetch_analytics(self, video_ids: list[str]) -> dict[str, VideoAnalytics]:
        analytics: dict[str, VideoAnalytics] = {}
        end_date = datetime.now(timezone.utc).date().isoformat()
        batches = [video_ids[i:i + ANALYTICS_BATCH_SIZE] for i in range(0, len(video_ids), ANALYTICS_BATCH_SIZE)]
        failures: list[Exception] = []

        for batch in batches:
            try:
                response = (
                    self._analytics_service()
                    .reports()
                    .query(
                        ids="channel==MINE",
                        startDate=ANALYTICS_START_DATE,
                        endDate=end_date,
                        metrics="views,estimatedMinutesWatched,averageViewDuration",
                        dimensions="video,creatorContentType",
                        filters=f"video=={','.join(batch)}",
                    )
                    .execute()
                )
                merge_analytics_rows(response.get("rows") or [], analytics)
            except Exception as exc:
                # 배치 하나의 실패(전송 오류, 잘못된 행 포함)는 건너뛰고 나머지로 계속 진행한다.
                logger.warning("analytics batch of %d videos failed: %s", len(batch), exc)
                failures.append(exc)

        self._persist_refreshed_token()
        if batches and len(failures) == len(batches):
            raise AnalyticsFetchError(f"YouTube analytics fetch failed: {failures[-1]}") from failures[-1]
        return analytics

    def _list_upload_ids(self) -> List[str]:
        service = self._youtube_service()
        channel = service.channels().list(id=self.settings.channel_id, part="contentDetails").execute()
        items = channel.get("items", [])
        uploads = (
            items[0].get("contentDetails", {}).get("relatedPlaylists", {}).get("uploads") if items else None
        )
        if not uploads:
            raise CatalogFetchError("Could not find uploads playlist")

        ids: List[str] = []
        page_token: Optional[str] = None
        while True:
            response = (
                service.playlistItems()
                .list(
                    playlistId=uploads,
                    part="contentDetails",
                    maxResults=VIDEO_BATCH_SIZE,
                    pageToken=page_token,
                )
                .execute()
            )
            for item in response.get("items", []):
                video_id = item.get("contentDetails", {}).get("videoId")
                if video_id:
                    ids.append(video_id)
            page_token = response.get("nextPageToken")
            if not page_token:
                return ids

    def _youtube_service(self):
        if self._youtube is None:
            self._youtube = build("youtube", "v3", credentials=self._get_credentials(), cache_discovery=False)
        return self._youtube

    def _analytics_service(self):
        if self._analytics is None:
            self._analytics = build(
                "youtubeAnalytics", "v2", credentials=self._get_credentials(), cache_discovery=False
            )
        return self._analytics

    def _get_credentials(self) -> Credentials:
        if self._credentials is None:
            token = self.token_store.get_token()
            if token is None or not token.refresh_token:
                raise CredentialError("No OAuth tokens found. Please connect your YouTube account first.")
            # google-auth 는 naive UTC expiry 를 기대한다.
            expiry = token.expiry.replace(tzinfo=None) if token.expiry and token.expiry.tzinfo else token.expiry
            self._credentials = Credentials(
                token=token.access_token,
                refresh_token=token.refresh_token,
                token_uri=self.settings.token_uri,
                client_id=self.settings.client_id,
                client_secret=self.settings.client_secret,
                scopes=SCOPES,
                expiry=expiry,
            )
        return self._credentials

    def _persist_refreshed_token(self) -> None:
        creds = self._credentials
        if creds is None or not creds.token:
            return
        expiry = creds.expiry.replace(tzinfo=timezone.utc) if creds.expiry else None
        try:
            stored = self.token_store.get_token()
            if stored is not None and stored.access_token == creds.token:
                return
            self.token_store.save_access_token(creds.token, expiry)
        except SQLAlchemyError as exc:
            # 호출 결과(또는 원래 오류)를 가리지 않도록 저장 실패는 기록만 한다.
            logger.warning("failed to persist refreshed access token: %s", exc)

    def _to_fetched_video(self, item: dict) -> FetchedVideo:
        snippet = item.get("snippet", {})
        stats = item.get("statistics", {})
        content = item.get("contentDetails", {})
        thumbnails = snippet.get("thumbnails", {})
        return FetchedVideo(
            video_id=item["id"],
            title=snippet.get("title", ""),
            description=snippet.get("description") or "",
            published_at=self._parse_datetime(snippet.get("publishedAt")),
            thumbnail_url=(thumbnails.get("high") or thumbnails.get("default") or {}).get("url", ""),
            duration_seconds=parse_duration(content.get("duration")),
            view_count=int(stats.get("viewCount", 0)),
            like_count=int(stats.get("likeCount", 0)) if stats.get("likeCount") else 0,
            comment_count=int(stats.get("commentCount", 0)) if stats.get("commentCount") else 0,
        )

    @staticmethod
    def _parse_datetime(value: str | None):
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
