import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()


@dataclass
class YouTubeSettings:
    client_id: str = os.getenv("GOOGLE_CLIENT_ID", "")
    client_secret: str = os.getenv("GOOGLE_CLIENT_SECRET", "")
    channel_id: str = os.getenv("YOUTUBE_CHANNEL_ID", "")
    token_uri: str = os.getenv("GOOGLE_TOKEN_URI", "https://oauth2.googleapis.com/token")


@dataclass
class SyncSettings:
    snapshot_batch_size: int = int(os.getenv("SNAPSHOT_BATCH_SIZE", "500"))
    timeout_seconds: int = int(os.getenv("SYNC_TIMEOUT_SECONDS", "300"))
    batch_enabled: bool = os.getenv("ENABLE_SYNC_BATCH", "false").lower() == "true"
    interval_minutes: int = int(os.getenv("SYNC_INTERVAL_MINUTES", "1440"))
