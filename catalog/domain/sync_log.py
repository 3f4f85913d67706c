from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class SyncStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class SyncLog:
    id: Optional[int]
    status: SyncStatus = SyncStatus.RUNNING
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    videos_synced: int = 0
    error_message: Optional[str] = None


@dataclass
class SyncResult:
    success: bool
    run_id: Optional[int]
    videos_synced: int = 0
    message: Optional[str] = None
