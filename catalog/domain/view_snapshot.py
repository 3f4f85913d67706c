from dataclasses import dataclass
from datetime import date


@dataclass
class ViewSnapshot:
    """
    일별 누적 조회수 스냅샷입니다. (video_id, snapshot_date) 당 한 건만 존재합니다.
    최근 조회 속도 계산의 기준점으로 활용됩니다.
    """
    video_id: str
    snapshot_date: date
    view_count: int
