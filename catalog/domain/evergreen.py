"""
에버그린 점수 계산.

영상별 원점수(raw score)는 최근 조회 속도 x 유지율 x 연령 성숙도 x 장수 보너스로 구하고,
한 번의 동기화에 포함된 전체 코호트의 최댓값을 100 으로 정규화한다.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Mapping, NamedTuple, Optional, Sequence

SECONDS_PER_DAY = 86400

# (snapshot_date, view_count)
HistoryPoint = tuple[date, int]


@dataclass(frozen=True)
class EvergreenParams:
    window_days: int = 30
    maturity_days: float = 90.0
    longevity_days: float = 180.0
    longevity_bonus: float = 1.4
    retention_cap: float = 1.2
    epsilon: float = 1e-9


DEFAULT_PARAMS = EvergreenParams()


class EvergreenBreakdown(NamedTuple):
    age_days: float
    lifetime_velocity: float
    recent_velocity: float
    retention_ratio: float
    age_maturity: float
    longevity_bonus: float
    raw_score: float


def to_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """타임존 여부에 따라 UTC aware datetime으로 변환한다."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def age_in_days(published_at: Optional[datetime], now: datetime) -> float:
    # 게시 시각을 모르면 당일 게시로 취급한다.
    if published_at is None:
        return 1.0
    elapsed = (to_utc(now) - to_utc(published_at)).total_seconds() / SECONDS_PER_DAY
    return max(1.0, elapsed)


def window_start(today: date, params: EvergreenParams = DEFAULT_PARAMS) -> date:
    return today - timedelta(days=params.window_days)


def snapshot_velocity(
    history: Sequence[HistoryPoint], today: date, params: EvergreenParams = DEFAULT_PARAMS
) -> Optional[float]:
    """
    최근 window_days 안의 가장 이른/늦은 스냅샷 차이로 일평균 조회 증가량을 구한다.
    윈도우 안의 스냅샷이 2개 미만이면 None.
    """
    since = window_start(today, params)
    in_window = sorted(point for point in history if since <= point[0] <= today)
    if len(in_window) < 2:
        return None
    (first_date, first_count), (last_date, last_count) = in_window[0], in_window[-1]
    days = max(1, (last_date - first_date).days)
    return max(0.0, (last_count - first_count) / days)


def evergreen_breakdown(
    view_count: int,
    published_at: Optional[datetime],
    history: Sequence[HistoryPoint],
    now: datetime,
    params: EvergreenParams = DEFAULT_PARAMS,
) -> EvergreenBreakdown:
    age = age_in_days(published_at, now)
    lifetime = (view_count or 0) / age

    recent = snapshot_velocity(history, to_utc(now).date(), params)
    if recent is None:
        recent = lifetime

    retention = min(recent / lifetime, params.retention_cap) if lifetime > 0 else 0.0
    maturity = min(age / params.maturity_days, 1.0)
    bonus = params.longevity_bonus if age > params.longevity_days else 1.0

    return EvergreenBreakdown(
        age_days=age,
        lifetime_velocity=lifetime,
        recent_velocity=recent,
        retention_ratio=retention,
        age_maturity=maturity,
        longevity_bonus=bonus,
        raw_score=recent * retention * maturity * bonus,
    )


def raw_evergreen_score(
    view_count: int,
    published_at: Optional[datetime],
    history: Sequence[HistoryPoint],
    now: datetime,
    params: EvergreenParams = DEFAULT_PARAMS,
) -> float:
    return evergreen_breakdown(view_count, published_at, history, now, params).raw_score


def normalize_scores(raw_scores: Mapping[str, float], params: EvergreenParams = DEFAULT_PARAMS) -> dict[str, int]:
    """
    코호트 최댓값 기준 0~100 정규화. 모든 원점수가 0 이하이면 전부 0 이 된다.
    """
    if not raw_scores:
        return {}
    top = max(raw_scores.values())
    if top <= 0:
        return {video_id: 0 for video_id in raw_scores}
    denominator = max(top, params.epsilon)
    return {
        video_id: min(100, max(0, round(raw / denominator * 100)))
        for video_id, raw in raw_scores.items()
    }
