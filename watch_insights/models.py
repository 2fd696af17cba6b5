from __future__ import annotations
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ViewingEntry:
    id: str
    profile_name: str
    title: str
    normalized_title: str
    genre: str
    start_time: datetime
    duration_minutes: int
    device: str
    country: str
    supplemental_video_type: str
    attributes: str
    day_name: str
    hour: int


@dataclass(frozen=True)
class SearchEntry:
    id: str
    profile_name: str
    query: str
    timestamp: datetime


# ----------------------------
# Aggregate views
# ----------------------------
class _Serializable:
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TrendPoint(_Serializable):
    label: str
    minutes: int


@dataclass(frozen=True)
class GenreStat(_Serializable):
    genre: str
    entries: int
    minutes: int


@dataclass(frozen=True)
class DeviceStat(_Serializable):
    device: str
    count: int
    minutes: int


@dataclass(frozen=True)
class TopTitleStat(_Serializable):
    title: str
    minutes: int
    sessions: int
    genre: str


@dataclass(frozen=True)
class HeatmapPoint(_Serializable):
    day: str
    hour: int
    value: int


@dataclass(frozen=True)
class DistributionPoint(_Serializable):
    label: str
    value: int
    smooth: float


@dataclass(frozen=True)
class DayTotal(_Serializable):
    day: str
    minutes: int


@dataclass(frozen=True)
class WordCloudToken(_Serializable):
    value: str
    count: float


@dataclass(frozen=True)
class SearchStats(_Serializable):
    total_queries: int
    monthly_counts: List[TrendPoint] = field(default_factory=list)
    word_cloud: List[WordCloudToken] = field(default_factory=list)
    top_searches: List[WordCloudToken] = field(default_factory=list)


@dataclass(frozen=True)
class WatchHighlights(_Serializable):
    total_titles: int
    total_hours: float
    total_sessions: int
    average_session_minutes: int
    peak_day: str
    peak_hour_range: str
    top_title: Optional[WordCloudToken] = None


@dataclass(frozen=True)
class Insight(_Serializable):
    label: str
    highlight: str
    detail: str
