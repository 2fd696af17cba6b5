from __future__ import annotations
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .data_prep import ExportReadError, IdFactory, Source, load_search, load_viewing
from .insights import create_insights
from .metrics import (
    TOP_TITLES_LIMIT, build_day_distribution, build_day_totals, build_device_stats,
    build_genre_stats, build_heatmap, build_hour_distribution, build_search_stats,
    build_top_titles, build_trend, summarize_watching,
)
from .models import (
    DayTotal, DeviceStat, DistributionPoint, GenreStat, HeatmapPoint, Insight,
    SearchEntry, SearchStats, TopTitleStat, TrendPoint, ViewingEntry, WatchHighlights,
)

logger = logging.getLogger(__name__)

SAMPLE_DIR = Path(__file__).resolve().parent / "sample_data"


def sample_paths() -> Tuple[Path, Path]:
    """(viewing, search) sample exports shipped with the package."""
    return SAMPLE_DIR / "sample-viewing-activity.csv", SAMPLE_DIR / "sample-search-history.csv"


@dataclass(frozen=True)
class Dashboard:
    summary: WatchHighlights
    trend: List[TrendPoint]
    genres: List[GenreStat]
    devices: List[DeviceStat]
    heatmap: List[HeatmapPoint]
    day_distribution: List[DistributionPoint]
    hour_distribution: List[DistributionPoint]
    day_totals: List[DayTotal]
    top_titles: List[TopTitleStat]
    search: SearchStats
    insights: List[Insight]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "trend": [p.to_dict() for p in self.trend],
            "genres": [g.to_dict() for g in self.genres],
            "devices": [d.to_dict() for d in self.devices],
            "heatmap": [p.to_dict() for p in self.heatmap],
            "day_distribution": [p.to_dict() for p in self.day_distribution],
            "hour_distribution": [p.to_dict() for p in self.hour_distribution],
            "day_totals": [d.to_dict() for d in self.day_totals],
            "top_titles": [t.to_dict() for t in self.top_titles],
            "search": self.search.to_dict(),
            "insights": [i.to_dict() for i in self.insights],
        }


def build_dashboard(
    viewing: Sequence[ViewingEntry],
    search: Sequence[SearchEntry] = (),
    *,
    top_titles: int = TOP_TITLES_LIMIT,
) -> Dashboard:
    summary = summarize_watching(viewing)
    genres = build_genre_stats(viewing)
    devices = build_device_stats(viewing)
    heatmap = build_heatmap(viewing)
    search_stats = build_search_stats(search)
    return Dashboard(
        summary=summary,
        trend=build_trend(viewing),
        genres=genres,
        devices=devices,
        heatmap=heatmap,
        day_distribution=build_day_distribution(viewing),
        hour_distribution=build_hour_distribution(viewing),
        day_totals=build_day_totals(viewing),
        top_titles=build_top_titles(viewing, limit=top_titles),
        search=search_stats,
        insights=create_insights(summary, genres, devices, heatmap, search_stats),
    )


@dataclass
class UploadStatus:
    viewing: str = "Waiting"
    search: str = "Optional"
    error: Optional[str] = None


@dataclass
class DashboardSession:
    """
    Currently loaded entries plus upload status.
    A successful upload replaces the entries wholesale; a failed one keeps them
    and only flips the status to "Failed".
    """
    tz: str = "UTC"
    top_titles: int = TOP_TITLES_LIMIT
    id_factory: Optional[IdFactory] = None
    viewing: List[ViewingEntry] = field(default_factory=list)
    search: List[SearchEntry] = field(default_factory=list)
    status: UploadStatus = field(default_factory=UploadStatus)

    def upload_viewing(self, source: Source) -> bool:
        self.status.viewing, self.status.error = "Uploading…", None
        try:
            entries = load_viewing(source, id_factory=self.id_factory, tz=self.tz)
        except (ExportReadError, OSError) as e:
            logger.warning("Viewing upload failed: %s", e)
            self.status.viewing, self.status.error = "Failed", str(e)
            return False
        self.viewing = entries
        self.status.viewing = f"{len(entries)} rows processed"
        return True

    def upload_search(self, source: Source) -> bool:
        self.status.search, self.status.error = "Uploading…", None
        try:
            entries = load_search(source, id_factory=self.id_factory, tz=self.tz)
        except (ExportReadError, OSError) as e:
            logger.warning("Search upload failed: %s", e)
            self.status.search, self.status.error = "Failed", str(e)
            return False
        self.search = entries
        self.status.search = f"{len(entries)} searches"
        return True

    def load_sample(self) -> bool:
        viewing_path, search_path = sample_paths()
        self.status = UploadStatus(viewing="Loading sample…", search="Loading sample…")
        try:
            viewing = load_viewing(viewing_path, id_factory=self.id_factory, tz=self.tz)
            search = load_search(search_path, id_factory=self.id_factory, tz=self.tz)
        except (ExportReadError, OSError) as e:
            logger.warning("Sample load failed: %s", e)
            self.status = UploadStatus(viewing="Failed", search="Failed", error=str(e))
            return False
        self.viewing, self.search = viewing, search
        self.status = UploadStatus(viewing="Sample loaded", search="Sample loaded")
        return True

    def dashboard(self) -> Dashboard:
        return build_dashboard(self.viewing, self.search, top_titles=self.top_titles)
