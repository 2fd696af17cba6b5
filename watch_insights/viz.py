from __future__ import annotations
import logging, os
from typing import Dict, List, Optional, Sequence, Tuple
import numpy as np
import matplotlib.pyplot as plt

from .metrics import hour_range
from .models import DeviceStat, DistributionPoint, GenreStat, HeatmapPoint, TrendPoint, WordCloudToken

logger = logging.getLogger(__name__)

HEATMAP_DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
BUCKET_HOURS = 3

def _ensure_dir(p: Optional[str]) -> None:
    if p:
        d = os.path.dirname(p)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)

def _finish(fig: plt.Figure, out_path: Optional[str], show: bool) -> Optional[str]:
    fig.tight_layout()
    saved = None
    if out_path:
        _ensure_dir(out_path)
        fig.savefig(out_path, dpi=150, bbox_inches="tight")
        saved = out_path
    if show:
        plt.show()
    else:
        plt.close(fig)
    return saved


def bucket_heatmap(points: Sequence[HeatmapPoint]) -> Tuple[np.ndarray, List[str], List[str]]:
    """
    Roll hour-level heatmap points up into 3-hour windows.
    Returns (grid[7, 8] of minutes, day labels Monday-first, bucket labels "12AM-3AM", ...).
    """
    n_buckets = 24 // BUCKET_HOURS
    grid = np.zeros((len(HEATMAP_DAYS), n_buckets), dtype=float)
    rows = {day: i for i, day in enumerate(HEATMAP_DAYS)}
    for p in points:
        if p.day not in rows:
            continue
        grid[rows[p.day], (p.hour % 24) // BUCKET_HOURS] += p.value
    labels = [hour_range(b * BUCKET_HOURS).replace(" ", "") for b in range(n_buckets)]
    return grid, list(HEATMAP_DAYS), labels


def plot_watch_trend(trend: Sequence[TrendPoint], out_path: Optional[str] = None, show: bool = False,
                     *, title: str = "Watch time by month", ylabel: str = "Hours"):
    if not trend:
        raise ValueError("No trend points to plot.")
    fig, ax = plt.subplots(figsize=(10, 4))
    values = np.array([p.minutes for p in trend], dtype=float)
    if ylabel == "Hours":
        values = values / 60
    x = np.arange(len(trend))
    ax.plot(x, values, marker="o", linewidth=1.8)
    ax.fill_between(x, values, alpha=0.15)
    ax.set_xticks(x, labels=[p.label for p in trend], rotation=45)
    ax.set_title(title)
    ax.set_ylabel(ylabel)
    return fig, ax, _finish(fig, out_path, show)

def plot_genre_breakdown(genres: Sequence[GenreStat], out_path: Optional[str] = None, show: bool = False):
    if not genres:
        raise ValueError("No genre stats to plot.")
    fig, ax = plt.subplots(figsize=(8, 4))
    ax.barh([g.genre for g in genres][::-1], [g.minutes / 60 for g in genres][::-1])
    ax.set_title("Hours by genre")
    ax.set_xlabel("Hours")
    return fig, ax, _finish(fig, out_path, show)

def plot_device_breakdown(devices: Sequence[DeviceStat], out_path: Optional[str] = None, show: bool = False):
    if not devices:
        raise ValueError("No device stats to plot.")
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.pie([d.minutes for d in devices], labels=[d.device for d in devices], autopct="%1.0f%%",
           startangle=90, wedgeprops={"width": 0.45})
    ax.set_title("Watch time by device")
    return fig, ax, _finish(fig, out_path, show)

def plot_binge_heatmap(points: Sequence[HeatmapPoint], out_path: Optional[str] = None, show: bool = False):
    """Day x 3-hour window heatmap of minutes watched."""
    if not points:
        raise ValueError("No heatmap points to plot.")
    grid, days, buckets = bucket_heatmap(points)
    fig, ax = plt.subplots(figsize=(10, 4))
    im = ax.imshow(grid, aspect="auto", cmap="magma")
    ax.set_title("Binge heatmap (Day × 3h window)")
    ax.set_yticks(range(len(days)), labels=days)
    ax.set_xticks(range(len(buckets)), labels=buckets, rotation=45)
    fig.colorbar(im, ax=ax, label="Minutes")
    return fig, ax, _finish(fig, out_path, show)

def plot_viewing_distribution(points: Sequence[DistributionPoint], out_path: Optional[str] = None,
                              show: bool = False, *, xlabel: str = "Day of month"):
    """Raw bars with the smoothed series on top."""
    if not points:
        raise ValueError("No distribution points to plot.")
    fig, ax = plt.subplots(figsize=(10, 4))
    x = np.arange(len(points))
    ax.bar(x, [p.value for p in points], alpha=0.35, label="Minutes")
    ax.plot(x, [p.smooth for p in points], linewidth=2.0, label="Smoothed")
    ax.set_xticks(x, labels=[p.label for p in points])
    ax.set_xlabel(xlabel)
    ax.set_ylabel("Minutes")
    ax.legend()
    return fig, ax, _finish(fig, out_path, show)

def plot_search_terms(tokens: Sequence[WordCloudToken], out_path: Optional[str] = None, show: bool = False,
                      *, top_n: int = 20):
    """Most frequent search words as a horizontal bar chart."""
    if not tokens:
        raise ValueError("No search terms to plot.")
    top = list(tokens)[:top_n]
    fig, ax = plt.subplots(figsize=(8, max(3, 0.3 * len(top))))
    ax.barh([t.value for t in top][::-1], [t.count for t in top][::-1])
    ax.set_title("Search words")
    ax.set_xlabel("Searches")
    return fig, ax, _finish(fig, out_path, show)


def save_dashboard_charts(dashboard, out_dir: str) -> Dict[str, str]:
    """Write every non-empty chart for a Dashboard into `out_dir`; returns {name: path}."""
    jobs = [
        ("watch_trend", plot_watch_trend, dashboard.trend, {}),
        ("genres", plot_genre_breakdown, dashboard.genres, {}),
        ("devices", plot_device_breakdown, dashboard.devices, {}),
        ("heatmap", plot_binge_heatmap, dashboard.heatmap, {}),
        ("day_distribution", plot_viewing_distribution, dashboard.day_distribution, {}),
        ("hour_distribution", plot_viewing_distribution, dashboard.hour_distribution,
         {"xlabel": "Hour of day"}),
        ("search_trend", plot_watch_trend, dashboard.search.monthly_counts,
         {"title": "Searches by month", "ylabel": "Searches"}),
        ("search_terms", plot_search_terms, dashboard.search.word_cloud, {}),
    ]
    saved: Dict[str, str] = {}
    for name, fn, data, kwargs in jobs:
        if not data:
            logger.info("Skipping %s chart: no data", name)
            continue
        path = os.path.join(out_dir, f"{name}.png")
        fn(data, out_path=path, **kwargs)
        saved[name] = path
    logger.info("Saved %d charts to %s", len(saved), out_dir)
    return saved
