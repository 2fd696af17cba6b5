from __future__ import annotations
from typing import List, Sequence
import pandas as pd
from sklearn.feature_extraction.text import CountVectorizer

from .data_prep import normalize_text, round_half_up, round_tenths
from .models import (
    DayTotal, DeviceStat, DistributionPoint, GenreStat, HeatmapPoint, SearchEntry,
    SearchStats, TopTitleStat, TrendPoint, ViewingEntry, WatchHighlights, WordCloudToken,
)

STOP_WORDS = frozenset([
    "a", "an", "the", "and", "of", "in", "on", "at", "to", "for", "with",
    "season", "episode", "movie", "show",
])

TOP_TITLES_LIMIT = 6
WORD_CLOUD_LIMIT = 60
TOP_SEARCHES_LIMIT = 6
SMOOTHING_WINDOW = 5


# ----------------------------
# frames
# ----------------------------
def _month_label(ts: pd.Timestamp) -> str:
    return f"{ts.month_name()[:3]} {ts.year}"

def _viewing_frame(entries: Sequence[ViewingEntry]) -> pd.DataFrame:
    ts = [pd.Timestamp(e.start_time) for e in entries]
    return pd.DataFrame({
        "title": [e.title for e in entries],
        "normalized_title": [e.normalized_title for e in entries],
        "genre": [e.genre for e in entries],
        "device": [e.device or "Device" for e in entries],
        "day": [e.day_name for e in entries],
        "hour": [e.hour for e in entries],
        "day_of_month": [t.day for t in ts],
        "month": [t.strftime("%Y-%m") for t in ts],
        "month_label": [_month_label(t) for t in ts],
        "minutes": [e.duration_minutes for e in entries],
    })

def _rank(df, by: str = "minutes"):
    # stable: ties keep first-seen order
    return df.sort_values(by, ascending=False, kind="stable")

def _top_key(s: pd.Series):
    return s.sort_values(ascending=False, kind="stable").index[0]


# ----------------------------
# viewing aggregates
# ----------------------------
def build_trend(entries: Sequence[ViewingEntry]) -> List[TrendPoint]:
    df = _viewing_frame(entries)
    if df.empty:
        return []
    by_month = df.groupby("month", sort=True).agg(
        label=("month_label", "first"),
        minutes=("minutes", "sum"),
    )
    return [TrendPoint(label=r.label, minutes=int(r.minutes)) for r in by_month.itertuples()]

def build_genre_stats(entries: Sequence[ViewingEntry]) -> List[GenreStat]:
    df = _viewing_frame(entries)
    if df.empty:
        return []
    agg = df.groupby("genre", sort=False).agg(
        entries=("minutes", "size"),
        minutes=("minutes", "sum"),
    ).reset_index()
    return [GenreStat(genre=r.genre, entries=int(r.entries), minutes=int(r.minutes))
            for r in _rank(agg).itertuples()]

def build_device_stats(entries: Sequence[ViewingEntry]) -> List[DeviceStat]:
    df = _viewing_frame(entries)
    if df.empty:
        return []
    agg = df.groupby("device", sort=False).agg(
        count=("minutes", "size"),
        minutes=("minutes", "sum"),
    ).reset_index()
    ranked = _rank(agg)[["device", "count", "minutes"]]
    return [DeviceStat(device=device, count=int(n), minutes=int(minutes))
            for device, n, minutes in ranked.itertuples(index=False, name=None)]

def build_top_titles(entries: Sequence[ViewingEntry], limit: int = TOP_TITLES_LIMIT) -> List[TopTitleStat]:
    """Titles grouped by normalized title; the latest display title represents the group."""
    df = _viewing_frame(entries)
    if df.empty:
        return []
    agg = df.groupby("normalized_title", sort=False).agg(
        title=("title", "last"),
        minutes=("minutes", "sum"),
        sessions=("minutes", "size"),
        genre=("genre", "first"),
    )
    top = _rank(agg).head(limit)
    return [TopTitleStat(title=r.title, minutes=int(r.minutes), sessions=int(r.sessions), genre=r.genre)
            for r in top.itertuples()]

def build_heatmap(entries: Sequence[ViewingEntry]) -> List[HeatmapPoint]:
    """Sparse (day, hour) -> minutes. Empty cells are absent."""
    df = _viewing_frame(entries)
    if df.empty:
        return []
    grid = df.groupby(["day", "hour"], sort=False)["minutes"].sum()
    return [HeatmapPoint(day=day, hour=int(hour), value=int(v)) for (day, hour), v in grid.items()]

def build_day_totals(entries: Sequence[ViewingEntry]) -> List[DayTotal]:
    df = _viewing_frame(entries)
    if df.empty:
        return []
    by_day = df.groupby("day", sort=False)["minutes"].sum()
    ranked = by_day.sort_values(ascending=False, kind="stable")
    return [DayTotal(day=day, minutes=int(v)) for day, v in ranked.items()]


# ----------------------------
# distributions
# ----------------------------
def smooth_series(values: Sequence[float], window: int = SMOOTHING_WINDOW) -> List[float]:
    """
    Centered moving average, `window // 2` neighbours on each side.
    Edge buckets average over the neighbours that exist (no padding, no wrap).
    Rounded to one decimal.
    """
    if not len(values):
        return []
    span = 2 * (window // 2) + 1
    s = pd.Series(list(values), dtype=float)
    return s.rolling(span, center=True, min_periods=1).mean().map(round_tenths).tolist()

def _distribution(minutes: pd.Series, buckets: range) -> List[DistributionPoint]:
    values = [int(v) for v in minutes.reindex(buckets, fill_value=0)]
    smoothed = smooth_series(values)
    return [DistributionPoint(label=str(b), value=v, smooth=float(s))
            for b, v, s in zip(buckets, values, smoothed)]

def build_day_distribution(entries: Sequence[ViewingEntry]) -> List[DistributionPoint]:
    """Minutes per day of month, 31 buckets."""
    df = _viewing_frame(entries)
    if df.empty:
        return []
    return _distribution(df.groupby("day_of_month")["minutes"].sum(), range(1, 32))

def build_hour_distribution(entries: Sequence[ViewingEntry]) -> List[DistributionPoint]:
    """Minutes per hour of day, 24 buckets."""
    df = _viewing_frame(entries)
    if df.empty:
        return []
    return _distribution(df.groupby("hour")["minutes"].sum(), range(24))


# ----------------------------
# summary
# ----------------------------
def hour_range(hour: int) -> str:
    def fmt(h: int) -> str:
        return f"{h % 12 or 12}{'PM' if h >= 12 else 'AM'}"
    start = hour % 24
    return f"{fmt(start)} - {fmt((hour + 3) % 24)}"

def summarize_watching(entries: Sequence[ViewingEntry]) -> WatchHighlights:
    df = _viewing_frame(entries)
    if df.empty:
        return WatchHighlights(
            total_titles=0, total_hours=0.0, total_sessions=0, average_session_minutes=0,
            peak_day="N/A", peak_hour_range="N/A", top_title=None,
        )

    total_minutes = int(df["minutes"].sum())
    sessions = len(df)
    titles = df.groupby("normalized_title", sort=False).agg(
        title=("title", "last"),
        minutes=("minutes", "sum"),
    )
    top = _rank(titles).iloc[0]
    peak_day = _top_key(df.groupby("day", sort=False)["minutes"].sum())
    peak_hour = _top_key(df.groupby("hour", sort=False)["minutes"].sum())

    return WatchHighlights(
        total_titles=len(titles),
        total_hours=round_tenths(total_minutes / 60),
        total_sessions=sessions,
        average_session_minutes=round_half_up(total_minutes / sessions),
        peak_day=peak_day,
        peak_hour_range=hour_range(int(peak_hour)),
        top_title=WordCloudToken(value=top["title"], count=round_tenths(int(top["minutes"]) / 60)),
    )


# ----------------------------
# search
# ----------------------------
def _build_tokenizer():
    # same normalization as titles, single-char tokens allowed
    vec = CountVectorizer(
        preprocessor=normalize_text,
        token_pattern=r"[a-z0-9]+",
        stop_words=sorted(STOP_WORDS),
        lowercase=False,
    )
    return vec.build_analyzer()

_tokenize = _build_tokenizer()

def _counts(values: List[str], limit: int) -> List[WordCloudToken]:
    if not values:
        return []
    s = pd.Series(values, dtype=object)
    counts = s.groupby(s, sort=False).size()
    ranked = counts.sort_values(ascending=False, kind="stable").head(limit)
    return [WordCloudToken(value=str(v), count=int(c)) for v, c in ranked.items()]

def build_search_stats(entries: Sequence[SearchEntry]) -> SearchStats:
    if not entries:
        return SearchStats(total_queries=0, monthly_counts=[], word_cloud=[], top_searches=[])

    ts = [pd.Timestamp(e.timestamp) for e in entries]
    months = pd.DataFrame({
        "month": [t.strftime("%Y-%m") for t in ts],
        "label": [_month_label(t) for t in ts],
    })
    monthly = months.groupby("month", sort=True).agg(label=("label", "first"), n=("label", "size"))
    monthly_counts = [TrendPoint(label=r.label, minutes=int(r.n)) for r in monthly.itertuples()]

    tokens = [tok for e in entries for tok in _tokenize(e.query)]
    queries = [q for q in (normalize_text(e.query) for e in entries) if q]

    return SearchStats(
        total_queries=len(entries),
        monthly_counts=monthly_counts,
        word_cloud=_counts(tokens, WORD_CLOUD_LIMIT),
        top_searches=_counts(queries, TOP_SEARCHES_LIMIT),
    )
