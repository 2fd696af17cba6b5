from __future__ import annotations
from typing import List, Sequence

from .data_prep import round_half_up
from .models import DeviceStat, GenreStat, HeatmapPoint, Insight, SearchStats, WatchHighlights

WEEKEND_DAYS = ("Saturday", "Sunday")


def create_insights(
    watch: WatchHighlights,
    genres: Sequence[GenreStat],
    devices: Sequence[DeviceStat],
    heatmap: Sequence[HeatmapPoint],
    search: SearchStats,
) -> List[Insight]:
    """
    Fixed-rule observations, in order:
      weekend vs weekday, top genres, main device, session pace, search habit.
    Each one is skipped when its data is missing.
    """
    insights: List[Insight] = []

    if heatmap:
        weekend = sum(p.value for p in heatmap if p.day in WEEKEND_DAYS)
        weekday = sum(p.value for p in heatmap) - weekend
        # strict: a tie counts as weekday
        if weekend > weekday:
            insights.append(Insight(
                label="Weekend Binges",
                detail="You log more minutes on Saturdays & Sundays.",
                highlight="Weekends dominate your screen time.",
            ))
        else:
            insights.append(Insight(
                label="Weekday Viewer",
                detail="Your sessions are steady through the work week.",
                highlight="Weekday consistency keeps watch time balanced.",
            ))

    if genres:
        favorite = genres[0]
        runner_up = genres[1] if len(genres) > 1 else None
        insights.append(Insight(
            label="Genre Crush",
            detail=f"You lean towards {favorite.genre.lower()} stories.",
            highlight=f"{favorite.genre} & {runner_up.genre} lead the queue." if runner_up else favorite.genre,
        ))

    if devices:
        top = devices[0]
        total = watch.total_hours * 60 or 1
        insights.append(Insight(
            label="Device of Choice",
            detail=f"Most sessions start on your {top.device}.",
            highlight=f"{round_half_up(top.minutes / total * 100)}% of watch time",
        ))

    if watch.average_session_minutes:
        insights.append(Insight(
            label="Session Pace",
            detail=f"Average session runs about {watch.average_session_minutes} minutes.",
            highlight="Short bursts keep things fresh.",
        ))

    if search.total_queries:
        favorite_search = search.top_searches[0] if search.top_searches else None
        insights.append(Insight(
            label="Search Habit",
            detail=(f'You frequently looked up "{favorite_search.value}".' if favorite_search
                    else "Searches guide what you play next."),
            highlight=f"{search.total_queries} searches logged",
        ))

    return insights
