from .data_prep import (
    ExportReadError, counter_ids, load_search, load_viewing, parse_duration_minutes,
    parse_search_rows, parse_viewing_rows, read_export,
)
from .genres import infer_genre
from .metrics import (
    build_day_distribution, build_day_totals, build_device_stats, build_genre_stats,
    build_heatmap, build_hour_distribution, build_search_stats, build_top_titles,
    build_trend, smooth_series, summarize_watching,
)
from .insights import create_insights
from .dashboard import Dashboard, DashboardSession, build_dashboard
