# --- row parsing for viewing-activity and search-history exports ---
from __future__ import annotations
import itertools, logging, math, os, re, uuid
from typing import IO, Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union
import pandas as pd

from .genres import infer_genre
from .models import SearchEntry, ViewingEntry

logger = logging.getLogger(__name__)

DAY_LABELS = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

# candidate columns per logical field, highest priority first
VIEWING_COLUMNS: Dict[str, Sequence[str]] = {
    "start_time": ("Start Time", "Date"),
    "duration": ("Duration",),
    "title": ("Title",),
    "attributes": ("Attributes", "Supplemental Video Type"),
    "device": ("Device Type", "Device"),
    "country": ("Country",),
    "supplemental_video_type": ("Supplemental Video Type",),
    "profile_name": ("Profile Name",),
}

SEARCH_COLUMNS: Dict[str, Sequence[str]] = {
    "timestamp": ("Timestamp", "Utc Timestamp", "Time", "Date"),
    "query": ("VideoTitle", "Search", "Search Term", "Query", "Query Typed", "Profile Name"),
    "profile_name": ("Profile Name",),
}

RawRow = Mapping[str, Any]
IdFactory = Callable[[], str]


class ExportReadError(ValueError):
    """The CSV export could not be tokenized at all."""


# ----------------------------
# helpers
# ----------------------------
def normalize_text(s: str) -> str:
    s = (s or "").lower()
    s = re.sub(r"[^a-z0-9 ]", " ", s)
    s = re.sub(r"\s+", " ", s).strip()
    return s

def _column_key(name: Any) -> str:
    return re.sub(r"[^a-z0-9]", "", str(name).lower())

def _cell(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    text = str(value).strip()
    return text or None

def _keyed(row: RawRow) -> Dict[str, Any]:
    index: Dict[str, Any] = {}
    for k, v in row.items():
        index.setdefault(_column_key(k), v)
    return index

def pick(row: RawRow, candidates: Sequence[str]) -> Optional[str]:
    """First non-blank value among `candidates`, matching headers loosely ("StartTime" == "Start Time")."""
    index = _keyed(row)
    for name in candidates:
        value = _cell(index.get(_column_key(name)))
        if value is not None:
            return value
    return None

def pick_present(row: RawRow, candidates: Sequence[str]) -> Optional[str]:
    """
    Like `pick`, but a whitespace-only cell still claims the field and comes back as "".
    Only missing and empty cells fall through to the next candidate.
    """
    index = _keyed(row)
    for name in candidates:
        value = index.get(_column_key(name))
        if value is None or (isinstance(value, float) and math.isnan(value)) or str(value) == "":
            continue
        return str(value).strip()
    return None

def uuid_ids() -> IdFactory:
    return lambda: uuid.uuid4().hex

def counter_ids(prefix: str = "row") -> IdFactory:
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"

def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def round_tenths(x: float) -> float:
    """One decimal, halves round up (0.25 -> 0.3)."""
    return math.floor(x * 10 + 0.5) / 10

def _number(s: str) -> Optional[float]:
    try:
        x = float(s)
    except (TypeError, ValueError):
        return None
    return x if math.isfinite(x) else None

def parse_duration_minutes(value: Any) -> int:
    """
    "H:MM:SS" -> H*60 + M + round(S/60)
    "H:MM"    -> H*60 + M
    "45"      -> 45
    anything else -> 0
    """
    text = _cell(value)
    if text is None:
        return 0
    parts = text.split(":")
    if len(parts) in (2, 3):
        nums = [_number(p) or 0.0 for p in parts]  # non-numeric pieces count as 0
        if len(nums) == 3:
            hours, minutes, seconds = nums
            return round_half_up(hours * 60 + minutes + round_half_up(seconds / 60))
        hours, minutes = nums
        return round_half_up(hours * 60 + minutes)
    numeric = _number(text)
    return round_half_up(numeric) if numeric is not None else 0

_INVISIBLE_RX = re.compile(r"[\u200b\u200e\ufeff]")

def parse_timestamp(value: Any, tz: str = "UTC") -> Optional[pd.Timestamp]:
    """
    Tolerant timestamp parse. Naive values are read as wall-clock time in `tz`,
    aware values are converted to `tz`. Returns None when unparseable.
    """
    text = _cell(value)
    if text is None:
        return None
    text = _INVISIBLE_RX.sub("", text).strip()
    if not text:
        return None
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    if ts.tzinfo is None:
        return ts.tz_localize(tz, ambiguous=False, nonexistent="shift_forward")
    return ts.tz_convert(tz)

def day_label(ts: pd.Timestamp) -> str:
    # pandas weekday is Monday=0; labels are Sunday-first
    return DAY_LABELS[(ts.weekday() + 1) % 7]


# ----------------------------
# row -> entry
# ----------------------------
def _viewing_entry(row: RawRow, new_id: IdFactory, tz: str) -> Optional[ViewingEntry]:
    start_time = parse_timestamp(pick(row, VIEWING_COLUMNS["start_time"]), tz=tz)
    if start_time is None:
        return None
    duration = parse_duration_minutes(pick(row, VIEWING_COLUMNS["duration"]))
    if duration <= 0:
        return None

    title = pick(row, VIEWING_COLUMNS["title"]) or "Untitled"
    attributes = pick(row, VIEWING_COLUMNS["attributes"]) or ""
    return ViewingEntry(
        id=new_id(),
        profile_name=pick(row, VIEWING_COLUMNS["profile_name"]) or "Profile",
        title=title,
        normalized_title=normalize_text(title),
        genre=infer_genre(title, attributes),
        start_time=start_time,
        duration_minutes=duration,
        device=pick(row, VIEWING_COLUMNS["device"]) or "Unknown Device",
        country=pick(row, VIEWING_COLUMNS["country"]) or "Unknown",
        supplemental_video_type=pick(row, VIEWING_COLUMNS["supplemental_video_type"]) or "Title",
        attributes=attributes,
        day_name=day_label(start_time),
        hour=int(start_time.hour),
    )

def _search_entry(row: RawRow, new_id: IdFactory, tz: str) -> Optional[SearchEntry]:
    timestamp = parse_timestamp(pick(row, SEARCH_COLUMNS["timestamp"]), tz=tz)
    if timestamp is None:
        return None
    query = pick_present(row, SEARCH_COLUMNS["query"])
    if not query:
        return None
    return SearchEntry(
        id=new_id(),
        profile_name=pick(row, SEARCH_COLUMNS["profile_name"]) or "Profile",
        query=query,
        timestamp=timestamp,
    )

def parse_viewing_rows(
    rows: Iterable[RawRow],
    *,
    id_factory: Optional[IdFactory] = None,
    tz: str = "UTC",
) -> List[ViewingEntry]:
    """Typed viewing entries; rows without a start time or a positive duration are dropped."""
    new_id = id_factory or uuid_ids()
    out = []
    for row in rows:
        entry = _viewing_entry(row, new_id, tz)
        if entry is not None:
            out.append(entry)
    return out

def parse_search_rows(
    rows: Iterable[RawRow],
    *,
    id_factory: Optional[IdFactory] = None,
    tz: str = "UTC",
) -> List[SearchEntry]:
    """Typed search entries; rows without a timestamp or a query are dropped."""
    new_id = id_factory or uuid_ids()
    out = []
    for row in rows:
        entry = _search_entry(row, new_id, tz)
        if entry is not None:
            out.append(entry)
    return out


# ----------------------------
# CSV exports
# ----------------------------
Source = Union[str, "os.PathLike[str]", IO[str]]

def read_export(source: Source) -> List[Dict[str, Any]]:
    """
    Load a CSV export (header row required) into raw records.
    All values are kept as strings; blank cells become "".
    Raises ExportReadError when the file cannot be tokenized.
    """
    name = getattr(source, "name", source)
    try:
        df = pd.read_csv(source, dtype=str, keep_default_na=False, skip_blank_lines=True,
                         encoding="utf-8-sig")
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise ExportReadError(f"Could not read CSV export {name}: {e}") from e
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict("records")

def load_viewing(source: Source, *, id_factory: Optional[IdFactory] = None,
                 tz: str = "UTC") -> List[ViewingEntry]:
    rows = read_export(source)
    entries = parse_viewing_rows(rows, id_factory=id_factory, tz=tz)
    logger.info("Parsed %d of %d viewing rows from %s", len(entries), len(rows),
                getattr(source, "name", source))
    return entries

def load_search(source: Source, *, id_factory: Optional[IdFactory] = None,
                tz: str = "UTC") -> List[SearchEntry]:
    rows = read_export(source)
    entries = parse_search_rows(rows, id_factory=id_factory, tz=tz)
    logger.info("Parsed %d of %d search rows from %s", len(entries), len(rows),
                getattr(source, "name", source))
    return entries
