"""
Rankings and aggregations over swim records.

Every function takes a flat sequence of record rows, either dicts shaped like
the /api/records payload (see helpers.records.record_to_row) or objects with
the same attributes, and returns plain dicts/lists ready for jsonify.

Nothing here touches the database or the request; callers load the rows
(usually via helpers.records.load_record_rows) and pass them in.
"""
import calendar
from collections.abc import Mapping
from datetime import date
from typing import Iterable, Optional

from swimtrack.helpers.swim import GENDERS, IM_DISTANCES, IM_POOL_LENGTH, INDIVIDUAL_MEDLEY
from swimtrack.helpers.time import parse_date, time_to_seconds

UNKNOWN_ATHLETE = "Unknown"

IM_PODIUM_SIZE = 3

# camelCase names the web client sends
_FIELD_ALIASES = {
    "pool_length": "poolLength",
    "student_id": "studentId",
    "athlete_name": "athleteName",
    "is_competition": "isCompetition",
    "competition_id": "competitionId",
    "competition_name": "competitionName",
}

GROUPINGS = {
    "style": ("style",),
    "style-distance": ("style", "distance"),
    "style-distance-poolLength": ("style", "distance", "pool_length"),
    "style-distance-poolLength-studentId": ("style", "distance", "pool_length", "student_id"),
}

DATE_RANGE_MONTHS = {
    "1month": 1,
    "3months": 3,
    "6months": 6,
    "1year": 12,
}

HISTORY_SORTS = ("date_desc", "date_asc", "time_asc", "time_desc")


# --- row access ---

def field(record, name, default=None):
    """Read `name` from a row dict (snake_case or camelCase) or an object."""
    if isinstance(record, Mapping):
        if name in record:
            return record[name]
        alias = _FIELD_ALIASES.get(name)
        if alias and alias in record:
            return record[alias]
        return default
    return getattr(record, name, default)


def record_date(record) -> Optional[date]:
    return parse_date(field(record, "date"))


def _iso(value):
    d = parse_date(value)
    return d.isoformat() if d else None


def _time_key(record, lexicographic=False):
    t = field(record, "time")
    if lexicographic:
        return t
    return time_to_seconds(t)


def _same_record(a, b) -> bool:
    if a is b:
        return True
    a_id = field(a, "id")
    return a_id is not None and a_id == field(b, "id")


# --- grouping / personal bests ---

def group_key(record, fields) -> str:
    return "-".join(str(field(record, f)) for f in fields)


def group_records(records: Iterable, fields=GROUPINGS["style-distance"]) -> dict:
    groups = {}
    for r in records:
        groups.setdefault(group_key(r, fields), []).append(r)
    return groups


def fastest(records: Iterable, lexicographic=False):
    """
    Fastest row by time (lowest wins). Ties keep the first row seen.
    Returns None for an empty input.
    """
    best = None
    best_key = None
    for r in records:
        k = _time_key(r, lexicographic)
        if best is None or k < best_key:
            best, best_key = r, k
    return best


def personal_bests(records: Iterable, grouping="style-distance-poolLength-studentId", lexicographic=False) -> dict:
    fields = GROUPINGS[grouping] if isinstance(grouping, str) else tuple(grouping)
    return {
        key: fastest(rows, lexicographic)
        for key, rows in group_records(records, fields).items()
    }


def _filter_rows(records, pool_length=None, style=None, student_id=None):
    out = []
    for r in records:
        if pool_length is not None and field(r, "pool_length") != pool_length:
            continue
        if style and style != "all" and field(r, "style") != style:
            continue
        if student_id is not None and field(r, "student_id") != student_id:
            continue
        out.append(r)
    return out


def _nested_bests(records, outer, inner, lexicographic):
    nested = {}
    for r in records:
        cell = nested.setdefault(field(r, outer), {})
        key = field(r, inner)
        current = cell.get(key)
        if current is None or _time_key(r, lexicographic) < _time_key(current, lexicographic):
            cell[key] = r
    return nested


def best_times_by_style(records, pool_length=None, style=None, student_id=None, lexicographic=False) -> dict:
    """{style: {distance: fastest row}} after the optional filters."""
    rows = _filter_rows(records, pool_length=pool_length, style=style, student_id=student_id)
    nested = _nested_bests(rows, "style", "distance", lexicographic)
    return {s: dict(sorted(by_dist.items())) for s, by_dist in nested.items()}


def all_time_records(records, pool_length=25, style=None, lexicographic=False) -> dict:
    """{distance: {style: fastest row}} for one pool length, distances ascending."""
    rows = _filter_rows(records, pool_length=pool_length, style=style)
    nested = _nested_bests(rows, "distance", "style", lexicographic)
    return {d: nested[d] for d in sorted(nested)}


# --- IM rankings ---

def _empty_cells() -> dict:
    return {f"{d}m": {g: [] for g in GENDERS} for d in IM_DISTANCES}


def _is_im_record(record) -> bool:
    return (
        field(record, "style") == INDIVIDUAL_MEDLEY
        and field(record, "pool_length") == IM_POOL_LENGTH
        and record_date(record) is not None
    )


def _in_month(record, year, month) -> bool:
    d = record_date(record)
    return d is not None and d.year == year and d.month == month


def latest_even_month(today: Optional[date] = None) -> tuple:
    """Most recent even month on or before `today` as (year, month)."""
    today = today or date.today()
    year = today.year
    month = today.month if today.month % 2 == 0 else today.month - 1
    if month == 0:
        month = 12
        year -= 1
    return year, month


def calculate_im_rankings(records, year: int, month: int) -> dict:
    """
    Top three IM times per distance/gender for one month.

    Only 15m-pool individual medley records dated in (year, month) count.
    Returns {"60m": {"male": [...], "female": [...]}, "120m": {...}} where
    each entry is {"rank", "athlete_name", "student_id", "time", "date"}.
    """
    im_records = [r for r in records if _is_im_record(r) and _in_month(r, year, month)]

    rankings = _empty_cells()
    for distance in IM_DISTANCES:
        for gender in GENDERS:
            cell = sorted(
                (r for r in im_records if field(r, "distance") == distance and field(r, "gender") == gender),
                key=_time_key,
            )[:IM_PODIUM_SIZE]

            rankings[f"{distance}m"][gender] = [
                {
                    "rank": i + 1,
                    "athlete_name": field(r, "athlete_name") or UNKNOWN_ATHLETE,
                    "student_id": field(r, "student_id"),
                    "time": field(r, "time"),
                    "date": _iso(field(r, "date")),
                }
                for i, r in enumerate(cell)
            ]
    return rankings


# --- growth rankings ---

def latest_two_even_months(records) -> tuple:
    """
    The two most recent distinct even months holding a qualifying IM record,
    as ((year, month), (year, month)), or (None, None) if there are fewer.
    """
    months = set()
    for r in records:
        if not _is_im_record(r):
            continue
        d = record_date(r)
        if d.month % 2 == 0:
            months.add((d.year, d.month))

    ordered = sorted(months, reverse=True)
    if len(ordered) < 2:
        return None, None
    return ordered[0], ordered[1]


def calculate_growth_rankings(records, limit: Optional[int] = None) -> dict:
    """
    Rank athletes by how much their latest even-month IM time beats their best.

    - current/previous periods are the two latest even months with data;
      with fewer than two, periods is None and every cell is empty
    - for each current-period record, the athlete's best is taken over all
      their other qualifying records for the same distance/gender
    - improvement_seconds = best - current, growth_rate = improvement / best * 100
      (positive means faster than the previous best)
    - athletes whose best is 00:00.00 are left out (no rate can be computed)
    - sorted by growth_rate descending; `limit` caps each cell (None = all)
    """
    current_period, previous_period = latest_two_even_months(records)
    if current_period is None or previous_period is None:
        return {"periods": None, "rankings": _empty_cells()}

    im_records = [r for r in records if _is_im_record(r)]
    current_records = [r for r in im_records if _in_month(r, *current_period)]

    rankings = _empty_cells()
    for distance in IM_DISTANCES:
        for gender in GENDERS:
            rows = []
            for current in current_records:
                if field(current, "distance") != distance or field(current, "gender") != gender:
                    continue

                history = [
                    r for r in im_records
                    if field(r, "student_id") == field(current, "student_id")
                    and field(r, "distance") == distance
                    and field(r, "gender") == gender
                    and not _same_record(r, current)
                ]
                if not history:
                    continue

                best = fastest(history)
                best_seconds = time_to_seconds(field(best, "time"))
                # A zero best has no meaningful growth rate
                if best_seconds <= 0:
                    continue
                current_seconds = time_to_seconds(field(current, "time"))
                improvement = best_seconds - current_seconds

                rows.append(
                    {
                        "rank": 0,
                        "athlete_name": field(current, "athlete_name") or UNKNOWN_ATHLETE,
                        "student_id": field(current, "student_id"),
                        "best_time": field(best, "time"),
                        "current_time": field(current, "time"),
                        "growth_rate": improvement / best_seconds * 100,
                        "improvement_seconds": improvement,
                        "best_date": _iso(field(best, "date")),
                        "current_date": _iso(field(current, "date")),
                    }
                )

            rows.sort(key=lambda row: row["growth_rate"], reverse=True)
            if limit is not None:
                rows = rows[:limit]
            for i, row in enumerate(rows):
                row["rank"] = i + 1

            rankings[f"{distance}m"][gender] = rows

    return {
        "periods": {
            "current": {"year": current_period[0], "month": current_period[1]},
            "previous": {"year": previous_period[0], "month": previous_period[1]},
        },
        "rankings": rankings,
    }


# --- monthly improvements (dashboard) ---

def calculate_improvements(records, year: int, month: int) -> list:
    """
    Records set in (year, month) that beat the athlete's best from strictly
    earlier dates for the same style/distance/pool length.
    Largest improvement first.
    """
    fields = GROUPINGS["style-distance-poolLength-studentId"]
    dated = [r for r in records if record_date(r) is not None and field(r, "athlete_name")]

    improvements = []
    for rows in group_records(dated, fields).values():
        for current in rows:
            if not _in_month(current, year, month):
                continue

            current_day = record_date(current)
            earlier = [r for r in rows if record_date(r) < current_day]
            if not earlier:
                continue

            previous_best = fastest(earlier)
            best_seconds = time_to_seconds(field(previous_best, "time"))
            current_seconds = time_to_seconds(field(current, "time"))
            if current_seconds >= best_seconds:
                continue

            improvements.append(
                {
                    "athlete_name": field(current, "athlete_name"),
                    "student_id": field(current, "student_id"),
                    "style": field(current, "style"),
                    "distance": field(current, "distance"),
                    "pool_length": field(current, "pool_length"),
                    "previous_best": field(previous_best, "time"),
                    "new_time": field(current, "time"),
                    "improvement": round(best_seconds - current_seconds, 2),
                    "date": _iso(field(current, "date")),
                }
            )

    improvements.sort(key=lambda row: row["improvement"], reverse=True)
    return improvements


# --- date ranges / history ---

def months_ago(day: date, months: int) -> date:
    """Same day-of-month `months` earlier, clamped to the month's last day."""
    total = day.year * 12 + (day.month - 1) - months
    year, month = divmod(total, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def filter_by_date_range(records, range_key="all", today=None, start=None, end=None) -> list:
    """
    Narrow rows to a date window.

    range_key:
      - "all": no filtering
      - "1month" / "3months" / "6months" / "1year": on or after that far back from today
      - "custom": inclusive [start, end]; either bound may be omitted
    """
    range_key = range_key or "all"
    if range_key == "all":
        return list(records)

    if range_key == "custom":
        start_day = parse_date(start)
        end_day = parse_date(end)
    elif range_key in DATE_RANGE_MONTHS:
        start_day = months_ago(today or date.today(), DATE_RANGE_MONTHS[range_key])
        end_day = None
    else:
        raise ValueError(f"Unknown date range: {range_key!r}")

    out = []
    for r in records:
        d = record_date(r)
        if d is None:
            continue
        if start_day and d < start_day:
            continue
        if end_day and d > end_day:
            continue
        out.append(r)
    return out


def athlete_history(records, student_id, style=None, sort="date_desc", range_key="all",
                    today=None, start=None, end=None, lexicographic=False) -> list:
    """
    One athlete's records grouped per style-distance, each group carrying its
    personal best. Groups appear in the order their first row sorts.
    """
    if sort not in HISTORY_SORTS:
        raise ValueError(f"Unknown sort: {sort!r}")

    rows = _filter_rows(records, style=style, student_id=student_id)
    rows = filter_by_date_range(rows, range_key, today=today, start=start, end=end)

    if sort in ("date_asc", "date_desc"):
        rows.sort(key=lambda r: record_date(r) or date.min, reverse=(sort == "date_desc"))
    else:
        rows.sort(key=lambda r: _time_key(r, lexicographic), reverse=(sort == "time_desc"))

    groups = []
    for key, group in group_records(rows, GROUPINGS["style-distance"]).items():
        best = fastest(group, lexicographic)
        groups.append(
            {
                "key": key,
                "style": field(group[0], "style"),
                "distance": field(group[0], "distance"),
                "pool_length": field(group[0], "pool_length"),
                "personal_best": field(best, "time"),
                "records": group,
            }
        )
    return groups
