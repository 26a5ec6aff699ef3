"""
Binge Math
──────────
Pure arithmetic over already-fetched watchlist rows.

  • estimate_remaining      - episodes left in a scope and the time to finish them
  • compute_profile_stats   - per-status counts, average rating, episodes watched

Rows are read by attribute (WatchlistEntryResponse, ORM rows and
SimpleNamespace all work). Missing or negative numbers count as zero: these
functions never raise on odd data.
"""
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable

from animetrack.db.models import WatchStatusEnum

SCOPE_ALL = "all"
SCOPE_WATCHING = "watching-only"
# Accepted as a synonym for SCOPE_WATCHING
SCOPE_WATCHING_ALIAS = "watching"

EPISODE_LENGTH_PRESETS: dict[int, str] = {
    24: "Standard",
    12: "Short",
    45: "Long",
}
DEFAULT_EPISODE_LENGTH = 24

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24
EPISODES_PER_DAY_TIP = 2

ONE_DECIMAL = Decimal("0.1")


def _non_negative_int(value: Any) -> int:
    if value is None:
        return 0
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 0
    return number if number > 0 else 0


def status_value(entry: Any) -> str:
    status = getattr(entry, "status", None)
    return status.value if hasattr(status, "value") else str(status)


def round_one_decimal(value: float | Decimal) -> float:
    """Half-up rounding to one decimal place (8.25 → 8.3)."""
    return float(Decimal(str(value)).quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP))


def remaining_episodes(entry: Any) -> int:
    """Episodes left for one row; never negative, 0 when the total is unknown."""
    total = _non_negative_int(getattr(entry, "total_episodes", None))
    watched = _non_negative_int(getattr(entry, "episodes_watched", None))
    return max(0, total - watched)


# ── Time estimate ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class RemainingEstimate:
    total_episodes_remaining: int
    total_minutes: int
    days: int
    hours: int
    minutes: int

    @property
    def days_at_two_per_day(self) -> int:
        return math.ceil(self.total_episodes_remaining / EPISODES_PER_DAY_TIP)


def select_scope(entries: Iterable[Any], scope: Any) -> list[Any]:
    """
    Resolve *scope* to the rows it covers.

    'all' → every row, 'watching-only' → rows being watched, anything else is
    treated as an entry id and matches at most one row.
    """
    rows = list(entries)
    scope_key = str(scope)

    if scope_key == SCOPE_ALL:
        return rows
    if scope_key in (SCOPE_WATCHING, SCOPE_WATCHING_ALIAS):
        return [
            row for row in rows
            if status_value(row) == WatchStatusEnum.WATCHING.value
        ]

    match = next((row for row in rows if str(getattr(row, "id", None)) == scope_key), None)
    return [match] if match is not None else []


def split_minutes(total_minutes: int) -> tuple[int, int, int]:
    """Truncating base-60/24 split into (days, hours 0-23, minutes 0-59)."""
    total_hours, minutes = divmod(total_minutes, MINUTES_PER_HOUR)
    days, hours = divmod(total_hours, HOURS_PER_DAY)
    return days, hours, minutes


def estimate_remaining(
    entries: Iterable[Any],
    scope: Any = SCOPE_ALL,
    episode_length_minutes: int = DEFAULT_EPISODE_LENGTH,
) -> RemainingEstimate:
    """
    Sum remaining episodes over *scope* and convert them to watch time.

    Example:
        totals 12/5 and 24/24 at 24 min → 7 episodes, 168 min → 0d 2h 48m
    """
    selected = select_scope(entries, scope)
    total_remaining = sum(remaining_episodes(row) for row in selected)

    total_minutes = total_remaining * _non_negative_int(episode_length_minutes)
    days, hours, minutes = split_minutes(total_minutes)

    return RemainingEstimate(
        total_episodes_remaining=total_remaining,
        total_minutes=total_minutes,
        days=days,
        hours=hours,
        minutes=minutes,
    )


# ── Profile statistics ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ProfileStats:
    total: int
    watch_later_count: int
    watching_count: int
    completed_count: int
    average_rating: float
    total_episodes_watched: int

    def percentage(self, count: int) -> float:
        if self.total <= 0:
            return 0.0
        return round_one_decimal(Decimal(count) * 100 / Decimal(self.total))

    @property
    def percentages(self) -> dict[str, float]:
        return {
            WatchStatusEnum.WATCH_LATER.value: self.percentage(self.watch_later_count),
            WatchStatusEnum.WATCHING.value: self.percentage(self.watching_count),
            WatchStatusEnum.COMPLETED.value: self.percentage(self.completed_count),
        }


def compute_profile_stats(entries: Iterable[Any]) -> ProfileStats:
    """Counts per status bucket plus rating and progress aggregates."""
    rows = list(entries)

    counts = {status.value: 0 for status in WatchStatusEnum}
    for row in rows:
        key = status_value(row)
        if key in counts:
            counts[key] += 1

    # Unrated rows (None or 0) stay out of the mean
    ratings = [_non_negative_int(getattr(row, "rating", None)) for row in rows]
    ratings = [r for r in ratings if r > 0]
    if ratings:
        average_rating = round_one_decimal(Decimal(sum(ratings)) / Decimal(len(ratings)))
    else:
        average_rating = 0.0

    total_watched = sum(
        _non_negative_int(getattr(row, "episodes_watched", None)) for row in rows
    )

    return ProfileStats(
        total=len(rows),
        watch_later_count=counts[WatchStatusEnum.WATCH_LATER.value],
        watching_count=counts[WatchStatusEnum.WATCHING.value],
        completed_count=counts[WatchStatusEnum.COMPLETED.value],
        average_rating=average_rating,
        total_episodes_watched=total_watched,
    )
