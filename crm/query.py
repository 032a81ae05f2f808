"""In-memory filtering, sorting and pagination of serialized rows.

Everything here is a pure function over a sequence of mappings (or objects),
so the same predicates serve the API list endpoints and any client holding a
cached collection. Predicates compose with logical AND via
:func:`apply_filters`; an empty search text or an empty selection matches
every row.
"""
from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Optional, Sequence

from dateutil.parser import isoparse
from dateutil.relativedelta import MO, relativedelta

Predicate = Callable[[Any], bool]


def lookup(item: Any, path: str) -> Any:
    """Resolve a dotted path such as ``student.username``; missing parts give None."""
    value = item
    for key in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(key)
        else:
            value = getattr(value, key, None)
    return value


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def text_search(query: Optional[str], *paths: str) -> Predicate:
    """Case-insensitive substring match against any of the given paths."""
    needle = (query or "").lower()

    def predicate(item: Any) -> bool:
        if not needle:
            return True
        return any(needle in str(lookup(item, path) or "").lower() for path in paths)

    return predicate


def field_equals(path: str, value: Any) -> Predicate:
    """Single-choice filter; an unset value (None or "") matches all."""
    expected = _plain(value)

    def predicate(item: Any) -> bool:
        if expected in (None, ""):
            return True
        return _plain(lookup(item, path)) == expected

    return predicate


def field_in(path: str, selected: Optional[Iterable[Any]]) -> Predicate:
    """Multi-select filter; an empty selection matches all, not none."""
    chosen = {_plain(value) for value in (selected or ())}

    def predicate(item: Any) -> bool:
        return not chosen or _plain(lookup(item, path)) in chosen

    return predicate


class RegularFilter(str, enum.Enum):
    ALL = "all"
    REGULAR = "regular"
    NOT_REGULAR = "not_regular"


def regular_status(mode: RegularFilter | str = RegularFilter.ALL) -> Predicate:
    mode = RegularFilter(mode)

    def predicate(item: Any) -> bool:
        if mode is RegularFilter.ALL:
            return True
        regular = bool(lookup(item, "isregular"))
        return regular if mode is RegularFilter.REGULAR else not regular

    return predicate


def apply_filters(items: Iterable[Any], *predicates: Predicate) -> list:
    return [item for item in items if all(predicate(item) for predicate in predicates)]


def toggle_selection(selected: Sequence[Any], value: Any) -> list:
    """Checkbox semantics: remove the value if selected, append it otherwise."""
    if value in selected:
        return [item for item in selected if item != value]
    return [*selected, value]


def parse_time_slot(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return isoparse(value)
        except ValueError:
            return None
    return None


def _as_utc(moment: datetime) -> datetime:
    # naive values are stored in UTC
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def sort_by_time_slot(items: Iterable[Any]) -> list:
    """Earliest lesson first; missing or unparsable time slots go last."""
    def key(item: Any):
        moment = parse_time_slot(lookup(item, "time_slot"))
        if moment is None:
            return (1, 0.0)
        return (0, _as_utc(moment).timestamp())

    return sorted(items, key=key)


@dataclass
class Page:
    items: list
    page: int
    page_size: int
    total_items: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def paginate(items: Iterable[Any], page: int = 1, page_size: int = 8) -> Page:
    """Slice out a 1-based page.

    A page past the end is empty with ``has_next`` false; it is not an error.
    """
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
    rows = list(items)
    start = (page - 1) * page_size
    return Page(
        items=rows[start:start + page_size],
        page=page,
        page_size=page_size,
        total_items=len(rows),
    )


def week_start(anchor: date) -> date:
    """Monday of the week containing ``anchor``."""
    return anchor + relativedelta(weekday=MO(-1))


def week_schedule(lessons: Iterable[Any], anchor: date) -> tuple[date, dict[date, dict[int, Any]]]:
    """Place lessons on a Monday-first 7 x 24 hour grid.

    Returns the week's Monday and a mapping of day -> {hour: lesson}. When two
    lessons share a slot the earlier one keeps it.
    """
    start = week_start(anchor)
    grid: dict[date, dict[int, Any]] = {start + timedelta(days=offset): {} for offset in range(7)}
    for lesson in sort_by_time_slot(lessons):
        moment = parse_time_slot(lookup(lesson, "time_slot"))
        if moment is None:
            continue
        moment = _as_utc(moment)
        slots = grid.get(moment.date())
        if slots is not None:
            slots.setdefault(moment.hour, lesson)
    return start, grid
