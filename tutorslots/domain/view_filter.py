"""
Queries over the grid restricted by a ViewFilter.

Two views are kept apart on purpose: in hourly mode the *visible* set holds
only the ``:00`` tick of each hour (one display unit per hour), while the
*toggle scope* always holds both ticks of the hour.
"""

from typing import FrozenSet, Iterable, List

from .models import TimeRange, ViewFilter
from .range_codec import slots_to_ranges
from .time_grid import hour_ticks


def visible_ticks(view: ViewFilter) -> FrozenSet[int]:
    """Ticks shown under the filter, used for counting and display."""
    if view.is_hourly:
        return frozenset(hour_ticks(hour)[0] for hour in view.hours)
    return toggle_scope(view)


def toggle_scope(view: ViewFilter) -> FrozenSet[int]:
    """Ticks that bulk operations act on under the filter."""
    return frozenset(tick for hour in view.hours for tick in hour_ticks(hour))


def visible_units(slots: Iterable[int], view: ViewFilter) -> List[int]:
    """
    Selected display units under the filter, as sorted ticks.

    In hourly mode an hour counts as selected only when both of its ticks are.
    """
    selected = frozenset(slots)
    if not view.is_hourly:
        return sorted(selected & visible_ticks(view))

    units = []
    for hour in view.hours:
        first, second = hour_ticks(hour)
        if first in selected and second in selected:
            units.append(first)
    return units


def clip_ranges(slots: Iterable[int], view: ViewFilter) -> List[TimeRange]:
    """Ranges of the selection that fall inside the filter window."""
    return slots_to_ranges(frozenset(slots) & toggle_scope(view))
