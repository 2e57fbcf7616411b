"""Listing helpers for missions: visibility, filters, sorting, grouping and calendar."""
from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from ..common.datetime_utils import dates_in_range, format_time, month_label, now_local
from ..core.constants import UNKNOWN_HOME_LABEL, UNKNOWN_ZONE_LABEL
from ..core.enums import MissionSortField, MissionStatus, UserType
from ..homes.model import Home
from .model import Mission

CURRENT = "current"
ARCHIVED = "archived"
AVAILABLE = "available"


@dataclass(frozen=True)
class MissionFilters:
    conciergeries: Sequence[str] = field(default_factory=tuple)
    periods: Sequence[str] = field(default_factory=tuple)  # "current" / "archived"
    statuses: Sequence[str] = field(default_factory=tuple)  # "available" or a MissionStatus value
    zones: Sequence[str] = field(default_factory=tuple)

    @property
    def empty(self) -> bool:
        return not (self.conciergeries or self.periods or self.statuses or self.zones)

    @classmethod
    def from_args(cls, args) -> "MissionFilters":
        """Build from a werkzeug ``MultiDict`` (repeated or comma separated values)."""

        def _values(name: str) -> tuple[str, ...]:
            values = []
            for raw in args.getlist(name):
                values.extend(v.strip() for v in raw.split(",") if v.strip())
            return tuple(values)

        return cls(
            conciergeries=_values("conciergerie"),
            periods=_values("period"),
            statuses=_values("status"),
            zones=_values("zone"),
        )


def _home_index(homes: Iterable[Home]) -> dict[str, Home]:
    return {h.id: h for h in homes}


def visible_missions(missions: Iterable[Mission], user_type: Optional[str], user_id: Optional[str]) -> list[Mission]:
    if user_type != UserType.EMPLOYEE.value:
        return list(missions)

    visible = []
    for mission in missions:
        if mission.employee_id:
            if mission.employee_id == user_id:
                visible.append(mission)
        elif mission.is_allowed_for(user_id or ""):
            visible.append(mission)
    return visible


def apply_filters(
    missions: Iterable[Mission],
    filters: MissionFilters,
    homes: Iterable[Home],
    now: Optional[datetime] = None,
) -> list[Mission]:
    missions = list(missions)
    if filters.empty:
        return missions

    now = now or now_local()
    by_id = _home_index(homes)
    both_periods = CURRENT in filters.periods and ARCHIVED in filters.periods

    result = []
    for mission in missions:
        if filters.conciergeries and mission.conciergerie_name not in filters.conciergeries:
            continue

        if filters.periods and not both_periods:
            is_current = mission.end_date_time >= now
            if not ((CURRENT in filters.periods and is_current) or (ARCHIVED in filters.periods and not is_current)):
                continue

        if filters.statuses:
            matches = (AVAILABLE in filters.statuses and not mission.employee_id) or (
                mission.status is not None and mission.status.value in filters.statuses
            )
            if not matches:
                continue

        if filters.zones:
            home = by_id.get(mission.home_id)
            if not home or not home.geographic_zone or home.geographic_zone not in filters.zones:
                continue

        result.append(mission)
    return result


def sort_missions(
    missions: Iterable[Mission],
    sort_field: MissionSortField,
    direction: str,
    homes: Iterable[Home],
) -> list[Mission]:
    by_id = _home_index(homes)

    def _key(mission: Mission):
        if sort_field == MissionSortField.DATE:
            return mission.start_date_time
        if sort_field == MissionSortField.CONCIERGERIE:
            return mission.conciergerie_name.casefold()
        home = by_id.get(mission.home_id)
        if sort_field == MissionSortField.GEOGRAPHIC_ZONE:
            return (home.geographic_zone if home else "").casefold()
        return (home.title if home else "").casefold()

    return sorted(missions, key=_key, reverse=direction == "desc")


def group_missions(
    missions: Iterable[Mission],
    sort_field: MissionSortField,
    homes: Iterable[Home],
) -> "OrderedDict[str, list[Mission]]":
    by_id = _home_index(homes)
    groups: "OrderedDict[str, list[Mission]]" = OrderedDict()

    for mission in missions:
        home = by_id.get(mission.home_id)
        if sort_field == MissionSortField.DATE:
            category = month_label(mission.start_date_time)
        elif sort_field == MissionSortField.CONCIERGERIE:
            category = mission.conciergerie_name
        elif sort_field == MissionSortField.GEOGRAPHIC_ZONE:
            category = (home.geographic_zone if home else "") or UNKNOWN_ZONE_LABEL
        else:
            category = (home.title if home else "") or UNKNOWN_HOME_LABEL
        groups.setdefault(category, []).append(mission)
    return groups


def group_by_date(missions: Iterable[Mission]) -> "OrderedDict[date, list[Mission]]":
    """Calendar view: each mission listed under every local date it spans."""
    days: dict[date, list[Mission]] = {}
    for mission in missions:
        for day in dates_in_range(mission.start_date_time, mission.end_date_time):
            bucket = days.setdefault(day, [])
            if all(m.id != mission.id for m in bucket):
                bucket.append(mission)
    return OrderedDict(sorted(days.items()))


def calendar_time_label(mission: Mission, day: date) -> str:
    start, end = mission.start_date_time, mission.end_date_time
    if start.date() == end.date():
        return f"{format_time(start)} - {format_time(end)}"
    if day == start.date():
        return f"À partir de {format_time(start)}"
    if day == end.date():
        return f"Jusqu'à {format_time(end)}"
    return "Toute la journée"


def parse_sort(args: Mapping[str, str]) -> tuple[MissionSortField, str]:
    try:
        sort_field = MissionSortField(args.get("sort") or MissionSortField.DATE.value)
    except ValueError:
        sort_field = MissionSortField.DATE
    direction = "desc" if (args.get("direction") or "").lower() == "desc" else "asc"
    return sort_field, direction


def calendar_missions(
    missions: Iterable[Mission],
    user_type: Optional[str],
    user_id: Optional[str],
    conciergerie_name: Optional[str] = None,
) -> list[Mission]:
    """Assigned, not yet completed missions of the employee or of the conciergerie."""
    result = []
    for mission in missions:
        if not mission.status or mission.status == MissionStatus.COMPLETED:
            continue
        if user_type == UserType.EMPLOYEE.value:
            if mission.employee_id == user_id:
                result.append(mission)
        elif user_type == UserType.CONCIERGERIE.value and mission.conciergerie_name == conciergerie_name:
            result.append(mission)
    return result
