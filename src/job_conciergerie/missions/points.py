"""Mission workload: task points and hour budgets."""
from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import dates_in_range, days_spanned, today_local
from ..core.constants import ARRIVAL_HOURS, DEPARTURE_HOURS, MAX_POINTS_PER_DAY
from ..core.enums import Task
from ..homes.model import Home
from .model import Mission, MissionPoints

TASK_POINTS = {
    Task.CLEANING: 3,
    Task.GARDENING: 2,
    Task.ARRIVAL: 1,
    Task.DEPARTURE: 1,
}


def task_points(task: Task) -> int:
    return TASK_POINTS.get(task, 0)


def total_points(tasks: Iterable[Task]) -> int:
    return sum(task_points(t) for t in tasks)


def mission_points(mission: Mission) -> MissionPoints:
    total = total_points(mission.tasks)
    days = days_spanned(mission.start_date_time, mission.end_date_time)
    return MissionPoints(total_points=total, points_per_day=min(total / days, MAX_POINTS_PER_DAY))


def remaining_points_per_day(mission: Mission, today: Optional[date] = None) -> float:
    """Points per day left from ``today`` to the end of the mission, 0 once it is over."""
    today = today or today_local()
    end = mission.end_date_time.date()
    if today > end:
        return 0
    remaining_days = abs((end - today).days) + 1
    return min(total_points(mission.tasks) / remaining_days, MAX_POINTS_PER_DAY)


def employee_points_for_day(
    employee_id: str,
    day: date,
    missions: Iterable[Mission],
    exclude_mission_id: Optional[str] = None,
) -> int:
    points = 0
    for mission in missions:
        if exclude_mission_id and mission.id == exclude_mission_id:
            continue
        if mission.employee_id != employee_id:
            continue
        if mission.start_date_time.date() <= day <= mission.end_date_time.date():
            points += total_points(mission.tasks)
    return points


def exceeds_daily_points(employee_id: str, mission: Mission, missions: Iterable[Mission]) -> bool:
    """True when taking ``mission`` would push any of its days over the daily cap."""
    missions = list(missions)
    per_day = mission_points(mission).points_per_day
    for day in dates_in_range(mission.start_date_time, mission.end_date_time):
        if employee_points_for_day(employee_id, day, missions, mission.id) + per_day > MAX_POINTS_PER_DAY:
            return True
    return False


def mission_hours(home: Home, tasks: Iterable[Task]) -> float:
    budgets = {
        Task.CLEANING: float(home.hours_of_cleaning or 0),
        Task.GARDENING: float(home.hours_of_gardening or 0),
        Task.ARRIVAL: ARRIVAL_HOURS,
        Task.DEPARTURE: DEPARTURE_HOURS,
    }
    return sum(budgets[t] for t in tasks)
