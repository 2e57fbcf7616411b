from __future__ import annotations

from datetime import date, datetime

from conftest import make_home, make_mission
from job_conciergerie.core.enums import Task
from job_conciergerie.missions.points import (
    employee_points_for_day,
    exceeds_daily_points,
    mission_hours,
    mission_points,
    remaining_points_per_day,
    total_points,
)


def test_total_points_sums_task_points():
    assert total_points([Task.CLEANING, Task.GARDENING, Task.ARRIVAL, Task.DEPARTURE]) == 7
    assert total_points([]) == 0


def test_points_per_day_is_capped_at_three():
    mission = make_mission(tasks=(Task.CLEANING, Task.ARRIVAL))

    points = mission_points(mission)

    assert points.total_points == 4
    assert points.points_per_day == 3


def test_points_per_day_spreads_over_inclusive_days():
    mission = make_mission(
        tasks=(Task.CLEANING, Task.GARDENING),
        start_date_time=datetime(2025, 3, 12, 18, 0),
        end_date_time=datetime(2025, 3, 13, 8, 0),
    )

    assert mission_points(mission).points_per_day == 2.5


def test_remaining_points_per_day_counts_from_today():
    mission = make_mission(
        tasks=(Task.CLEANING,),
        start_date_time=datetime(2025, 3, 12, 9, 0),
        end_date_time=datetime(2025, 3, 14, 18, 0),
    )

    assert remaining_points_per_day(mission, date(2025, 3, 13)) == 1.5
    assert remaining_points_per_day(mission, date(2025, 3, 15)) == 0


def test_employee_points_for_day_only_counts_own_missions_spanning_the_day():
    missions = [
        make_mission("m1", tasks=(Task.CLEANING,), employee_id="emp"),
        make_mission("m2", tasks=(Task.ARRIVAL,), employee_id="emp"),
        make_mission("m3", tasks=(Task.GARDENING,), employee_id="other"),
        make_mission(
            "m4",
            tasks=(Task.DEPARTURE,),
            employee_id="emp",
            start_date_time=datetime(2025, 3, 20, 9, 0),
            end_date_time=datetime(2025, 3, 20, 10, 0),
        ),
    ]

    assert employee_points_for_day("emp", date(2025, 3, 12), missions) == 4
    assert employee_points_for_day("emp", date(2025, 3, 12), missions, exclude_mission_id="m1") == 1


def test_exceeds_daily_points_when_day_is_full():
    taken = make_mission("m1", tasks=(Task.CLEANING,), employee_id="emp")
    candidate = make_mission("m2", tasks=(Task.ARRIVAL,))

    assert exceeds_daily_points("emp", candidate, [taken, candidate]) is True
    assert exceeds_daily_points("other", candidate, [taken, candidate]) is False


def test_mission_hours_use_home_budgets():
    home = make_home(hours_of_cleaning=3.0, hours_of_gardening=1.5)

    assert mission_hours(home, [Task.CLEANING, Task.GARDENING, Task.ARRIVAL, Task.DEPARTURE]) == 5.5
    assert mission_hours(home, [Task.ARRIVAL]) == 0.5
