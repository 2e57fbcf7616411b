from __future__ import annotations

from datetime import date, datetime

from werkzeug.datastructures import MultiDict

from conftest import make_home, make_mission
from job_conciergerie.core.enums import MissionSortField, MissionStatus
from job_conciergerie.missions.filters import (
    MissionFilters,
    apply_filters,
    calendar_missions,
    calendar_time_label,
    group_by_date,
    group_missions,
    sort_missions,
    visible_missions,
)

NOW = datetime(2025, 3, 10, 12, 0)

HOMES = [
    make_home("h-nice", title="Villa Les Pins", geographic_zone="Nice"),
    make_home("h-cannes", title="Appartement Croisette", geographic_zone="Cannes"),
]


def _missions():
    return [
        make_mission("past", home_id="h-nice", start_date_time=datetime(2025, 2, 1, 9), end_date_time=datetime(2025, 2, 1, 12)),
        make_mission("free", home_id="h-cannes"),
        make_mission("mine", home_id="h-nice", employee_id="emp", status=MissionStatus.ACCEPTED),
        make_mission("theirs", home_id="h-nice", employee_id="other", status=MissionStatus.STARTED),
        make_mission("restricted", home_id="h-cannes", allowed_employees=("other",)),
        make_mission("open-to-me", home_id="h-cannes", allowed_employees=("emp",), conciergerie_name="Riviera Services"),
    ]


def test_employee_sees_own_and_allowed_missions():
    visible = {m.id for m in visible_missions(_missions(), "employee", "emp")}

    assert visible == {"past", "free", "mine", "open-to-me"}


def test_conciergerie_sees_everything():
    assert len(visible_missions(_missions(), "conciergerie", "c" * 22)) == 6


def test_no_filters_returns_everything():
    assert len(apply_filters(_missions(), MissionFilters(), HOMES, NOW)) == 6


def test_period_filters():
    archived = apply_filters(_missions(), MissionFilters(periods=("archived",)), HOMES, NOW)
    both = apply_filters(_missions(), MissionFilters(periods=("current", "archived")), HOMES, NOW)

    assert [m.id for m in archived] == ["past"]
    assert len(both) == 6


def test_status_filter_available_means_unassigned():
    result = apply_filters(_missions(), MissionFilters(statuses=("available", "started")), HOMES, NOW)

    assert {m.id for m in result} == {"past", "free", "theirs", "restricted", "open-to-me"}


def test_zone_and_conciergerie_filters_combine():
    filters = MissionFilters(conciergeries=("Azur Conciergerie",), zones=("Cannes",))

    assert [m.id for m in apply_filters(_missions(), filters, HOMES, NOW)] == ["free", "restricted"]


def test_filters_from_query_args_accept_comma_lists():
    filters = MissionFilters.from_args(MultiDict([("status", "available,accepted"), ("zone", "Nice")]))

    assert filters.statuses == ("available", "accepted")
    assert filters.zones == ("Nice",)
    assert not filters.empty


def test_sort_by_home_title_desc():
    result = sort_missions(_missions()[:2], MissionSortField.HOME_TITLE, "desc", HOMES)

    assert [m.id for m in result] == ["past", "free"]


def test_group_by_month_uses_french_labels():
    groups = group_missions(_missions(), MissionSortField.DATE, HOMES)

    assert list(groups) == ["Février 2025", "Mars 2025"]


def test_group_by_zone_falls_back_to_unknown_zone():
    missions = [make_mission("lost", home_id="missing")]

    assert list(group_missions(missions, MissionSortField.GEOGRAPHIC_ZONE, HOMES)) == ["Zone inconnue"]
    assert list(group_missions(missions, MissionSortField.HOME_TITLE, HOMES)) == ["Bien non trouvé"]


def test_calendar_lists_mission_on_every_day_once():
    mission = make_mission(start_date_time=datetime(2025, 3, 12, 18), end_date_time=datetime(2025, 3, 14, 10))

    days = group_by_date([mission, mission])

    assert list(days) == [date(2025, 3, 12), date(2025, 3, 13), date(2025, 3, 14)]
    assert all(len(items) == 1 for items in days.values())


def test_calendar_time_labels():
    mission = make_mission(start_date_time=datetime(2025, 3, 12, 18), end_date_time=datetime(2025, 3, 14, 10))

    assert calendar_time_label(mission, date(2025, 3, 12)) == "À partir de 18:00"
    assert calendar_time_label(mission, date(2025, 3, 13)) == "Toute la journée"
    assert calendar_time_label(mission, date(2025, 3, 14)) == "Jusqu'à 10:00"
    assert calendar_time_label(make_mission(), date(2025, 3, 12)) == "09:00 - 12:00"


def test_calendar_missions_skip_completed_and_unassigned():
    missions = _missions() + [
        make_mission("done", employee_id="emp", status=MissionStatus.COMPLETED),
    ]

    assert [m.id for m in calendar_missions(missions, "employee", "emp")] == ["mine"]
    assert {m.id for m in calendar_missions(missions, "conciergerie", "c" * 22, "Azur Conciergerie")} == {
        "mine",
        "theirs",
    }
