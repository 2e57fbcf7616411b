from __future__ import annotations

import pytest

from conftest import make_conciergerie, make_home
from job_conciergerie.core.enums import MissionStatus
from job_conciergerie.core.exceptions import AuthorizationError, NotFoundError, ValidationError

AZUR = "Azur Conciergerie"


def _payload(**overrides):
    data = {
        "title": "Mas Provençal",
        "description": "Grande maison avec jardin",
        "objectives": ["Changer les draps", "Arroser les plantes"],
        "images": ["bafycid2/file2"],
        "geographicZone": "Grasse",
        "hoursOfCleaning": 4,
        "hoursOfGardening": "2.5",
    }
    data.update(overrides)
    return data


def test_create_home(home_service):
    home = home_service.create(AZUR, _payload())

    assert home.title == "Mas Provençal"
    assert home.objectives == ("Changer les draps", "Arroser les plantes")
    assert home.hours_of_gardening == 2.5
    assert home.conciergerie_name == AZUR
    assert home in home_service.list_by_conciergerie(AZUR)


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"title": "  "}, "Le titre est requis"),
        ({"images": []}, "Veuillez ajouter au moins une photo"),
        ({"objectives": [" "]}, "Veuillez ajouter au moins un objectif"),
        ({"objectives": ["Arroser", "arroser"]}, "Des objectifs identiques ont été détectés"),
        ({"hoursOfCleaning": -1}, "Heures de ménage doit être positif"),
    ],
)
def test_create_validation(home_service, overrides, message):
    with pytest.raises(ValidationError, match=message):
        home_service.create(AZUR, _payload(**overrides))


def test_duplicate_title_is_trimmed_and_case_insensitive(home_service):
    with pytest.raises(ValidationError, match="existe déjà"):
        home_service.create(AZUR, _payload(title="  villa les pins "))


def test_same_title_allowed_for_another_conciergerie(home_service):
    home = home_service.create("Riviera Services", _payload(title="Villa Les Pins"))

    assert home.conciergerie_name == "Riviera Services"


def test_update_only_supplied_fields(home_service):
    home = home_service.update(AZUR, "home1", {"description": "Nouvelle description"})

    assert home.description == "Nouvelle description"
    assert home.title == "Villa Les Pins"


def test_update_with_nothing_returns_none(home_service):
    assert home_service.update(AZUR, "home1", {}) is None


def test_update_unpins_removed_images(home_service, storage):
    home_service.update(AZUR, "home1", {"images": ["bafynew/file9"]})

    assert storage.unpinned == ["bafycid1/file1"]


def test_update_by_other_conciergerie_is_refused(home_service):
    with pytest.raises(AuthorizationError):
        home_service.update("Riviera Services", "home1", {"title": "Pirate"})


def test_delete_refused_while_missions_reference_home(home_service):
    with pytest.raises(ValidationError):
        home_service.delete(AZUR, "home1")


def test_delete_with_missions_removes_them_first(home_service, mission_service, missions_repo, storage, sender):
    missions_repo.set_assignment(mission_id="m1", employee_id="e" * 22, status=MissionStatus.ACCEPTED)
    conciergerie = make_conciergerie()

    removed = []

    def remove_mission(mission):
        removed.append(mission.id)
        mission_service.delete(conciergerie, mission.id)

    assert home_service.delete(AZUR, "home1", remove_mission=remove_mission) is True
    assert removed == ["m1"]
    assert missions_repo.list_by_home("home1") == []
    assert home_service.get_by_id("home1") is None
    assert storage.unpinned == ["bafycid1/file1"]
    assert sender.subjects() == ["Mission supprimée : Villa Les Pins"]


def test_delete_unpins_images(home_service, homes_repo, storage):
    homes_repo.create(make_home("home2", title="Studio", images=("cidA/idA", "cidB/idB")))

    assert home_service.delete(AZUR, "home2") is True
    assert storage.unpinned == ["cidA/idA", "cidB/idB"]
    assert home_service.get_by_id("home2") is None


def test_delete_unknown_home(home_service):
    with pytest.raises(NotFoundError):
        home_service.delete(make_conciergerie().name, "missing")
