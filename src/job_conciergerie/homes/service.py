from __future__ import annotations

from dataclasses import replace
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol

from ..common.ids import generate_simple_id
from ..common.logging import get_logger
from ..common.validators import clean_string_list, require_non_empty, require_non_negative_number
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..database.mysql_base import DatabaseError
from ..missions.model import Mission
from ..missions.repository import MissionRepository
from .model import Home
from .repository import HomeRepository

LOG = get_logger("job_conciergerie.homes")


class ImageStorage(Protocol):
    def unpin_images(self, images: Iterable[str]) -> None:
        raise NotImplementedError


def _normalize_title(title: str) -> str:
    return title.strip().lower()


def _validate_objectives(values: Any) -> tuple[str, ...]:
    objectives = clean_string_list(values)
    if not objectives:
        raise ValidationError("Veuillez ajouter au moins un objectif")
    lowered = [o.lower() for o in objectives]
    if len(set(lowered)) != len(lowered):
        raise ValidationError("Des objectifs identiques ont été détectés")
    return tuple(objectives)


class HomeService:
    def __init__(self, homes: HomeRepository, missions: MissionRepository, storage: ImageStorage):
        self._homes = homes
        self._missions = missions
        self._storage = storage

    def list_homes(self) -> list[Home]:
        try:
            return list(self._homes.list_all())
        except DatabaseError:
            LOG.exception("error fetching homes")
            return []

    def get_by_id(self, home_id: Optional[str]) -> Optional[Home]:
        if not home_id:
            return None
        return self._homes.get_by_id(home_id)

    def list_by_conciergerie(self, conciergerie_name: str) -> list[Home]:
        try:
            return list(self._homes.list_by_conciergerie(conciergerie_name))
        except DatabaseError:
            LOG.exception("error fetching homes for conciergerie %s", conciergerie_name)
            return []

    def _title_taken(self, conciergerie_name: str, title: str, *, exclude_id: Optional[str] = None) -> bool:
        wanted = _normalize_title(title)
        return any(
            _normalize_title(h.title) == wanted and h.id != exclude_id
            for h in self._homes.list_by_conciergerie(conciergerie_name)
        )

    def _require_owned(self, conciergerie_name: str, home_id: str) -> Home:
        home = self._homes.get_by_id(home_id)
        if not home:
            raise NotFoundError("Bien non trouvé")
        if home.conciergerie_name != conciergerie_name:
            raise AuthorizationError("Ce bien appartient à une autre conciergerie")
        return home

    def create(self, conciergerie_name: str, data: Mapping[str, Any]) -> Home:
        title = require_non_empty(data.get("title"), "Le titre")
        images = tuple(clean_string_list(data.get("images")))
        if not images:
            raise ValidationError("Veuillez ajouter au moins une photo")

        home = Home(
            id=generate_simple_id(),
            title=title,
            description=require_non_empty(data.get("description"), "La description"),
            objectives=_validate_objectives(data.get("objectives")),
            images=images,
            geographic_zone=require_non_empty(data.get("geographicZone"), "La zone géographique"),
            hours_of_cleaning=require_non_negative_number(data.get("hoursOfCleaning", 0), "Heures de ménage"),
            hours_of_gardening=require_non_negative_number(data.get("hoursOfGardening", 0), "Heures de jardinage"),
            conciergerie_name=conciergerie_name,
        )
        if self._title_taken(conciergerie_name, title):
            raise ValidationError("Un bien avec ce titre existe déjà")

        created = self._homes.create(home)
        LOG.info("home %s created by %s", created.id, conciergerie_name)
        return created

    def update(self, conciergerie_name: str, home_id: str, data: Mapping[str, Any]) -> Optional[Home]:
        """Apply the supplied fields. Returns ``None`` when nothing was supplied."""
        home = self._require_owned(conciergerie_name, home_id)

        changes: dict[str, Any] = {}
        if "title" in data:
            title = require_non_empty(data.get("title"), "Le titre")
            if _normalize_title(title) != _normalize_title(home.title) and self._title_taken(
                conciergerie_name, title, exclude_id=home.id
            ):
                raise ValidationError("Un bien avec ce titre existe déjà")
            changes["title"] = title
        if "description" in data:
            changes["description"] = require_non_empty(data.get("description"), "La description")
        if "objectives" in data:
            changes["objectives"] = _validate_objectives(data.get("objectives"))
        if "images" in data:
            images = tuple(clean_string_list(data.get("images")))
            if not images:
                raise ValidationError("Veuillez ajouter au moins une photo")
            changes["images"] = images
        if "geographicZone" in data:
            changes["geographic_zone"] = require_non_empty(data.get("geographicZone"), "La zone géographique")
        if "hoursOfCleaning" in data:
            changes["hours_of_cleaning"] = require_non_negative_number(data.get("hoursOfCleaning"), "Heures de ménage")
        if "hoursOfGardening" in data:
            changes["hours_of_gardening"] = require_non_negative_number(
                data.get("hoursOfGardening"), "Heures de jardinage"
            )

        if not changes:
            return None

        updated = self._homes.update(replace(home, **changes))
        if updated and "images" in changes:
            removed = [i for i in home.images if i not in updated.images]
            if removed:
                self._storage.unpin_images(removed)
        return updated

    def delete(
        self,
        conciergerie_name: str,
        home_id: str,
        *,
        remove_mission: Optional[Callable[[Mission], Any]] = None,
    ) -> bool:
        """Delete a home and unpin its images.

        Homes still used by missions are refused unless ``remove_mission`` is
        given, in which case it is called for each of them first.
        """
        home = self._require_owned(conciergerie_name, home_id)
        missions = list(self._missions.list_by_home(home.id))
        if missions and remove_mission is None:
            raise ValidationError("Ce bien est encore utilisé par des missions")
        for mission in missions:
            remove_mission(mission)

        deleted = self._homes.delete(home.id)
        if deleted:
            self._storage.unpin_images(home.images)
            LOG.info("home %s deleted by %s with %d missions", home.id, conciergerie_name, len(missions))
        return deleted
