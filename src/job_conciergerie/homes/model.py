from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Home:
    id: str
    title: str
    description: str
    objectives: Tuple[str, ...]
    images: Tuple[str, ...]  # "cid/id" values from the pinning service
    geographic_zone: str
    hours_of_cleaning: float
    hours_of_gardening: float
    conciergerie_name: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "objectives": list(self.objectives),
            "images": list(self.images),
            "geographicZone": self.geographic_zone,
            "hoursOfCleaning": self.hours_of_cleaning,
            "hoursOfGardening": self.hours_of_gardening,
            "conciergerieName": self.conciergerie_name,
        }
