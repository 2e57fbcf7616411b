from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Home


class HomeRepository(Protocol):
    def list_all(self) -> Sequence[Home]:
        raise NotImplementedError

    def get_by_id(self, home_id: str) -> Optional[Home]:
        raise NotImplementedError

    def list_by_conciergerie(self, conciergerie_name: str) -> Sequence[Home]:
        raise NotImplementedError

    def create(self, home: Home) -> Home:
        raise NotImplementedError

    def update(self, home: Home) -> Optional[Home]:
        raise NotImplementedError

    def delete(self, home_id: str) -> bool:
        raise NotImplementedError
