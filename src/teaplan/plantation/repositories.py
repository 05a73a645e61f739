"""Worker and field repository interfaces consumed by the scheduler."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from teaplan.plantation.contract.models import Field, Roster, Worker


class WorkerRepository(Protocol):
    """Source of the workers affiliated with a plantation."""

    def get_workers_by_plantation(self, plantation_id: str) -> list[Worker]:  # pragma: no cover
        ...


class FieldRepository(Protocol):
    """Source of the fields belonging to a plantation."""

    def get_fields_by_plantation(self, plantation_id: str) -> list[Field]:  # pragma: no cover
        ...


class RosterRepository:
    """In-memory worker/field repository backed by loaded rosters.

    Unknown plantations yield empty lists, mirroring a document store query with no hits.
    Lists are returned in roster order and copied so callers cannot mutate the store.
    """

    def __init__(self, rosters: Iterable[Roster] = ()) -> None:
        self._rosters: dict[str, Roster] = {}
        for roster in rosters:
            self.add(roster)

    def add(self, roster: Roster) -> None:
        self._rosters[roster.plantation_id] = roster

    def plantation_ids(self) -> list[str]:
        return list(self._rosters)

    def get_workers_by_plantation(self, plantation_id: str) -> list[Worker]:
        roster = self._rosters.get(plantation_id)
        return list(roster.workers) if roster else []

    def get_fields_by_plantation(self, plantation_id: str) -> list[Field]:
        roster = self._rosters.get(plantation_id)
        return list(roster.fields) if roster else []


__all__ = ["WorkerRepository", "FieldRepository", "RosterRepository"]
