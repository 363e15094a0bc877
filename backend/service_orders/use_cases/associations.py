"""Association writer: turns submitted references into link rows for one service order.

Each group is replaced wholesale (delete all links of the order, then one
batch insert). Entries are written as given: duplicates are not collapsed and
execution order density is the caller's responsibility.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from sqlalchemy.orm import Session

from .. import repository
from ..schemas import (
    EpiLinkIn,
    EquipmentLinkIn,
    MaterialLinkIn,
    ProcedureLinkIn,
    ProcedureOrderRow,
    ServiceEpiRow,
    ServiceEquipmentRow,
    ServiceMaterialRow,
    ServiceTeamRow,
    TeamLinkIn,
)


@dataclass(frozen=True)
class AssociationGroup:
    name: str
    links: repository.Repository
    to_row: Callable[[int, Any], dict[str, Any]]
    row_schema: type[BaseModel]

    def insert(self, db: Session, service_id: int, entries: Sequence[Any]) -> list[Any]:
        return self.links.insert(db, [self.to_row(service_id, entry) for entry in entries])

    def replace(self, db: Session, service_id: int, entries: Sequence[Any]) -> list[Any]:
        self.links.delete_where(db, service_id=service_id)
        return self.insert(db, service_id, entries)

    def serialize(self, rows: Sequence[Any]) -> list[dict[str, Any]]:
        return [self.row_schema.model_validate(row).model_dump(mode="json") for row in rows]


def _team_row(service_id: int, entry: TeamLinkIn) -> dict[str, Any]:
    return {"service_id": service_id, "team_id": entry.team_id}


def _procedure_row(service_id: int, entry: ProcedureLinkIn) -> dict[str, Any]:
    return {
        "service_id": service_id,
        "id_procedure": entry.id_procedure,
        "execution_order": entry.execution_order,
    }


def _material_row(service_id: int, entry: MaterialLinkIn) -> dict[str, Any]:
    return {"service_id": service_id, "material_id": entry.material_id, "quantity": entry.quantity}


def _equipment_row(service_id: int, entry: EquipmentLinkIn) -> dict[str, Any]:
    return {"service_id": service_id, "equipment_id": entry.equipment_id}


def _epi_row(service_id: int, entry: EpiLinkIn) -> dict[str, Any]:
    return {"service_id": service_id, "epi_id": entry.epi_id, "quantity": entry.quantity}


TEAM = AssociationGroup("team", repository.service_team, _team_row, ServiceTeamRow)
PROCEDURES = AssociationGroup("procedures", repository.procedure_order, _procedure_row, ProcedureOrderRow)
MATERIALS = AssociationGroup("materials", repository.service_materials, _material_row, ServiceMaterialRow)
EQUIPMENTS = AssociationGroup("equipments", repository.service_equipments, _equipment_row, ServiceEquipmentRow)
EPI = AssociationGroup("epi", repository.service_epi, _epi_row, ServiceEpiRow)

ASSOCIATION_GROUPS: dict[str, AssociationGroup] = {
    group.name: group for group in (TEAM, PROCEDURES, MATERIALS, EQUIPMENTS, EPI)
}


def replace_team(db: Session, service_id: int, entries: Sequence[TeamLinkIn]) -> list[Any]:
    return TEAM.replace(db, service_id, entries)


def replace_procedures(db: Session, service_id: int, entries: Sequence[ProcedureLinkIn]) -> list[Any]:
    return PROCEDURES.replace(db, service_id, entries)


def replace_materials(db: Session, service_id: int, entries: Sequence[MaterialLinkIn]) -> list[Any]:
    return MATERIALS.replace(db, service_id, entries)


def replace_equipments(db: Session, service_id: int, entries: Sequence[EquipmentLinkIn]) -> list[Any]:
    return EQUIPMENTS.replace(db, service_id, entries)


def replace_epi(db: Session, service_id: int, entries: Sequence[EpiLinkIn]) -> list[Any]:
    return EPI.replace(db, service_id, entries)
