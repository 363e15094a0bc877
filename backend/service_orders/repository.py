"""Generic record store gateway: one repository type parametrised by mapped model."""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Generic, TypeVar

from sqlalchemy.orm import Session

from .domain_errors import DomainError, not_found
from .models import (
    Epi,
    Equipment,
    Material,
    Observation,
    Procedure,
    ProcedureMaterial,
    ProcedureOrder,
    Service,
    ServiceEpi,
    ServiceEquipment,
    ServiceMaterial,
    ServiceTeam,
    TeamMember,
)

ModelT = TypeVar("ModelT")


class Repository(Generic[ModelT]):
    """CRUD over one collection. Callers own commit/rollback."""

    def __init__(self, model: type[ModelT], *, label: str) -> None:
        self.model = model
        self.label = label

    def _column(self, name: str):
        column = getattr(self.model, name, None)
        if column is None:
            raise DomainError(
                code="UNKNOWN_COLUMN",
                http_status=400,
                message=f"Unknown field '{name}' for {self.label}",
            )
        return column

    def list(
        self,
        db: Session,
        *,
        order_by: str = "id",
        descending: bool = False,
        **filters: Any,
    ) -> list[ModelT]:
        query = db.query(self.model)
        for name, value in filters.items():
            query = query.filter(self._column(name) == value)
        column = self._column(order_by)
        return query.order_by(column.desc() if descending else column.asc()).all()

    def find(self, db: Session, row_id: int) -> ModelT | None:
        return db.query(self.model).filter(self.model.id == row_id).first()

    def get_one(self, db: Session, row_id: int) -> ModelT:
        row = self.find(db, row_id)
        if row is None:
            raise not_found(self.label, row_id)
        return row

    def exists(self, db: Session, row_id: int) -> bool:
        return db.query(self.model.id).filter(self.model.id == row_id).first() is not None

    def insert(self, db: Session, rows: Iterable[dict[str, Any]]) -> list[ModelT]:
        """Batch insert; flushed so generated ids are available."""
        created = [self.model(**row) for row in rows]
        if not created:
            return []
        db.add_all(created)
        db.flush()
        return created

    def update(self, db: Session, row_id: int, patch: dict[str, Any]) -> ModelT:
        row = self.get_one(db, row_id)
        for field, value in patch.items():
            self._column(field)
            setattr(row, field, value)
        db.flush()
        return row

    def delete(self, db: Session, row_id: int) -> None:
        row = self.get_one(db, row_id)
        db.delete(row)
        db.flush()

    def delete_where(self, db: Session, **filters: Any) -> int:
        query = db.query(self.model)
        for name, value in filters.items():
            query = query.filter(self._column(name) == value)
        return query.delete(synchronize_session=False)


services = Repository(Service, label="service")
team = Repository(TeamMember, label="team member")
procedures = Repository(Procedure, label="procedure")
materials = Repository(Material, label="material")
equipments = Repository(Equipment, label="equipment")
epi = Repository(Epi, label="epi")
observations = Repository(Observation, label="observation")
procedure_materials = Repository(ProcedureMaterial, label="procedure material")

service_team = Repository(ServiceTeam, label="service team link")
procedure_order = Repository(ProcedureOrder, label="procedure order link")
service_materials = Repository(ServiceMaterial, label="service material link")
service_equipments = Repository(ServiceEquipment, label="service equipment link")
service_epi = Repository(ServiceEpi, label="service epi link")
