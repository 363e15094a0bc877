"""Eager-loaded service order aggregate (order + all association groups + observations)."""
from __future__ import annotations

from typing import Any

from sqlalchemy.orm import Session, selectinload

from ..domain_errors import not_found
from ..models import (
    Observation,
    Procedure,
    ProcedureMaterial,
    ProcedureOrder,
    Service,
    ServiceEpi,
    ServiceEquipment,
    ServiceMaterial,
    ServiceTeam,
)
from ..schemas import ProcedureDetailResponse, ServiceAggregateResponse


def _aggregate_options():
    return (
        selectinload(Service.team_links).selectinload(ServiceTeam.team),
        selectinload(Service.procedure_links).selectinload(ProcedureOrder.procedure),
        selectinload(Service.material_links).selectinload(ServiceMaterial.material),
        selectinload(Service.equipment_links).selectinload(ServiceEquipment.equipment),
        selectinload(Service.epi_links).selectinload(ServiceEpi.epi_item),
        selectinload(Service.observations).selectinload(Observation.team_member),
    )


def load_service_aggregate(db: Session, service_id: int) -> Service:
    """Load one order with every related group; 404 when missing.

    ``populate_existing`` refreshes collections already in the identity map,
    since association groups are rewritten with bulk deletes.
    """
    service = (
        db.query(Service)
        .options(*_aggregate_options())
        .execution_options(populate_existing=True)
        .filter(Service.id == service_id)
        .first()
    )
    if service is None:
        raise not_found("service", service_id)
    return service


def build_service_aggregate(service: Service) -> dict[str, Any]:
    return ServiceAggregateResponse.model_validate(service).model_dump(mode="json")


def get_service_aggregate(db: Session, service_id: int) -> dict[str, Any]:
    return build_service_aggregate(load_service_aggregate(db, service_id))


def get_procedure_detail(db: Session, procedure_id: int) -> dict[str, Any]:
    """Procedure with its bill of materials."""
    procedure = (
        db.query(Procedure)
        .options(selectinload(Procedure.material_links).selectinload(ProcedureMaterial.material))
        .execution_options(populate_existing=True)
        .filter(Procedure.id == procedure_id)
        .first()
    )
    if procedure is None:
        raise not_found("procedure", procedure_id)
    return ProcedureDetailResponse.model_validate(procedure).model_dump(mode="json")
