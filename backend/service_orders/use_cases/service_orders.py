"""Service order composition: composite create, scalar update, association-replacing update."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import repository
from ..domain_errors import DomainError, store_error_message, validation_error
from ..models import Observation, Service
from ..schemas import (
    ObservationResponse,
    ServiceCreateRequest,
    ServiceFields,
    ServiceRelationsUpdateRequest,
    ServiceResponse,
    ServiceUpdateRequest,
)
from ..services.aggregate import get_service_aggregate
from .associations import ASSOCIATION_GROUPS, PROCEDURES

logger = logging.getLogger(__name__)

PLANNING_OBSERVATION_TYPE = "planning"


def _require_identity_fields(fields: ServiceFields) -> None:
    if not fields.type or not fields.ps:
        raise validation_error("Required fields: type and ps", code="SERVICE_FIELDS_REQUIRED")


def _apply_scalar_updates(service: Service, updates: dict[str, Any]) -> None:
    for field in ("type", "ps"):
        if field in updates and not updates[field]:
            raise validation_error(f"{field} cannot be empty", code="SERVICE_FIELDS_REQUIRED")

    start_date = updates.get("start_date", service.start_date)
    end_date = updates.get("end_date", service.end_date)
    if start_date and end_date and end_date < start_date:
        raise validation_error("end_date must be on or after start_date", code="SERVICE_DATES_INVALID")

    for field, value in updates.items():
        setattr(service, field, value)


def _write_best_effort(
    db: Session,
    *,
    service_id: int,
    group: str,
    write: Callable[[], list[dict[str, Any]]],
    written: dict[str, Any],
    failures: dict[str, str],
) -> None:
    """Run one group's write inside a savepoint; a failure only undoes that group."""
    try:
        with db.begin_nested():
            rows = write()
    except SQLAlchemyError as exc:
        message = store_error_message(exc)
        logger.warning("Association %s not written for service %s: %s", group, service_id, message)
        failures[group] = message
        return
    written[group] = rows


def _observation_writer(db: Session, service_id: int, note: str) -> Callable[[], list[dict[str, Any]]]:
    def write() -> list[dict[str, Any]]:
        observation = Observation(
            service_id=service_id,
            description=note,
            observation_date=datetime.now(timezone.utc),
            observation_type=PLANNING_OBSERVATION_TYPE,
        )
        db.add(observation)
        db.flush()
        return [ObservationResponse.model_validate(observation).model_dump(mode="json")]
    return write


def _group_writer(db: Session, group: str, service_id: int, entries) -> Callable[[], list[dict[str, Any]]]:
    association = ASSOCIATION_GROUPS[group]

    def write() -> list[dict[str, Any]]:
        return association.serialize(association.insert(db, service_id, entries))
    return write


def create_service_order_use_case(*, db: Session, data: ServiceCreateRequest) -> dict[str, Any]:
    """Create an order with its associations.

    The order row and its procedure links share one transaction: a procedures
    failure leaves nothing behind. Observation, team, materials, equipment and
    PPE groups are best-effort and reported under ``failures``.
    """
    _require_identity_fields(data.service)
    if not data.procedures:
        raise validation_error("At least one procedure is required", code="SERVICE_PROCEDURES_REQUIRED")

    service = Service(**data.service.model_dump())
    db.add(service)
    db.flush()
    service_id = service.id

    associations: dict[str, Any] = {}
    failures: dict[str, str] = {}

    try:
        procedure_rows = PROCEDURES.insert(db, service_id, data.procedures)
    except SQLAlchemyError as exc:
        db.rollback()
        message = store_error_message(exc)
        logger.error("Procedures failed for new service %s, order discarded: %s", service_id, message)
        raise DomainError(
            code="PROCEDURES_ASSOCIATION_FAILED",
            http_status=500,
            message=f"Failed to insert procedures: {message}",
        ) from exc
    associations["procedures"] = PROCEDURES.serialize(procedure_rows)

    note = (data.observations or "").strip()
    if note:
        _write_best_effort(
            db,
            service_id=service_id,
            group="observations",
            write=_observation_writer(db, service_id, note),
            written=associations,
            failures=failures,
        )

    for group, entries in (
        ("team", data.team),
        ("materials", data.materials),
        ("equipments", data.equipments),
        ("epi", data.epi),
    ):
        if not entries:
            continue
        _write_best_effort(
            db,
            service_id=service_id,
            group=group,
            write=_group_writer(db, group, service_id, entries),
            written=associations,
            failures=failures,
        )

    db.commit()
    db.refresh(service)

    logger.info("service.create id=%s groups=%s", service_id, sorted(associations))
    return {
        "service": ServiceResponse.model_validate(service).model_dump(mode="json"),
        "associations": associations,
        "failures": failures,
    }


def update_service_fields_use_case(*, db: Session, data: ServiceUpdateRequest) -> dict[str, Any]:
    """Scalar-only update; associations are untouched."""
    updates = data.model_dump(exclude_unset=True, exclude={"id"})
    if not updates:
        raise validation_error("No fields to update were provided", code="NO_FIELDS_TO_UPDATE")

    service = repository.services.get_one(db, data.id)
    _apply_scalar_updates(service, updates)
    db.commit()
    db.refresh(service)
    return ServiceResponse.model_validate(service).model_dump(mode="json")


def update_service_relations_use_case(
    *,
    db: Session,
    data: ServiceRelationsUpdateRequest,
) -> tuple[dict[str, Any], dict[str, str]]:
    """Apply scalar fields, then replace every association group present in the request.

    Returns the rehydrated aggregate and the groups that could not be replaced.
    """
    service = repository.services.get_one(db, data.id)
    _apply_scalar_updates(service, data.scalar_updates())
    db.flush()

    replaced: dict[str, Any] = {}
    failures: dict[str, str] = {}
    for group, entries in (
        ("procedures", data.procedures),
        ("materials", data.materials),
        ("equipments", data.equipments),
        ("epi", data.epis),
        ("team", data.team),
    ):
        if entries is None:
            continue
        association = ASSOCIATION_GROUPS[group]
        _write_best_effort(
            db,
            service_id=service.id,
            group=group,
            write=lambda association=association, entries=entries: association.serialize(
                association.replace(db, service.id, entries)
            ),
            written=replaced,
            failures=failures,
        )

    db.commit()
    logger.info("service.update id=%s replaced=%s", service.id, sorted(replaced))
    return get_service_aggregate(db, service.id), failures


def delete_service_use_case(*, db: Session, service_id: int) -> None:
    """Delete an order; links and observations go with it through FK cascades."""
    repository.services.delete(db, service_id)
    db.commit()
    logger.info("service.delete id=%s", service_id)


def list_services_use_case(*, db: Session) -> list[dict[str, Any]]:
    return [
        ServiceResponse.model_validate(service).model_dump(mode="json")
        for service in repository.services.list(db, order_by="id", descending=True)
    ]
