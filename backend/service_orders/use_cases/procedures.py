"""Procedure use-cases: creation with a bill of materials and ps-filtered listing."""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import repository
from ..domain_errors import DomainError, store_error_message
from ..schemas import ProcedureCreate, ProcedureMaterialRow, ProcedureResponse
from ..services.aggregate import get_procedure_detail

logger = logging.getLogger(__name__)


def list_procedures_use_case(*, db: Session, ps: str | None = None) -> list[dict[str, Any]]:
    filters = {"ps": ps} if ps else {}
    return [
        ProcedureResponse.model_validate(procedure).model_dump(mode="json")
        for procedure in repository.procedures.list(db, order_by="id", **filters)
    ]


def get_procedure_use_case(*, db: Session, procedure_id: int) -> dict[str, Any]:
    return get_procedure_detail(db, procedure_id)


def create_procedure_use_case(*, db: Session, data: ProcedureCreate) -> dict[str, Any]:
    """Insert a procedure and its materials; the procedure is discarded if the materials fail."""
    (procedure,) = repository.procedures.insert(db, [data.model_dump(exclude={"materials"})])

    material_rows: list[Any] = []
    if data.materials:
        try:
            material_rows = repository.procedure_materials.insert(
                db,
                [
                    {
                        "procedure_id": procedure.id,
                        "material_id": entry.material_id,
                        "quantity": entry.quantity,
                    }
                    for entry in data.materials
                ],
            )
        except SQLAlchemyError as exc:
            db.rollback()
            message = store_error_message(exc)
            logger.error("Materials failed for new procedure %r, procedure discarded: %s", data.name, message)
            raise DomainError(
                code="PROCEDURE_MATERIALS_FAILED",
                http_status=500,
                message=f"Failed to insert procedure materials: {message}",
            ) from exc

    db.commit()
    db.refresh(procedure)
    logger.info("procedure.create id=%s materials=%d", procedure.id, len(material_rows))

    payload = ProcedureResponse.model_validate(procedure).model_dump(mode="json")
    payload["materials"] = [
        ProcedureMaterialRow.model_validate(row).model_dump(mode="json") for row in material_rows
    ]
    return payload
