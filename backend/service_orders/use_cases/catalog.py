"""CRUD use-cases shared by the catalogue collections (team, materials, equipments, epi, procedures)."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from .. import repository
from ..domain_errors import format_validation_errors, validation_error
from ..schemas import (
    DescribedItemCreate,
    DescribedItemResponse,
    DescribedItemUpdate,
    MaterialCreate,
    MaterialResponse,
    MaterialUpdate,
    ProcedureResponse,
    ProcedureUpdate,
    TeamMemberCreate,
    TeamMemberResponse,
    TeamMemberUpdate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogCollection:
    name: str
    repository: repository.Repository
    create_schema: type[BaseModel] | None
    update_schema: type[BaseModel]
    response_schema: type[BaseModel]

    def serialize(self, row: Any) -> dict[str, Any]:
        return self.response_schema.model_validate(row).model_dump(mode="json")


TEAM = CatalogCollection("team", repository.team, TeamMemberCreate, TeamMemberUpdate, TeamMemberResponse)
MATERIALS = CatalogCollection(
    "materials", repository.materials, MaterialCreate, MaterialUpdate, MaterialResponse,
)
EQUIPMENTS = CatalogCollection(
    "equipments", repository.equipments, DescribedItemCreate, DescribedItemUpdate, DescribedItemResponse,
)
EPI = CatalogCollection("epi", repository.epi, DescribedItemCreate, DescribedItemUpdate, DescribedItemResponse)
# Procedures have their own create (bill of materials); only update/delete go through here.
PROCEDURES = CatalogCollection("procedures", repository.procedures, None, ProcedureUpdate, ProcedureResponse)


def list_catalog_use_case(*, db: Session, collection: CatalogCollection) -> list[dict[str, Any]]:
    return [collection.serialize(row) for row in collection.repository.list(db, order_by="id")]


def get_catalog_item_use_case(*, db: Session, collection: CatalogCollection, item_id: int) -> dict[str, Any]:
    return collection.serialize(collection.repository.get_one(db, item_id))


def create_catalog_item_use_case(
    *,
    db: Session,
    collection: CatalogCollection,
    payload: BaseModel,
) -> dict[str, Any]:
    (row,) = collection.repository.insert(db, [payload.model_dump()])
    db.commit()
    db.refresh(row)
    logger.info("%s.create id=%s", collection.name, row.id)
    return collection.serialize(row)


def update_catalog_item_use_case(
    *,
    db: Session,
    collection: CatalogCollection,
    item_id: int,
    updated_data: dict[str, Any] | None,
) -> dict[str, Any]:
    """Apply ``updatedData`` after validating it against the collection's update schema."""
    if not updated_data:
        raise validation_error("No fields to update were provided", code="NO_FIELDS_TO_UPDATE")
    try:
        patch = collection.update_schema.model_validate(updated_data)
    except ValidationError as exc:
        raise validation_error(format_validation_errors(exc.errors())) from exc

    row = collection.repository.update(db, item_id, patch.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(row)
    return collection.serialize(row)


def delete_catalog_item_use_case(*, db: Session, collection: CatalogCollection, item_id: int) -> None:
    # get_one inside delete is the existence pre-check: a missing row is a 404 with no writes.
    collection.repository.delete(db, item_id)
    db.commit()
    logger.info("%s.delete id=%s", collection.name, item_id)
