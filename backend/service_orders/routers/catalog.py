"""Catalogue endpoints (team, materials, equipments, epi): one router per collection."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..responses import success_response
from ..schemas import CatalogPatchRequest
from ..use_cases import catalog
from ..use_cases.catalog import CatalogCollection


def add_update_delete_routes(router: APIRouter, collection: CatalogCollection) -> None:
    """PATCH ``{id, updatedData}`` and DELETE ``?id=`` for a collection."""

    @router.patch("")
    def update_item(data: CatalogPatchRequest, db: Session = Depends(get_db)):
        item = catalog.update_catalog_item_use_case(
            db=db,
            collection=collection,
            item_id=data.id,
            updated_data=data.updatedData,
        )
        return success_response(item)

    @router.delete("")
    def delete_item(id: int = Query(...), db: Session = Depends(get_db)):
        catalog.delete_catalog_item_use_case(db=db, collection=collection, item_id=id)
        return success_response(deletedId=id)


def build_catalog_router(collection: CatalogCollection) -> APIRouter:
    router = APIRouter(prefix=f"/{collection.name}", tags=[collection.name])
    create_schema = collection.create_schema

    @router.get("")
    def list_or_get(id: Optional[int] = Query(default=None), db: Session = Depends(get_db)):
        """Single row with ``?id=``, otherwise every row ordered by id."""
        if id is not None:
            return success_response(catalog.get_catalog_item_use_case(db=db, collection=collection, item_id=id))
        return success_response(catalog.list_catalog_use_case(db=db, collection=collection))

    @router.post("", status_code=201)
    def create_item(payload: create_schema, db: Session = Depends(get_db)):
        item = catalog.create_catalog_item_use_case(db=db, collection=collection, payload=payload)
        return success_response(item, status_code=201)

    add_update_delete_routes(router, collection)
    return router


team_router = build_catalog_router(catalog.TEAM)
materials_router = build_catalog_router(catalog.MATERIALS)
equipments_router = build_catalog_router(catalog.EQUIPMENTS)
epi_router = build_catalog_router(catalog.EPI)

routers = (team_router, materials_router, equipments_router, epi_router)
