"""Procedure endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..responses import success_response
from ..schemas import ProcedureCreate
from ..use_cases import catalog, procedures
from .catalog import add_update_delete_routes

router = APIRouter(prefix="/procedures", tags=["procedures"])


@router.get("")
def list_procedures(
    id: Optional[int] = Query(default=None),
    ps: Optional[str] = Query(default=None),
    db: Session = Depends(get_db),
):
    """One procedure with its bill of materials (``?id=``), or the list filtered by ``?ps=``."""
    if id is not None:
        return success_response(procedures.get_procedure_use_case(db=db, procedure_id=id))
    return success_response(procedures.list_procedures_use_case(db=db, ps=ps))


@router.post("", status_code=201)
def create_procedure(data: ProcedureCreate, db: Session = Depends(get_db)):
    return success_response(procedures.create_procedure_use_case(db=db, data=data), status_code=201)


add_update_delete_routes(router, catalog.PROCEDURES)
