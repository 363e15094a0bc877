"""Service order endpoints."""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..responses import success_response
from ..schemas import ServiceCreateRequest, ServiceRelationsUpdateRequest, ServiceUpdateRequest
from ..services.aggregate import get_service_aggregate
from ..use_cases import service_orders

router = APIRouter(prefix="/services", tags=["services"])


@router.get("")
def list_services(id: Optional[int] = Query(default=None), db: Session = Depends(get_db)):
    """Full aggregate for ``?id=``, otherwise the orders newest first."""
    if id is not None:
        return success_response(get_service_aggregate(db, id))
    return success_response(service_orders.list_services_use_case(db=db))


@router.post("", status_code=201)
def create_service(data: ServiceCreateRequest, db: Session = Depends(get_db)):
    result = service_orders.create_service_order_use_case(db=db, data=data)
    return success_response(result, status_code=201)


@router.put("")
def update_service(data: ServiceUpdateRequest, db: Session = Depends(get_db)):
    return success_response(service_orders.update_service_fields_use_case(db=db, data=data))


@router.patch("")
def update_service_relations(data: ServiceRelationsUpdateRequest, db: Session = Depends(get_db)):
    aggregate, failures = service_orders.update_service_relations_use_case(db=db, data=data)
    message = None
    if failures:
        message = f"Service updated; some associations were not replaced: {', '.join(sorted(failures))}"
    return success_response(aggregate, warnings=failures or None, message=message)


@router.delete("")
def delete_service(id: int = Query(...), db: Session = Depends(get_db)):
    service_orders.delete_service_use_case(db=db, service_id=id)
    return success_response(deletedId=id)
