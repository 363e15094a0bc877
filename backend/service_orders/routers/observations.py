"""Observation endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..database import get_db
from ..responses import success_response
from ..schemas import ObservationCreate
from ..use_cases import observations

router = APIRouter(prefix="/observations", tags=["observations"])


@router.get("")
def list_observations(service_id: int = Query(...), db: Session = Depends(get_db)):
    return success_response(observations.list_observations_use_case(db=db, service_id=service_id))


@router.post("", status_code=201)
def create_observation(data: ObservationCreate, db: Session = Depends(get_db)):
    return success_response(observations.create_observation_use_case(db=db, data=data), status_code=201)


@router.delete("")
def delete_observation(id: int = Query(...), db: Session = Depends(get_db)):
    observations.delete_observation_use_case(db=db, observation_id=id)
    return success_response(deletedId=id)
