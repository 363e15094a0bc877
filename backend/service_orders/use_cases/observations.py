"""Observation use-cases: notes attached to a service order after creation."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session, selectinload

from .. import repository
from ..domain_errors import not_found
from ..models import Observation
from ..schemas import ObservationCreate, ObservationDetail


def list_observations_use_case(*, db: Session, service_id: int) -> list[dict[str, Any]]:
    """Observations of one order, newest first, with their author."""
    if not repository.services.exists(db, service_id):
        raise not_found("service", service_id)

    observations = (
        db.query(Observation)
        .options(selectinload(Observation.team_member))
        .filter(Observation.service_id == service_id)
        .order_by(Observation.observation_date.desc(), Observation.id.desc())
        .all()
    )
    return [ObservationDetail.model_validate(item).model_dump(mode="json") for item in observations]


def create_observation_use_case(*, db: Session, data: ObservationCreate) -> dict[str, Any]:
    if not repository.services.exists(db, data.service_id):
        raise not_found("service", data.service_id)
    if data.team_member_id is not None and not repository.team.exists(db, data.team_member_id):
        raise not_found("team member", data.team_member_id)

    row = data.model_dump()
    if row["observation_date"] is None:
        row["observation_date"] = datetime.now(timezone.utc)

    (observation,) = repository.observations.insert(db, [row])
    db.commit()
    db.refresh(observation)
    return ObservationDetail.model_validate(observation).model_dump(mode="json")


def delete_observation_use_case(*, db: Session, observation_id: int) -> None:
    repository.observations.delete(db, observation_id)
    db.commit()
