"""Pydantic schemas for API."""
from pydantic import (
    AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator,
)
from typing import Any, Optional
from datetime import date, datetime

from .models import UNITS_OF_MEASURE


def coerce_positive_int(value: Any) -> int:
    """Absent, non-numeric or non-positive client values fall back to 1."""
    if isinstance(value, bool):
        return 1
    try:
        number = int(value)
    except (TypeError, ValueError):
        return 1
    return number if number > 0 else 1


def normalize_unit(value: str) -> str:
    unit = value.strip().upper()
    if unit not in UNITS_OF_MEASURE:
        raise ValueError(f"must be one of {', '.join(UNITS_OF_MEASURE)}")
    return unit


# Catalogue schemas
class TeamMemberCreate(BaseModel):
    name: str = Field(min_length=1)
    position: str = Field(min_length=1)
    primary_contact: Optional[str] = None
    secondary_contact: Optional[str] = None


class TeamMemberUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    position: Optional[str] = Field(default=None, min_length=1)
    primary_contact: Optional[str] = None
    secondary_contact: Optional[str] = None


class TeamMemberResponse(BaseModel):
    id: int
    name: str
    position: str
    primary_contact: Optional[str] = None
    secondary_contact: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class TeamMemberBrief(BaseModel):
    """Brief team member info for nested responses."""
    id: int
    name: str
    position: str
    primary_contact: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class MaterialCreate(BaseModel):
    name: str = Field(min_length=1)
    unity_of_measure: str = Field(min_length=1)

    @field_validator("unity_of_measure")
    @classmethod
    def _known_unit(cls, value: str) -> str:
        return normalize_unit(value)


class MaterialUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    unity_of_measure: Optional[str] = None

    @field_validator("unity_of_measure")
    @classmethod
    def _known_unit(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return normalize_unit(value)


class MaterialResponse(BaseModel):
    id: int
    name: str
    unity_of_measure: str
    model_config = ConfigDict(from_attributes=True)


class DescribedItemCreate(BaseModel):
    """Equipment and PPE items share the same shape."""
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)


class DescribedItemUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None


class DescribedItemResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class CatalogPatchRequest(BaseModel):
    id: int
    updatedData: Optional[dict[str, Any]] = None


# Procedure schemas
class ProcedureMaterialIn(BaseModel):
    material_id: int = Field(validation_alias=AliasChoices("material_id", "id"))
    quantity: int = 1

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> int:
        return coerce_positive_int(value)


class ProcedureCreate(BaseModel):
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    estimated_time: Optional[int] = Field(default=None, ge=0)
    ps: Optional[str] = None
    materials: list[ProcedureMaterialIn] = Field(default_factory=list)


class ProcedureUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    estimated_time: Optional[int] = Field(default=None, ge=0)
    ps: Optional[str] = None


class ProcedureResponse(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    estimated_time: Optional[int] = None
    ps: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class ProcedureMaterialOut(BaseModel):
    quantity: int
    material: MaterialResponse
    model_config = ConfigDict(from_attributes=True)


class ProcedureDetailResponse(ProcedureResponse):
    procedure_materials: list[ProcedureMaterialOut] = Field(
        default_factory=list,
        validation_alias=AliasChoices("procedure_materials", "material_links"),
    )


class ProcedureMaterialRow(BaseModel):
    id: int
    procedure_id: int
    material_id: int
    quantity: int
    model_config = ConfigDict(from_attributes=True)


# Service order schemas
SERVICE_FIELDS = ("type", "ps", "start_date", "end_date", "responsible", "status")


class ServiceFields(BaseModel):
    type: Optional[str] = None
    ps: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    responsible: Optional[str] = None
    status: Optional[str] = None

    @model_validator(mode="after")
    def _dates_in_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must be on or after start_date")
        return self


class TeamLinkIn(BaseModel):
    team_id: int = Field(validation_alias=AliasChoices("team_id", "id"))

    @model_validator(mode="before")
    @classmethod
    def _bare_id(cls, value: Any) -> Any:
        if isinstance(value, (int, str)):
            return {"team_id": value}
        return value


class ProcedureLinkIn(BaseModel):
    id_procedure: int = Field(validation_alias=AliasChoices("id_procedure", "procedure_id", "id"))
    execution_order: int = 1

    @field_validator("execution_order", mode="before")
    @classmethod
    def _execution_order(cls, value: Any) -> int:
        return coerce_positive_int(value)


class MaterialLinkIn(BaseModel):
    material_id: int = Field(validation_alias=AliasChoices("material_id", "id"))
    quantity: int = 1

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> int:
        return coerce_positive_int(value)


class EquipmentLinkIn(BaseModel):
    equipment_id: int = Field(validation_alias=AliasChoices("equipment_id", "id"))


class EpiLinkIn(BaseModel):
    epi_id: int = Field(validation_alias=AliasChoices("epi_id", "id"))
    quantity: int = 1

    @field_validator("quantity", mode="before")
    @classmethod
    def _quantity(cls, value: Any) -> int:
        return coerce_positive_int(value)


class ServiceCreateRequest(BaseModel):
    """Composite create payload; scalar fields may be nested under ``service`` or sent flat."""
    service: ServiceFields
    observations: Optional[str] = None
    team: list[TeamLinkIn] = Field(default_factory=list)
    procedures: list[ProcedureLinkIn] = Field(default_factory=list)
    materials: list[MaterialLinkIn] = Field(default_factory=list)
    equipments: list[EquipmentLinkIn] = Field(default_factory=list)
    epi: list[EpiLinkIn] = Field(default_factory=list, validation_alias=AliasChoices("epi", "epis"))

    @model_validator(mode="before")
    @classmethod
    def _flat_payload(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("service") is None:
            data = dict(data)
            data["service"] = {field: data.pop(field) for field in SERVICE_FIELDS if field in data}
        return data


class ServiceUpdateRequest(ServiceFields):
    """PUT: scalar fields only; association keys are ignored."""
    model_config = ConfigDict(extra="ignore")

    id: int


class ServiceRelationsUpdateRequest(ServiceFields):
    """PATCH: scalar fields plus any association group to replace."""
    model_config = ConfigDict(extra="ignore")

    id: int
    team: Optional[list[TeamLinkIn]] = None
    procedures: Optional[list[ProcedureLinkIn]] = None
    materials: Optional[list[MaterialLinkIn]] = None
    equipments: Optional[list[EquipmentLinkIn]] = None
    epis: Optional[list[EpiLinkIn]] = Field(default=None, validation_alias=AliasChoices("epis", "epi"))

    def scalar_updates(self) -> dict[str, Any]:
        return {
            field: getattr(self, field)
            for field in SERVICE_FIELDS
            if field in self.model_fields_set
        }


class ServiceResponse(BaseModel):
    id: int
    type: str
    ps: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    responsible: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


# Link rows as written
class ServiceTeamRow(BaseModel):
    id: int
    service_id: int
    team_id: int
    model_config = ConfigDict(from_attributes=True)


class ProcedureOrderRow(BaseModel):
    id: int
    service_id: int
    id_procedure: int
    execution_order: int
    model_config = ConfigDict(from_attributes=True)


class ServiceMaterialRow(BaseModel):
    id: int
    service_id: int
    material_id: int
    quantity: int
    model_config = ConfigDict(from_attributes=True)


class ServiceEquipmentRow(BaseModel):
    id: int
    service_id: int
    equipment_id: int
    model_config = ConfigDict(from_attributes=True)


class ServiceEpiRow(BaseModel):
    id: int
    service_id: int
    epi_id: int
    quantity: int
    model_config = ConfigDict(from_attributes=True)


# Observation schemas
class ObservationCreate(BaseModel):
    service_id: int
    description: str = Field(min_length=1)
    observation_type: Optional[str] = None
    observation_date: Optional[datetime] = None
    team_member_id: Optional[int] = None


class ObservationResponse(BaseModel):
    id: int
    service_id: int
    description: str
    observation_date: Optional[datetime] = None
    observation_type: Optional[str] = None
    team_member_id: Optional[int] = None
    model_config = ConfigDict(from_attributes=True)


class ObservationDetail(ObservationResponse):
    team_member: Optional[TeamMemberBrief] = None


# Aggregate (eager-loaded order view)
class TeamLinkOut(BaseModel):
    team: TeamMemberBrief
    model_config = ConfigDict(from_attributes=True)


class ProcedureLinkOut(BaseModel):
    execution_order: int
    procedure: ProcedureResponse
    model_config = ConfigDict(from_attributes=True)


class MaterialLinkOut(BaseModel):
    quantity: int
    material: MaterialResponse
    model_config = ConfigDict(from_attributes=True)


class EquipmentLinkOut(BaseModel):
    equipment: DescribedItemResponse
    model_config = ConfigDict(from_attributes=True)


class EpiLinkOut(BaseModel):
    quantity: int
    epi_item: DescribedItemResponse
    model_config = ConfigDict(from_attributes=True)


class ServiceAggregateResponse(ServiceResponse):
    service_team: list[TeamLinkOut] = Field(
        default_factory=list, validation_alias=AliasChoices("service_team", "team_links"),
    )
    procedure_order: list[ProcedureLinkOut] = Field(
        default_factory=list, validation_alias=AliasChoices("procedure_order", "procedure_links"),
    )
    service_materials: list[MaterialLinkOut] = Field(
        default_factory=list, validation_alias=AliasChoices("service_materials", "material_links"),
    )
    service_equipments: list[EquipmentLinkOut] = Field(
        default_factory=list, validation_alias=AliasChoices("service_equipments", "equipment_links"),
    )
    service_epi: list[EpiLinkOut] = Field(
        default_factory=list, validation_alias=AliasChoices("service_epi", "epi_links"),
    )
    observations: list[ObservationDetail] = Field(default_factory=list)


# Delivery
class SendOrderRequest(BaseModel):
    id: Optional[int] = None
    channel: Optional[str] = None
    destination: Optional[str] = None


class ServiceStandardResponse(BaseModel):
    ps_code: str
    service_name: str
