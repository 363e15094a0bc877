"""SQLAlchemy models for service orders, their catalogue and association links."""
from sqlalchemy import (
    Column, String, Integer, Date, DateTime, Text,
    ForeignKey, CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


UNITS_OF_MEASURE = ("UN", "M", "M²", "M³", "KG", "L", "ML", "CX", "PC")


class Service(Base):
    """Service order (work order)."""
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    type = Column(Text, nullable=False)
    ps = Column(String(20), nullable=False, index=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    responsible = Column(Text, nullable=True)
    status = Column(String(50), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint(
            "end_date IS NULL OR start_date IS NULL OR end_date >= start_date",
            name="chk_service_dates",
        ),
    )

    # Relationships
    team_links = relationship("ServiceTeam", cascade="all, delete-orphan", passive_deletes=True)
    procedure_links = relationship(
        "ProcedureOrder",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ProcedureOrder.execution_order",
    )
    material_links = relationship("ServiceMaterial", cascade="all, delete-orphan", passive_deletes=True)
    equipment_links = relationship("ServiceEquipment", cascade="all, delete-orphan", passive_deletes=True)
    epi_links = relationship("ServiceEpi", cascade="all, delete-orphan", passive_deletes=True)
    observations = relationship(
        "Observation",
        back_populates="service",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Observation.observation_date.desc()",
    )


class TeamMember(Base):
    """Team member; referenced by orders, never owned by one."""
    __tablename__ = "team"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    position = Column(String(255), nullable=False)
    primary_contact = Column(String(255), nullable=True)
    secondary_contact = Column(String(255), nullable=True)


class Procedure(Base):
    """Procedure tied to a service standard (ps)."""
    __tablename__ = "procedures"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    estimated_time = Column(Integer, nullable=True)  # minutes
    ps = Column(String(20), nullable=True, index=True)

    material_links = relationship(
        "ProcedureMaterial",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Material(Base):
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    unity_of_measure = Column(String(10), nullable=False)


class Equipment(Base):
    __tablename__ = "equipments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)


class Epi(Base):
    """Personal protective equipment item."""
    __tablename__ = "epi"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)


class Observation(Base):
    __tablename__ = "observations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    observation_date = Column(DateTime(timezone=True), server_default=func.now())
    observation_type = Column(String(50), nullable=True)
    team_member_id = Column(Integer, ForeignKey("team.id", ondelete="SET NULL"), nullable=True)

    service = relationship("Service", back_populates="observations")
    team_member = relationship("TeamMember")


class ProcedureMaterial(Base):
    """Bill of materials of a procedure."""
    __tablename__ = "procedure_materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    procedure_id = Column(Integer, ForeignKey("procedures.id", ondelete="CASCADE"), nullable=False, index=True)
    material_id = Column(Integer, ForeignKey("materials.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint(quantity > 0, name="chk_procedure_material_quantity_positive"),
    )

    material = relationship("Material")


# Association links, each scoped to one service order.

class ServiceTeam(Base):
    __tablename__ = "service_team"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    team_id = Column(Integer, ForeignKey("team.id"), nullable=False)

    team = relationship("TeamMember")


class ProcedureOrder(Base):
    __tablename__ = "procedure_order"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    id_procedure = Column(Integer, ForeignKey("procedures.id"), nullable=False)
    execution_order = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint(execution_order > 0, name="chk_procedure_order_positive"),
    )

    procedure = relationship("Procedure")


class ServiceMaterial(Base):
    __tablename__ = "service_materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    material_id = Column(Integer, ForeignKey("materials.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint(quantity > 0, name="chk_service_material_quantity_positive"),
    )

    material = relationship("Material")


class ServiceEquipment(Base):
    __tablename__ = "service_equipments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    equipment_id = Column(Integer, ForeignKey("equipments.id"), nullable=False)

    equipment = relationship("Equipment")


class ServiceEpi(Base):
    __tablename__ = "service_epi"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(Integer, ForeignKey("services.id", ondelete="CASCADE"), nullable=False, index=True)
    epi_id = Column(Integer, ForeignKey("epi.id"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    __table_args__ = (
        CheckConstraint(quantity > 0, name="chk_service_epi_quantity_positive"),
    )

    epi_item = relationship("Epi")
