"""
SQLAlchemy ORM models.

Tables
------
* ``route_edges``   -- directed edges of the route network
* ``vehicles``      -- bookable vehicles with a per-minute rate
* ``reservations``  -- committed time intervals, one per live booking
* ``bookings``      -- booking snapshots with lifecycle status

Indexes
-------
* **Unique** on ``route_edges(source, target)`` and ``bookings.human_code``.
* **B-Tree** on ``reservations.vehicle_id``, ``bookings.status``,
  ``bookings.vehicle_id`` and ``bookings.rider_contact`` for the lookups
  used by the booking lifecycle and the API.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from cabroute.domain.enums import BookingStatus


class RouteEdgeModel(Base):
    __tablename__ = "route_edges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    source = Column(String(64), nullable=False)
    target = Column(String(64), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("source", "target", name="uq_route_edges_pair"),
        CheckConstraint("duration_minutes > 0", name="ck_route_edges_duration"),
        Index("idx_route_edges_source", "source"),
    )


class VehicleModel(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True)
    name = Column(String(120), nullable=False)
    rate_per_minute = Column(Float, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    reservations = relationship(
        "ReservationModel",
        cascade="all, delete-orphan",
        order_by="ReservationModel.start_time",
        lazy="selectin",
    )

    __table_args__ = (Index("idx_vehicles_active", "active"),)


class ReservationModel(Base):
    __tablename__ = "reservations"

    booking_id = Column(String(36), primary_key=True)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (Index("idx_reservations_vehicle", "vehicle_id"),)


class BookingModel(Base):
    __tablename__ = "bookings"

    id = Column(String(36), primary_key=True)
    human_code = Column(String(16), unique=True, nullable=False)
    rider_contact = Column(String(255), nullable=True)
    source = Column(String(64), nullable=False)
    destination = Column(String(64), nullable=False)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), nullable=False)

    # Snapshot taken at creation; never recomputed
    path = Column(JSON, nullable=False)
    total_duration = Column(Integer, nullable=False)
    estimated_cost = Column(Float, nullable=False)

    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    status = Column(
        Enum(BookingStatus, name="bookingstatus"),
        default=BookingStatus.CONFIRMED,
        nullable=False,
    )
    notification_sent = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_bookings_status", "status"),
        Index("idx_bookings_vehicle", "vehicle_id"),
        Index("idx_bookings_contact", "rider_contact"),
    )
