"""SOS alert model."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rescuenet.db.base import Base

if TYPE_CHECKING:
    from rescuenet.models.volunteer_response import SosVolunteerResponse


class AlertStatus(str, enum.Enum):
    PENDING = "Pending"
    VOLUNTEERS_NOTIFIED = "VolunteersNotified"
    NOTIFICATION_FAILED = "NotificationFailed"
    UNATTENDED = "Unattended"
    ASSISTANCE_EN_ROUTE = "AssistanceEnRoute"
    ASSISTANCE_IN_PROGRESS = "AssistanceInProgress"
    RESOLVED = "Resolved"


# Statuses an alert can only hold while no volunteer is on record
UNDISPATCHED_STATUSES = frozenset({AlertStatus.PENDING, AlertStatus.UNATTENDED})

TERMINAL_STATUSES = frozenset({AlertStatus.UNATTENDED, AlertStatus.RESOLVED})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SosAlert(Base):
    """SOS raised by a citizen, with the volunteers notified for it."""

    __tablename__ = "sos_alerts"
    __table_args__ = (Index("ix_sos_alerts_location", "latitude", "longitude"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    citizen_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    citizen_name: Mapped[str] = mapped_column(String(255), nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[AlertStatus] = mapped_column(
        Enum(AlertStatus, native_enum=False, length=32, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AlertStatus.PENDING,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )
    # Bumped on every UPDATE; concurrent writers fail with StaleDataError
    version_id: Mapped[int] = mapped_column(Integer, nullable=False)

    responded_volunteers: Mapped[list[SosVolunteerResponse]] = relationship(
        back_populates="alert",
        order_by="SosVolunteerResponse.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version_id}

    def response_for(self, volunteer_id: int) -> SosVolunteerResponse | None:
        """Return the entry for ``volunteer_id``, or None if they were never notified."""
        for entry in self.responded_volunteers:
            if entry.volunteer_id == volunteer_id:
                return entry
        return None
