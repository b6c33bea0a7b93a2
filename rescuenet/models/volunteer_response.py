"""Volunteer response model - one row per volunteer notified for an SOS alert."""

from __future__ import annotations

import enum
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rescuenet.db.base import Base

if TYPE_CHECKING:
    from rescuenet.models.sos_alert import SosAlert


class ResponseStatus(str, enum.Enum):
    NOTIFIED = "Notified"
    ACKNOWLEDGED = "Acknowledged"
    EN_ROUTE = "EnRoute"
    ASSISTING = "Assisting"
    UNABLE_TO_ASSIST = "UnableToAssist"
    RESOLVED_BY_VOLUNTEER = "ResolvedByVolunteer"


# A volunteer in one of these is still on the way or on scene
ACTIVE_RESPONSE_STATUSES = frozenset({ResponseStatus.EN_ROUTE, ResponseStatus.ASSISTING})


class SosVolunteerResponse(Base):
    """A notified volunteer's snapshot and current response to an alert."""

    __tablename__ = "sos_volunteer_responses"
    __table_args__ = (UniqueConstraint("sos_alert_id", "volunteer_id", name="uq_sos_response_volunteer"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    sos_alert_id: Mapped[int] = mapped_column(ForeignKey("sos_alerts.id"), nullable=False, index=True)
    volunteer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    volunteer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    push_token: Mapped[str | None] = mapped_column(Text, nullable=True)  # audit snapshot, may go stale
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    response_status: Mapped[ResponseStatus] = mapped_column(
        Enum(ResponseStatus, native_enum=False, length=32, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ResponseStatus.NOTIFIED,
    )
    response_timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    alert: Mapped[SosAlert] = relationship(back_populates="responded_volunteers")
