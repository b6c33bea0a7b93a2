"""SQLAlchemy models."""

from __future__ import annotations

from rescuenet.models.sos_alert import AlertStatus, SosAlert
from rescuenet.models.user import User, UserRole
from rescuenet.models.volunteer_response import ResponseStatus, SosVolunteerResponse

__all__ = [
    "AlertStatus",
    "ResponseStatus",
    "SosAlert",
    "SosVolunteerResponse",
    "User",
    "UserRole",
]
