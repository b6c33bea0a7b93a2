"""Volunteer directory maintenance: locations and push tokens."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from rescuenet.core.errors import InvalidInput
from rescuenet.models.user import User
from rescuenet.services.geo_service import VolunteerCandidate, find_within_radius

logger = logging.getLogger(__name__)


def update_location(db: Session, user: User, latitude: float, longitude: float) -> User:
    """Store the user's current position."""
    user.latitude = latitude
    user.longitude = longitude
    user.location_updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user


def register_push_token(db: Session, user: User, push_token: str | None) -> User:
    """Set or clear the device token pushes are delivered to."""
    token = push_token.strip() if push_token else None
    if push_token is not None and not token:
        raise InvalidInput("Push token must not be blank; send null to unregister.", field="push_token")
    user.push_token = token
    db.commit()
    db.refresh(user)
    logger.info("User %s push token %s", user.id, "registered" if token else "cleared")
    return user


def nearby_volunteers(
    db: Session,
    latitude: float,
    longitude: float,
    radius_m: float,
    limit: int,
) -> list[VolunteerCandidate]:
    """Reachable volunteers around a point, nearest first."""
    return find_within_radius(db, latitude, longitude, radius_m, limit)
