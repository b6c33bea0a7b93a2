"""Location, push token and nearby volunteer API."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from rescuenet.core.deps import get_current_user, require_volunteer
from rescuenet.core.sos_policies import MAX_NOTIFICATION_DISTANCE_METERS
from rescuenet.db.session import get_db
from rescuenet.models.user import User
from rescuenet.schemas.volunteer import (
    LocationResponse,
    LocationUpdate,
    NearbyVolunteerResponse,
    PushTokenResponse,
    PushTokenUpdate,
)
from rescuenet.services.volunteer_service import nearby_volunteers, register_push_token, update_location

router = APIRouter(tags=["volunteers"])


@router.post("/location", response_model=LocationResponse)
def set_location(
    data: LocationUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """User updates their current location."""
    user = update_location(db, current_user, data.latitude, data.longitude)
    return LocationResponse(
        latitude=user.latitude,
        longitude=user.longitude,
        location_updated_at=user.location_updated_at,
    )


@router.put("/push-token", response_model=PushTokenResponse)
def set_push_token(
    data: PushTokenUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_volunteer),
):
    """Volunteer registers (or clears) the device that receives SOS pushes."""
    user = register_push_token(db, current_user, data.push_token)
    return PushTokenResponse(has_push_token=user.has_push_token)


@router.get("/volunteers/nearby", response_model=list[NearbyVolunteerResponse])
def list_nearby_volunteers(
    latitude: float = Query(ge=-90, le=90),
    longitude: float = Query(ge=-180, le=180),
    radius_m: float = Query(default=MAX_NOTIFICATION_DISTANCE_METERS, gt=0, le=100_000),
    limit: int = Query(default=10, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Reachable volunteers around a point, nearest first."""
    found = nearby_volunteers(db, latitude, longitude, radius_m, limit)
    return [
        NearbyVolunteerResponse(
            volunteer_id=c.id,
            volunteer_name=c.name,
            distance_m=round(c.distance_m, 1),
        )
        for c in found
    ]
