"""Location, push token and nearby-volunteer schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class LocationUpdate(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class LocationResponse(BaseModel):
    latitude: float
    longitude: float
    location_updated_at: datetime


class PushTokenUpdate(BaseModel):
    # None unregisters the device; the volunteer then stops receiving SOS pushes
    push_token: str | None = Field(default=None, max_length=4096)


class PushTokenResponse(BaseModel):
    has_push_token: bool


class NearbyVolunteerResponse(BaseModel):
    volunteer_id: int
    volunteer_name: str
    distance_m: float
