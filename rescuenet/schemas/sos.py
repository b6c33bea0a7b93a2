"""SOS alert schemas."""

from datetime import datetime

from pydantic import BaseModel, Field, StrictFloat, StrictInt

from rescuenet.models.sos_alert import AlertStatus
from rescuenet.models.volunteer_response import ResponseStatus
from rescuenet.services.sos_service import TriggerOutcome


class SosTriggerRequest(BaseModel):
    """Citizen's SOS. Coordinates are checked by the dispatch service."""

    latitude: StrictFloat | StrictInt | None = None
    longitude: StrictFloat | StrictInt | None = None
    message: str | None = None


class SosTriggerResponse(BaseModel):
    alert_id: int
    outcome: TriggerOutcome
    message: str
    status: AlertStatus
    volunteers_notified: int


class SosResponseUpdate(BaseModel):
    """Volunteer's own response to an alert."""

    response_status: str = Field(..., description="Acknowledged | EnRoute | Assisting | UnableToAssist | ResolvedByVolunteer")


class VolunteerResponseOut(BaseModel):
    volunteer_id: int
    volunteer_name: str
    response_status: ResponseStatus
    response_timestamp: datetime

    model_config = {"from_attributes": True}


class SosAlertResponse(BaseModel):
    id: int
    citizen_id: int
    citizen_name: str
    latitude: float
    longitude: float
    message: str | None
    status: AlertStatus
    responded_volunteers: list[VolunteerResponseOut] = []
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class SosResponseUpdated(BaseModel):
    message: str
    alert: SosAlertResponse
