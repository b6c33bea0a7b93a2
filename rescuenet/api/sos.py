"""SOS alerts API."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from rescuenet.core.deps import get_current_user, require_citizen, require_volunteer
from rescuenet.db.session import get_db
from rescuenet.models.user import User
from rescuenet.schemas.sos import (
    SosAlertResponse,
    SosResponseUpdate,
    SosResponseUpdated,
    SosTriggerRequest,
    SosTriggerResponse,
)
from rescuenet.services.notifier import Notifier, get_notifier
from rescuenet.services.sos_service import (
    OUTCOME_MESSAGES,
    TriggerOutcome,
    get_alert,
    list_citizen_alerts,
    list_volunteer_alerts,
    trigger_sos,
    update_response,
)

router = APIRouter(prefix="/sos", tags=["sos"])

# Every outcome is a success for the caller; the code tells them how it went
_OUTCOME_STATUS_CODES = {
    TriggerOutcome.NO_VOLUNTEERS: status.HTTP_200_OK,
    TriggerOutcome.ALL_NOTIFIED: status.HTTP_201_CREATED,
    TriggerOutcome.SOME_NOTIFICATIONS_FAILED: status.HTTP_207_MULTI_STATUS,
}


@router.post("/trigger", response_model=SosTriggerResponse, status_code=status.HTTP_201_CREATED)
def trigger(
    data: SosTriggerRequest,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_citizen),
    notifier: Notifier = Depends(get_notifier),
):
    """Citizen triggers an SOS; nearby volunteers are notified."""
    result = trigger_sos(db, current_user, data.latitude, data.longitude, data.message, notifier)
    response.status_code = _OUTCOME_STATUS_CODES[result.outcome]
    return SosTriggerResponse(
        alert_id=result.alert.id,
        outcome=result.outcome,
        message=OUTCOME_MESSAGES[result.outcome],
        status=result.alert.status,
        volunteers_notified=len(result.alert.responded_volunteers),
    )


@router.get("/me", response_model=list[SosAlertResponse])
def list_my_alerts(
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_citizen),
):
    """List current citizen's SOS alerts, newest first."""
    return list_citizen_alerts(db, current_user.id, limit)


@router.get("/volunteer-alerts", response_model=list[SosAlertResponse])
def list_alerts_for_volunteer(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_volunteer),
):
    """SOS alerts the current volunteer was notified for, newest first."""
    return list_volunteer_alerts(db, current_user.id)


@router.get("/alerts/{alert_id}", response_model=SosAlertResponse)
def read_alert(
    alert_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Get one SOS alert with every volunteer's response."""
    return get_alert(db, alert_id, current_user)


@router.put("/alerts/{alert_id}/response", response_model=SosResponseUpdated)
def respond_to_alert(
    alert_id: int,
    data: SosResponseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_volunteer),
):
    """Volunteer updates their own response; the alert status follows."""
    alert = update_response(db, alert_id, current_user.id, data.response_status)
    return SosResponseUpdated(
        message="SOS alert response updated successfully.",
        alert=SosAlertResponse.model_validate(alert),
    )
