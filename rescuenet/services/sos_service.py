"""SOS dispatch service.

Trigger: a citizen's SOS is stored as Pending, the nearest volunteers are
selected and pushed concurrently, and the alert settles on Unattended,
VolunteersNotified or NotificationFailed.

Response update: a notified volunteer reports their own status and the
alert status is recomputed from ``ALERT_STATUS_RULES``.
"""

from __future__ import annotations

import enum
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from rescuenet.core.config import settings
from rescuenet.core.errors import DependencyFailure, InvalidInput, NotAuthenticated, NotAuthorized, NotFound
from rescuenet.core.sos_policies import (
    ALERT_LINK_PATH,
    MAX_MESSAGE_LENGTH,
    MAX_NOTIFICATION_DISTANCE_METERS,
    MAX_UPDATE_RETRIES,
    MAX_VOLUNTEERS_TO_NOTIFY,
    NOTIFICATION_BODY,
    NOTIFICATION_ICON_PATH,
    NOTIFICATION_TITLE,
)
from rescuenet.models.sos_alert import AlertStatus, SosAlert
from rescuenet.models.user import User, UserRole
from rescuenet.models.volunteer_response import ACTIVE_RESPONSE_STATUSES, ResponseStatus, SosVolunteerResponse
from rescuenet.services.geo_service import VolunteerCandidate, select_candidates
from rescuenet.services.notifier import NotificationResult, Notifier, PushMessage, fan_out

logger = logging.getLogger(__name__)


class TriggerOutcome(str, enum.Enum):
    NO_VOLUNTEERS = "no_volunteers"
    ALL_NOTIFIED = "all_notified"
    SOME_NOTIFICATIONS_FAILED = "some_notifications_failed"


OUTCOME_MESSAGES = {
    TriggerOutcome.NO_VOLUNTEERS: "SOS triggered, but no volunteers available for immediate notification.",
    TriggerOutcome.ALL_NOTIFIED: "SOS triggered and notifications sent to nearby volunteers.",
    TriggerOutcome.SOME_NOTIFICATIONS_FAILED: "SOS triggered, but some notifications may have failed.",
}

# Statuses a volunteer may report; Notified is only ever set at dispatch
VOLUNTEER_SETTABLE_STATUSES = frozenset(ResponseStatus) - {ResponseStatus.NOTIFIED}


@dataclass
class TriggerResult:
    alert: SosAlert
    outcome: TriggerOutcome
    notifications: list[NotificationResult]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _validate_coordinates(latitude: object, longitude: object) -> tuple[float, float]:
    for name, value, bound in (("latitude", latitude, 90), ("longitude", longitude, 180)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInput(f"Valid {name} is required for SOS.", field=name)
        if not math.isfinite(value) or abs(value) > bound:
            raise InvalidInput(f"{name.capitalize()} must be between -{bound} and {bound}.", field=name)
    return float(latitude), float(longitude)


def build_push_message(alert: SosAlert) -> PushMessage:
    """Notification sent to every volunteer selected for ``alert``."""
    base = settings.frontend_url.rstrip("/")
    return PushMessage(
        title=NOTIFICATION_TITLE,
        body=NOTIFICATION_BODY.format(citizen_name=alert.citizen_name),
        click_link=base + ALERT_LINK_PATH.format(alert_id=alert.id),
        icon=base + NOTIFICATION_ICON_PATH,
    )


def _record_volunteers(alert: SosAlert, candidates: list[VolunteerCandidate]) -> None:
    now = _utcnow()
    alert.responded_volunteers = [
        SosVolunteerResponse(
            volunteer_id=c.id,
            volunteer_name=c.name,
            push_token=c.push_token,
            position=i,
            response_status=ResponseStatus.NOTIFIED,
            response_timestamp=now,
        )
        for i, c in enumerate(candidates)
    ]


def trigger_sos(
    db: Session,
    citizen: User | None,
    latitude: float,
    longitude: float,
    message: str | None,
    notifier: Notifier,
) -> TriggerResult:
    """Create an SOS for ``citizen`` at the point and notify the nearest volunteers.

    Selection or persistence errors roll everything back and raise
    ``DependencyFailure``. Push failures are folded into the alert status.
    """
    if citizen is None:
        raise NotAuthenticated("User not authenticated.")
    if citizen.role != UserRole.CITIZEN:
        raise InvalidInput("Only registered citizens can trigger SOS.", role=str(citizen.role.value))
    latitude, longitude = _validate_coordinates(latitude, longitude)
    message = (message or "").strip() or None
    if message is not None and len(message) > MAX_MESSAGE_LENGTH:
        raise InvalidInput(f"Message must be at most {MAX_MESSAGE_LENGTH} characters.", field="message")

    alert = SosAlert(
        citizen_id=citizen.id,
        citizen_name=citizen.full_name,
        latitude=latitude,
        longitude=longitude,
        message=message,
        status=AlertStatus.PENDING,
    )
    try:
        db.add(alert)
        db.flush()
        candidates = select_candidates(
            db,
            latitude,
            longitude,
            limit=MAX_VOLUNTEERS_TO_NOTIFY,
            radius_m=MAX_NOTIFICATION_DISTANCE_METERS,
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error("SOS trigger for citizen %s failed before dispatch: %s", citizen.id, exc)
        raise DependencyFailure("Could not record SOS alert.") from exc

    logger.info(
        "SOS %s from citizen %s at (%.5f, %.5f): %d candidate(s)",
        alert.id, citizen.id, latitude, longitude, len(candidates),
    )

    if not candidates:
        alert.status = AlertStatus.UNATTENDED
        outcome = TriggerOutcome.NO_VOLUNTEERS
        results: list[NotificationResult] = []
    else:
        results = fan_out(notifier, candidates, build_push_message(alert))
        _record_volunteers(alert, candidates)
        failed = [r for r in results if not r.success]
        if failed:
            alert.status = AlertStatus.NOTIFICATION_FAILED
            outcome = TriggerOutcome.SOME_NOTIFICATIONS_FAILED
            logger.warning(
                "SOS %s: %d of %d notification(s) failed: %s",
                alert.id, len(failed), len(results), [r.volunteer_id for r in failed],
            )
        else:
            alert.status = AlertStatus.VOLUNTEERS_NOTIFIED
            outcome = TriggerOutcome.ALL_NOTIFIED

    alert_id = alert.id
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        # Pushes already went out; the log is the only record of who got them
        logger.error(
            "SOS %s: could not record dispatch outcome, alert left Pending; pushed volunteers %s (delivered %s): %s",
            alert_id,
            [c.id for c in candidates],
            [r.volunteer_id for r in results if r.success],
            exc,
        )
        raise DependencyFailure("Could not record SOS dispatch outcome.", alert_id=alert_id) from exc
    db.refresh(alert)
    return TriggerResult(alert=alert, outcome=outcome, notifications=results)


# ---------- Aggregate alert status ----------

AlertStatusRule = Callable[[SosAlert, int], AlertStatus]


def _keep(alert: SosAlert, volunteer_id: int) -> AlertStatus:
    return alert.status


def _en_route(alert: SosAlert, volunteer_id: int) -> AlertStatus:
    if alert.status == AlertStatus.ASSISTANCE_IN_PROGRESS:
        return alert.status
    return AlertStatus.ASSISTANCE_EN_ROUTE


def _assisting(alert: SosAlert, volunteer_id: int) -> AlertStatus:
    return AlertStatus.ASSISTANCE_IN_PROGRESS


def _resolved_by_volunteer(alert: SosAlert, volunteer_id: int) -> AlertStatus:
    others_active = any(
        r.volunteer_id != volunteer_id and r.response_status in ACTIVE_RESPONSE_STATUSES
        for r in alert.responded_volunteers
    )
    return alert.status if others_active else AlertStatus.RESOLVED


# One rule per response status; a test asserts every status has an entry
ALERT_STATUS_RULES: dict[ResponseStatus, AlertStatusRule] = {
    ResponseStatus.NOTIFIED: _keep,
    ResponseStatus.ACKNOWLEDGED: _keep,
    ResponseStatus.EN_ROUTE: _en_route,
    ResponseStatus.ASSISTING: _assisting,
    ResponseStatus.UNABLE_TO_ASSIST: _keep,
    ResponseStatus.RESOLVED_BY_VOLUNTEER: _resolved_by_volunteer,
}


def next_alert_status(alert: SosAlert, volunteer_id: int, new_status: ResponseStatus) -> AlertStatus:
    """Alert status after ``volunteer_id``'s entry has been set to ``new_status``."""
    if alert.status == AlertStatus.RESOLVED:
        return alert.status
    return ALERT_STATUS_RULES[new_status](alert, volunteer_id)


def _parse_response_status(value: object) -> ResponseStatus:
    try:
        status = ResponseStatus(value)
    except ValueError:
        raise InvalidInput("Invalid response status.", response_status=str(value)) from None
    if status not in VOLUNTEER_SETTABLE_STATUSES:
        raise InvalidInput("Invalid response status.", response_status=status.value)
    return status


def _apply_response(db: Session, alert_id: int, volunteer_id: int, new_status: ResponseStatus) -> SosAlert:
    alert = db.get(SosAlert, alert_id, populate_existing=True)
    if alert is None:
        raise NotFound("SOS alert", alert_id=alert_id)
    entry = alert.response_for(volunteer_id)
    if entry is None:
        raise NotAuthorized(
            "Volunteer not associated with this alert or unauthorized.",
            alert_id=alert_id,
            volunteer_id=volunteer_id,
        )

    now = _utcnow()
    entry.response_status = new_status
    entry.response_timestamp = now
    previous = alert.status
    alert.status = next_alert_status(alert, volunteer_id, new_status)
    alert.updated_at = now
    db.commit()

    if alert.status != previous:
        logger.info("SOS %s: %s -> %s (volunteer %s: %s)", alert_id, previous.value, alert.status.value, volunteer_id, new_status.value)
    if all(r.response_status == ResponseStatus.UNABLE_TO_ASSIST for r in alert.responded_volunteers):
        # No automatic re-dispatch: the volunteer set is fixed once notified
        logger.warning("SOS %s: every notified volunteer is unable to assist; needs manual follow-up", alert_id)
    return alert


def update_response(db: Session, alert_id: int, volunteer_id: int, new_status: ResponseStatus | str) -> SosAlert:
    """Record ``volunteer_id``'s response on an alert and recompute the alert status.

    The alert row carries a version counter; if another volunteer's update
    lands in between, the read-modify-write is retried on fresh data.
    """
    status = _parse_response_status(new_status)
    for attempt in range(1, MAX_UPDATE_RETRIES + 1):
        try:
            alert = _apply_response(db, alert_id, volunteer_id, status)
        except StaleDataError:
            db.rollback()
            logger.info("SOS %s: concurrent update, retrying (%d/%d)", alert_id, attempt, MAX_UPDATE_RETRIES)
            continue
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("SOS %s: response update failed: %s", alert_id, exc)
            raise DependencyFailure("Could not update SOS alert response.", alert_id=alert_id) from exc
        db.refresh(alert)
        return alert
    raise DependencyFailure("SOS alert is being updated concurrently; try again.", alert_id=alert_id)


# ---------- Reads ----------


def list_volunteer_alerts(db: Session, volunteer_id: int) -> list[SosAlert]:
    """Alerts this volunteer was notified for, newest first."""
    stmt = (
        select(SosAlert)
        .join(SosVolunteerResponse, SosVolunteerResponse.sos_alert_id == SosAlert.id)
        .where(SosVolunteerResponse.volunteer_id == volunteer_id)
        .order_by(SosAlert.created_at.desc(), SosAlert.id.desc())
    )
    return list(db.execute(stmt).scalars().all())


def list_citizen_alerts(db: Session, citizen_id: int, limit: int = 20) -> list[SosAlert]:
    """List SOS alerts raised by a citizen, newest first."""
    stmt = (
        select(SosAlert)
        .where(SosAlert.citizen_id == citizen_id)
        .order_by(SosAlert.created_at.desc(), SosAlert.id.desc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def get_alert(db: Session, alert_id: int, user: User) -> SosAlert:
    """Get an alert. Visible to its citizen, its notified volunteers and admins."""
    alert = db.get(SosAlert, alert_id)
    if alert is None:
        raise NotFound("SOS alert", alert_id=alert_id)
    if user.role == UserRole.ADMIN or alert.citizen_id == user.id or alert.response_for(user.id) is not None:
        return alert
    raise NotAuthorized("You cannot view this SOS alert.", alert_id=alert_id)
