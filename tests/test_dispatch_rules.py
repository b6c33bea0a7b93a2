"""Alert status rules: one table entry per volunteer response status."""

import pytest

from rescuenet.models import AlertStatus, ResponseStatus, SosAlert, SosVolunteerResponse
from rescuenet.services.sos_service import ALERT_STATUS_RULES, next_alert_status


def _alert(status, *volunteer_statuses):
    """Transient alert whose volunteers are ids 1..n with the given statuses."""
    return SosAlert(
        status=status,
        responded_volunteers=[
            SosVolunteerResponse(volunteer_id=i, volunteer_name=f"V{i}", response_status=s, position=i)
            for i, s in enumerate(volunteer_statuses, start=1)
        ],
    )


def test_every_response_status_has_a_rule():
    assert set(ALERT_STATUS_RULES) == set(ResponseStatus)


@pytest.mark.parametrize(
    "current, new_status, expected",
    [
        (AlertStatus.VOLUNTEERS_NOTIFIED, ResponseStatus.EN_ROUTE, AlertStatus.ASSISTANCE_EN_ROUTE),
        (AlertStatus.NOTIFICATION_FAILED, ResponseStatus.EN_ROUTE, AlertStatus.ASSISTANCE_EN_ROUTE),
        (AlertStatus.ASSISTANCE_IN_PROGRESS, ResponseStatus.EN_ROUTE, AlertStatus.ASSISTANCE_IN_PROGRESS),
        (AlertStatus.VOLUNTEERS_NOTIFIED, ResponseStatus.ASSISTING, AlertStatus.ASSISTANCE_IN_PROGRESS),
        (AlertStatus.ASSISTANCE_EN_ROUTE, ResponseStatus.ASSISTING, AlertStatus.ASSISTANCE_IN_PROGRESS),
        (AlertStatus.VOLUNTEERS_NOTIFIED, ResponseStatus.ACKNOWLEDGED, AlertStatus.VOLUNTEERS_NOTIFIED),
        (AlertStatus.ASSISTANCE_EN_ROUTE, ResponseStatus.UNABLE_TO_ASSIST, AlertStatus.ASSISTANCE_EN_ROUTE),
        (AlertStatus.VOLUNTEERS_NOTIFIED, ResponseStatus.UNABLE_TO_ASSIST, AlertStatus.VOLUNTEERS_NOTIFIED),
    ],
)
def test_single_volunteer_rules(current, new_status, expected):
    alert = _alert(current, new_status)
    assert next_alert_status(alert, 1, new_status) == expected


def test_resolved_when_nobody_else_active():
    alert = _alert(
        AlertStatus.ASSISTANCE_EN_ROUTE,
        ResponseStatus.RESOLVED_BY_VOLUNTEER,
        ResponseStatus.UNABLE_TO_ASSIST,
        ResponseStatus.ACKNOWLEDGED,
    )
    assert next_alert_status(alert, 1, ResponseStatus.RESOLVED_BY_VOLUNTEER) == AlertStatus.RESOLVED


@pytest.mark.parametrize("other", [ResponseStatus.EN_ROUTE, ResponseStatus.ASSISTING])
def test_not_resolved_while_another_volunteer_is_active(other):
    alert = _alert(AlertStatus.ASSISTANCE_IN_PROGRESS, ResponseStatus.RESOLVED_BY_VOLUNTEER, other)
    assert next_alert_status(alert, 1, ResponseStatus.RESOLVED_BY_VOLUNTEER) == AlertStatus.ASSISTANCE_IN_PROGRESS


def test_resolved_is_terminal():
    alert = _alert(AlertStatus.RESOLVED, ResponseStatus.EN_ROUTE, ResponseStatus.RESOLVED_BY_VOLUNTEER)
    for status in ResponseStatus:
        assert next_alert_status(alert, 1, status) == AlertStatus.RESOLVED


@pytest.mark.parametrize("status", list(ResponseStatus))
def test_same_status_twice_is_idempotent(status):
    alert = _alert(AlertStatus.VOLUNTEERS_NOTIFIED, status, ResponseStatus.NOTIFIED)
    alert.status = next_alert_status(alert, 1, status)
    first = alert.status
    assert next_alert_status(alert, 1, status) == first
