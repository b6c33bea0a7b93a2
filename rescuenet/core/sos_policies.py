"""SOS dispatch policy constants."""

from __future__ import annotations

from rescuenet.core.config import settings

# Most volunteers pushed for a single SOS
MAX_VOLUNTEERS_TO_NOTIFY = settings.sos_max_volunteers

# Search radius for the first selection pass, in meters
MAX_NOTIFICATION_DISTANCE_METERS = settings.sos_max_distance_m

# Attempts at the optimistic read-modify-write of an alert
MAX_UPDATE_RETRIES = 3

# Longest free-text message a citizen can attach
MAX_MESSAGE_LENGTH = 500

NOTIFICATION_TITLE = "SOS Alert! Citizen Needs Help!"
NOTIFICATION_BODY = "{citizen_name} near you requires assistance. Tap for details."
NOTIFICATION_ICON_PATH = "/RescueNetLogo.png"
ALERT_LINK_PATH = "/sos-alerts/{alert_id}"
