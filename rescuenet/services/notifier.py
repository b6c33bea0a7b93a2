"""Push notification delivery and SOS fan-out.

A notifier exposes ``send(push_token, message) -> bool``. ``fan_out`` calls
it once per volunteer on a thread pool and joins every call into a
``NotificationResult`` list; a failing or raising send only affects its
own result.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol, Sequence

import firebase_admin
from firebase_admin import credentials, exceptions, messaging

from rescuenet.core.config import settings
from rescuenet.services.geo_service import VolunteerCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PushMessage:
    title: str
    body: str
    click_link: str
    icon: str | None = None


@dataclass(frozen=True)
class NotificationResult:
    volunteer_id: int
    success: bool
    error: str | None = None


class Notifier(Protocol):
    def send(self, push_token: str, message: PushMessage) -> bool: ...


class FcmNotifier:
    """Sends web push notifications through Firebase Cloud Messaging."""

    def __init__(self, credentials_path: str = "") -> None:
        self._credentials_path = credentials_path
        self._app: firebase_admin.App | None = None
        self._lock = threading.Lock()

    def _get_app(self) -> firebase_admin.App:
        with self._lock:
            if self._app is None:
                try:
                    self._app = firebase_admin.get_app()
                except ValueError:
                    cred = (
                        credentials.Certificate(self._credentials_path)
                        if self._credentials_path
                        else credentials.ApplicationDefault()
                    )
                    self._app = firebase_admin.initialize_app(cred)
            return self._app

    @staticmethod
    def build_message(push_token: str, message: PushMessage) -> messaging.Message:
        """FCM message with the click link carried in the webpush options."""
        return messaging.Message(
            token=push_token,
            notification=messaging.Notification(title=message.title, body=message.body),
            webpush=messaging.WebpushConfig(
                notification=messaging.WebpushNotification(icon=message.icon),
                fcm_options=messaging.WebpushFCMOptions(link=message.click_link),
            ),
        )

    def send(self, push_token: str, message: PushMessage) -> bool:
        try:
            message_id = messaging.send(self.build_message(push_token, message), app=self._get_app())
        except exceptions.FirebaseError as exc:
            logger.warning("FCM send failed (%s): %s", exc.code, exc)
            return False
        logger.debug("FCM message sent: %s", message_id)
        return True


class LoggingNotifier:
    """Development notifier: logs the push and reports success."""

    def send(self, push_token: str, message: PushMessage) -> bool:
        logger.info("[PUSH] %s -> %s...: %s (%s)", message.title, push_token[:12], message.body, message.click_link)
        return True


_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """Return the process-wide notifier selected by ``settings.notifier_backend``."""
    global _notifier
    if _notifier is None:
        if settings.notifier_backend == "log":
            _notifier = LoggingNotifier()
        else:
            _notifier = FcmNotifier(settings.firebase_credentials_path)
    return _notifier


def _send_one(notifier: Notifier, candidate: VolunteerCandidate, message: PushMessage) -> NotificationResult:
    try:
        ok = notifier.send(candidate.push_token, message)
    except Exception as exc:  # one recipient's failure must not sink the others
        logger.exception("Push to volunteer %s raised", candidate.id)
        return NotificationResult(volunteer_id=candidate.id, success=False, error=str(exc) or type(exc).__name__)
    if not ok:
        return NotificationResult(volunteer_id=candidate.id, success=False, error="send failed")
    return NotificationResult(volunteer_id=candidate.id, success=True)


def fan_out(
    notifier: Notifier,
    candidates: Sequence[VolunteerCandidate],
    message: PushMessage,
    max_workers: int | None = None,
) -> list[NotificationResult]:
    """Send ``message`` to every candidate concurrently. Results follow candidate order."""
    if not candidates:
        return []
    workers = max(1, min(max_workers or settings.notify_max_workers, len(candidates)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="sos-push") as pool:
        return list(pool.map(lambda c: _send_one(notifier, c, message), candidates))
