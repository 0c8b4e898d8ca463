# notifications/services.py
import logging

import requests

from gamification.conf import get_setting
from .models import Notification

logger = logging.getLogger("ecoact.notifications")


def _is_expo_token(token):
    return bool(token) and token.startswith(("ExponentPushToken[", "ExpoPushToken["))


def send_push_notification(user, title, body, data=None, notification_type=Notification.TYPE_SYSTEM) -> bool:
    """
    Best-effort notification delivery.

    Always tries to record an in-app Notification, then pushes to the Expo
    API when the user has registered a token. Returns True only when the
    push was accepted. Never raises.
    """
    payload = dict(data or {})

    try:
        notification = Notification.objects.create(
            user=user,
            type=notification_type,
            title=title,
            body=body,
            data=payload,
        )
    except Exception as e:
        logger.warning(f"Could not record notification for user {user.pk}: {e}")
        notification = None

    token = getattr(user, "push_token", "")
    if not _is_expo_token(token):
        return False

    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    access_token = get_setting("EXPO_PUSH_ACCESS_TOKEN")
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"

    message = {
        "to": token,
        "sound": "default",
        "title": title,
        "body": body,
        "data": payload,
    }

    try:
        res = requests.post(
            get_setting("EXPO_PUSH_URL"),
            json=message,
            headers=headers,
            timeout=get_setting("PUSH_TIMEOUT_SECONDS"),
        )
        res.raise_for_status()
        ticket = res.json().get("data") or {}
        if isinstance(ticket, list):
            ticket = ticket[0] if ticket else {}
        if ticket.get("status") == "error":
            logger.warning(f"Expo rejected push for user {user.pk}: {ticket.get('message')}")
            return False
    except (requests.RequestException, ValueError) as e:
        logger.warning(f"Push delivery failed for user {user.pk}: {e}")
        return False

    if notification is not None:
        Notification.objects.filter(pk=notification.pk).update(pushed=True)
    logger.info(f"Push sent to user {user.pk}: {title}")
    return True
