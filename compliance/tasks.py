# compliance/tasks.py
from celery import shared_task

from .services import send_expiry_reminders


@shared_task
def send_expiry_reminders_task():
    """Daily certificate expiry reminders."""
    return send_expiry_reminders()
