# gamification/tasks.py
from celery import shared_task

from .engine import RewardsEngine


@shared_task
def sweep_expirations_task():
    """
    Periodic expiry sweep for milestones and community challenges.
    Safe to run any number of times.
    """
    return RewardsEngine().sweep_expirations()
