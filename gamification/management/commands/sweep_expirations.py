from django.core.management.base import BaseCommand

from gamification.engine import RewardsEngine


class Command(BaseCommand):
    help = "Fail expired milestones and community challenges (cron-friendly, idempotent)"

    def handle(self, *args, **options):
        result = RewardsEngine().sweep_expirations()
        self.stdout.write(self.style.SUCCESS(
            f"Expired {result['milestones_expired']} milestones, "
            f"{result['challenges_expired']} challenges"
        ))
