from django.conf import settings
from django.db import models
from django.db.models import Q

from .badges import StatSnapshot


class UserProgress(models.Model):
    """
    Denormalized per-user aggregate mutated by every rewarded action.
    Totals only ever grow; they are written with F() increments.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="progress",
    )

    total_points = models.PositiveIntegerField(default=0)
    total_co2_saved_kg = models.FloatField(default=0)

    current_streak = models.PositiveIntegerField(default=0)
    longest_streak = models.PositiveIntegerField(default=0)
    # UTC calendar day (YYYY-MM-DD) of the last rewarded action
    last_active_date_key = models.CharField(max_length=10, null=True, blank=True)

    # Counters read by badge predicates
    missions_count = models.PositiveIntegerField(default=0)
    compliance_on_time_count = models.PositiveIntegerField(default=0)
    pollution_report_count = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "User progress"
        indexes = [
            models.Index(fields=["-total_points"], name="progress_points_idx"),
        ]

    def __str__(self):
        return f"{self.user}: {self.total_points} pts, {self.total_co2_saved_kg:.1f} kg"

    @property
    def badges(self):
        return set(self.user.badges.values_list("badge_id", flat=True))

    def snapshot(self, has_community=False) -> StatSnapshot:
        return StatSnapshot(
            total_co2_saved_kg=self.total_co2_saved_kg,
            missions_count=self.missions_count,
            current_streak=self.current_streak,
            has_community=has_community,
            compliance_on_time_count=self.compliance_on_time_count,
            pollution_report_count=self.pollution_report_count,
        )


class UserBadge(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="badges",
    )
    badge_id = models.CharField(max_length=64)
    earned_at = models.DateTimeField()

    class Meta:
        ordering = ["earned_at"]
        constraints = [
            models.UniqueConstraint(fields=["user", "badge_id"], name="unique_user_badge"),
        ]

    def __str__(self):
        return f"{self.user} - {self.badge_id}"


class PointsLog(models.Model):
    """
    Immutable ledger of point grants ("Why did I get points?").
    Rows with an award_key are paid at most once per (user, reason, award_key).
    """
    REASON_MISSION = "mission"
    REASON_COMPLIANCE = "compliance"
    REASON_POLLUTION_REPORT = "pollution_report"
    REASON_DAILY_TIER_BONUS = "daily_tier_bonus"
    REASON_STREAK_BONUS = "streak_bonus"
    REASON_MILESTONE_REWARD = "milestone_reward"

    REASON_CHOICES = [
        (REASON_MISSION, "Mission"),
        (REASON_COMPLIANCE, "Compliance"),
        (REASON_POLLUTION_REPORT, "Pollution report"),
        (REASON_DAILY_TIER_BONUS, "Daily tier bonus"),
        (REASON_STREAK_BONUS, "Streak bonus"),
        (REASON_MILESTONE_REWARD, "Milestone reward"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="points_logs",
    )
    amount = models.IntegerField()
    reason = models.CharField(max_length=32, choices=REASON_CHOICES)
    award_key = models.CharField(max_length=128, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["user", "reason", "award_key"],
                condition=Q(award_key__isnull=False),
                name="unique_points_award",
            ),
        ]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="points_log_user_idx"),
        ]

    def __str__(self):
        return f"{self.user} +{self.amount} ({self.reason})"


class GoalQuerySet(models.QuerySet):
    """
    Store operations shared by milestones and challenges.
    """

    def cas_transition(self, pk, expected_status, new_status, guard=None, **fields) -> bool:
        """
        Compare-and-set the status. Only the caller whose UPDATE matched the
        expected status (and optional guard) gets True.
        """
        qs = self.filter(pk=pk, status=expected_status)
        if guard is not None:
            qs = qs.filter(guard)
        return qs.update(status=new_status, **fields) == 1


class RecurringMilestoneQuerySet(GoalQuerySet):
    def find_active(self, user, current=None):
        qs = self.filter(user=user, status=RecurringMilestone.STATUS_ACTIVE)
        if current is not None:
            qs = qs.filter(period_start__lte=current, period_end__gte=current)
        return qs

    def upsert_if_absent(self, user, type, period_key, defaults):
        """Race-safe insert keyed by (user, type, period_key)."""
        return self.get_or_create(user=user, type=type, period_key=period_key, defaults=defaults)

    def expired(self, current):
        return self.filter(status=RecurringMilestone.STATUS_ACTIVE, period_end__lt=current)


class RecurringMilestone(models.Model):
    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
    ]

    TYPE_WEEKLY_CO2 = "weekly_co2"
    TYPE_MONTHLY_CO2 = "monthly_co2"
    TYPE_WEEKLY_MISSIONS = "weekly_missions"
    TYPE_MONTHLY_MISSIONS = "monthly_missions"
    TYPE_MONTHLY_STREAK = "monthly_streak"

    TYPE_CHOICES = [
        (TYPE_WEEKLY_CO2, "Weekly CO2"),
        (TYPE_MONTHLY_CO2, "Monthly CO2"),
        (TYPE_WEEKLY_MISSIONS, "Weekly missions"),
        (TYPE_MONTHLY_MISSIONS, "Monthly missions"),
        (TYPE_MONTHLY_STREAK, "Monthly streak"),
    ]

    PERIOD_WEEKLY = "weekly"
    PERIOD_MONTHLY = "monthly"

    PERIOD_CHOICES = [
        (PERIOD_WEEKLY, "Weekly"),
        (PERIOD_MONTHLY, "Monthly"),
    ]

    DIFFICULTY_CHOICES = [
        ("easy", "Easy"),
        ("medium", "Medium"),
        ("hard", "Hard"),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="milestones",
    )
    type = models.CharField(max_length=32, choices=TYPE_CHOICES)
    period = models.CharField(max_length=16, choices=PERIOD_CHOICES)
    # "2024-W07" or "2024-03"
    period_key = models.CharField(max_length=16)

    # Goal
    target_value = models.FloatField()
    unit = models.CharField(max_length=16)
    label = models.CharField(max_length=255)

    # Progress
    current_value = models.FloatField(default=0)
    percent_complete = models.PositiveSmallIntegerField(default=0)

    # Reward
    bonus_points = models.PositiveIntegerField(default=0)
    badge_id = models.CharField(max_length=64, blank=True, default="")

    difficulty = models.CharField(max_length=8, choices=DIFFICULTY_CHOICES, default="easy")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)

    period_start = models.DateTimeField()
    period_end = models.DateTimeField()
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = RecurringMilestoneQuerySet.as_manager()

    class Meta:
        ordering = ["period_end", "type"]
        constraints = [
            models.UniqueConstraint(fields=["user", "type", "period_key"], name="unique_milestone_period"),
        ]
        indexes = [
            models.Index(fields=["user", "status"], name="milestone_user_status_idx"),
            models.Index(fields=["status", "period_end"], name="milestone_expiry_idx"),
        ]

    def __str__(self):
        return f"{self.user} {self.type} {self.period_key} ({self.status})"


class CommunityChallengeQuerySet(GoalQuerySet):
    def find_active(self, community, current=None):
        qs = self.filter(community=community, status=CommunityChallenge.STATUS_ACTIVE)
        if current is not None:
            qs = qs.filter(start_at__lte=current, end_at__gte=current)
        return qs

    def expired(self, current):
        return self.filter(status=CommunityChallenge.STATUS_ACTIVE, end_at__lt=current)


class CommunityChallenge(models.Model):
    """
    Time-boxed community-wide CO2 goal.
    At most one active challenge per community (partial unique index).
    """
    STATUS_ACTIVE = "active"
    STATUS_COMPLETED = "completed"
    STATUS_FAILED = "failed"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_FAILED, "Failed"),
    ]

    community = models.ForeignKey(
        "core.Community",
        on_delete=models.CASCADE,
        related_name="challenges",
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    goal_co2_kg = models.FloatField()
    # Not clamped; may exceed the goal
    current_co2_kg = models.FloatField(default=0)
    participant_count = models.PositiveIntegerField(default=0)

    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    completed_at = models.DateTimeField(null=True, blank=True)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="challenges_created",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = CommunityChallengeQuerySet.as_manager()

    class Meta:
        ordering = ["-start_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["community"],
                condition=Q(status="active"),
                name="one_active_challenge_per_community",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "end_at"], name="challenge_expiry_idx"),
        ]

    def __str__(self):
        return f"{self.community} - {self.title} ({self.status})"


class ChallengeParticipant(models.Model):
    challenge = models.ForeignKey(
        CommunityChallenge,
        on_delete=models.CASCADE,
        related_name="participants",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="challenge_participations",
    )
    co2_contributed_kg = models.FloatField(default=0)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["challenge", "user"], name="unique_challenge_participant"),
        ]

    def __str__(self):
        return f"{self.user} in {self.challenge}"
