# gamification/leaderboard.py
"""
Rankings and community stats, read from the aggregates the engine keeps:
UserProgress totals for all-time boards, MissionCompletion rows for
anything windowed (this week, this month).
"""
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.db.models import Count, FloatField, IntegerField, Sum
from django.db.models.functions import Coalesce

from core.models import CommunityMembership
from missions.models import MissionCompletion

from .datetime_utils import now, month_bounds, parse_date_key, week_bounds
from .points import round_half_up

PAGE_SIZE = 20
TOP_CONTRIBUTORS = 5
DAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]

User = get_user_model()


def _with_totals(qs):
    return qs.filter(is_active=True).annotate(
        points=Coalesce("progress__total_points", 0, output_field=IntegerField()),
        co2=Coalesce("progress__total_co2_saved_kg", 0.0, output_field=FloatField()),
    )


def _member_ids(community):
    return CommunityMembership.objects.filter(community=community, is_active=True).values("user_id")


def _entry(rank, user, points, co2):
    return {
        "rank": rank,
        "user_id": user.id,
        "name": user.public_name,
        "avatar": user.profile_picture or "",
        "total_points": points,
        "total_co2_saved_kg": round(co2 or 0, 2),
    }


def _page_window(page):
    page = max(1, page)
    offset = (page - 1) * PAGE_SIZE
    return page, offset


def _totals_page(qs, page):
    page, offset = _page_window(page)
    ordered = qs.order_by("-points", "id")
    users = ordered[offset:offset + PAGE_SIZE]
    return {
        "leaderboard": [
            _entry(offset + i + 1, user, user.points, user.co2)
            for i, user in enumerate(users)
        ],
        "total": ordered.count(),
        "page": page,
        "page_size": PAGE_SIZE,
    }


def global_leaderboard(page=1):
    return _totals_page(_with_totals(User.objects.all()), page)


def community_leaderboard(community, page=1):
    members = User.objects.filter(pk__in=_member_ids(community))
    return _totals_page(_with_totals(members), page)


def _weekly_rows(current):
    start, end = week_bounds(current)
    return (
        MissionCompletion.objects
        .filter(completed_at__gte=start, completed_at__lte=end)
        .order_by()
        .values("user_id")
        .annotate(points=Sum("points_awarded"), co2=Sum("co2_saved_awarded"))
    )


def weekly_leaderboard(page=1, clock=now):
    """Mission points earned since Monday 00:00 UTC."""
    page, offset = _page_window(page)
    rows = _weekly_rows(clock()).order_by("-points", "user_id")
    window = list(rows[offset:offset + PAGE_SIZE])
    users = User.objects.in_bulk([row["user_id"] for row in window])

    return {
        "leaderboard": [
            _entry(offset + i + 1, users[row["user_id"]], row["points"], row["co2"])
            for i, row in enumerate(window)
            if row["user_id"] in users
        ],
        "total": rows.count(),
        "page": page,
        "page_size": PAGE_SIZE,
    }


def get_my_ranks(user, community_id=None, clock=now):
    """
    1-based ranks of user. Ties share a rank: the rank is one more than the
    number of users strictly ahead.
    """
    everyone = _with_totals(User.objects.all())
    mine = everyone.filter(pk=user.pk).values_list("points", flat=True).first() or 0

    ranks = {
        "global_rank": everyone.filter(points__gt=mine).count() + 1,
        "total_global": everyone.count(),
        "community_rank": None,
        "total_community": None,
    }

    if community_id is not None:
        members = everyone.filter(pk__in=CommunityMembership.objects.filter(
            community_id=community_id, is_active=True
        ).values("user_id"))
        ranks["community_rank"] = members.filter(points__gt=mine).count() + 1
        ranks["total_community"] = members.count()

    weekly = _weekly_rows(clock())
    my_weekly = weekly.filter(user_id=user.pk).values_list("points", flat=True).first() or 0
    ranks["weekly_rank"] = weekly.filter(points__gt=my_weekly).count() + 1
    ranks["total_weekly"] = weekly.count()
    ranks["weekly_points"] = my_weekly
    return ranks


def _percent_change(current, previous):
    if previous <= 0:
        return 0
    return round_half_up((current - previous) / previous * 100)


def get_community_stats(community, clock=now):
    current = clock()
    month_start, month_end = month_bounds(current)
    last_start, last_end = month_bounds(month_start - timedelta(microseconds=1))
    week_start, week_end = week_bounds(current)

    completions = MissionCompletion.objects.filter(user_id__in=_member_ids(community))
    this_month = completions.filter(completed_at__gte=month_start, completed_at__lte=month_end)
    last_month = completions.filter(completed_at__gte=last_start, completed_at__lte=last_end)

    this_month_totals = this_month.aggregate(co2=Sum("co2_saved_awarded"), missions=Count("id"))
    this_month_co2 = this_month_totals["co2"] or 0
    last_month_co2 = last_month.aggregate(co2=Sum("co2_saved_awarded"))["co2"] or 0
    member_count = CommunityMembership.objects.filter(community=community, is_active=True).count()

    # Days without completions are left out
    weekly_trend = [
        {
            "date": row["date_key"],
            "day_label": DAY_LABELS[parse_date_key(row["date_key"]).weekday()],
            "co2_saved_kg": round_half_up(row["co2"]),
            "mission_count": row["missions"],
        }
        for row in (
            completions
            .filter(completed_at__gte=week_start, completed_at__lte=week_end)
            .values("date_key")
            .annotate(co2=Sum("co2_saved_awarded"), missions=Count("id"))
            .order_by("date_key")
        )
    ]

    top_rows = list(
        this_month
        .values("user_id")
        .annotate(co2=Sum("co2_saved_awarded"), missions=Count("id"))
        .order_by("-co2", "user_id")[:TOP_CONTRIBUTORS]
    )
    users = User.objects.in_bulk([row["user_id"] for row in top_rows])
    top_contributors = [
        {
            "rank": i + 1,
            "user_id": row["user_id"],
            "name": users[row["user_id"]].public_name,
            "avatar": users[row["user_id"]].profile_picture or "",
            "co2_saved_kg": round_half_up(row["co2"]),
            "mission_count": row["missions"],
        }
        for i, row in enumerate(top_rows)
        if row["user_id"] in users
    ]

    return {
        "community": {
            "id": community.id,
            "name": community.name,
            "type": community.type,
            "member_count": member_count,
        },
        "stats": {
            "total_co2_saved_all_time": round(community.total_co2_saved_kg, 2),
            "this_month_co2": round_half_up(this_month_co2),
            "last_month_co2": round_half_up(last_month_co2),
            "month_over_month_change": _percent_change(this_month_co2, last_month_co2),
            "this_month_missions": this_month_totals["missions"],
            "avg_co2_per_member": round_half_up(this_month_co2 / (member_count or 1)),
        },
        "weekly_trend": weekly_trend,
        "top_contributors": top_contributors,
    }
