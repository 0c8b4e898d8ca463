from django.urls import path

from .views import (
    MyProgressView,
    ActiveMilestonesView,
    MilestoneHistoryView,
    MilestoneSummaryView,
    CommunityChallengeView,
    CommunityChallengeHistoryView,
    GlobalLeaderboardView,
    WeeklyLeaderboardView,
    MyRankView,
    CommunityLeaderboardView,
    CommunityStatsView,
)


urlpatterns = [
    path("progress/me/", MyProgressView.as_view(), name="my-progress"),

    path("milestones/active/", ActiveMilestonesView.as_view(), name="milestones-active"),
    path("milestones/history/", MilestoneHistoryView.as_view(), name="milestones-history"),
    path("milestones/summary/", MilestoneSummaryView.as_view(), name="milestones-summary"),

    path(
        "communities/<int:community_id>/challenge/",
        CommunityChallengeView.as_view(),
        name="community-challenge",
    ),
    path(
        "communities/<int:community_id>/challenges/",
        CommunityChallengeHistoryView.as_view(),
        name="community-challenge-history",
    ),

    path("leaderboard/", GlobalLeaderboardView.as_view(), name="leaderboard-global"),
    path("leaderboard/weekly/", WeeklyLeaderboardView.as_view(), name="leaderboard-weekly"),
    path("leaderboard/me/", MyRankView.as_view(), name="leaderboard-me"),
    path(
        "communities/<int:community_id>/leaderboard/",
        CommunityLeaderboardView.as_view(),
        name="community-leaderboard",
    ),
    path(
        "communities/<int:community_id>/stats/",
        CommunityStatsView.as_view(),
        name="community-stats",
    ),
]
