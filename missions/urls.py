from django.urls import path

from .views import (
    MissionListView,
    DailyMissionsView,
    DailySignalView,
    CompleteMissionView,
    CompletedMissionsView,
)


urlpatterns = [
    path("", MissionListView.as_view(), name="missions-list"),
    path("daily/", DailyMissionsView.as_view(), name="missions-daily"),
    path("daily/signal/", DailySignalView.as_view(), name="missions-daily-signal"),
    path("completed/", CompletedMissionsView.as_view(), name="missions-completed"),
    path("<int:mission_id>/complete/", CompleteMissionView.as_view(), name="mission-complete"),
]
