from django.urls import path
from .views import CommunityActivityFeedView
from notifications.views import MyNotificationsView


urlpatterns = [
    path(
        "communities/<int:community_id>/activity/",
        CommunityActivityFeedView.as_view(),
        name="community-activity-feed",
    ),
    path("notifications/me/", MyNotificationsView.as_view(), name="my-notifications"),
]
