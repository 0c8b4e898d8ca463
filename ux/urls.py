from django.urls import path
from ux.views.dashboard import UXDashboardSummaryView

urlpatterns = [
    path(
        "me/dashboard/summary/",
        UXDashboardSummaryView.as_view(),
        name="ux-dashboard-summary",
    ),
]
