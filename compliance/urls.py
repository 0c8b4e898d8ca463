from django.urls import path

from .views import VehicleListCreateView, VehicleComplianceLogView, PollutionReportView


urlpatterns = [
    path("vehicles/", VehicleListCreateView.as_view(), name="vehicles"),
    path("vehicles/<int:vehicle_id>/log/", VehicleComplianceLogView.as_view(), name="vehicle-compliance-log"),
    path("reports/", PollutionReportView.as_view(), name="pollution-reports"),
]
