from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from .models import ComplianceRecord, PollutionReport, Vehicle
from .serializers import (
    ComplianceLogSerializer,
    ComplianceRecordSerializer,
    PollutionReportSerializer,
    VehicleSerializer,
)
from .services import log_vehicle_compliance, submit_pollution_report


class VehicleListCreateView(APIView):
    """
    GET  /api/compliance/vehicles/  → my active vehicles with certificate status
    POST /api/compliance/vehicles/  → register a vehicle
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        vehicles = Vehicle.objects.filter(user=request.user, is_active=True)
        return Response(VehicleSerializer(vehicles, many=True).data)

    def post(self, request):
        serializer = VehicleSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        vehicle = serializer.save(user=request.user)
        return Response(VehicleSerializer(vehicle).data, status=status.HTTP_201_CREATED)


class VehicleComplianceLogView(APIView):
    """
    GET  /api/compliance/vehicles/<id>/log/  → certificate history
    POST /api/compliance/vehicles/<id>/log/  → log a certificate and collect the reward
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, vehicle_id):
        records = ComplianceRecord.objects.filter(
            user=request.user, vehicle_id=vehicle_id, vehicle__is_active=True
        )
        return Response(ComplianceRecordSerializer(records, many=True).data)

    def post(self, request, vehicle_id):
        serializer = ComplianceLogSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        details = dict(serializer.validated_data)
        test_date = details.pop("test_date")

        try:
            result = log_vehicle_compliance(request.user, vehicle_id, test_date, **details)
        except Vehicle.DoesNotExist:
            return Response({"error": "Vehicle not found"}, status=status.HTTP_404_NOT_FOUND)

        return Response(result, status=status.HTTP_201_CREATED)


class PollutionReportView(APIView):
    """
    GET  /api/compliance/reports/  → my reports
    POST /api/compliance/reports/  → submit a report (daily cap applies)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        reports = PollutionReport.objects.filter(reporter=request.user)[:50]
        return Response(PollutionReportSerializer(reports, many=True).data)

    def post(self, request):
        serializer = PollutionReportSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        result = submit_pollution_report(request.user, serializer.validated_data)
        return Response(result, status=status.HTTP_201_CREATED)
