from django.contrib import admin
from django.urls import path, include
from core.views import HealthCheckView

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/users/', include('users.urls')),
    path('api/core/', include('core.urls')),
    path('api/missions/', include('missions.urls')),
    path('api/gamification/', include('gamification.urls')),
    path('api/compliance/', include('compliance.urls')),
    path('api/ux/', include('ux.urls')),
    path("api/health/", HealthCheckView.as_view(), name="health-check"),
]
