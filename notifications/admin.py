from django.contrib import admin
from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "type", "title", "is_read", "pushed", "created_at")
    list_filter = ("type", "is_read", "pushed")
    search_fields = ("title", "user__username")
