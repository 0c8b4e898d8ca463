from django.contrib import admin
from django.contrib.auth.admin import UserAdmin
from .models import User

@admin.register(User)
class CustomUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'display_name', 'is_staff', 'is_onboarded')
    list_filter = ('is_staff', 'is_superuser', 'is_active', 'is_onboarded')
    search_fields = ('username', 'email', 'display_name')
    fieldsets = UserAdmin.fieldsets + (
        ('EcoAct', {'fields': ('display_name', 'profile_picture', 'push_token', 'is_onboarded')}),
    )
    add_fieldsets = UserAdmin.add_fieldsets + (
        ('EcoAct', {'fields': ('display_name',)}),
    )
