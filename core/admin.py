from django.contrib import admin
from .models import Community, CommunityMembership, CommunityActivity

@admin.register(Community)
class CommunityAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'type', 'total_co2_saved_kg', 'total_points', 'is_active', 'created_at')
    search_fields = ('name', 'slug', 'description')
    list_filter = ('type', 'is_active', 'created_at')
    prepopulated_fields = {'slug': ('name',)}

@admin.register(CommunityMembership)
class CommunityMembershipAdmin(admin.ModelAdmin):
    list_display = ('user', 'community', 'role', 'is_active', 'is_default', 'joined_at')
    list_filter = ('role', 'is_active', 'is_default', 'community')
    search_fields = ('user__username', 'community__name')

@admin.register(CommunityActivity)
class CommunityActivityAdmin(admin.ModelAdmin):
    list_display = ('community', 'verb', 'actor', 'timestamp')
    list_filter = ('verb', 'community')
    search_fields = ('actor__username', 'community__name')
