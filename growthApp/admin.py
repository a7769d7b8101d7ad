from django.contrib import admin
from .models import GrowthUpdate


@admin.register(GrowthUpdate)
class GrowthUpdateAdmin(admin.ModelAdmin):
    list_display = ['order', 'status', 'image_count', 'recorded_by', 'created_at']
    list_filter = ['status', 'created_at']
    search_fields = ['order__vegetable_name', 'recorded_by__email', 'notes']
    readonly_fields = ['order', 'position', 'status', 'notes', 'images', 'recorded_by', 'created_at']

    def image_count(self, obj):
        return len(obj.images or [])
    image_count.short_description = "Images"

    # The log is append-only
    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
