from django.contrib import admin
from .models import FarmerProfile


@admin.register(FarmerProfile)
class FarmerProfileAdmin(admin.ModelAdmin):
    list_display = ['farm_name', 'farmer_email', 'location', 'verification_status', 'verified_at', 'created_at']
    list_filter = ['verification_status']
    search_fields = ['farm_name', 'location', 'user__email']
    readonly_fields = ['verification_status', 'verified_at', 'verified_by', 'created_at', 'updated_at']

    def farmer_email(self, obj):
        return obj.user.email
    farmer_email.short_description = "Farmer"
