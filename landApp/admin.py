from django.contrib import admin
from .models import LandListing


@admin.register(LandListing)
class LandListingAdmin(admin.ModelAdmin):
    list_display = ['title', 'farmer', 'location', 'total_size', 'available_size', 'price_per_sqft', 'is_active']
    list_filter = ['is_active', 'farmer__verification_status']
    search_fields = ['title', 'location', 'farmer__farm_name']
    readonly_fields = ['created_at', 'updated_at']

    def get_readonly_fields(self, request, obj=None):
        # Sizes of a saved listing move with orders, not through the form
        if obj is not None:
            return self.readonly_fields + list(LandListing.SIZE_FIELDS)
        return self.readonly_fields
