from django.contrib import admin
from django.utils.html import format_html
from .models import Order, Payment


class PaymentInline(admin.TabularInline):
    model = Payment
    extra = 0
    readonly_fields = ['amount', 'payment_type', 'status', 'payer', 'created_at']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = [
        'id', 'vegetable_name', 'consumer', 'farmer', 'land_size',
        'total_price', 'status_display', 'created_at'
    ]
    list_filter = ['status', 'created_at']
    search_fields = ['vegetable_name', 'consumer__email', 'farmer__farm_name']
    readonly_fields = [
        'status', 'total_price', 'advance_amount', 'final_amount',
        'idempotency_key', 'created_at', 'updated_at'
    ]
    inlines = [PaymentInline]

    def status_display(self, obj):
        status_colors = {
            'pending': 'orange',
            'rejected': 'red',
            'cancelled': 'gray',
            'delivered': 'green',
        }
        color = status_colors.get(obj.status, 'blue')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color, obj.get_status_display()
        )
    status_display.short_description = "Status"

    def get_queryset(self, request):
        return super().get_queryset(request).select_related('consumer', 'farmer')

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ['order', 'payment_type', 'amount', 'status', 'payer', 'created_at']
    list_filter = ['payment_type', 'status']
    search_fields = ['order__id', 'payer__email', 'transaction_id']
    readonly_fields = ['order', 'payer', 'amount', 'payment_type', 'created_at']
