from decimal import Decimal

from rest_framework import serializers

from landApp.models import LandListing
from .models import Order, Payment


class PaymentSerializer(serializers.ModelSerializer):
    payment_type_display = serializers.CharField(source='get_payment_type_display', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'order', 'payer', 'amount', 'payment_type', 'payment_type_display', 'status',
            'payment_method', 'transaction_id', 'paid_at', 'created_at'
        ]
        read_only_fields = [
            'id', 'order', 'payer', 'amount', 'payment_type', 'status', 'payment_method',
            'transaction_id', 'paid_at', 'created_at'
        ]


class OrderSerializer(serializers.ModelSerializer):
    status_display = serializers.CharField(source='get_status_display', read_only=True)
    next_status = serializers.CharField(source='upcoming_status', read_only=True)
    is_terminal = serializers.BooleanField(read_only=True)
    consumer_name = serializers.CharField(source='consumer.display_name', read_only=True)
    consumer_email = serializers.EmailField(source='consumer.email', read_only=True)
    farm_name = serializers.CharField(source='farmer.farm_name', read_only=True)
    land_title = serializers.CharField(source='land_listing.title', read_only=True)
    payments = PaymentSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            'id', 'consumer', 'consumer_name', 'consumer_email', 'farmer', 'farm_name',
            'land_listing', 'land_title', 'vegetable_name', 'land_size', 'total_price',
            'advance_amount', 'final_amount', 'status', 'status_display', 'next_status',
            'is_terminal', 'status_reason', 'delivery_address', 'delivery_notes',
            'planting_instructions', 'expected_harvest_date', 'actual_harvest_date',
            'payments', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'consumer', 'farmer', 'land_listing', 'vegetable_name', 'land_size', 'total_price',
            'advance_amount', 'final_amount', 'status', 'status_reason', 'delivery_address',
            'delivery_notes', 'planting_instructions', 'expected_harvest_date',
            'actual_harvest_date', 'created_at', 'updated_at'
        ]


class OrderCreateSerializer(serializers.Serializer):
    land_listing = serializers.PrimaryKeyRelatedField(queryset=LandListing.objects.select_related('farmer'))
    vegetable_name = serializers.CharField(max_length=100)
    land_size = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    delivery_address = serializers.CharField()
    delivery_notes = serializers.CharField(required=False, allow_blank=True, default='')
    planting_instructions = serializers.CharField(required=False, allow_blank=True, default='')
    idempotency_key = serializers.CharField(max_length=100, required=False, allow_blank=True)


class OrderActionSerializer(serializers.Serializer):
    """Optional reason for a reject/cancel"""
    reason = serializers.CharField(required=False, allow_blank=True, max_length=500, default='')


class OrderAcceptSerializer(serializers.Serializer):
    expected_harvest_date = serializers.DateField(required=False, allow_null=True)


class FinalPaymentSerializer(serializers.Serializer):
    payment_method = serializers.CharField(required=False, allow_blank=True, max_length=50, default='')
