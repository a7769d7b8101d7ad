from rest_framework import serializers

from .models import GrowthUpdate


class GrowthUpdateSerializer(serializers.ModelSerializer):
    status_label = serializers.CharField(source='get_status_label', read_only=True)
    recorded_by_name = serializers.CharField(source='recorded_by.display_name', read_only=True)

    class Meta:
        model = GrowthUpdate
        fields = [
            'id', 'order', 'status', 'status_label', 'notes', 'images',
            'recorded_by', 'recorded_by_name', 'created_at'
        ]
        read_only_fields = ['id', 'order', 'status', 'notes', 'images', 'recorded_by', 'created_at']


class GrowthUpdateCreateSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=50)
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    image_urls = serializers.ListField(
        child=serializers.URLField(max_length=500),
        required=False,
        default=list
    )
