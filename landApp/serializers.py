from django.core.exceptions import ValidationError as ModelValidationError
from django.db import transaction
from rest_framework import serializers
from .models import LandListing


class LandListingSerializer(serializers.ModelSerializer):
    farm_name = serializers.CharField(source='farmer.farm_name', read_only=True)
    supported_vegetables = serializers.ListField(
        child=serializers.CharField(max_length=100), allow_empty=False
    )

    class Meta:
        model = LandListing
        fields = [
            'id', 'farmer', 'farm_name', 'title', 'description', 'location', 'total_size',
            'available_size', 'price_per_sqft', 'supported_vegetables', 'soil_type',
            'water_source', 'is_active', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'farmer', 'created_at', 'updated_at']
        extra_kwargs = {'available_size': {'required': False}}

    def validate(self, data):
        instance = self.instance

        if instance is not None:
            # Once listed, available land only moves with orders and plot resizes
            available_size = data.pop('available_size', None)
            if available_size is not None and available_size != instance.available_size:
                raise serializers.ValidationError({
                    'available_size': 'Available size follows orders and cannot be edited directly'
                })

            total_size = data.get('total_size')
            if total_size is not None and total_size != instance.total_size:
                reserved = instance.reserved_size()
                if total_size < reserved:
                    raise serializers.ValidationError({
                        'total_size': f'Active orders already hold {reserved} sqft of this listing'
                    })
            return data

        total_size = data.get('total_size')
        available_size = data.get('available_size')

        # New listings start fully available unless told otherwise
        if available_size is None:
            data['available_size'] = available_size = total_size

        if total_size is not None and available_size is not None and available_size > total_size:
            raise serializers.ValidationError({
                'available_size': 'Available size cannot exceed total size'
            })
        return data

    def update(self, instance, validated_data):
        total_size = validated_data.pop('total_size', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)

        with transaction.atomic():
            if total_size is not None and total_size != instance.total_size:
                if not instance.resize(total_size):
                    raise ModelValidationError({
                        'total_size': 'Active orders hold more land than the new total size'
                    })
            instance.save(update_fields=list(validated_data) + ['updated_at'])
        return instance


class LandListingToggleSerializer(serializers.Serializer):
    is_active = serializers.BooleanField(required=False)
