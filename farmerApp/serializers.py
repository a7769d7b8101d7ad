from rest_framework import serializers
from .models import FarmerProfile


class FarmerProfileSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)
    full_name = serializers.CharField(source='user.full_name', read_only=True)
    verification_status_display = serializers.CharField(
        source='get_verification_status_display', read_only=True
    )

    class Meta:
        model = FarmerProfile
        fields = [
            'id', 'user', 'email', 'full_name', 'farm_name', 'location', 'farm_description',
            'specializations', 'experience_years', 'verification_status',
            'verification_status_display', 'verification_notes', 'verified_at', 'verified_by',
            'created_at', 'updated_at'
        ]
        read_only_fields = [
            'id', 'user', 'verification_status', 'verification_notes', 'verified_at',
            'verified_by', 'created_at', 'updated_at'
        ]


class FarmerProfileUpdateSerializer(serializers.ModelSerializer):
    """Descriptive fields a farmer may edit on their own profile"""

    specializations = serializers.ListField(
        child=serializers.CharField(max_length=100), required=False
    )

    class Meta:
        model = FarmerProfile
        fields = ['farm_name', 'location', 'farm_description', 'specializations', 'experience_years']


class FarmerReviewSerializer(serializers.Serializer):
    decision = serializers.ChoiceField(choices=list(FarmerProfile.REVIEW_DECISIONS))
    notes = serializers.CharField(required=False, allow_blank=True, max_length=2000, default='')
