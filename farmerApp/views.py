import logging

from django.core.exceptions import ValidationError, PermissionDenied
from django.http import Http404
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.exceptions import IllegalTransition, PersistenceError, validation_messages
from .models import FarmerProfile
from .serializers import FarmerProfileSerializer, FarmerProfileUpdateSerializer, FarmerReviewSerializer

logger = logging.getLogger(__name__)


def admin_only(request, action):
    if not request.user.is_admin_role:
        return Response({
            'success': False,
            'message': f'Only admins can {action}'
        }, status=status.HTTP_403_FORBIDDEN)
    return None


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_visible_farmers(request):
    """Approved farmers, as shown to consumers browsing the marketplace"""
    farmers = FarmerProfile.objects.visible().select_related('user')

    specialization = request.query_params.get('specialization')
    if specialization:
        farmers = [f for f in farmers if specialization.lower() in (s.lower() for s in f.specializations)]

    serializer = FarmerProfileSerializer(farmers, many=True)
    return Response({
        'success': True,
        'count': len(serializer.data),
        'data': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_farmer_by_id(request, farmer_id):
    farmer = get_object_or_404(FarmerProfile.objects.select_related('user'), id=farmer_id)

    # Unapproved profiles only exist for their owner and admins
    if not farmer.is_visible and farmer.user_id != request.user.id and not request.user.is_admin_role:
        raise Http404

    return Response({
        'success': True,
        'data': FarmerProfileSerializer(farmer).data
    }, status=status.HTTP_200_OK)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def my_profile(request):
    """Farmer self-service: read or edit descriptive fields"""
    if not request.user.is_farmer:
        return Response({
            'success': False,
            'message': 'Only farmers have a farm profile'
        }, status=status.HTTP_403_FORBIDDEN)

    farmer = get_object_or_404(FarmerProfile, user=request.user)

    if request.method == 'PATCH':
        serializer = FarmerProfileUpdateSerializer(farmer, data=request.data, partial=True)
        if not serializer.is_valid():
            logger.warning(f"Farmer profile update validation error: {serializer.errors}")
            return Response({
                'success': False,
                'message': 'Invalid data provided',
                'errors': serializer.errors
            }, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        logger.info(f"Farmer profile {farmer.id} updated")

    return Response({
        'success': True,
        'data': FarmerProfileSerializer(farmer).data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_pending_farmers(request):
    denied = admin_only(request, 'view pending farmers')
    if denied:
        return denied

    farmers = FarmerProfile.objects.pending().select_related('user')
    serializer = FarmerProfileSerializer(farmers, many=True)
    return Response({
        'success': True,
        'count': len(serializer.data),
        'data': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_all_farmers(request):
    denied = admin_only(request, 'view all farmers')
    if denied:
        return denied

    farmers = FarmerProfile.objects.select_related('user').all()
    verification_status = request.query_params.get('status')
    if verification_status:
        farmers = farmers.filter(verification_status=verification_status)

    serializer = FarmerProfileSerializer(farmers, many=True)
    return Response({
        'success': True,
        'count': len(serializer.data),
        'data': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def review_farmer(request, farmer_id):
    """Approve or reject a pending farmer (admin only)"""
    denied = admin_only(request, 'review farmers')
    if denied:
        return denied

    farmer = get_object_or_404(FarmerProfile, id=farmer_id)

    serializer = FarmerReviewSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid data provided',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        farmer.review(
            request.user,
            serializer.validated_data['decision'],
            serializer.validated_data['notes'],
        )
    except PermissionDenied as e:
        return Response({'success': False, 'message': str(e)}, status=status.HTTP_403_FORBIDDEN)
    except ValidationError as e:
        return Response({
            'success': False,
            'message': 'Invalid review',
            'errors': validation_messages(e)
        }, status=status.HTTP_400_BAD_REQUEST)
    except IllegalTransition as e:
        return Response({
            'success': False,
            'message': e.message,
            'current_status': e.current_status
        }, status=status.HTTP_409_CONFLICT)
    except PersistenceError as e:
        logger.error(f"Error reviewing farmer {farmer_id}: {e}")
        return Response({
            'success': False,
            'message': 'Could not save the review, please retry'
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response({
        'success': True,
        'message': f'Farmer has been {farmer.verification_status}.',
        'data': FarmerProfileSerializer(farmer).data
    }, status=status.HTTP_200_OK)
