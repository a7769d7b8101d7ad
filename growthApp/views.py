import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.shortcuts import get_object_or_404
from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response

from backend.exceptions import IllegalTransition, PersistenceError, validation_messages
from orderApp.models import Order
from .models import GrowthUpdate, GROWTH_PHASES
from .serializers import GrowthUpdateSerializer, GrowthUpdateCreateSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([permissions.IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def order_growth_updates(request, order_id):
    """GET the growth timeline of an order, POST a new entry (farmer only)"""
    order = get_object_or_404(
        Order.objects.select_related('farmer', 'consumer').visible_to(request.user),
        id=order_id
    )

    if request.method == 'GET':
        updates = GrowthUpdate.objects.for_order(order)
        serializer = GrowthUpdateSerializer(updates, many=True)
        return Response({
            'success': True,
            'count': len(serializer.data),
            'data': serializer.data
        }, status=status.HTTP_200_OK)

    data = request.data
    if hasattr(request.data, 'getlist'):
        # multipart forms repeat the key once per URL
        data = {
            'status': request.data.get('status', ''),
            'notes': request.data.get('notes', ''),
            'image_urls': request.data.getlist('image_urls'),
        }
    serializer = GrowthUpdateCreateSerializer(data=data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid growth update',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        update = GrowthUpdate.objects.append_update(
            farmer_user=request.user,
            order=order,
            status_tag=serializer.validated_data['status'],
            notes=serializer.validated_data['notes'],
            files=request.FILES.getlist('images'),
            image_urls=serializer.validated_data['image_urls'],
        )
    except PermissionDenied as e:
        return Response({
            'success': False,
            'message': str(e)
        }, status=status.HTTP_403_FORBIDDEN)
    except ValidationError as e:
        return Response({
            'success': False,
            'message': 'Invalid growth update',
            'errors': validation_messages(e)
        }, status=status.HTTP_400_BAD_REQUEST)
    except IllegalTransition as e:
        return Response({
            'success': False,
            'message': e.message,
            'current_status': e.current_status
        }, status=status.HTTP_409_CONFLICT)
    except PersistenceError as e:
        logger.error(f"Growth update for order {order_id} failed: {e}")
        return Response({
            'success': False,
            'message': 'Could not save the growth update right now, please retry'
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)

    return Response({
        'success': True,
        'message': 'Growth status has been recorded successfully.',
        'data': GrowthUpdateSerializer(update).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def list_growth_phases(request):
    return Response({
        'success': True,
        'data': [{'value': value, 'label': label} for value, label in GROWTH_PHASES]
    }, status=status.HTTP_200_OK)
