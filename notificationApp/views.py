import logging

from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.exceptions import NotificationDispatchError
from .emails import send_notification

logger = logging.getLogger(__name__)


class NotificationRequestSerializer(serializers.Serializer):
    type = serializers.CharField(max_length=50)
    orderId = serializers.CharField(max_length=64)
    recipientEmail = serializers.EmailField()
    recipientName = serializers.CharField(max_length=150, required=False, allow_blank=True, default='')
    vegetableName = serializers.CharField(max_length=100)
    farmerName = serializers.CharField(max_length=200, required=False, allow_blank=True)
    customerName = serializers.CharField(max_length=150, required=False, allow_blank=True)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def send_notification_view(request):
    """Stateless email relay: one templated email per call"""
    serializer = NotificationRequestSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid notification',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    notification = dict(serializer.validated_data)
    logger.info(f"Processing notification {notification['type']} for order {notification['orderId']}")

    try:
        result = send_notification(notification)
    except NotificationDispatchError as e:
        logger.error(f"Error in send-notification relay: {e}")
        return Response({
            'success': False,
            'error': str(e)
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return Response({
        'success': True,
        'message': result['message'],
        'sent': result['sent'],
        'notification': notification
    }, status=status.HTTP_200_OK)
