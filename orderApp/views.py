import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.shortcuts import get_object_or_404
from rest_framework import status, permissions
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from backend.exceptions import (
    IllegalTransition, DuplicateRequest, PersistenceError, validation_messages
)
from farmerApp.models import FarmerProfile
from userApp.models import CustomUser
from .models import Order
from .serializers import (
    OrderSerializer, OrderCreateSerializer, OrderActionSerializer, OrderAcceptSerializer,
    FinalPaymentSerializer, PaymentSerializer
)

logger = logging.getLogger(__name__)


def order_queryset():
    return Order.objects.select_related(
        'consumer', 'farmer', 'farmer__user', 'land_listing'
    ).prefetch_related('payments')


def workflow_error_response(e, action):
    """Map an order workflow exception to the matching error response."""
    if isinstance(e, PermissionDenied):
        return Response({
            'success': False,
            'message': str(e)
        }, status=status.HTTP_403_FORBIDDEN)
    if isinstance(e, ValidationError):
        return Response({
            'success': False,
            'message': f'Could not {action}',
            'errors': validation_messages(e)
        }, status=status.HTTP_400_BAD_REQUEST)
    if isinstance(e, IllegalTransition):
        return Response({
            'success': False,
            'message': e.message,
            'current_status': e.current_status
        }, status=status.HTTP_409_CONFLICT)
    if isinstance(e, DuplicateRequest):
        return Response({
            'success': False,
            'message': e.message,
            'order_id': str(e.existing_id)
        }, status=status.HTTP_409_CONFLICT)
    logger.error(f"Persistence error while trying to {action}: {e}")
    return Response({
        'success': False,
        'message': f'Could not {action} right now, please retry'
    }, status=status.HTTP_503_SERVICE_UNAVAILABLE)


WORKFLOW_ERRORS = (PermissionDenied, ValidationError, IllegalTransition, DuplicateRequest, PersistenceError)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def create_order(request):
    """Place an order on a land listing"""
    serializer = OrderCreateSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Order creation validation error: {serializer.errors}")
        return Response({
            'success': False,
            'message': 'Invalid order data',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    idempotency_key = data.get('idempotency_key') or request.headers.get('Idempotency-Key')

    try:
        order = Order.objects.place_order(
            consumer=request.user,
            listing=data['land_listing'],
            vegetable_name=data['vegetable_name'],
            land_size=data['land_size'],
            delivery_address=data['delivery_address'],
            delivery_notes=data['delivery_notes'],
            planting_instructions=data['planting_instructions'],
            idempotency_key=idempotency_key,
        )
    except WORKFLOW_ERRORS as e:
        return workflow_error_response(e, 'place the order')

    order = order_queryset().get(pk=order.pk)
    return Response({
        'success': True,
        'message': 'Order placed successfully. The farmer will review it shortly.',
        'data': OrderSerializer(order).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def get_user_orders(request):
    """Orders placed by the logged-in consumer"""
    orders = order_queryset().for_consumer(request.user)
    serializer = OrderSerializer(orders, many=True)
    return Response({
        'success': True,
        'count': len(serializer.data),
        'data': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def get_farmer_orders(request):
    """Orders received by the logged-in farmer, optionally filtered by status"""
    if not request.user.is_farmer:
        return Response({
            'success': False,
            'message': 'Only farmers can view received orders'
        }, status=status.HTTP_403_FORBIDDEN)

    orders = order_queryset().for_farmer(request.user)
    status_filter = request.query_params.get('status')
    if status_filter and status_filter != 'all':
        orders = orders.filter(status=status_filter)

    serializer = OrderSerializer(orders, many=True)
    return Response({
        'success': True,
        'count': len(serializer.data),
        'data': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def get_all_orders(request):
    """Every order on the platform (admin review)"""
    if not request.user.is_admin_role:
        return Response({
            'success': False,
            'message': 'Only admins can view all orders'
        }, status=status.HTTP_403_FORBIDDEN)

    orders = order_queryset().all()
    status_filter = request.query_params.get('status')
    if status_filter and status_filter != 'all':
        orders = orders.filter(status=status_filter)

    serializer = OrderSerializer(orders, many=True)
    return Response({
        'success': True,
        'count': len(serializer.data),
        'data': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def platform_stats(request):
    """Headline counts for the admin dashboard"""
    if not request.user.is_admin_role:
        return Response({
            'success': False,
            'message': 'Only admins can view platform statistics'
        }, status=status.HTTP_403_FORBIDDEN)

    return Response({
        'success': True,
        'data': {
            'total_users': CustomUser.objects.filter(role='user').count(),
            'total_farmers': CustomUser.objects.filter(role='farmer').count(),
            'pending_farmers': FarmerProfile.objects.pending().count(),
            'total_orders': Order.objects.count(),
        }
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def get_order_by_id(request, order_id):
    order = get_object_or_404(order_queryset().visible_to(request.user), id=order_id)
    return Response({
        'success': True,
        'data': OrderSerializer(order).data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([permissions.IsAuthenticated])
def get_order_payments(request, order_id):
    order = get_object_or_404(order_queryset().visible_to(request.user), id=order_id)
    return Response({
        'success': True,
        'data': PaymentSerializer(order.payments.all(), many=True).data
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def accept_order(request, order_id):
    order = get_object_or_404(order_queryset(), id=order_id)

    serializer = OrderAcceptSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid data provided',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        order.accept(request.user, serializer.validated_data.get('expected_harvest_date'))
    except WORKFLOW_ERRORS as e:
        return workflow_error_response(e, 'accept the order')

    return Response({
        'success': True,
        'message': 'Order accepted successfully',
        'data': OrderSerializer(order).data
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def reject_order(request, order_id):
    order = get_object_or_404(order_queryset(), id=order_id)

    serializer = OrderActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid data provided',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        order.reject(request.user, serializer.validated_data['reason'])
    except WORKFLOW_ERRORS as e:
        return workflow_error_response(e, 'reject the order')

    return Response({
        'success': True,
        'message': 'Order rejected successfully',
        'data': OrderSerializer(order).data
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def advance_order(request, order_id):
    """Move the order to the next growing stage"""
    order = get_object_or_404(order_queryset(), id=order_id)

    try:
        order.advance(request.user)
    except WORKFLOW_ERRORS as e:
        return workflow_error_response(e, 'update the order status')

    return Response({
        'success': True,
        'message': f"Order status changed to {order.get_status_display().lower()}.",
        'data': OrderSerializer(order).data
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def cancel_order(request, order_id):
    order = get_object_or_404(order_queryset(), id=order_id)

    serializer = OrderActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid data provided',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        order.cancel(request.user, serializer.validated_data['reason'])
    except WORKFLOW_ERRORS as e:
        return workflow_error_response(e, 'cancel the order')

    return Response({
        'success': True,
        'message': 'Order cancelled successfully',
        'data': OrderSerializer(order).data
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([permissions.IsAuthenticated])
def record_final_payment(request, order_id):
    order = get_object_or_404(order_queryset(), id=order_id)

    serializer = FinalPaymentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid data provided',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        payment = order.record_final_payment(request.user, serializer.validated_data['payment_method'])
    except WORKFLOW_ERRORS as e:
        return workflow_error_response(e, 'record the final payment')

    return Response({
        'success': True,
        'message': 'Final payment recorded',
        'data': PaymentSerializer(payment).data
    }, status=status.HTTP_201_CREATED)
