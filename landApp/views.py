import logging

from django.core.exceptions import ValidationError
from django.db.models import ProtectedError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from backend.exceptions import validation_messages
from farmerApp.models import FarmerProfile
from .models import LandListing
from .serializers import LandListingSerializer, LandListingToggleSerializer

logger = logging.getLogger(__name__)


def owned_listing_or_error(request, listing_id, action):
    """Return (listing, None) for the owning farmer, else (None, error response)."""
    listing = get_object_or_404(LandListing.objects.select_related('farmer'), id=listing_id)
    if listing.farmer.user_id != request.user.id:
        return None, Response({
            'success': False,
            'message': f'You do not have permission to {action} this listing'
        }, status=status.HTTP_403_FORBIDDEN)
    return listing, None


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def create_listing(request):
    if not request.user.is_farmer:
        return Response({
            'success': False,
            'message': 'Only farmers can create land listings'
        }, status=status.HTTP_403_FORBIDDEN)

    farmer = get_object_or_404(FarmerProfile, user=request.user)

    serializer = LandListingSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Land listing validation error: {serializer.errors}")
        return Response({
            'success': False,
            'message': 'Invalid listing data',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        listing = serializer.save(farmer=farmer)
    except ValidationError as e:
        return Response({
            'success': False,
            'message': 'Invalid listing data',
            'errors': validation_messages(e)
        }, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Land listing {listing.id} created by farmer {farmer.id}")
    return Response({
        'success': True,
        'message': 'Land listing created successfully',
        'data': LandListingSerializer(listing).data
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_visible_listings(request):
    """Listings consumers can order from"""
    listings = LandListing.objects.visible().select_related('farmer')

    farmer_id = request.query_params.get('farmer')
    if farmer_id:
        listings = listings.filter(farmer_id=farmer_id)

    vegetable = request.query_params.get('vegetable')
    if vegetable:
        listings = [listing for listing in listings if listing.supports(vegetable)]

    serializer = LandListingSerializer(listings, many=True)
    return Response({
        'success': True,
        'count': len(serializer.data),
        'data': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def my_listings(request):
    listings = LandListing.objects.filter(farmer__user=request.user)
    serializer = LandListingSerializer(listings, many=True)
    return Response({
        'success': True,
        'count': len(serializer.data),
        'data': serializer.data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def get_listing_by_id(request, listing_id):
    listing = get_object_or_404(LandListing.objects.select_related('farmer'), id=listing_id)

    is_owner = listing.farmer.user_id == request.user.id
    if not (is_owner or request.user.is_admin_role) and not LandListing.objects.visible().filter(pk=listing.pk).exists():
        return Response({
            'success': False,
            'message': 'Listing not found'
        }, status=status.HTTP_404_NOT_FOUND)

    return Response({
        'success': True,
        'data': LandListingSerializer(listing).data
    }, status=status.HTTP_200_OK)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def update_listing(request, listing_id):
    listing, error = owned_listing_or_error(request, listing_id, 'update')
    if error:
        return error

    partial = request.method == 'PATCH'
    serializer = LandListingSerializer(listing, data=request.data, partial=partial)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Invalid data provided',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        listing = serializer.save()
    except ValidationError as e:
        return Response({
            'success': False,
            'message': 'Invalid data provided',
            'errors': validation_messages(e)
        }, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Land listing {listing.id} updated")
    return Response({
        'success': True,
        'message': 'Land listing updated successfully',
        'data': LandListingSerializer(listing).data
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def toggle_listing(request, listing_id):
    """Flip is_active, or set it explicitly when provided"""
    listing, error = owned_listing_or_error(request, listing_id, 'update')
    if error:
        return error

    serializer = LandListingToggleSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    listing.is_active = serializer.validated_data.get('is_active', not listing.is_active)
    listing.save(update_fields=['is_active', 'updated_at'])

    return Response({
        'success': True,
        'message': 'Listing activated' if listing.is_active else 'Listing deactivated',
        'data': LandListingSerializer(listing).data
    }, status=status.HTTP_200_OK)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def delete_listing(request, listing_id):
    listing, error = owned_listing_or_error(request, listing_id, 'delete')
    if error:
        return error

    try:
        listing.delete()
    except ProtectedError:
        return Response({
            'success': False,
            'message': 'This listing has orders and cannot be deleted. Deactivate it instead.'
        }, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Land listing {listing_id} deleted")
    return Response({
        'success': True,
        'message': 'Land listing deleted successfully'
    }, status=status.HTTP_200_OK)
