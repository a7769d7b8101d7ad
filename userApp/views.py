import re
import logging

from django.contrib.auth.hashers import check_password
from django.db import transaction, IntegrityError
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from farmerApp.models import FarmerProfile
from .models import CustomUser
from .serializers import CustomUserSerializer, RegisterSerializer, LoginSerializer

logger = logging.getLogger(__name__)


def is_valid_password(password):
    """Validate password complexity."""
    if len(password) < 8:
        return "Password must be at least 8 characters long."
    if not any(char.isdigit() for char in password):
        return "Password must include at least one number."
    if not any(char.isupper() for char in password):
        return "Password must include at least one uppercase letter."
    if not any(char.islower() for char in password):
        return "Password must include at least one lowercase letter."
    if not re.search(r"[!@#$%^&*(),.?\":{}|<>]", password):
        return "Password must include at least one special character (!@#$%^&* etc.)."
    return None


def token_pair(user):
    refresh = RefreshToken.for_user(user)
    return {
        "refresh": str(refresh),
        "access": str(refresh.access_token),
    }


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def register_user(request):
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Registration validation error: {serializer.errors}")
        return Response({
            'success': False,
            'message': 'Invalid registration data',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    password_error = is_valid_password(data['password'])
    if password_error:
        return Response({
            'success': False,
            'message': password_error,
            'errors': {'password': [password_error]}
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        with transaction.atomic():
            user = CustomUser.objects.create_user(
                email=data['email'],
                role=data['role'],
                password=data['password'],
                full_name=data['full_name'],
                phone_number=data['phone_number'],
                address=data['address'],
            )
            if user.is_farmer:
                FarmerProfile.objects.create(
                    user=user,
                    farm_name=data['farm_name'].strip(),
                    location=data['location'].strip(),
                )
    except IntegrityError:
        return Response({
            'success': False,
            'message': 'A user with this email already exists.'
        }, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Registered {user.role} account {user.id}")
    return Response({
        'success': True,
        'message': 'User registered successfully.',
        'data': CustomUserSerializer(user).data,
        'token': token_pair(user),
    }, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def login_user(request):
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response({
            'success': False,
            'message': 'Email and password are required.',
            'errors': serializer.errors
        }, status=status.HTTP_400_BAD_REQUEST)

    email = serializer.validated_data['email']
    password = serializer.validated_data['password']

    user = CustomUser.objects.filter(email__iexact=email).first()
    if not user or not check_password(password, user.password):
        logger.info(f"Failed login attempt for {email}")
        return Response({
            'success': False,
            'message': 'Invalid email or password.'
        }, status=status.HTTP_401_UNAUTHORIZED)

    if not user.is_active:
        return Response({
            'success': False,
            'message': 'This account is inactive.'
        }, status=status.HTTP_401_UNAUTHORIZED)

    return Response({
        'success': True,
        'message': 'Login successful.',
        'data': CustomUserSerializer(user).data,
        'token': token_pair(user),
    }, status=status.HTTP_200_OK)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def logout_user(request):
    """Blacklist the supplied refresh token."""
    refresh = request.data.get('refresh')
    if not refresh:
        return Response({
            'success': False,
            'message': 'Refresh token is required.'
        }, status=status.HTTP_400_BAD_REQUEST)

    try:
        RefreshToken(refresh).blacklist()
    except TokenError as e:
        return Response({
            'success': False,
            'message': str(e)
        }, status=status.HTTP_400_BAD_REQUEST)

    return Response({
        'success': True,
        'message': 'Logged out successfully.'
    }, status=status.HTTP_200_OK)


@api_view(['GET', 'PATCH'])
@permission_classes([IsAuthenticated])
def get_logged_in_user(request):
    user = request.user

    if request.method == 'PATCH':
        serializer = CustomUserSerializer(user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response({
                'success': False,
                'message': 'Invalid data provided',
                'errors': serializer.errors
            }, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        return Response({
            'success': True,
            'message': 'Profile updated successfully',
            'data': serializer.data
        }, status=status.HTTP_200_OK)

    return Response({
        'success': True,
        'data': CustomUserSerializer(user).data
    }, status=status.HTTP_200_OK)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_all_users(request):
    if not request.user.is_admin_role:
        return Response({
            'success': False,
            'message': 'Only admins can list users'
        }, status=status.HTTP_403_FORBIDDEN)

    users = CustomUser.objects.all()
    role = request.query_params.get('role')
    if role:
        users = users.filter(role=role)

    return Response({
        'success': True,
        'count': users.count(),
        'data': CustomUserSerializer(users, many=True).data
    }, status=status.HTTP_200_OK)
