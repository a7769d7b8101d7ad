from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from farmerApp.models import FarmerProfile
from landApp.models import LandListing
from orderApp.models import Order
from userApp.models import CustomUser

PASSWORD = 'Harvest#2024'


@pytest.fixture
def consumer(db):
    return CustomUser.objects.create_user(
        email='alice@example.com', role='user', password=PASSWORD, full_name='Alice Mutoni'
    )


@pytest.fixture
def other_consumer(db):
    return CustomUser.objects.create_user(email='bob@example.com', role='user', password=PASSWORD)


@pytest.fixture
def admin_user(db):
    return CustomUser.objects.create_user(email='admin@example.com', role='admin', password=PASSWORD)


@pytest.fixture
def farmer_user(db):
    return CustomUser.objects.create_farmer(
        email='farmer@example.com', password=PASSWORD, full_name='Jean Habimana'
    )


@pytest.fixture
def farmer_profile(farmer_user):
    return FarmerProfile.objects.create(
        user=farmer_user,
        farm_name='Green Valley Farm',
        location='Musanze',
        specializations=['Tomato', 'Carrot'],
        verification_status='approved',
    )


@pytest.fixture
def pending_profile(db):
    user = CustomUser.objects.create_farmer(email='newfarmer@example.com', password=PASSWORD)
    return FarmerProfile.objects.create(user=user, farm_name='Sunrise Plots', location='Huye')


@pytest.fixture
def listing(farmer_profile):
    return LandListing.objects.create(
        farmer=farmer_profile,
        title='North field',
        location='Musanze',
        total_size=Decimal('100.00'),
        available_size=Decimal('100.00'),
        price_per_sqft=Decimal('2.00'),
        supported_vegetables=['Tomato', 'Carrot'],
    )


@pytest.fixture
def order(consumer, listing):
    return Order.objects.place_order(
        consumer=consumer,
        listing=listing,
        vegetable_name='Tomato',
        land_size=Decimal('50'),
        delivery_address='KG 11 Ave, Kigali',
    )


@pytest.fixture
def accepted_order(order, farmer_user):
    return order.accept(farmer_user)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for(api_client):
    def authenticate(user):
        api_client.force_authenticate(user=user)
        return api_client
    return authenticate
