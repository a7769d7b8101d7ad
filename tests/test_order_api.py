from decimal import Decimal

import pytest

from orderApp.models import Order


@pytest.fixture
def order_payload(listing):
    return {
        'land_listing': str(listing.id),
        'vegetable_name': 'Tomato',
        'land_size': '50',
        'delivery_address': 'KG 11 Ave, Kigali',
    }


def test_create_order_returns_split(client_for, consumer, order_payload):
    response = client_for(consumer).post('/orders/create/', order_payload, format='json')

    assert response.status_code == 201
    data = response.data['data']
    assert data['status'] == 'pending'
    assert data['total_price'] == '100.00'
    assert data['advance_amount'] == '30.00'
    assert data['final_amount'] == '70.00'
    assert data['next_status'] is None
    assert len(data['payments']) == 1


def test_oversize_order_is_a_bad_request(client_for, consumer, order_payload):
    order_payload['land_size'] = '500'
    response = client_for(consumer).post('/orders/create/', order_payload, format='json')

    assert response.status_code == 400
    assert 'land_size' in response.data['errors']
    assert Order.objects.count() == 0


def test_idempotency_header_returns_conflict_with_existing_order(client_for, consumer, order_payload):
    api = client_for(consumer)
    first = api.post('/orders/create/', order_payload, format='json', HTTP_IDEMPOTENCY_KEY='cart-7')
    second = api.post('/orders/create/', order_payload, format='json', HTTP_IDEMPOTENCY_KEY='cart-7')

    assert first.status_code == 201
    assert second.status_code == 409
    assert second.data['order_id'] == first.data['data']['id']


def test_farmer_cannot_place_orders(client_for, farmer_user, order_payload):
    response = client_for(farmer_user).post('/orders/create/', order_payload, format='json')
    assert response.status_code == 403


def test_order_lists_per_role(client_for, order, consumer, farmer_user, admin_user):
    assert client_for(consumer).get('/orders/mine/').data['count'] == 1
    assert client_for(farmer_user).get('/orders/farmer/').data['count'] == 1
    assert client_for(farmer_user).get('/orders/farmer/?status=accepted').data['count'] == 0
    assert client_for(admin_user).get('/orders/all/').data['count'] == 1
    assert client_for(consumer).get('/orders/all/').status_code == 403


def test_order_detail_hidden_from_other_consumers(client_for, order, other_consumer):
    response = client_for(other_consumer).get(f'/orders/{order.id}/')
    assert response.status_code == 404


def test_accept_twice_conflicts(client_for, order, farmer_user):
    api = client_for(farmer_user)
    response = api.post(f'/orders/{order.id}/accept/', {'expected_harvest_date': '2026-12-01'}, format='json')
    assert response.status_code == 200
    assert response.data['data']['status'] == 'accepted'
    assert response.data['data']['next_status'] == 'planted'

    response = api.post(f'/orders/{order.id}/accept/', {}, format='json')
    assert response.status_code == 409
    assert response.data['current_status'] == 'accepted'


def test_consumer_cannot_advance(client_for, accepted_order, consumer):
    response = client_for(consumer).post(f'/orders/{accepted_order.id}/advance/')
    assert response.status_code == 403


def test_advance_and_final_payment_over_http(client_for, accepted_order, farmer_user, consumer):
    for expected in ('planted', 'growing', 'ready_to_harvest'):
        response = client_for(farmer_user).post(f'/orders/{accepted_order.id}/advance/')
        assert response.data['data']['status'] == expected

    response = client_for(consumer).post(
        f'/orders/{accepted_order.id}/final-payment/', {'payment_method': 'card'}, format='json'
    )
    assert response.status_code == 201
    assert response.data['data']['amount'] == '70.00'

    payments = client_for(consumer).get(f'/orders/{accepted_order.id}/payments/').data['data']
    assert sorted(p['payment_type'] for p in payments) == ['advance', 'final']


def test_reject_with_reason(client_for, order, farmer_user, listing):
    response = client_for(farmer_user).post(f'/orders/{order.id}/reject/', {'reason': 'No water'}, format='json')
    assert response.status_code == 200
    assert response.data['data']['status_reason'] == 'No water'
    listing.refresh_from_db()
    assert listing.available_size == Decimal('100.00')


def test_cancel_terminal_order_conflicts(client_for, order, consumer):
    api = client_for(consumer)
    assert api.post(f'/orders/{order.id}/cancel/', {}, format='json').status_code == 200
    assert api.post(f'/orders/{order.id}/cancel/', {}, format='json').status_code == 409


def test_requires_authentication(api_client):
    assert api_client.get('/orders/mine/').status_code == 401


def test_another_farmer_cannot_accept(client_for, order, pending_profile):
    response = client_for(pending_profile.user).post(f'/orders/{order.id}/accept/', {}, format='json')
    assert response.status_code == 409
    assert response.data['current_status'] == 'pending'


def test_platform_stats_for_admins(client_for, admin_user, order, other_consumer, pending_profile):
    response = client_for(admin_user).get('/orders/stats/')

    assert response.status_code == 200
    assert response.data['data'] == {
        'total_users': 2,
        'total_farmers': 2,
        'pending_farmers': 1,
        'total_orders': 1,
    }


def test_platform_stats_hidden_from_consumers(client_for, consumer):
    assert client_for(consumer).get('/orders/stats/').status_code == 403
