from datetime import date
from decimal import Decimal

import pytest
from django.core.exceptions import PermissionDenied, ValidationError

from backend.exceptions import IllegalTransition, ConcurrentModification, DuplicateRequest
from landApp.models import LandListing
from orderApp.models import Order, Payment, compute_payment_split, next_status


@pytest.mark.parametrize('total', ['100.00', '0.01', '0.05', '33.33', '99.99', '1234567.89'])
def test_split_always_adds_back_to_total(total):
    split = compute_payment_split(Decimal(total))
    assert split['advance'] + split['final'] == Decimal(total)


def test_split_rounds_advance_half_up():
    split = compute_payment_split(Decimal('0.05'))
    assert split['advance'] == Decimal('0.02')
    assert split['final'] == Decimal('0.03')


def test_next_status_lookup():
    assert next_status('accepted') == 'planted'
    assert next_status('harvested') == 'delivered'
    assert next_status('delivered') is None
    assert next_status('pending') is None
    assert next_status('cancelled') is None


def test_place_order_creates_pending_order_and_advance_payment(order, listing):
    assert order.status == 'pending'
    assert order.total_price == Decimal('100.00')
    assert order.advance_amount == Decimal('30.00')
    assert order.final_amount == Decimal('70.00')

    payment = order.payments.get()
    assert payment.payment_type == 'advance'
    assert payment.status == 'pending'
    assert payment.amount == Decimal('30.00')

    listing.refresh_from_db()
    assert listing.available_size == Decimal('50.00')


def test_oversize_order_writes_nothing(consumer, listing):
    with pytest.raises(ValidationError) as excinfo:
        Order.objects.place_order(consumer, listing, 'Tomato', Decimal('150'), 'KG 11 Ave')

    assert 'land_size' in excinfo.value.message_dict
    assert Order.objects.count() == 0
    assert Payment.objects.count() == 0
    listing.refresh_from_db()
    assert listing.available_size == Decimal('100.00')


def test_unsupported_vegetable_and_missing_address_are_rejected(consumer, listing):
    with pytest.raises(ValidationError) as excinfo:
        Order.objects.place_order(consumer, listing, 'Cassava', Decimal('10'), '   ')

    errors = excinfo.value.message_dict
    assert 'vegetable_name' in errors
    assert 'delivery_address' in errors


def test_vegetable_match_ignores_case(consumer, listing):
    order = Order.objects.place_order(consumer, listing, 'tomato', Decimal('10'), 'KG 11 Ave')
    assert order.vegetable_name == 'tomato'


def test_orders_on_unapproved_farmer_are_rejected(consumer, listing, farmer_profile):
    farmer_profile.verification_status = 'pending'
    farmer_profile.save()
    listing.refresh_from_db()

    with pytest.raises(ValidationError) as excinfo:
        Order.objects.place_order(consumer, listing, 'Tomato', Decimal('10'), 'KG 11 Ave')
    assert 'land_listing' in excinfo.value.message_dict


def test_only_consumers_place_orders(farmer_user, listing):
    with pytest.raises(PermissionDenied):
        Order.objects.place_order(farmer_user, listing, 'Tomato', Decimal('10'), 'KG 11 Ave')


def test_repeated_idempotency_key_is_rejected(consumer, listing):
    first = Order.objects.place_order(
        consumer, listing, 'Tomato', Decimal('10'), 'KG 11 Ave', idempotency_key='checkout-42'
    )

    with pytest.raises(DuplicateRequest) as excinfo:
        Order.objects.place_order(
            consumer, listing, 'Tomato', Decimal('10'), 'KG 11 Ave', idempotency_key='checkout-42'
        )

    assert excinfo.value.existing_id == first.id
    assert Order.objects.count() == 1


def test_accept_then_accept_again_is_illegal(order, farmer_user):
    order.accept(farmer_user, expected_harvest_date=date(2026, 12, 1))
    assert order.status == 'accepted'
    order.refresh_from_db()
    assert order.status == 'accepted'
    assert order.expected_harvest_date == date(2026, 12, 1)

    with pytest.raises(IllegalTransition):
        order.accept(farmer_user)


def test_only_owning_farmer_changes_status(order, consumer, pending_profile):
    with pytest.raises(PermissionDenied):
        order.accept(consumer)

    other_farmer = pending_profile.user
    for attempt in (
        lambda: order.accept(other_farmer),
        lambda: order.reject(other_farmer),
        lambda: order.advance(other_farmer),
    ):
        with pytest.raises(IllegalTransition) as excinfo:
            attempt()
        assert excinfo.value.current_status == 'pending'

    order.refresh_from_db()
    assert order.status == 'pending'


def test_stale_copy_loses_the_race(order, farmer_user):
    stale = Order.objects.get(pk=order.pk)
    order.accept(farmer_user)

    with pytest.raises(ConcurrentModification) as excinfo:
        stale.reject(farmer_user, 'too late')
    assert excinfo.value.current_status == 'accepted'


def test_advance_walks_the_fixed_sequence(accepted_order, farmer_user):
    visited = []
    for _ in range(5):
        visited.append(accepted_order.advance(farmer_user).status)

    assert visited == ['planted', 'growing', 'ready_to_harvest', 'harvested', 'delivered']
    assert accepted_order.actual_harvest_date is not None

    with pytest.raises(IllegalTransition):
        accepted_order.advance(farmer_user)


def test_advance_from_pending_is_illegal(order, farmer_user):
    with pytest.raises(IllegalTransition):
        order.advance(farmer_user)


def test_reject_releases_land_and_is_terminal(order, farmer_user, consumer, listing):
    order.reject(farmer_user, 'Field flooded')
    listing.refresh_from_db()
    assert listing.available_size == Decimal('100.00')
    assert order.status_reason == 'Field flooded'

    for attempt in (
        lambda: order.accept(farmer_user),
        lambda: order.advance(farmer_user),
        lambda: order.cancel(consumer),
    ):
        with pytest.raises(IllegalTransition):
            attempt()

    order.refresh_from_db()
    assert order.status == 'rejected'


def test_consumer_cancels_and_land_is_released(accepted_order, consumer, listing):
    accepted_order.cancel(consumer, 'Changed my mind')
    assert accepted_order.status == 'cancelled'
    assert LandListing.objects.get(pk=listing.pk).available_size == Decimal('100.00')


def test_admin_can_cancel_but_strangers_cannot(order, admin_user, other_consumer):
    with pytest.raises(PermissionDenied):
        order.cancel(other_consumer)

    order.cancel(admin_user)
    assert order.status == 'cancelled'


def test_final_payment_needs_ready_to_harvest(accepted_order, consumer, farmer_user):
    with pytest.raises(IllegalTransition):
        accepted_order.record_final_payment(consumer)

    for _ in range(3):
        accepted_order.advance(farmer_user)
    assert accepted_order.status == 'ready_to_harvest'

    payment = accepted_order.record_final_payment(consumer, 'mobile_money')
    assert payment.amount == Decimal('70.00')
    assert payment.payment_type == 'final'
    assert sum(p.amount for p in accepted_order.payments.all()) == accepted_order.total_price

    with pytest.raises(IllegalTransition):
        accepted_order.record_final_payment(consumer)


def test_visible_to_limits_orders_to_parties(order, consumer, other_consumer, farmer_user, admin_user):
    assert list(Order.objects.visible_to(consumer)) == [order]
    assert list(Order.objects.visible_to(farmer_user)) == [order]
    assert list(Order.objects.visible_to(admin_user)) == [order]
    assert not Order.objects.visible_to(other_consumer).exists()


def test_idempotency_keys_are_scoped_to_the_consumer(consumer, other_consumer, listing):
    first = Order.objects.place_order(
        consumer, listing, 'Tomato', Decimal('10'), 'KG 11 Ave', idempotency_key='checkout-1'
    )
    second = Order.objects.place_order(
        other_consumer, listing, 'Tomato', Decimal('10'), 'KN 3 Rd', idempotency_key='checkout-1'
    )

    assert first.id != second.id
    assert second.consumer == other_consumer


@pytest.mark.parametrize('land_size', ['50.005', '0.001', 'NaN', 'Infinity', 'plenty'])
def test_land_size_must_be_exact_cents(consumer, listing, land_size):
    with pytest.raises(ValidationError) as excinfo:
        Order.objects.place_order(consumer, listing, 'Tomato', land_size, 'KG 11 Ave')

    assert 'land_size' in excinfo.value.message_dict
    assert Order.objects.count() == 0
    listing.refresh_from_db()
    assert listing.available_size == Decimal('100.00')


def test_land_size_with_trailing_zeros_is_accepted(consumer, listing):
    order = Order.objects.place_order(consumer, listing, 'Tomato', '12.500', 'KG 11 Ave')
    assert order.land_size == Decimal('12.50')
    assert order.total_price == Decimal('25.00')
