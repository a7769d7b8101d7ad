import uuid
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import PermissionDenied, ValidationError
from django.core.validators import MinValueValidator
from django.db import models, transaction, DatabaseError, IntegrityError
from django.utils import timezone

from backend.exceptions import (
    IllegalTransition, ConcurrentModification, DuplicateRequest, PersistenceError
)
from farmerApp.models import FarmerProfile
from landApp.models import LandListing
from notificationApp.emails import dispatch_order_event, STATUS_EVENTS
from userApp.models import CustomUser

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ADVANCE_RATE = Decimal('0.30')

# Linear lifecycle once a farmer has accepted; pending forks into accepted/rejected
ORDER_FLOW = ['accepted', 'planted', 'growing', 'ready_to_harvest', 'harvested', 'delivered']
TERMINAL_STATUSES = frozenset(['rejected', 'cancelled', 'delivered'])


def round2(value):
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_payment_split(total_price):
    """Split a total into the 30% advance and the 70% final payment.

    The final amount is whatever is left after the rounded advance, so the two
    always add back up to the total.
    """
    total = round2(total_price)
    advance = round2(total * ADVANCE_RATE)
    return {'advance': advance, 'final': total - advance}


def next_status(current):
    """The status `advance` moves to from `current`, or None."""
    if current not in ORDER_FLOW:
        return None
    index = ORDER_FLOW.index(current)
    if index + 1 >= len(ORDER_FLOW):
        return None
    return ORDER_FLOW[index + 1]


class OrderQuerySet(models.QuerySet):
    def for_consumer(self, user):
        return self.filter(consumer=user)

    def for_farmer(self, user):
        return self.filter(farmer__user=user)

    def visible_to(self, user):
        if user.is_admin_role:
            return self
        return self.filter(models.Q(consumer=user) | models.Q(farmer__user=user))


class OrderManager(models.Manager.from_queryset(OrderQuerySet)):
    def place_order(self, consumer, listing, vegetable_name, land_size, delivery_address,
                    delivery_notes='', planting_instructions='', idempotency_key=None):
        """Create a pending order with its advance payment and notify the farmer."""
        if not consumer.is_consumer:
            raise PermissionDenied("Only consumers can place orders")

        if idempotency_key:
            existing = self.filter(
                consumer=consumer, idempotency_key=idempotency_key
            ).values_list('id', flat=True).first()
            if existing:
                raise DuplicateRequest("An order was already placed for this request", existing_id=existing)

        errors = {}
        try:
            land_size = Decimal(str(land_size))
            exact = land_size.is_finite() and land_size == land_size.quantize(CENT)
        except (InvalidOperation, TypeError, ValueError):
            raise ValidationError({'land_size': "Land size must be a number"})
        if not exact:
            raise ValidationError({'land_size': "Land size can have at most two decimal places"})
        land_size = land_size.quantize(CENT)

        if land_size <= 0:
            errors['land_size'] = "Land size must be greater than zero"
        elif land_size > listing.available_size:
            errors['land_size'] = (
                f"Requested {land_size} sqft but only {listing.available_size} sqft is available"
            )
        if not listing.supports(vegetable_name):
            errors['vegetable_name'] = "This listing does not support the selected vegetable"
        if not (delivery_address or '').strip():
            errors['delivery_address'] = "Delivery address is required"
        if not listing.is_active:
            errors['land_listing'] = "This listing is not accepting orders"
        elif not listing.farmer.is_visible:
            errors['land_listing'] = "This farmer has not been verified"
        if errors:
            raise ValidationError(errors)

        total_price = round2(land_size * listing.price_per_sqft)
        split = compute_payment_split(total_price)

        try:
            with transaction.atomic():
                if not listing.reserve(land_size):
                    raise ValidationError({'land_size': "The requested land is no longer available"})

                order = self.create(
                    consumer=consumer,
                    farmer=listing.farmer,
                    land_listing=listing,
                    vegetable_name=vegetable_name.strip(),
                    land_size=land_size,
                    total_price=total_price,
                    advance_amount=split['advance'],
                    final_amount=split['final'],
                    delivery_address=delivery_address.strip(),
                    delivery_notes=delivery_notes or '',
                    planting_instructions=planting_instructions or '',
                    idempotency_key=idempotency_key or None,
                )
                Payment.objects.create(
                    order=order,
                    payer=consumer,
                    amount=split['advance'],
                    payment_type='advance',
                )
        except IntegrityError as e:
            if idempotency_key:
                existing = self.filter(
                    consumer=consumer, idempotency_key=idempotency_key
                ).values_list('id', flat=True).first()
                if existing:
                    raise DuplicateRequest("An order was already placed for this request", existing_id=existing)
            raise PersistenceError("Could not save the order") from e
        except DatabaseError as e:
            raise PersistenceError("Could not save the order") from e

        logger.info(f"Order {order.id} placed by consumer {consumer.id} on listing {listing.id}")
        dispatch_order_event('order_placed', order)
        return order


class Order(models.Model):
    """A consumer's sponsorship of a vegetable crop on a farmer's land"""

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('accepted', 'Accepted'),
        ('rejected', 'Rejected'),
        ('planted', 'Planted'),
        ('growing', 'Growing'),
        ('ready_to_harvest', 'Ready To Harvest'),
        ('harvested', 'Harvested'),
        ('delivered', 'Delivered'),
        ('cancelled', 'Cancelled'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    consumer = models.ForeignKey(CustomUser, on_delete=models.PROTECT, related_name='vegetable_orders')
    farmer = models.ForeignKey(FarmerProfile, on_delete=models.PROTECT, related_name='orders')
    land_listing = models.ForeignKey(LandListing, on_delete=models.PROTECT, related_name='orders')

    vegetable_name = models.CharField(max_length=100)
    land_size = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Sponsored land in square feet"
    )

    # Frozen at creation
    total_price = models.DecimalField(max_digits=14, decimal_places=2)
    advance_amount = models.DecimalField(max_digits=14, decimal_places=2)
    final_amount = models.DecimalField(max_digits=14, decimal_places=2)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    status_reason = models.TextField(blank=True)

    delivery_address = models.TextField()
    delivery_notes = models.TextField(blank=True)
    planting_instructions = models.TextField(blank=True)
    expected_harvest_date = models.DateField(null=True, blank=True)
    actual_harvest_date = models.DateField(null=True, blank=True)

    # Unique per consumer, see Meta.constraints
    idempotency_key = models.CharField(max_length=100, null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OrderManager()

    class Meta:
        db_table = 'vegetable_orders'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['consumer', 'idempotency_key'], name='unique_idempotency_key_per_consumer'
            ),
        ]

    def __str__(self):
        return f"Order #{self.id} - {self.vegetable_name} ({self.land_size} sqft) - {self.status}"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    @property
    def upcoming_status(self):
        return next_status(self.status)

    def can_view(self, user):
        return user.is_admin_role or self.consumer_id == user.id or self.farmer.user_id == user.id

    def is_owned_by_farmer(self, user):
        return user.is_farmer and self.farmer.user_id == user.id

    def _require_farmer(self, user):
        if not user.is_farmer:
            raise PermissionDenied("Only the farmer of this order can change its status")
        if self.farmer.user_id != user.id:
            raise IllegalTransition(
                "This order belongs to another farmer",
                current_status=self.status,
            )

    def _transition(self, expected, new_status, **fields):
        """Conditionally move from `expected` to `new_status`.

        Raises ConcurrentModification when another writer got there first.
        """
        changed_at = timezone.now()
        try:
            updated = Order.objects.filter(pk=self.pk, status=expected).update(
                status=new_status, updated_at=changed_at, **fields
            )
        except DatabaseError as e:
            raise PersistenceError(f"Could not update order {self.pk}") from e

        if not updated:
            self.refresh_from_db(fields=['status'])
            raise ConcurrentModification(
                f"Order was changed to {self.status} by another request",
                current_status=self.status,
            )

        self.status = new_status
        self.updated_at = changed_at
        for name, value in fields.items():
            setattr(self, name, value)
        logger.info(f"Order {self.pk}: {expected} -> {new_status}")

    def accept(self, farmer_user, expected_harvest_date=None):
        self._require_farmer(farmer_user)
        if self.status != 'pending':
            raise IllegalTransition(
                f"Only pending orders can be accepted (order is {self.status})",
                current_status=self.status,
            )

        fields = {}
        if expected_harvest_date:
            fields['expected_harvest_date'] = expected_harvest_date
        self._transition('pending', 'accepted', **fields)
        dispatch_order_event(STATUS_EVENTS['accepted'], self)
        return self

    def reject(self, farmer_user, reason=''):
        self._require_farmer(farmer_user)
        if self.status != 'pending':
            raise IllegalTransition(
                f"Only pending orders can be rejected (order is {self.status})",
                current_status=self.status,
            )

        with transaction.atomic():
            self._transition('pending', 'rejected', status_reason=reason or '')
            self.land_listing.release(self.land_size)
        dispatch_order_event(STATUS_EVENTS['rejected'], self)
        return self

    def advance(self, farmer_user):
        """Move an accepted order one step along the growing sequence."""
        self._require_farmer(farmer_user)
        if self.is_terminal:
            raise IllegalTransition(
                f"Order is already {self.status}",
                current_status=self.status,
            )
        if self.status == 'pending':
            raise IllegalTransition(
                "Pending orders must be accepted or rejected first",
                current_status=self.status,
            )

        upcoming = next_status(self.status)
        if upcoming is None:
            raise IllegalTransition(
                f"No status follows {self.status}",
                current_status=self.status,
            )

        fields = {}
        if upcoming == 'harvested':
            fields['actual_harvest_date'] = timezone.localdate()
        self._transition(self.status, upcoming, **fields)

        if upcoming in STATUS_EVENTS:
            dispatch_order_event(STATUS_EVENTS[upcoming], self)
        return self

    def cancel(self, actor, reason=''):
        if not (actor.is_admin_role or self.consumer_id == actor.id):
            raise PermissionDenied("Only the consumer who placed the order or an admin can cancel it")
        if self.is_terminal:
            raise IllegalTransition(
                f"Order is already {self.status}",
                current_status=self.status,
            )

        with transaction.atomic():
            self._transition(self.status, 'cancelled', status_reason=reason or '')
            self.land_listing.release(self.land_size)
        return self

    def record_final_payment(self, consumer, payment_method=''):
        """Open the 70% final payment once the crop is ready to harvest."""
        if self.consumer_id != consumer.id:
            raise PermissionDenied("Only the consumer who placed the order can pay for it")
        if self.status != 'ready_to_harvest':
            raise IllegalTransition(
                f"Final payment is only possible when the order is ready to harvest (order is {self.status})",
                current_status=self.status,
            )
        if self.payments.filter(payment_type='final').exists():
            raise IllegalTransition("Final payment has already been recorded", current_status=self.status)

        try:
            with transaction.atomic():
                payment = Payment.objects.create(
                    order=self,
                    payer=consumer,
                    amount=self.final_amount,
                    payment_type='final',
                    payment_method=payment_method or '',
                )
        except IntegrityError:
            raise IllegalTransition("Final payment has already been recorded", current_status=self.status)
        except DatabaseError as e:
            raise PersistenceError(f"Could not record final payment for order {self.pk}") from e

        logger.info(f"Final payment {payment.id} recorded for order {self.pk}")
        return payment


class Payment(models.Model):
    """One of the two instalments of an order"""

    PAYMENT_TYPE_CHOICES = [
        ('advance', 'Advance'),
        ('final', 'Final'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('paid', 'Paid'),
        ('failed', 'Failed'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name='payments')
    payer = models.ForeignKey(CustomUser, on_delete=models.PROTECT, related_name='payments')
    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    payment_type = models.CharField(max_length=10, choices=PAYMENT_TYPE_CHOICES)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending')
    payment_method = models.CharField(max_length=50, blank=True)
    transaction_id = models.CharField(max_length=100, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'payments'
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(fields=['order', 'payment_type'], name='unique_payment_type_per_order'),
        ]

    def __str__(self):
        return f"{self.get_payment_type_display()} payment of {self.amount} for order {self.order_id}"
