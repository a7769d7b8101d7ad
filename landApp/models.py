import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Sum
from django.db.models.functions import Least

from farmerApp.models import FarmerProfile


class LandListingQuerySet(models.QuerySet):
    def visible(self):
        """Active listings of approved farmers"""
        return self.filter(is_active=True, farmer__verification_status='approved')


class LandListing(models.Model):
    """A plot a farmer rents out for growing vegetables"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    farmer = models.ForeignKey(FarmerProfile, on_delete=models.CASCADE, related_name='land_listings')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.CharField(max_length=255)
    total_size = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))],
        help_text="Total size in square feet"
    )
    available_size = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Size still open for orders, in square feet"
    )
    price_per_sqft = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    supported_vegetables = models.JSONField(default=list)
    soil_type = models.CharField(max_length=100, blank=True)
    water_source = models.CharField(max_length=100, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LandListingQuerySet.as_manager()

    class Meta:
        db_table = 'land_listings'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} - {self.location}"

    def clean(self):
        errors = {}

        if self.available_size is not None and self.total_size is not None:
            if self.available_size > self.total_size:
                errors['available_size'] = "Available size cannot exceed total size"

        if not isinstance(self.supported_vegetables, list) or not self.supported_vegetables:
            errors['supported_vegetables'] = "At least one supported vegetable is required"
        elif not all(isinstance(v, str) and v.strip() for v in self.supported_vegetables):
            errors['supported_vegetables'] = "Supported vegetables must be non-empty names"

        if errors:
            raise ValidationError(errors)

    # Only reserve(), release() and resize() move these
    SIZE_FIELDS = ('total_size', 'available_size')

    def save(self, *args, **kwargs):
        self.full_clean()
        if not self._state.adding and kwargs.get('update_fields') is None:
            kwargs['update_fields'] = [
                f.name for f in self._meta.concrete_fields
                if not f.primary_key and f.name not in self.SIZE_FIELDS
            ]
        super().save(*args, **kwargs)

    def reserved_size(self):
        """Land held by orders that are still in progress"""
        from orderApp.models import TERMINAL_STATUSES
        total = self.orders.exclude(status__in=TERMINAL_STATUSES).aggregate(total=Sum('land_size'))['total']
        return total or Decimal('0.00')

    def supports(self, vegetable_name):
        wanted = (vegetable_name or '').strip().lower()
        return any(v.strip().lower() == wanted for v in self.supported_vegetables)

    def reserve(self, size):
        """Take `size` sqft out of the available land.

        Conditional on enough land still being available at write time, so
        concurrent orders cannot over-allocate. Returns False when it is not.
        """
        updated = LandListing.objects.filter(pk=self.pk, available_size__gte=size).update(
            available_size=F('available_size') - size
        )
        if updated:
            self.refresh_from_db(fields=['available_size'])
        return bool(updated)

    def release(self, size):
        """Give reserved land back, never beyond the total size."""
        LandListing.objects.filter(pk=self.pk).update(
            available_size=Least(F('available_size') + size, F('total_size'))
        )
        self.refresh_from_db(fields=['available_size'])

    def resize(self, total_size):
        """Change the plot size, moving the available land by the same amount.

        Refused (returns False) when the new size is smaller than the land
        orders currently hold.
        """
        updated = LandListing.objects.filter(
            pk=self.pk, available_size__gte=F('total_size') - total_size
        ).update(
            # available_size first: MySQL evaluates SET clauses left to right
            available_size=F('available_size') + total_size - F('total_size'),
            total_size=total_size,
        )
        self.refresh_from_db(fields=['total_size', 'available_size'])
        return bool(updated)
