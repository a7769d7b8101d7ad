import os
import uuid
import logging

from django.conf import settings
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.files.storage import default_storage
from django.core.validators import URLValidator
from django.db import models, transaction, DatabaseError, IntegrityError

from backend.exceptions import IllegalTransition, ConcurrentModification, PersistenceError
from orderApp.models import Order
from userApp.models import CustomUser

logger = logging.getLogger(__name__)

# Offered to farmers as suggestions; any non-empty tag is accepted
GROWTH_PHASES = [
    ('seed_planted', 'Seed Planted'),
    ('sprouting', 'Sprouting'),
    ('growing', 'Growing'),
    ('flowering', 'Flowering'),
    ('fruiting', 'Fruiting'),
    ('almost_ready', 'Almost Ready'),
    ('ready_to_harvest', 'Ready to Harvest'),
    ('harvested', 'Harvested'),
]


def max_images():
    return getattr(settings, 'GROWTH_UPDATE_MAX_IMAGES', 4)


class GrowthUpdateQuerySet(models.QuerySet):
    def update(self, **kwargs):
        raise PermissionDenied("Growth updates cannot be edited")

    def delete(self):
        raise PermissionDenied("Growth updates cannot be deleted")


class GrowthUpdateManager(models.Manager.from_queryset(GrowthUpdateQuerySet)):
    def for_order(self, order):
        return self.filter(order=order).select_related('recorded_by')

    def append_update(self, farmer_user, order, status_tag, notes='', files=None, image_urls=None):
        """Record one growth entry for an order.

        Uploaded files are stored first; if storing any of them or writing the
        entry fails, every file stored by this call is removed again.
        """
        files = list(files or [])
        image_urls = [url.strip() for url in (image_urls or []) if url and url.strip()]

        if not order.is_owned_by_farmer(farmer_user):
            raise PermissionDenied("Only the farmer of this order can post growth updates")
        if order.is_terminal:
            raise IllegalTransition(
                f"Cannot post growth updates on a {order.status} order",
                current_status=order.status,
            )

        errors = {}
        status_tag = (status_tag or '').strip()
        if not status_tag:
            errors['status'] = "A growth status is required"
        if len(files) + len(image_urls) > max_images():
            errors['images'] = f"At most {max_images()} images can be attached to one update"
        validate_url = URLValidator()
        for url in image_urls:
            try:
                validate_url(url)
            except ValidationError:
                errors.setdefault('images', f"Invalid image URL: {url}")
        if errors:
            raise ValidationError(errors)

        stored = []
        try:
            for upload in files:
                extension = os.path.splitext(upload.name)[1].lower()
                name = default_storage.save(f"growth-updates/{order.pk}/{uuid.uuid4().hex}{extension}", upload)
                stored.append(name)

            with transaction.atomic():
                position = self.filter(order=order).count() + 1
                entry = self.create(
                    order=order,
                    position=position,
                    status=status_tag,
                    notes=notes or '',
                    images=[default_storage.url(name) for name in stored] + image_urls,
                    recorded_by=farmer_user,
                )
        except IntegrityError as e:
            discard_files(stored)
            raise ConcurrentModification(
                "Another growth update was recorded at the same time, please retry",
                current_status=order.status,
            ) from e
        except (OSError, DatabaseError) as e:
            discard_files(stored)
            raise PersistenceError(f"Could not record growth update for order {order.pk}") from e

        logger.info(f"Growth update {entry.id} ({status_tag}) recorded for order {order.pk} with {len(entry.images)} images")
        return entry


def discard_files(names):
    for name in names:
        try:
            default_storage.delete(name)
        except OSError:
            logger.warning(f"Could not remove orphaned growth image {name}")


class GrowthUpdate(models.Model):
    """Append-only progress entry posted by the farmer for an order"""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.PROTECT, related_name='growth_updates')
    position = models.PositiveIntegerField(editable=False)
    status = models.CharField(max_length=50, help_text="Growth phase tag, e.g. sprouting")
    notes = models.TextField(blank=True)
    images = models.JSONField(default=list, blank=True)
    recorded_by = models.ForeignKey(CustomUser, on_delete=models.PROTECT, related_name='growth_updates')
    created_at = models.DateTimeField(auto_now_add=True)

    objects = GrowthUpdateManager()

    class Meta:
        db_table = 'growth_status'
        ordering = ['created_at', 'position']
        constraints = [
            models.UniqueConstraint(fields=['order', 'position'], name='unique_growth_position_per_order'),
        ]

    def __str__(self):
        return f"{self.get_status_label()} on order {self.order_id}"

    def get_status_label(self):
        return dict(GROWTH_PHASES).get(self.status, self.status)

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise PermissionDenied("Growth updates cannot be edited")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionDenied("Growth updates cannot be deleted")
