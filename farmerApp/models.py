import uuid
import logging

from django.core.exceptions import PermissionDenied, ValidationError
from django.db import models, DatabaseError
from django.utils import timezone

from backend.exceptions import IllegalTransition, ConcurrentModification, PersistenceError
from userApp.models import CustomUser

logger = logging.getLogger(__name__)


class FarmerProfileQuerySet(models.QuerySet):
    def visible(self):
        """Profiles consumers are allowed to discover."""
        return self.filter(verification_status='approved')

    def pending(self):
        return self.filter(verification_status='pending')


class FarmerProfile(models.Model):
    """Farm details plus the admin-controlled verification gate"""

    VERIFICATION_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]
    REVIEW_DECISIONS = ('approved', 'rejected')

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        CustomUser,
        on_delete=models.CASCADE,
        related_name='farmer_profile',
        limit_choices_to={'role': 'farmer'}
    )
    farm_name = models.CharField(max_length=200)
    location = models.CharField(max_length=255)
    farm_description = models.TextField(blank=True)
    specializations = models.JSONField(default=list, blank=True)
    experience_years = models.PositiveIntegerField(null=True, blank=True)

    # Verification (admin-write-only)
    verification_status = models.CharField(
        max_length=10,
        choices=VERIFICATION_STATUS_CHOICES,
        default='pending'
    )
    verification_notes = models.TextField(blank=True)
    verified_at = models.DateTimeField(null=True, blank=True)
    verified_by = models.ForeignKey(
        CustomUser,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_farmers'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FarmerProfileQuerySet.as_manager()

    class Meta:
        db_table = 'farmer_profiles'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.farm_name} ({self.get_verification_status_display()})"

    @property
    def is_visible(self):
        return self.verification_status == 'approved'

    def clean(self):
        if not isinstance(self.specializations, list) or not all(
            isinstance(item, str) for item in self.specializations
        ):
            raise ValidationError({'specializations': "Specializations must be a list of strings"})

    def review(self, reviewer, decision, notes=''):
        """Record an admin decision on a pending profile.

        The write is conditional on the profile still being pending, so two
        reviewers racing on the same profile cannot both succeed.
        """
        if not reviewer.is_admin_role:
            raise PermissionDenied("Only admins can review farmers")
        if decision not in self.REVIEW_DECISIONS:
            raise ValidationError({'decision': f"Decision must be one of: {', '.join(self.REVIEW_DECISIONS)}"})
        if self.verification_status != 'pending':
            raise IllegalTransition(
                f"Farmer has already been reviewed ({self.verification_status})",
                current_status=self.verification_status,
            )

        reviewed_at = timezone.now()
        try:
            updated = FarmerProfile.objects.filter(pk=self.pk, verification_status='pending').update(
                verification_status=decision,
                verification_notes=notes or '',
                verified_at=reviewed_at,
                verified_by=reviewer,
                updated_at=reviewed_at,
            )
        except DatabaseError as e:
            raise PersistenceError(f"Could not save review for farmer {self.pk}") from e

        if not updated:
            self.refresh_from_db(fields=['verification_status'])
            raise ConcurrentModification(
                f"Farmer was reviewed concurrently ({self.verification_status})",
                current_status=self.verification_status,
            )

        self.verification_status = decision
        self.verification_notes = notes or ''
        self.verified_at = reviewed_at
        self.verified_by = reviewer
        self.updated_at = reviewed_at
        logger.info(f"Farmer {self.pk} {decision} by admin {reviewer.id}")
        return self
