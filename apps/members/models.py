from django.core.exceptions import ObjectDoesNotExist
from django.db import models

from apps.members.validators import BLOOD_GROUPS, GENDERS, MANDATORY_FIELDS, OPTIONAL_FIELDS


class LockState(models.TextChoices):
    EMPTY = 'empty', 'Empty'
    DRAFT = 'draft', 'Draft'
    LOCKED = 'locked', 'Locked'


class Member(models.Model):
    """A named dependent occupying one relation slot of a plan purchase"""

    GENDER_CHOICES = [(g, g) for g in GENDERS]
    BLOOD_GROUP_CHOICES = [(b, b) for b in BLOOD_GROUPS]

    # Relations
    plan_purchase = models.ForeignKey(
        'plan_purchases.PlanPurchase',
        on_delete=models.RESTRICT,
        related_name='members'
    )
    relation_slot = models.CharField(max_length=30)

    # Identity
    full_name = models.CharField(max_length=120, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    gender = models.CharField(max_length=10, choices=GENDER_CHOICES, blank=True)
    blood_group = models.CharField(max_length=3, choices=BLOOD_GROUP_CHOICES, blank=True)
    mobile = models.CharField(max_length=10, blank=True)
    email = models.CharField(max_length=254, blank=True)

    # Biometrics (optional)
    height_cm = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    weight_kg = models.DecimalField(max_digits=4, decimal_places=1, null=True, blank=True)
    medical_conditions = models.TextField(blank=True)

    # Nominee (optional)
    nominee_name = models.CharField(max_length=120, blank=True)
    nominee_relation = models.CharField(max_length=30, blank=True)

    # KYC
    aadhaar_number = models.CharField(max_length=12, blank=True)
    pan_number = models.CharField(max_length=10, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=80, blank=True)
    state = models.CharField(max_length=80, blank=True)
    pincode = models.CharField(max_length=6, blank=True)

    # Lifecycle
    lock_state = models.CharField(max_length=10, choices=LockState.choices, default=LockState.EMPTY)
    locked_at = models.DateTimeField(null=True, blank=True)

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'members'
        ordering = ['plan_purchase', 'id']
        constraints = [
            models.UniqueConstraint(
                fields=['plan_purchase', 'relation_slot'],
                name='unique_member_slot_per_purchase',
            ),
        ]
        verbose_name = 'Member'
        verbose_name_plural = 'Members'

    def __str__(self):
        return f"{self.full_name or '(pending)'} ({self.relation_slot})"

    @property
    def is_locked(self):
        return self.lock_state == LockState.LOCKED

    @property
    def card_id(self):
        try:
            return self.ecard.pk
        except ObjectDoesNotExist:
            return None

    @property
    def has_card(self):
        return self.card_id is not None

    def field_values(self):
        """Current values of every editable member field."""
        return {name: getattr(self, name) for name in MANDATORY_FIELDS + OPTIONAL_FIELDS}
