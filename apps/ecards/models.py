from django.db import models
from django.utils import timezone


class CardStatus(models.TextChoices):
    PENDING = 'pending', 'Generation pending'
    ACTIVE = 'active', 'Active'


class ECard(models.Model):
    """Digital coverage card issued once to a locked member"""

    # One card per member, enforced by the database
    member = models.OneToOneField(
        'members.Member',
        on_delete=models.PROTECT,
        related_name='ecard'
    )

    # Identification
    card_unique_id = models.CharField(max_length=20, unique=True)

    # Lifecycle
    status = models.CharField(max_length=10, choices=CardStatus.choices, default=CardStatus.PENDING)
    issued_at = models.DateTimeField(auto_now_add=True)
    activated_at = models.DateTimeField(null=True, blank=True)

    # Validity
    valid_from = models.DateField()
    valid_till = models.DateField()

    # Member and plan data frozen at request time
    snapshot = models.JSONField(default=dict)

    class Meta:
        db_table = 'ecards'
        ordering = ['-issued_at']
        verbose_name = 'E-Card'
        verbose_name_plural = 'E-Cards'

    def __str__(self):
        return f"{self.card_unique_id} - {self.snapshot.get('member_name', '')}"

    @property
    def is_expired(self):
        return self.valid_till < timezone.localdate()

    @property
    def display_status(self):
        if self.status == CardStatus.ACTIVE and self.is_expired:
            return 'expired'
        return self.status
