from django.db import models
from django.utils import timezone


def default_relation_slots():
    return ['Self', 'Spouse', 'Child1', 'Child2']


class Plan(models.Model):
    """Catalogue of HealthMitra benefit plans"""

    STATUT_CHOICES = [
        ('active', 'Active'),
        ('inactive', 'Inactive'),
    ]

    # Identification
    code = models.CharField(max_length=20, unique=True)  # GOLD, SILVER, FAMILY
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)

    # Coverage
    coverage_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    benefits = models.JSONField(default=list, blank=True)

    # Enrollment policy
    mandatory_member_count = models.PositiveIntegerField(default=4)
    relation_slots = models.JSONField(default=default_relation_slots)
    validity_days = models.PositiveIntegerField(default=365)

    emergency_contact = models.CharField(max_length=30, blank=True)

    # Metadata
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    status = models.CharField(max_length=20, choices=STATUT_CHOICES, default='active')

    class Meta:
        db_table = 'plans'
        ordering = ['code']
        verbose_name = 'Plan'
        verbose_name_plural = 'Plans'

    def __str__(self):
        return f"{self.code} - {self.name}"


class PlanPurchase(models.Model):
    """A subscriber's purchase of a plan; aggregate root of its members"""

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        EXPIRED = 'expired', 'Expired'

    plan = models.ForeignKey('plan_purchases.Plan', on_delete=models.RESTRICT, related_name='purchases')

    # Identification
    policy_number = models.CharField(max_length=30, unique=True)

    # Subscriber
    subscriber_name = models.CharField(max_length=120)
    subscriber_mobile = models.CharField(max_length=15, blank=True)

    # Enrollment policy, fixed at purchase time
    mandatory_member_count = models.PositiveIntegerField()
    relation_slots = models.JSONField()

    # Payment trace (processed elsewhere)
    amount_paid = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    transaction_id = models.CharField(max_length=50, blank=True)

    # Dates
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    purchased_at = models.DateTimeField(auto_now_add=True)
    valid_from = models.DateField(null=True, blank=True)
    expiry_date = models.DateField(null=True, blank=True)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'plan_purchases'
        ordering = ['-purchased_at']
        verbose_name = 'Plan purchase'
        verbose_name_plural = 'Plan purchases'

    def __str__(self):
        return f"{self.policy_number} - {self.subscriber_name}"

    @property
    def is_expired(self):
        if self.status == self.Status.EXPIRED:
            return True
        return bool(self.expiry_date and self.expiry_date < timezone.localdate())

    def save(self, *args, **kwargs):
        # Enrollment policy is copied from the plan once
        if self.mandatory_member_count is None:
            self.mandatory_member_count = self.plan.mandatory_member_count
        if self.relation_slots is None:
            self.relation_slots = list(self.plan.relation_slots)
        if self.valid_from is None:
            self.valid_from = timezone.localdate()
        if self.expiry_date is None:
            self.expiry_date = self.valid_from + timezone.timedelta(days=self.plan.validity_days)
        if not self.policy_number:
            self.policy_number = generate_policy_number(self.plan)
        super().save(*args, **kwargs)


def generate_policy_number(plan):
    """Unique policy number in the HM-YYYY-PPP-NNN format"""
    year = timezone.now().year
    prefix = f"HM-{year}-{plan.code[:3].upper()}-"

    last = PlanPurchase.objects.filter(
        policy_number__startswith=prefix
    ).order_by('-policy_number').first()

    sequence = 1
    if last:
        try:
            sequence = int(last.policy_number.split('-')[-1]) + 1
        except (ValueError, IndexError):
            sequence = 1

    return f"{prefix}{sequence:03d}"
