"""
Shared fixtures: a four-slot family plan, its purchase with empty members,
a complete set of valid member details and an authenticated API client.
"""
import pytest
from django.contrib.auth.models import User
from django.utils import timezone
from rest_framework.test import APIClient

from apps.members.services import MemberRecordService
from apps.plan_purchases.models import Plan, PlanPurchase


@pytest.fixture
def plan(db):
    return Plan.objects.create(
        code='FAMILY',
        name='Gold Family Health Plan',
        description='Cashless hospitalisation for a family of four',
        coverage_amount=500000,
        price=14999,
        benefits=['Cashless hospitalisation', 'Annual health check-up'],
        mandatory_member_count=4,
        relation_slots=['Self', 'Spouse', 'Child1', 'Child2'],
        validity_days=365,
        emergency_contact='+91 1800 555 0101',
    )


@pytest.fixture
def purchase(plan):
    return PlanPurchase.objects.create(
        plan=plan,
        subscriber_name='Rahul Sharma',
        subscriber_mobile='9876543210',
        amount_paid=14999,
    )


@pytest.fixture
def members(purchase):
    """Empty member of every slot, keyed by relation"""
    created = MemberRecordService.create_slot_members(purchase.pk)
    return {member.relation_slot: member for member in created}


@pytest.fixture
def valid_fields():
    return {
        'full_name': 'Asha Verma',
        'date_of_birth': '1990-04-12',
        'gender': 'Female',
        'blood_group': 'B+',
        'mobile': '9876543210',
        'email': 'asha.verma@example.com',
        'aadhaar_number': '1234 5678 9012',
        'pan_number': 'abcde1234f',
        'address': '14 MG Road, Koregaon Park',
        'city': 'Pune',
        'state': 'Maharashtra',
        'pincode': '411001',
        'height_cm': '162',
        'weight_kg': '58.5',
    }


@pytest.fixture
def lock_member(valid_fields):
    """Lock a member with valid details, optionally overriding some of them"""
    def _lock(member, **overrides):
        return MemberRecordService.commit_and_lock(member.pk, {**valid_fields, **overrides})
    return _lock


@pytest.fixture
def today():
    return timezone.localdate()


@pytest.fixture
def api_client(db):
    user = User.objects.create_user(username='subscriber', password='secret-pass')
    client = APIClient()
    client.force_authenticate(user=user)
    return client
