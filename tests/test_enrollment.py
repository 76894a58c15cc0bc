import pytest

from apps.members import enrollment
from apps.members.exceptions import NotFound
from apps.members.services import MemberRecordService
from apps.plan_purchases.models import PlanPurchase

pytestmark = pytest.mark.django_db


def test_nothing_locked(purchase, members):
    assert enrollment.is_fully_enrolled(purchase.pk) is False
    assert enrollment.progress(purchase.pk) == 0.0
    assert enrollment.next_unlocked_slot(purchase.pk) == 'Self'


def test_three_of_four_locked(purchase, members, lock_member):
    for slot in ['Self', 'Spouse', 'Child1']:
        lock_member(members[slot])

    assert enrollment.progress(purchase.pk) == 0.75
    assert enrollment.is_fully_enrolled(purchase.pk) is False
    assert enrollment.next_unlocked_slot(purchase.pk) == 'Child2'


def test_all_mandatory_members_locked(purchase, members, lock_member):
    for member in members.values():
        lock_member(member)

    assert enrollment.is_fully_enrolled(purchase.pk) is True
    assert enrollment.progress(purchase.pk) == 1.0
    assert enrollment.next_unlocked_slot(purchase.pk) is None


def test_next_slot_follows_plan_order_not_entry_order(purchase, members, lock_member):
    lock_member(members['Child2'])
    lock_member(members['Self'])
    MemberRecordService.save_draft(members['Spouse'].pk, {'full_name': 'Meera Sharma'})

    assert enrollment.next_unlocked_slot(purchase.pk) == 'Spouse'


def test_missing_member_row_counts_as_unlocked(purchase):
    MemberRecordService.create_member(purchase.pk, 'Spouse')
    assert enrollment.next_unlocked_slot(purchase.pk) == 'Self'


def test_extra_locked_member_keeps_gate_true(plan, lock_member):
    purchase = PlanPurchase.objects.create(
        plan=plan,
        subscriber_name='Rahul Sharma',
        mandatory_member_count=4,
        relation_slots=['Self', 'Spouse', 'Child1', 'Child2', 'Parent'],
    )
    members = {m.relation_slot: m for m in MemberRecordService.create_slot_members(purchase.pk)}

    for slot in ['Self', 'Spouse', 'Child1', 'Child2']:
        lock_member(members[slot])
    assert enrollment.is_fully_enrolled(purchase.pk) is True

    lock_member(members['Parent'])
    assert enrollment.is_fully_enrolled(purchase.pk) is True
    assert enrollment.progress(purchase.pk) == 1.0


def test_gate_is_recomputed_on_every_read(purchase, members, lock_member):
    assert enrollment.enrollment_summary(purchase.pk)['locked_members'] == 0
    lock_member(members['Self'])
    summary = enrollment.enrollment_summary(purchase.pk)
    assert summary['locked_members'] == 1
    assert summary['progress'] == 0.25
    assert summary['next_unlocked_slot'] == 'Spouse'
    assert summary['policy_number'] == purchase.policy_number


def test_unknown_purchase(db):
    with pytest.raises(NotFound):
        enrollment.is_fully_enrolled(123456)
