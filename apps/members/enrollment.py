"""
Enrollment gate of a plan purchase.

Everything here is derived from the member rows on each call and never
stored, so members locked from different entry points are always counted.
"""
from apps.members.models import LockState, Member
from apps.members.services import get_plan_purchase


def _locked_count(purchase):
    return Member.objects.filter(plan_purchase=purchase, lock_state=LockState.LOCKED).count()


def is_fully_enrolled(plan_purchase_id):
    purchase = get_plan_purchase(plan_purchase_id)
    return _locked_count(purchase) >= purchase.mandatory_member_count


def progress(plan_purchase_id):
    """Share of mandatory members already locked, between 0.0 and 1.0"""
    purchase = get_plan_purchase(plan_purchase_id)
    if not purchase.mandatory_member_count:
        return 1.0
    return min(_locked_count(purchase) / purchase.mandatory_member_count, 1.0)


def next_unlocked_slot(plan_purchase_id):
    """First relation slot, in plan order, whose member is not locked yet"""
    purchase = get_plan_purchase(plan_purchase_id)
    states = dict(
        Member.objects.filter(plan_purchase=purchase).values_list('relation_slot', 'lock_state')
    )
    for slot in purchase.relation_slots:
        if states.get(slot, LockState.EMPTY) != LockState.LOCKED:
            return slot
    return None


def enrollment_summary(plan_purchase_id):
    purchase = get_plan_purchase(plan_purchase_id)
    locked = _locked_count(purchase)
    mandatory = purchase.mandatory_member_count
    return {
        'plan_purchase_id': purchase.pk,
        'policy_number': purchase.policy_number,
        'locked_members': locked,
        'mandatory_member_count': mandatory,
        'is_fully_enrolled': locked >= mandatory,
        'progress': min(locked / mandatory, 1.0) if mandatory else 1.0,
        'next_unlocked_slot': next_unlocked_slot(purchase.pk),
    }
