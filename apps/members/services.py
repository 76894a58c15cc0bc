import logging

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.members.exceptions import DuplicateSlot, MemberLocked, NotFound, ValidationFailed
from apps.members.models import LockState, Member
from apps.members.validators import (
    MANDATORY_FIELDS, FieldError, ReasonCode, mandatory_errors, validate_fields,
)
from apps.plan_purchases.models import PlanPurchase

logger = logging.getLogger(__name__)


def get_plan_purchase(plan_purchase_id):
    try:
        return PlanPurchase.objects.get(pk=plan_purchase_id)
    except PlanPurchase.DoesNotExist:
        raise NotFound(f"Plan purchase {plan_purchase_id} not found")


def slot_order(plan_purchase):
    return {slot: index for index, slot in enumerate(plan_purchase.relation_slots)}


class MemberRecordService:
    """Authoritative state of the members enrolled under a plan purchase"""

    @staticmethod
    def create_member(plan_purchase_id, relation_slot):
        """
        Create the empty member record for one relation slot.

        Raises NotFound, ValidationFailed (slot not offered by the plan) or
        DuplicateSlot.
        """
        purchase = get_plan_purchase(plan_purchase_id)

        if relation_slot not in purchase.relation_slots:
            raise ValidationFailed([FieldError(
                'relation_slot',
                ReasonCode.INVALID_CHOICE,
                f"Relation must be one of {', '.join(purchase.relation_slots)}",
            )])

        if Member.objects.filter(plan_purchase=purchase, relation_slot=relation_slot).exists():
            raise DuplicateSlot(f"Slot {relation_slot} is already occupied", field='relation_slot')

        try:
            with transaction.atomic():
                member = Member.objects.create(
                    plan_purchase=purchase,
                    relation_slot=relation_slot,
                    lock_state=LockState.EMPTY,
                )
        except IntegrityError:
            # Concurrent creation of the same slot
            raise DuplicateSlot(f"Slot {relation_slot} is already occupied", field='relation_slot')

        logger.info(f"Member {member.pk} created for {purchase.policy_number} ({relation_slot})")
        return member

    @staticmethod
    def create_slot_members(plan_purchase_id):
        """Create the empty member of every unoccupied slot, in slot order"""
        purchase = get_plan_purchase(plan_purchase_id)
        occupied = set(
            Member.objects.filter(plan_purchase=purchase).values_list('relation_slot', flat=True)
        )

        created = []
        for slot in purchase.relation_slots:
            if slot in occupied:
                continue
            try:
                created.append(MemberRecordService.create_member(purchase.pk, slot))
            except DuplicateSlot:
                continue
        return created

    @staticmethod
    @transaction.atomic
    def save_draft(member_id, partial_fields):
        """
        Merge a partial payload into the member without locking it.

        The call is all-or-nothing: any invalid field rejects the whole
        payload with ValidationFailed. Mandatory fields of a locked member
        raise MemberLocked; its optional fields remain editable.
        """
        try:
            member = Member.objects.select_for_update().get(pk=member_id)
        except Member.DoesNotExist:
            raise NotFound(f"Member {member_id} not found")

        if member.is_locked:
            frozen = [name for name in partial_fields if name in MANDATORY_FIELDS]
            if frozen:
                raise MemberLocked(
                    f"{member.relation_slot} details are locked and cannot be changed",
                    field=frozen[0],
                )

        cleaned, errors = validate_fields(partial_fields)
        if errors:
            raise ValidationFailed(errors)

        for name, value in cleaned.items():
            setattr(member, name, value)
        # Blank values alone do not count as saved data
        saved = [name for name, value in cleaned.items() if value not in (None, '')]
        if member.lock_state == LockState.EMPTY and saved:
            member.lock_state = LockState.DRAFT
        member.save()

        logger.debug(f"Draft saved for member {member.pk}: {sorted(cleaned)}")
        return member

    @staticmethod
    def commit_and_lock(member_id, full_fields):
        """
        Validate the complete member and lock it.

        The payload is merged over the stored draft before the cross-field
        rule runs. The lock is a compare-and-swap on lock_state: of
        concurrent callers only the first succeeds, the others get
        MemberLocked. Raises NotFound, MemberLocked or ValidationFailed; on
        failure nothing is written.
        """
        try:
            member = Member.objects.get(pk=member_id)
        except Member.DoesNotExist:
            raise NotFound(f"Member {member_id} not found")

        if member.is_locked:
            raise MemberLocked(f"{member.relation_slot} details are already locked")

        unknown = [name for name in full_fields if name not in member.field_values()]
        merged = member.field_values()
        merged.update(full_fields)

        errors = [FieldError(name, ReasonCode.UNKNOWN_FIELD, f'Unknown field: {name}') for name in unknown]
        errors.extend(mandatory_errors(merged))
        if errors:
            raise ValidationFailed(errors)

        cleaned, _ = validate_fields(
            {name: value for name, value in merged.items() if name not in unknown}
        )

        now = timezone.now()
        updated = Member.objects.filter(
            pk=member.pk,
            lock_state__in=[LockState.EMPTY, LockState.DRAFT],
        ).update(
            lock_state=LockState.LOCKED,
            locked_at=now,
            updated_at=now,
            **cleaned,
        )

        if not updated:
            raise MemberLocked(f"{member.relation_slot} details are already locked")

        logger.info(f"Member {member.pk} locked ({member.relation_slot})")
        return Member.objects.get(pk=member.pk)

    @staticmethod
    def get_member(member_id):
        try:
            return Member.objects.select_related('plan_purchase').get(pk=member_id)
        except Member.DoesNotExist:
            raise NotFound(f"Member {member_id} not found")

    @staticmethod
    def list_members(plan_purchase_id):
        """Members of the purchase in relation slot order"""
        purchase = get_plan_purchase(plan_purchase_id)
        order = slot_order(purchase)
        members = Member.objects.filter(plan_purchase=purchase).select_related('ecard')
        return sorted(members, key=lambda m: (order.get(m.relation_slot, len(order)), m.pk))
