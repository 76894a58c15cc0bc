import logging
import uuid

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.ecards.models import CardStatus, ECard
from apps.members.exceptions import (
    CardAlreadyIssued, MemberNotLocked, NotFound, PlanExpired,
)
from apps.members.models import Member
from apps.members.services import get_plan_purchase
from apps.members.validators import age_on

logger = logging.getLogger(__name__)


def one_year_after(day):
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        # 29 February
        return day.replace(year=day.year + 1, day=28)


class CardIssuanceService:
    """Lifecycle of the E-Card of a member: none -> pending -> active"""

    @staticmethod
    def generate_card_unique_id():
        """Display identifier in the HM-XXXX-XXXX format"""
        prefix = settings.ECARD['CARD_PREFIX']
        while True:
            token = uuid.uuid4().hex.upper()
            card_unique_id = f"{prefix}-{token[:4]}-{token[4:8]}"
            if not ECard.objects.filter(card_unique_id=card_unique_id).exists():
                return card_unique_id

    @staticmethod
    def build_snapshot(member, today):
        """Card data frozen at request time; later plan changes never alter it"""
        purchase = member.plan_purchase
        plan = purchase.plan
        return {
            'member_name': member.full_name,
            'relation': member.relation_slot,
            'date_of_birth': member.date_of_birth.isoformat(),
            'age': age_on(member.date_of_birth, today),
            'gender': member.gender,
            'blood_group': member.blood_group,
            'mobile': member.mobile,
            'email': member.email,
            'aadhaar_last4': member.aadhaar_number[-4:],
            'plan_name': plan.name,
            'plan_code': plan.code,
            'plan_description': plan.description,
            'policy_number': purchase.policy_number,
            'coverage_amount': str(plan.coverage_amount),
            'benefits': list(plan.benefits),
            'emergency_contact': plan.emergency_contact or settings.ECARD['EMERGENCY_CONTACT'],
        }

    @staticmethod
    @transaction.atomic
    def request_card(member_id):
        """
        Issue the E-Card of a locked member in the pending state.

        Raises NotFound, MemberNotLocked, CardAlreadyIssued or PlanExpired.
        The unique index on ecards.member_id guarantees a single card even
        when two requests race past the existence check.
        """
        try:
            member = Member.objects.select_for_update().select_related(
                'plan_purchase__plan'
            ).get(pk=member_id)
        except Member.DoesNotExist:
            raise NotFound(f"Member {member_id} not found")

        if not member.is_locked:
            raise MemberNotLocked(f"{member.relation_slot} details are not locked yet")

        if ECard.objects.filter(member=member).exists():
            raise CardAlreadyIssued(f"An E-Card already exists for {member.full_name}")

        purchase = member.plan_purchase
        if purchase.is_expired:
            raise PlanExpired(f"Plan {purchase.policy_number} has expired")

        # 1. Validity window: one year, never beyond the purchase expiry
        valid_from = timezone.localdate()
        valid_till = one_year_after(valid_from)
        if purchase.expiry_date and purchase.expiry_date < valid_till:
            valid_till = purchase.expiry_date

        # 2. Create the card
        try:
            with transaction.atomic():
                card = ECard.objects.create(
                    member=member,
                    card_unique_id=CardIssuanceService.generate_card_unique_id(),
                    status=CardStatus.PENDING,
                    valid_from=valid_from,
                    valid_till=valid_till,
                    snapshot=CardIssuanceService.build_snapshot(member, valid_from),
                )
        except IntegrityError:
            raise CardAlreadyIssued(f"An E-Card already exists for {member.full_name}")

        logger.info(f"E-Card {card.card_unique_id} requested for member {member.pk}")

        # 3. Confirmation runs once the card row is committed
        if settings.ECARD['ASYNC_CONFIRMATION']:
            from apps.ecards.tasks import generate_ecard
            transaction.on_commit(lambda: generate_ecard.delay(card.pk))

        return card

    @staticmethod
    def confirm_card(card_id):
        """
        Move a pending card to active.

        Confirming an active card returns it unchanged. Raises NotFound.
        """
        updated = ECard.objects.filter(
            pk=card_id,
            status=CardStatus.PENDING,
        ).update(status=CardStatus.ACTIVE, activated_at=timezone.now())

        card = CardIssuanceService.get_card(card_id)
        if updated:
            logger.info(f"E-Card {card.card_unique_id} activated")
        return card

    @staticmethod
    def get_card(card_id):
        try:
            return ECard.objects.select_related('member').get(pk=card_id)
        except ECard.DoesNotExist:
            raise NotFound(f"E-Card {card_id} not found")

    @staticmethod
    def list_cards(plan_purchase_id):
        purchase = get_plan_purchase(plan_purchase_id)
        return ECard.objects.filter(member__plan_purchase=purchase).select_related('member')
