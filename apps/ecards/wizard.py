"""
E-Card generation wizard.

``ECardWizard`` sequences SelectMember -> CaptureFields -> Review -> Commit
against the member store and the card service. It keeps only the current
step and the draft values in memory; nothing is persisted before commit.
"""
import enum
import logging
from dataclasses import dataclass, field

from apps.ecards.services import CardIssuanceService
from apps.members.exceptions import (
    AcknowledgmentRequired, CardAlreadyIssued, EnrollmentError, MemberLocked, NotFound, ValidationFailed,
)
from apps.members.models import LockState
from apps.members.services import MemberRecordService
from apps.members.validators import (
    MANDATORY_FIELDS, OPTIONAL_FIELDS, FieldError, ReasonCode, mandatory_errors,
)

logger = logging.getLogger(__name__)

ACKNOWLEDGMENT_TEXT = 'I confirm these details are accurate and cannot be changed'


class WizardStep(enum.IntEnum):
    SELECT_MEMBER = 1
    CAPTURE_FIELDS = 2
    REVIEW = 3
    COMMIT = 4
    DONE = 5


class InvalidStep(EnrollmentError):
    code = 'invalid_step'
    default_message = 'This action is not available at the current step'


@dataclass
class MemberChoice:
    member_id: int
    name: str
    relation: str
    lock_state: str
    has_card: bool

    @property
    def awaiting_card(self):
        """Locked outside the wizard; the card is requested directly"""
        return self.lock_state == LockState.LOCKED and not self.has_card

    @property
    def selectable(self):
        return not self.has_card and not self.awaiting_card


@dataclass
class CommitResult:
    """
    Outcome of a commit whose lock succeeded.

    ``issuance_error`` is set when the member was locked but the card
    request failed; the lock must not be retried.
    """
    member: object
    card: object = None
    issuance_error: EnrollmentError = None

    @property
    def issued(self):
        return self.card is not None


@dataclass
class ECardWizard:
    plan_purchase_id: int
    step: WizardStep = WizardStep.SELECT_MEMBER
    member_id: int = None
    draft: dict = field(default_factory=dict)
    acknowledged: bool = False

    def _require(self, *steps):
        if self.step not in steps:
            raise InvalidStep(f"Not available at step {self.step.name}")

    # ===== SelectMember =====

    def available_members(self):
        """All members of the purchase; carded ones are shown but not selectable"""
        return [
            MemberChoice(
                member_id=member.pk,
                name=member.full_name,
                relation=member.relation_slot,
                lock_state=member.lock_state,
                has_card=member.has_card,
            )
            for member in MemberRecordService.list_members(self.plan_purchase_id)
        ]

    def select_member(self, member_id):
        self._require(WizardStep.SELECT_MEMBER, WizardStep.CAPTURE_FIELDS)

        member = MemberRecordService.get_member(member_id)
        if member.plan_purchase_id != self.plan_purchase_id:
            raise NotFound(f"Member {member_id} not found in this plan")
        if member.has_card:
            raise CardAlreadyIssued(f"An E-Card already exists for {member.full_name}")
        if member.is_locked:
            raise MemberLocked(
                f"{member.relation_slot} details are already locked; "
                f"request the E-Card with POST /api/v1/members/{member.pk}/ecard/",
                field='member_id',
            )

        # Pre-fill with whatever was saved as draft
        self.member_id = member.pk
        self.draft = {
            name: value
            for name, value in member.field_values().items()
            if value not in (None, '')
        }
        self.acknowledged = False
        self.step = WizardStep.CAPTURE_FIELDS
        return member

    # ===== CaptureFields =====

    def capture(self, fields):
        self._require(WizardStep.CAPTURE_FIELDS)
        self.draft.update(fields)
        return dict(self.draft)

    def advance_to_review(self):
        """Run the full validation and move to review; every failing field is reported"""
        self._require(WizardStep.CAPTURE_FIELDS)

        errors = mandatory_errors(self.draft)
        unknown = [name for name in self.draft if name not in MANDATORY_FIELDS + OPTIONAL_FIELDS]
        if unknown or errors:
            errors.extend(
                FieldError(name, ReasonCode.UNKNOWN_FIELD, f'Unknown field: {name}') for name in unknown
            )
            raise ValidationFailed(errors)

        self.step = WizardStep.REVIEW
        return self.review_summary()

    def back(self):
        if self.step == WizardStep.REVIEW:
            self.step = WizardStep.CAPTURE_FIELDS
        elif self.step == WizardStep.CAPTURE_FIELDS:
            self.step = WizardStep.SELECT_MEMBER
        else:
            raise InvalidStep(f"Cannot go back from step {self.step.name}")
        self.acknowledged = False
        return self.step

    # ===== Review =====

    def review_summary(self):
        self._require(WizardStep.CAPTURE_FIELDS, WizardStep.REVIEW)
        return {
            'member_id': self.member_id,
            'fields': {name: self.draft.get(name) for name in MANDATORY_FIELDS + OPTIONAL_FIELDS},
            'acknowledgment': ACKNOWLEDGMENT_TEXT,
            'acknowledged': self.acknowledged,
        }

    def acknowledge(self, confirmed=True):
        self._require(WizardStep.REVIEW)
        self.acknowledged = bool(confirmed)
        return self.acknowledged

    @property
    def can_commit(self):
        return self.step == WizardStep.REVIEW and self.acknowledged

    # ===== Commit =====

    def commit(self):
        """
        Lock the member, then request its card.

        A lock failure (ValidationFailed, MemberLocked, NotFound) is raised
        and no card is requested. A card failure after the lock is returned
        in CommitResult.issuance_error.
        """
        self._require(WizardStep.REVIEW)
        if not self.acknowledged:
            raise AcknowledgmentRequired(field='acknowledged')

        self.step = WizardStep.COMMIT
        try:
            member = MemberRecordService.commit_and_lock(self.member_id, self.draft)
        except EnrollmentError:
            self.step = WizardStep.REVIEW
            raise

        self.step = WizardStep.DONE
        try:
            card = CardIssuanceService.request_card(member.pk)
        except EnrollmentError as e:
            logger.warning(f"Member {member.pk} locked but E-Card issuance failed: {e.code}")
            return CommitResult(member=member, issuance_error=e)

        return CommitResult(member=member, card=card)
